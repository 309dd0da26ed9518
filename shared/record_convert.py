# Copyright 2025 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# ==============================================================================

"""
Helpers to convert between dataclass records and stored documents.

Documents are stored with camelCase keys and without their id, which is the
document key itself.
"""

from dataclasses import asdict
from enum import Enum
from typing import Any, Type, TypeVar

from dacite import Config, from_dict

from shared.json_utils import convert_keys
from shared.types import BusStatus, DayType

T = TypeVar("T")

_DACITE_CONFIG = Config(cast=[BusStatus, DayType], check_types=False)


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {key: _plain(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_plain(item) for item in value]
    return value


def to_document(record: Any, *, exclude: tuple[str, ...] = ("id",)) -> dict:
    """Returns the camelCase document body for a dataclass record."""
    data = {
        key: _plain(value)
        for key, value in asdict(record).items()
        if key not in exclude
    }
    return convert_keys(data, "snake_to_camel")


def from_document(data_class: Type[T], doc_id: str | None, data: dict) -> T:
    """Builds a dataclass record from a stored camelCase document."""
    values = convert_keys(dict(data or {}), "camel_to_snake")
    if doc_id is not None:
        values["id"] = doc_id
    return from_dict(data_class=data_class, data=values, config=_DACITE_CONFIG)
