import importlib.util
import unittest
from pathlib import Path

from dashboard.dependencies import get_repository, reset_clients

SCRIPT = Path(__file__).resolve().parents[2] / "scripts" / "publish_location.py"


def _load_script():
    spec = importlib.util.spec_from_file_location("publish_location", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


class PublishLocationScriptTests(unittest.TestCase):
    def setUp(self):
        reset_clients()
        self.script = _load_script()

    def tearDown(self):
        reset_clients()

    def test_publish_then_clear(self):
        code = self.script.main(["bus7", "--lat", "2.31", "--lng", "102.32", "--speed", "25"])
        self.assertEqual(code, 0)
        location = get_repository().get_live_location("bus7")
        self.assertEqual(location.latitude, 2.31)
        self.assertEqual(location.speed, 25.0)

        self.assertEqual(self.script.main(["bus7", "--clear"]), 0)
        self.assertEqual(get_repository().list_live_locations(), [])

    def test_coordinates_required(self):
        with self.assertRaises(SystemExit):
            self.script.main(["bus7"])


if __name__ == "__main__":
    unittest.main()
