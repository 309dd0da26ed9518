import unittest
from unittest.mock import MagicMock, patch

import requests
from firebase_admin import auth as firebase_auth
from firebase_admin import exceptions as firebase_exceptions
from google.api_core import exceptions as google_exceptions

from dashboard.auth import FirebaseAuthClient, InMemoryAuthClient
from dashboard.documents import FirestoreDocumentStore
from dashboard.errors import (
    AuthError,
    BackendError,
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    translate_backend_errors,
)
from dashboard.realtime import FirebaseRealtimeStore, InMemoryRealtimeStore
from dashboard.storage import FirebaseBlobStore


class ErrorTranslationTests(unittest.TestCase):
    def test_firebase_codes_map_to_statuses(self):
        with self.assertRaises(NotFoundError) as ctx:
            with translate_backend_errors("get user"):
                raise firebase_exceptions.NotFoundError("No user record found")
        self.assertEqual(ctx.exception.status_code, 404)
        self.assertEqual(ctx.exception.message, "No user record found")

        with self.assertRaises(ConflictError):
            with translate_backend_errors("create user"):
                raise firebase_exceptions.AlreadyExistsError("EMAIL_EXISTS")

    def test_unclassified_firebase_error_is_bad_gateway(self):
        with self.assertRaises(BackendError) as ctx:
            with translate_backend_errors("write"):
                raise firebase_exceptions.UnavailableError("Service unavailable")
        self.assertEqual(ctx.exception.status_code, 502)
        self.assertEqual(ctx.exception.message, "Service unavailable")

    def test_google_api_errors_keep_message(self):
        with self.assertRaises(PermissionDeniedError) as ctx:
            with translate_backend_errors("list drivers"):
                raise google_exceptions.PermissionDenied(
                    "Missing or insufficient permissions."
                )
        self.assertEqual(ctx.exception.message, "Missing or insufficient permissions.")
        self.assertEqual(ctx.exception.status_code, 403)


class FirestoreDocumentStoreTests(unittest.TestCase):
    def setUp(self):
        self.client = MagicMock()
        self.store = FirestoreDocumentStore(self.client)

    def test_list_applies_equality_filters(self):
        snap = MagicMock()
        snap.id = "p1"
        snap.to_dict.return_value = {"name": "Gate", "routeId": "r1"}
        collection = self.client.collection.return_value
        collection.where.return_value.stream.return_value = [snap]

        items = self.store.list("route_points", {"routeId": "r1"})

        self.assertEqual(items, [("p1", {"name": "Gate", "routeId": "r1"})])
        self.client.collection.assert_called_once_with("route_points")
        field_filter = collection.where.call_args.kwargs["filter"]
        self.assertEqual(field_filter.field_path, "routeId")
        self.assertEqual(field_filter.op_string, "==")
        self.assertEqual(field_filter.value, "r1")

    def test_get_missing_document_returns_none(self):
        snap = self.client.collection.return_value.document.return_value.get.return_value
        snap.exists = False
        self.assertIsNone(self.store.get("drivers", "nope"))

    def test_add_returns_new_document_id(self):
        doc_ref = MagicMock()
        doc_ref.id = "new-id"
        self.client.collection.return_value.add.return_value = (None, doc_ref)

        self.assertEqual(self.store.add("buses", {"busNumber": "B1"}), "new-id")

    def test_set_with_merge(self):
        self.store.set("routes/r1/schedule", "e1", {"note": "x"}, merge=True)
        self.client.collection.assert_called_once_with("routes/r1/schedule")
        document = self.client.collection.return_value.document
        document.assert_called_once_with("e1")
        document.return_value.set.assert_called_once_with({"note": "x"}, merge=True)

    def test_backend_errors_are_translated(self):
        document = self.client.collection.return_value.document.return_value
        document.delete.side_effect = google_exceptions.PermissionDenied("denied")
        with self.assertRaises(PermissionDeniedError):
            self.store.delete("drivers", "d1")


class RealtimeStoreTests(unittest.TestCase):
    def test_firebase_store_uses_child_references(self):
        root = MagicMock()
        store = FirebaseRealtimeStore(root)

        store.set("/busLocations/b1/", {"latitude": 1.0})
        root.child.assert_called_with("busLocations/b1")
        root.child.return_value.set.assert_called_once_with({"latitude": 1.0})

        root.get.return_value = {"busLocations": {}}
        self.assertEqual(store.get(""), {"busLocations": {}})

    def test_in_memory_tree_paths(self):
        store = InMemoryRealtimeStore()
        store.set("busLocations/b1", {"latitude": 1.0})
        store.update("busLocations/b1", {"speed": 20.0})

        self.assertEqual(store.get("busLocations/b1"), {"latitude": 1.0, "speed": 20.0})
        self.assertEqual(store.get("busLocations/b1/speed"), 20.0)
        self.assertIsNone(store.get("busLocations/b2"))

        store.delete("busLocations/b1")
        self.assertEqual(store.get("busLocations"), {})


class FirebaseBlobStoreTests(unittest.TestCase):
    def test_upload_and_sign(self):
        bucket = MagicMock()
        bucket.blob.return_value.generate_signed_url.return_value = "https://signed"
        store = FirebaseBlobStore(bucket=bucket)

        store.upload_bytes("drivers/d1/photo.png", b"img", "image/png")
        url = store.signed_url("drivers/d1/photo.png", expires_in=120)

        bucket.blob.assert_called_with("drivers/d1/photo.png")
        bucket.blob.return_value.upload_from_string.assert_called_once_with(
            b"img", content_type="image/png"
        )
        self.assertEqual(url, "https://signed")


class FirebaseAuthClientTests(unittest.TestCase):
    def setUp(self):
        self.admin = MagicMock()
        self.client = FirebaseAuthClient(self.admin, api_key="web-key")

    @patch("dashboard.auth.requests.post")
    def test_sign_in_uses_identity_toolkit(self, mock_post):
        mock_post.return_value.status_code = 200
        mock_post.return_value.json.return_value = {
            "localId": "uid-1",
            "idToken": "token-1",
            "expiresIn": "3600",
        }

        session = self.client.sign_in("staff@example.com", "secret1")

        self.assertEqual(session.uid, "uid-1")
        self.assertEqual(session.id_token, "token-1")
        self.assertEqual(session.expires_in, 3600)
        kwargs = mock_post.call_args.kwargs
        self.assertEqual(kwargs["params"], {"key": "web-key"})
        self.assertTrue(kwargs["json"]["returnSecureToken"])

    @patch("dashboard.auth.requests.post")
    def test_sign_in_passes_backend_message_through(self, mock_post):
        mock_post.return_value.status_code = 400
        mock_post.return_value.json.return_value = {
            "error": {"message": "INVALID_LOGIN_CREDENTIALS"}
        }

        with self.assertRaises(AuthError) as ctx:
            self.client.sign_in("staff@example.com", "wrong")
        self.assertEqual(ctx.exception.message, "INVALID_LOGIN_CREDENTIALS")

    @patch("dashboard.auth.requests.post")
    def test_sign_in_network_failure(self, mock_post):
        mock_post.side_effect = requests.ConnectionError("offline")
        with self.assertRaises(BackendError) as ctx:
            self.client.sign_in("staff@example.com", "secret1")
        self.assertEqual(ctx.exception.status_code, 502)

    def test_sign_in_requires_api_key(self):
        client = FirebaseAuthClient(self.admin, api_key=None)
        with self.assertRaises(BackendError):
            client.sign_in("staff@example.com", "secret1")

    def test_verify_session(self):
        self.admin.verify_id_token.return_value = {"uid": "uid-1"}
        self.assertEqual(self.client.verify_session("token-1"), "uid-1")

        self.admin.verify_id_token.side_effect = firebase_auth.InvalidIdTokenError(
            "Token expired"
        )
        with self.assertRaises(AuthError):
            self.client.verify_session("token-1")
        with self.assertRaises(AuthError):
            self.client.verify_session("")

    def test_verify_session_certificate_fetch_failure(self):
        self.admin.verify_id_token.side_effect = firebase_auth.CertificateFetchError(
            "Failed to fetch public key certificates", None
        )
        with self.assertRaises(BackendError) as ctx:
            self.client.verify_session("token-1")
        self.assertNotIsInstance(ctx.exception, AuthError)
        self.assertEqual(ctx.exception.status_code, 502)
        self.assertIn("certificates", ctx.exception.message)

    def test_sign_up_translates_existing_email(self):
        self.admin.create_user.side_effect = firebase_auth.EmailAlreadyExistsError(
            "The user with the provided email already exists", None, None
        )
        with self.assertRaises(ConflictError):
            self.client.sign_up("staff@example.com", "secret1", "Staff")


class InMemoryAuthClientTests(unittest.TestCase):
    def test_sessions(self):
        client = InMemoryAuthClient()
        account = client.sign_up("Staff@Example.com", "secret1", "Staff")
        session = client.sign_in("staff@example.com", "secret1")
        self.assertEqual(client.verify_session(session.id_token), account.uid)
        with self.assertRaises(AuthError):
            client.sign_in("staff@example.com", "wrong")
        with self.assertRaises(AuthError):
            client.verify_session("unknown")


if __name__ == "__main__":
    unittest.main()
