import unittest
from unittest.mock import patch

from dashboard import dependencies, firebase
from dashboard.auth import FirebaseAuthClient, InMemoryAuthClient
from dashboard.config import Settings
from dashboard.documents import FirestoreDocumentStore, InMemoryDocumentStore
from dashboard.realtime import FirebaseRealtimeStore, InMemoryRealtimeStore
from dashboard.storage import FirebaseBlobStore, InMemoryBlobStore


def _firebase_settings(**overrides) -> Settings:
    values = {
        "firebase_api_key": "test-api-key",
        "firebase_project_id": "trackutem-test",
        "firebase_database_url": "https://trackutem-test-default-rtdb.firebaseio.com",
        "firebase_storage_bucket": "trackutem-test.firebasestorage.app",
    }
    values.update(overrides)
    return Settings(**values)


class InitFirebaseTests(unittest.TestCase):
    def setUp(self):
        firebase._handles = None

    def tearDown(self):
        firebase._handles = None

    @patch("dashboard.firebase.storage")
    @patch("dashboard.firebase.db")
    @patch("dashboard.firebase.firestore")
    @patch("dashboard.firebase.auth")
    @patch("dashboard.firebase.credentials")
    @patch("dashboard.firebase.firebase_admin")
    def test_initializes_once_with_four_handles(
        self,
        mock_admin,
        mock_credentials,
        mock_auth,
        mock_firestore,
        mock_db,
        mock_storage,
    ):
        settings = _firebase_settings()

        handles = firebase.init_firebase(settings)
        again = firebase.init_firebase(settings)

        self.assertIs(handles, again)
        mock_admin.initialize_app.assert_called_once_with(
            mock_credentials.ApplicationDefault.return_value,
            {
                "projectId": "trackutem-test",
                "databaseURL": "https://trackutem-test-default-rtdb.firebaseio.com",
                "storageBucket": "trackutem-test.firebasestorage.app",
            },
        )
        app = mock_admin.initialize_app.return_value
        mock_auth.Client.assert_called_once_with(app)
        mock_firestore.client.assert_called_once_with(app)
        mock_db.reference.assert_called_once_with("/", app=app)
        mock_storage.bucket.assert_called_once_with(app=app)
        for handle in (handles.auth, handles.firestore, handles.database, handles.bucket):
            self.assertIsNotNone(handle)

    @patch("dashboard.firebase.storage")
    @patch("dashboard.firebase.db")
    @patch("dashboard.firebase.firestore")
    @patch("dashboard.firebase.auth")
    @patch("dashboard.firebase.credentials")
    @patch("dashboard.firebase.firebase_admin")
    def test_uses_service_account_file_when_configured(
        self,
        mock_admin,
        mock_credentials,
        mock_auth,
        mock_firestore,
        mock_db,
        mock_storage,
    ):
        settings = _firebase_settings(
            google_application_credentials="/secrets/service-account.json"
        )

        firebase.init_firebase(settings)

        mock_credentials.Certificate.assert_called_once_with(
            "/secrets/service-account.json"
        )
        mock_credentials.ApplicationDefault.assert_not_called()


class DependencySelectionTests(unittest.TestCase):
    def setUp(self):
        dependencies.reset_clients()

    def tearDown(self):
        dependencies.reset_clients()

    @patch("dashboard.dependencies.get_settings")
    def test_in_memory_without_project(self, mock_settings):
        mock_settings.return_value = Settings(firebase_project_id=None)
        self.assertIsInstance(dependencies.get_document_store(), InMemoryDocumentStore)
        self.assertIsInstance(dependencies.get_realtime_store(), InMemoryRealtimeStore)
        self.assertIsInstance(dependencies.get_blob_store(), InMemoryBlobStore)
        self.assertIsInstance(dependencies.get_auth_client(), InMemoryAuthClient)

    @patch("dashboard.dependencies.get_settings")
    def test_in_memory_toggle_wins_over_project(self, mock_settings):
        mock_settings.return_value = _firebase_settings(use_in_memory_backends=True)
        self.assertIsInstance(dependencies.get_document_store(), InMemoryDocumentStore)

    @patch("dashboard.dependencies.init_firebase")
    @patch("dashboard.dependencies.get_settings")
    def test_firebase_clients_share_initialized_handles(
        self, mock_settings, mock_init
    ):
        mock_settings.return_value = _firebase_settings()
        handles = mock_init.return_value

        documents = dependencies.get_document_store()
        realtime = dependencies.get_realtime_store()
        blobs = dependencies.get_blob_store()
        auth_client = dependencies.get_auth_client()

        self.assertIsInstance(documents, FirestoreDocumentStore)
        self.assertIs(documents.client, handles.firestore)
        self.assertIsInstance(realtime, FirebaseRealtimeStore)
        self.assertIs(realtime.root, handles.database)
        self.assertIsInstance(blobs, FirebaseBlobStore)
        self.assertIs(blobs.bucket, handles.bucket)
        self.assertIsInstance(auth_client, FirebaseAuthClient)
        self.assertEqual(auth_client.api_key, "test-api-key")

    def test_singletons_persist_until_reset(self):
        first = dependencies.get_document_store()
        self.assertIs(dependencies.get_document_store(), first)
        dependencies.reset_clients()
        self.assertIsNot(dependencies.get_document_store(), first)


if __name__ == "__main__":
    unittest.main()
