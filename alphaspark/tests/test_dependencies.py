import threading
import unittest
from unittest.mock import patch

from fastapi.testclient import TestClient

from alphaspark import dependencies
from alphaspark.app import create_app
from alphaspark.config import Settings
from alphaspark.db import FirestoreDocumentStore, InMemoryDocumentStore


class DocumentStoreSelectionTests(unittest.TestCase):
    def setUp(self):
        dependencies._document_store = None
        self.addCleanup(setattr, dependencies, "_document_store", None)

    def use_settings(self, **overrides):
        settings = Settings(**overrides)
        patcher = patch("alphaspark.dependencies.get_settings", return_value=settings)
        patcher.start()
        self.addCleanup(patcher.stop)
        return settings

    def test_in_memory_only_when_enabled(self):
        self.use_settings(use_in_memory_backends=True)
        store = dependencies.get_document_store()
        self.assertIsInstance(store, InMemoryDocumentStore)
        self.assertIs(dependencies.get_document_store(), store)

    @patch("alphaspark.db.firebase_admin.initialize_app")
    @patch("alphaspark.db.firebase_admin.get_app", side_effect=ValueError("no app"))
    def test_firestore_store_connects_lazily(self, get_app, initialize_app):
        self.use_settings(
            use_in_memory_backends=False,
            firebase_service_account_path="/nonexistent/key.json",
        )
        store = dependencies.get_document_store()
        self.assertIsInstance(store, FirestoreDocumentStore)
        self.assertEqual(store.service_account_path, "/nonexistent/key.json")
        get_app.assert_not_called()
        initialize_app.assert_not_called()

    def test_concurrent_callers_share_one_store(self):
        self.use_settings(use_in_memory_backends=True)
        barrier = threading.Barrier(8)
        seen = []

        def worker():
            barrier.wait()
            seen.append(dependencies.get_document_store())

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(len(seen), 8)
        self.assertEqual(len({id(store) for store in seen}), 1)


class MissingCredentialsTests(unittest.TestCase):
    """Without a usable service account every endpoint reports the failure."""

    def setUp(self):
        dependencies._document_store = None
        self.addCleanup(setattr, dependencies, "_document_store", None)
        settings = Settings(
            use_in_memory_backends=False,
            firebase_service_account_path="/nonexistent/key.json",
        )
        patchers = [
            patch("alphaspark.dependencies.get_settings", return_value=settings),
            patch(
                "alphaspark.db.firebase_admin.get_app",
                side_effect=ValueError("no app"),
            ),
            patch(
                "alphaspark.db.credentials.Certificate",
                side_effect=FileNotFoundError("/nonexistent/key.json"),
            ),
        ]
        for patcher in patchers:
            patcher.start()
            self.addCleanup(patcher.stop)
        self.client = TestClient(create_app())

    def test_connection_test_reports_credentials_note(self):
        response = self.client.get("/api/test")
        self.assertEqual(response.status_code, 200)
        payload = response.json()
        self.assertFalse(payload["success"])
        self.assertIn("Firebase initialization failed", payload["error"])
        self.assertEqual(
            payload["note"], "Please check Firebase credentials and Firestore setup"
        )

    def test_login_reports_error_instead_of_user_not_found(self):
        payload = self.client.post("/api/login", json={"userId": "user-001"}).json()
        self.assertFalse(payload["success"])
        self.assertEqual(payload["message"], "An error occurred during login")
        self.assertIn("Firebase initialization failed", payload["error"])

    def test_debug_reports_error(self):
        payload = self.client.get("/api/debug").json()
        self.assertFalse(payload["success"])
        self.assertIn("Firebase initialization failed", payload["error"])


if __name__ == "__main__":
    unittest.main()
