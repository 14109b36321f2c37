import os
import shutil
import unittest

from fastapi.testclient import TestClient

os.environ["CARTOGRAPHER_DISABLE_AI"] = "1"

from cartographer.api.main import app, registry, state
from cartographer.tests.test_builder import _workspace


class CartographerApiTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls) -> None:
        cls.workspace = _workspace()
        os.environ["WORKSPACE_PATH"] = cls.workspace
        os.environ["GRAPH_STORE_BACKEND"] = "memory"
        os.environ.pop("SNAPSHOT_DIR", None)
        state["config"] = None
        state["explainer"] = None
        registry.clear()

        cls.client_context = TestClient(app)
        cls.client = cls.client_context.__enter__()
        cls.main_py = os.path.join(cls.workspace, "main.py")

    @classmethod
    def tearDownClass(cls) -> None:
        cls.client_context.__exit__(None, None, None)
        shutil.rmtree(cls.workspace)

    def test_health(self) -> None:
        response = self.client.get("/")
        self.assertEqual(response.status_code, 200)
        payload = response.json()
        self.assertEqual(payload["status"], "active")
        self.assertEqual(payload["workspace"], self.workspace)
        self.assertFalse(payload["ai_enabled"])
        self.assertIsNone(payload["startup_error"])

    def test_query(self) -> None:
        response = self.client.post("/query", json={"question": "who calls compute_total"})
        self.assertEqual(response.status_code, 200)
        payload = response.json()
        self.assertEqual(payload["intent"], "USAGE")
        self.assertEqual(payload["files"], [self.main_py])
        self.assertEqual(payload["metadata"]["callers"], ["main"])
        self.assertIn("contextPreview", payload)

    def test_query_rejects_empty_question(self) -> None:
        response = self.client.post("/query", json={"question": "   "})
        self.assertEqual(response.status_code, 400)

    def test_query_without_llm_is_unknown(self) -> None:
        response = self.client.post("/query", json={"question": "tell me a joke"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["intent"], "unknown")

    def test_graph(self) -> None:
        response = self.client.get("/graph")
        self.assertEqual(response.status_code, 200)
        payload = response.json()
        self.assertIn("nodes", payload)
        self.assertIn("links", payload)

        nodes_by_id = {node["id"]: node for node in payload["nodes"]}
        self.assertEqual(nodes_by_id[self.main_py]["risk"], "HIGH")
        link_types = {link["type"] for link in payload["links"]}
        self.assertEqual(link_types, {"IMPORTS", "CALLS"})

    def test_graph_stats(self) -> None:
        response = self.client.get("/graph/stats")
        self.assertEqual(response.status_code, 200)
        payload = response.json()
        self.assertEqual(payload["cycles"], 1)
        self.assertGreater(payload["nodes"], 0)

    def test_blast_radius(self) -> None:
        response = self.client.get("/blast-radius/compute_total")
        self.assertEqual(response.status_code, 200)
        payload = response.json()
        self.assertEqual(payload["affected_functions"], [f"{self.main_py}::main::13"])
        self.assertEqual(payload["matches"], [f"{self.main_py}::compute_total::8"])

        missing = self.client.get("/blast-radius/does_not_exist")
        self.assertEqual(missing.status_code, 404)

    def test_insights(self) -> None:
        response = self.client.get("/insights")
        self.assertEqual(response.status_code, 200)
        payload = response.json()
        self.assertIn("archaeologist", payload["collaborators"])
        self.assertNotIn("historian", payload["collaborators"])
        self.assertEqual(payload["languages"], {"Python": 3})
        self.assertEqual(payload["risk_counts"], {"HIGH": 1, "LOW": 1})
        self.assertEqual([i["type"] for i in payload["architecture"]], ["CYCLE"])
        self.assertEqual(payload["hotspots"], [])

    def test_snapshots(self) -> None:
        created = self.client.post("/graph/snapshot")
        self.assertEqual(created.status_code, 200)
        filename = created.json()["filename"]

        listing = self.client.get("/graph/snapshots")
        self.assertIn(filename, listing.json()["snapshots"])

        loaded = self.client.get(f"/graph/snapshots/{filename}")
        self.assertEqual(loaded.status_code, 200)
        self.assertIn("nodes", loaded.json())

        missing = self.client.get("/graph/snapshots/snapshot-missing.json")
        self.assertEqual(missing.status_code, 404)

    def test_rebuild(self) -> None:
        response = self.client.post("/rebuild")
        self.assertEqual(response.status_code, 200)
        payload = response.json()
        self.assertEqual(payload["status"], "rebuilt")
        self.assertEqual(payload["workspace"], self.workspace)

        missing = os.path.join(self.workspace, "no-such-dir")
        failed = self.client.post("/rebuild", json={"workspace_path": missing})
        self.assertEqual(failed.status_code, 503)
        # The previous graph keeps serving
        self.assertEqual(self.client.get("/").json()["workspace"], self.workspace)

    def test_unavailable_without_context(self) -> None:
        registry.clear()
        try:
            self.assertEqual(self.client.post("/query", json={"question": "who calls main"}).status_code, 503)
            self.assertEqual(self.client.get("/graph").status_code, 503)
            self.assertEqual(self.client.get("/").json()["status"], "degraded")
        finally:
            self.assertEqual(self.client.post("/rebuild").status_code, 200)


if __name__ == "__main__":
    unittest.main()
