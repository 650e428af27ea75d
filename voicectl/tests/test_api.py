import asyncio
import unittest
import os
import sys
from unittest import mock

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from fastapi.testclient import TestClient

from voicectl.api import create_app, parse_limit
from voicectl.apps import build_app_tables
from voicectl.history import CommandHistory
from voicectl.platforms import ActionResolver
from voicectl.processor import CommandProcessor


class MemoryStorage:
    """Stands in for StorageFailover; same operations, no database."""

    def __init__(self):
        self.history = CommandHistory()
        self.started = False
        self.closed = False

    def start(self):
        self.started = True

    async def save(self, record):
        return self.history.push(record)

    async def list(self, limit):
        return self.history.latest(limit)

    async def clear(self):
        self.history.clear()

    async def watch(self, interval):
        await asyncio.Event().wait()

    async def close(self):
        self.closed = True


class RecordingExecutor:
    def __init__(self):
        self.calls = []

    async def __call__(self, invocation):
        self.calls.append(invocation)
        return "No output"


class TestParseLimit(unittest.TestCase):
    def test_parse_limit(self):
        self.assertEqual(parse_limit("2"), 2)
        self.assertEqual(parse_limit(None), 50)
        self.assertEqual(parse_limit("abc"), 50)
        self.assertEqual(parse_limit("0"), 50)
        self.assertEqual(parse_limit("-3"), 50)


class TestApi(unittest.TestCase):
    def setUp(self):
        self.storage = MemoryStorage()
        self.executor = RecordingExecutor()
        named_apps, aliases = build_app_tables(None)
        self.processor = CommandProcessor(
            executor=self.executor,
            resolver=ActionResolver(named_apps, aliases),
            platform_id="linux",
        )
        self.app = create_app(self.storage, self.processor, reconnect_interval=0)
        self.client = TestClient(self.app)
        self.client.__enter__()
        self.addCleanup(self.client.__exit__, None, None, None)

    def test_lifecycle(self):
        self.assertTrue(self.storage.started)

    def test_status(self):
        r = self.client.get("/api/status")
        self.assertEqual(r.status_code, 200)
        body = r.json()
        self.assertEqual(body["status"], "online")
        self.assertEqual(body["platform"], "linux")
        self.assertIn("timestamp", body)

    def test_execute(self):
        r = self.client.post(
            "/api/execute",
            json={"text": "open google.com", "type": "voice"},
            headers={"User-Agent": "unit-test-agent"},
        )
        self.assertEqual(r.status_code, 200)
        body = r.json()
        self.assertEqual(set(body), {"id", "response", "status", "timestamp"})
        self.assertEqual(body["status"], "success")
        self.assertEqual(body["response"], "✅ Opening google.com")
        self.assertEqual(self.executor.calls[0].command, "xdg-open https://google.com")

        stored = self.storage.history.latest(1)[0]
        self.assertEqual(stored.id, body["id"])
        self.assertEqual(stored.source, "voice")
        self.assertEqual(stored.platform, "linux")
        self.assertEqual(stored.client_context, "unit-test-agent")

    def test_unrecognized_is_not_an_http_error(self):
        r = self.client.post("/api/execute", json={"text": "asdkjf random text", "type": "text"})
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json()["status"], "error")
        self.assertIn("Try:", r.json()["response"])
        self.assertEqual(len(self.storage.history), 1)

    def test_execute_missing_fields(self):
        for payload in ({"text": "mute"}, {"type": "text"}, {"text": "", "type": "text"}, {"text": "   ", "type": "text"}, {}):
            with self.subTest(payload=payload):
                r = self.client.post("/api/execute", json=payload)
                self.assertEqual(r.status_code, 400)
                self.assertEqual(r.json(), {"error": "Missing required fields: text, type"})
        self.assertEqual(len(self.storage.history), 0)

    def test_execute_without_body(self):
        r = self.client.post("/api/execute")
        self.assertEqual(r.status_code, 400)
        self.assertIn("error", r.json())

    def test_execute_invalid_type(self):
        r = self.client.post("/api/execute", json={"text": "mute", "type": "email"})
        self.assertEqual(r.status_code, 400)
        self.assertEqual(self.executor.calls, [])

    def test_execute_internal_error(self):
        with mock.patch.object(self.storage, "save", mock.AsyncMock(side_effect=RuntimeError("boom"))):
            r = self.client.post("/api/execute", json={"text": "mute", "type": "text"})
        self.assertEqual(r.status_code, 500)
        self.assertEqual(r.json(), {"error": "Internal server error"})

    def test_history_limit(self):
        for i in range(5):
            self.client.post("/api/execute", json={"text": f"open site{i}.com", "type": "text"})
        r = self.client.get("/api/history", params={"limit": 2})
        self.assertEqual(r.status_code, 200)
        rows = r.json()
        self.assertEqual(len(rows), 2)
        self.assertEqual([row["text"] for row in rows], ["open site4.com", "open site3.com"])
        self.assertEqual(
            set(rows[0]),
            {"id", "text", "source", "timestamp", "status", "response", "platform"},
        )

    def test_history_bad_limit_uses_default(self):
        for i in range(3):
            self.client.post("/api/execute", json={"text": "mute", "type": "text"})
        self.assertEqual(len(self.client.get("/api/history?limit=abc").json()), 3)
        self.assertEqual(len(self.client.get("/api/history?limit=0").json()), 3)

    def test_clear_history(self):
        self.client.post("/api/execute", json={"text": "mute", "type": "text"})
        for _ in range(2):
            r = self.client.delete("/api/history")
            self.assertEqual(r.status_code, 200)
            self.assertEqual(r.json(), {"message": "History cleared successfully"})
        self.assertEqual(self.client.get("/api/history").json(), [])

    def test_info_endpoints(self):
        r = self.client.get("/api/storage-info")
        self.assertEqual(r.status_code, 200)
        self.assertTrue(r.json()["info"].startswith("💾 Storage Information:"))
        self.assertEqual(self.executor.calls[-1].action, "query:storage")
        for kind in ("system", "memory", "cpu", "network"):
            with self.subTest(kind=kind):
                r = self.client.get(f"/api/{kind}-info")
                self.assertEqual(r.status_code, 200)
                self.assertIn("info", r.json())

    def test_info_failure(self):
        with mock.patch.object(self.processor, "describe", mock.AsyncMock(side_effect=RuntimeError("psutil"))):
            r = self.client.get("/api/cpu-info")
        self.assertEqual(r.status_code, 500)
        self.assertEqual(r.json(), {"error": "Failed to get CPU information"})


if __name__ == "__main__":
    unittest.main()
