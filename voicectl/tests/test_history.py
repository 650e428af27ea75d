import unittest
import os
import sys

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from voicectl.history import CommandHistory
from voicectl.models import CommandRecord


def record(text="open google.com", client_context=None):
    return CommandRecord(
        text=text,
        source="text",
        status="success",
        response="✅ Opening google.com",
        platform="linux",
        client_context=client_context,
    )


class TestCommandHistory(unittest.TestCase):
    def test_push_assigns_id_and_timestamp(self):
        h = CommandHistory()
        saved = h.push(record())
        self.assertIsNotNone(saved.id)
        self.assertIsNotNone(saved.timestamp)
        self.assertEqual(h.latest(1), [saved])

    def test_newest_first(self):
        h = CommandHistory()
        for i in range(3):
            h.push(record(f"cmd {i}"))
        self.assertEqual([r.text for r in h.latest(10)], ["cmd 2", "cmd 1", "cmd 0"])
        self.assertEqual([r.text for r in h.latest(2)], ["cmd 2", "cmd 1"])

    def test_capacity_evicts_oldest(self):
        h = CommandHistory(max_records=100)
        for i in range(101):
            h.push(record(f"cmd {i}"))
        self.assertEqual(len(h), 100)
        texts = [r.text for r in h.latest(200)]
        self.assertNotIn("cmd 0", texts)
        self.assertEqual(texts[0], "cmd 100")
        self.assertEqual(texts[-1], "cmd 1")

    def test_ids_strictly_increase(self):
        h = CommandHistory()
        ids = [int(h.push(record()).id) for _ in range(50)]
        self.assertEqual(ids, sorted(set(ids)))

    def test_clear(self):
        h = CommandHistory()
        h.push(record())
        h.clear()
        h.clear()
        self.assertEqual(len(h), 0)
        self.assertEqual(h.latest(1), [])
        self.assertEqual(h.latest(5), [])

    def test_projection_hides_client_context(self):
        h = CommandHistory()
        saved = h.push(record(client_context="Mozilla/5.0"))
        self.assertEqual(saved.client_context, "Mozilla/5.0")
        self.assertEqual(
            set(saved.to_dict()),
            {"id", "text", "source", "timestamp", "status", "response", "platform"},
        )


if __name__ == "__main__":
    unittest.main()
