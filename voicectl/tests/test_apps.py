import json
import tempfile
import unittest
import os
import sys

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from voicectl.apps import build_app_tables, canonical_app_name, extract_app_name, load_apps_config
from voicectl.platforms import ActionResolver


class TestApps(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)

    def _write(self, payload) -> str:
        path = os.path.join(self.tmp.name, "apps.json")
        with open(path, "w", encoding="utf-8") as f:
            f.write(payload if isinstance(payload, str) else json.dumps(payload))
        return path

    def test_extract_app_name(self):
        self.assertEqual(extract_app_name("Open  Spotify"), "spotify")
        self.assertEqual(extract_app_name("run gimp"), "gimp")

    def test_canonical_app_name(self):
        self.assertEqual(canonical_app_name("the vs code app"), "vscode")
        self.assertEqual(canonical_app_name("Google Chrome"), "chrome")
        self.assertEqual(canonical_app_name("app"), "app")

    def test_load_apps_config(self):
        path = self._write({"apps": [
            {"id": "Obsidian", "aliases": ["obsidian notes"],
             "commands": {"linux": "obsidian", "darwin": "open -a Obsidian"}},
            {"id": "", "commands": {"linux": "nothing"}},
            "junk",
        ]})
        commands, aliases = load_apps_config(path)
        self.assertEqual(commands["linux"], {"obsidian": "obsidian"})
        self.assertEqual(commands["darwin"], {"obsidian": "open -a Obsidian"})
        self.assertEqual(aliases, {"obsidian notes": "obsidian"})

    def test_missing_or_broken_file(self):
        self.assertEqual(load_apps_config(None), ({}, {}))
        self.assertEqual(load_apps_config(os.path.join(self.tmp.name, "nope.json")), ({}, {}))
        self.assertEqual(load_apps_config(self._write("{not json")), ({}, {}))

    def test_extra_apps_reach_the_resolver(self):
        path = self._write({"apps": [
            {"id": "obsidian", "aliases": ["obsidian notes"], "commands": {"linux": "obsidian"}},
        ]})
        named_apps, aliases = build_app_tables(path)
        self.assertEqual(named_apps["linux"]["spotify"], "spotify")
        r = ActionResolver(named_apps, aliases)
        inv = r.resolve("launch-named-app", {"app": "obsidian notes"}, "linux")
        self.assertEqual(inv.command, "obsidian")
        with self.assertRaises(TypeError):
            named_apps["linux"]["obsidian"] = "other"


if __name__ == "__main__":
    unittest.main()
