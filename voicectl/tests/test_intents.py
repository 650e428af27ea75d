import unittest
import os
import sys

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from voicectl import intents
from voicectl.intents import Rule, classify, normalize


class TestClassify(unittest.TestCase):
    def test_open_url(self):
        self.assertEqual(classify("open google.com"), ("open-url", {"url": "google.com"}))

    def test_normalizes_case_and_spacing(self):
        self.assertEqual(normalize("   OPEN   Google.COM "), "open google.com")
        self.assertEqual(classify("   OPEN   Google.COM ")[0], "open-url")

    def test_shutdown_in_minutes(self):
        intent, params = classify("shutdown in 5 minutes")
        self.assertEqual(intent, "shutdown")
        self.assertEqual(params, {"seconds": "300"})

    def test_shutdown_default_delay(self):
        self.assertEqual(classify("shut down the computer"), ("shutdown", {"seconds": "60"}))

    def test_unrecognized(self):
        self.assertEqual(classify("asdkjf random text"), ("unrecognized", {}))
        self.assertEqual(classify(""), ("unrecognized", {}))
        self.assertEqual(classify(None), ("unrecognized", {}))

    def test_table(self):
        cases = [
            ("search python tutorials", "web-search", {"query": "python tutorials"}),
            ("google", "web-search", {"query": ""}),
            ("youtube lofi music", "video-search", {"query": "lofi music"}),
            ("play cats on youtube", "video-search", {"query": "play cats"}),
            ("what time is it", "get-time", {}),
            ("what is the date today", "get-date", {}),
            ("check the weather", "open-weather", {}),
            ("open the calculator", "launch-app", {"app": "calculator"}),
            ("open text editor", "launch-app", {"app": "notepad"}),
            ("whatsapp call mom", "whatsapp-call", {"contact": "Mom"}),
            ("whatsapp message john", "whatsapp-message", {"contact": "john"}),
            ("send a whatsapp message", "whatsapp-message", {"contact": "contact"}),
            ("open whatsapp", "launch-app", {"app": "whatsapp"}),
            ("open downloads in file manager", "open-file-location", {"location": "downloads"}),
            ("open file manager", "launch-app", {"app": "filemanager"}),
            ("open wifi settings", "open-settings", {"setting": "network"}),
            ("open control panel", "open-settings", {"setting": "main"}),
            ("open spotify", "launch-named-app", {"app": "spotify"}),
            ("launch visual studio code", "launch-named-app", {"app": "visual studio code"}),
            ("please restart the computer", "restart", {}),
            ("hibernate", "sleep", {}),
            ("increase volume", "volume-up", {}),
            ("volume down", "volume-down", {}),
            ("mute", "mute", {}),
            ("show system information", "system-info", {}),
            ("how much ram do i have", "memory-info", {}),
            ("check disk space", "storage-info", {}),
            ("cpu usage", "cpu-info", {}),
            ("what is my ip address", "network-info", {}),
            ("laptop battery status", "battery-info", {}),
            ("check system temperature", "temperature-info", {}),
        ]
        for text, intent, params in cases:
            with self.subTest(text=text):
                self.assertEqual(classify(text), (intent, params))

    def test_rule_order_is_priority(self):
        self.assertEqual(classify("shutdown the settings"), ("open-settings", {"setting": "main"}))
        self.assertEqual(classify("open calculator"), ("launch-app", {"app": "calculator"}))
        self.assertEqual(classify("search youtube cats")[0], "web-search")
        # "cpu" is checked before temperature
        self.assertEqual(classify("cpu temperature")[0], "cpu-info")

    def test_restart_is_not_a_launch(self):
        self.assertEqual(classify("restart")[0], "restart")

    def test_ram_must_be_a_word(self):
        self.assertNotEqual(classify("program")[0], "memory-info")

    def test_failed_capture_falls_through(self):
        self.assertEqual(classify("open")[0], "unrecognized")
        # no domain after "open": not a url, still a named launch
        self.assertEqual(classify("open the .com site")[0], "launch-named-app")

    def test_custom_rule_table(self):
        rules = (Rule("time", lambda t: (intents.GET_TIME, {}) if "clock" in t else None),)
        self.assertEqual(classify("clock please", rules), ("get-time", {}))
        self.assertEqual(classify("what time is it", rules), ("unrecognized", {}))

    def test_params_are_fresh_dicts(self):
        _, a = classify("mute")
        a["x"] = "1"
        _, b = classify("mute")
        self.assertEqual(b, {})

    def test_every_rule_intent_is_known(self):
        for text in ("open google.com", "mute", "cpu", "whatsapp"):
            self.assertIn(classify(text)[0], intents.INTENTS)


if __name__ == "__main__":
    unittest.main()
