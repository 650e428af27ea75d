"""Ordered intent rules for free-text commands.

Every command is normalized (lower-cased, trimmed, inner whitespace collapsed)
and checked against ``RULES`` from top to bottom. The first rule whose
condition holds decides the intent, and its extractor builds the parameter
mapping. Nothing is scored and nothing is retried: rule order *is* the
priority. ``UNRECOGNIZED`` is what is left when no rule matches.
"""
import re
from dataclasses import dataclass
from typing import Callable

from .apps import extract_app_name
from .config import (
    FILE_LOCATIONS,
    SETTINGS_KEYWORDS,
    URL_SUFFIXES,
    WHATSAPP_CONTACTS,
)
from .duration import shutdown_delay


OPEN_URL = "open-url"
WEB_SEARCH = "web-search"
VIDEO_SEARCH = "video-search"
GET_TIME = "get-time"
GET_DATE = "get-date"
OPEN_WEATHER = "open-weather"
LAUNCH_APP = "launch-app"
WHATSAPP_CALL = "whatsapp-call"
WHATSAPP_MESSAGE = "whatsapp-message"
OPEN_FILE_LOCATION = "open-file-location"
OPEN_SETTINGS = "open-settings"
LAUNCH_NAMED_APP = "launch-named-app"
SHUTDOWN = "shutdown"
RESTART = "restart"
SLEEP = "sleep"
VOLUME_UP = "volume-up"
VOLUME_DOWN = "volume-down"
MUTE = "mute"
SYSTEM_INFO = "system-info"
MEMORY_INFO = "memory-info"
STORAGE_INFO = "storage-info"
CPU_INFO = "cpu-info"
NETWORK_INFO = "network-info"
BATTERY_INFO = "battery-info"
TEMPERATURE_INFO = "temperature-info"
UNRECOGNIZED = "unrecognized"

INFO_INTENTS = {
    SYSTEM_INFO: "system",
    MEMORY_INFO: "memory",
    STORAGE_INFO: "storage",
    CPU_INFO: "cpu",
    NETWORK_INFO: "network",
    BATTERY_INFO: "battery",
    TEMPERATURE_INFO: "temperature",
}

INTENTS = frozenset({
    OPEN_URL, WEB_SEARCH, VIDEO_SEARCH, GET_TIME, GET_DATE, OPEN_WEATHER,
    LAUNCH_APP, WHATSAPP_CALL, WHATSAPP_MESSAGE, OPEN_FILE_LOCATION,
    OPEN_SETTINGS, LAUNCH_NAMED_APP, SHUTDOWN, RESTART, SLEEP,
    VOLUME_UP, VOLUME_DOWN, MUTE, UNRECOGNIZED,
    *INFO_INTENTS,
})


_URL_RE = re.compile(r"open\s+([a-z0-9.-]+\.[a-z]{2,})")
_MESSAGE_CONTACT_RE = re.compile(r"(?:message|text)\s+(\w+)")
_LAUNCH_RE = re.compile(r"\b(?:open|launch|start)\s+(.+)")
_SEARCH_WORDS_RE = re.compile(r"search|google")
_VIDEO_WORDS_RE = re.compile(r"\b(?:youtube|search|on)\b")


def normalize(text: str) -> str:
    return " ".join((text or "").strip().lower().split())


def _has(t: str, *phrases: str) -> bool:
    return any(p in t for p in phrases)


def _has_word(t: str, *words: str) -> bool:
    return any(re.search(rf"\b{re.escape(w)}\b", t) for w in words)


def _squash(t: str) -> str:
    return " ".join(t.split())


# Each classifier below returns (intent, params) when its condition holds and
# None otherwise. Group rules (messaging, files, settings) pick a variant.

def _open_url(t: str):
    if not (_has(t, "open") and _has(t, *URL_SUFFIXES)):
        return None
    m = _URL_RE.search(t)
    if not m:
        return None
    return OPEN_URL, {"url": m.group(1)}


def _web_search(t: str):
    if not _has(t, "search", "google"):
        return None
    return WEB_SEARCH, {"query": _squash(_SEARCH_WORDS_RE.sub("", t))}


def _video_search(t: str):
    if not _has(t, "youtube"):
        return None
    return VIDEO_SEARCH, {"query": _squash(_VIDEO_WORDS_RE.sub("", t))}


def _time(t: str):
    return (GET_TIME, {}) if _has(t, "time") else None


def _date(t: str):
    return (GET_DATE, {}) if _has(t, "date") else None


def _weather(t: str):
    return (OPEN_WEATHER, {}) if _has(t, "weather") else None


def _calculator(t: str):
    return (LAUNCH_APP, {"app": "calculator"}) if _has(t, "calculator", "calc") else None


def _text_editor(t: str):
    return (LAUNCH_APP, {"app": "notepad"}) if _has(t, "notepad", "text editor") else None


def _whatsapp(t: str):
    if not _has(t, "whatsapp"):
        return None
    if _has(t, "call"):
        for key, contact in WHATSAPP_CONTACTS.items():
            if key in t:
                return WHATSAPP_CALL, {"contact": contact}
    if _has(t, "message", "text"):
        m = _MESSAGE_CONTACT_RE.search(t)
        return WHATSAPP_MESSAGE, {"contact": m.group(1) if m else "contact"}
    return LAUNCH_APP, {"app": "whatsapp"}


def _file_location(t: str):
    if not _has(t, "file manager", "explorer", "files"):
        return None
    for location in FILE_LOCATIONS:
        if location in t:
            return OPEN_FILE_LOCATION, {"location": location}
    return LAUNCH_APP, {"app": "filemanager"}


def _settings(t: str):
    if not _has(t, "settings", "control panel"):
        return None
    for setting, keywords in SETTINGS_KEYWORDS.items():
        if _has(t, *keywords):
            return OPEN_SETTINGS, {"setting": setting}
    return OPEN_SETTINGS, {"setting": "main"}


def _launch_named_app(t: str):
    m = _LAUNCH_RE.search(t)
    if not m:
        return None
    app = extract_app_name(m.group(0))
    if not app:
        return None
    return LAUNCH_NAMED_APP, {"app": app}


def _shutdown(t: str):
    if not _has(t, "shutdown", "shut down"):
        return None
    return SHUTDOWN, {"seconds": str(shutdown_delay(t))}


def _when(intent: str, *phrases: str):
    def match(t: str):
        return (intent, {}) if _has(t, *phrases) else None
    return match


def _memory(t: str):
    if _has_word(t, "ram") or _has(t, "memory"):
        return MEMORY_INFO, {}
    return None


def _battery(t: str):
    if _has(t, "battery") and _has(t, "laptop", "computer"):
        return BATTERY_INFO, {}
    return None


def _temperature(t: str):
    if _has(t, "temperature") and _has(t, "cpu", "system"):
        return TEMPERATURE_INFO, {}
    return None


@dataclass(frozen=True)
class Rule:
    name: str
    match: Callable[[str], tuple[str, dict] | None]


RULES: tuple[Rule, ...] = (
    Rule("open-url", _open_url),
    Rule("web-search", _web_search),
    Rule("video-search", _video_search),
    Rule("time", _time),
    Rule("date", _date),
    Rule("weather", _weather),
    Rule("calculator", _calculator),
    Rule("text-editor", _text_editor),
    Rule("whatsapp", _whatsapp),
    Rule("file-location", _file_location),
    Rule("settings", _settings),
    Rule("launch", _launch_named_app),
    Rule("shutdown", _shutdown),
    Rule("restart", _when(RESTART, "restart", "reboot")),
    Rule("sleep", _when(SLEEP, "sleep", "hibernate")),
    Rule("volume-up", _when(VOLUME_UP, "volume up", "increase volume")),
    Rule("volume-down", _when(VOLUME_DOWN, "volume down", "decrease volume")),
    Rule("mute", _when(MUTE, "mute", "volume off")),
    Rule("system-info", _when(SYSTEM_INFO, "system info", "system information", "computer specs")),
    Rule("memory-info", _memory),
    Rule("storage-info", _when(STORAGE_INFO, "storage", "disk space", "hard drive")),
    Rule("cpu-info", _when(CPU_INFO, "cpu", "processor")),
    Rule("network-info", _when(NETWORK_INFO, "network", "ip address", "wifi")),
    Rule("battery-info", _battery),
    Rule("temperature-info", _temperature),
)


def classify(text: str, rules: tuple[Rule, ...] = RULES) -> tuple[str, dict]:
    t = normalize(text)
    if not t:
        return UNRECOGNIZED, {}
    for rule in rules:
        hit = rule.match(t)
        if hit is not None:
            intent, params = hit
            return intent, dict(params)
    return UNRECOGNIZED, {}
