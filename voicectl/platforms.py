"""Per-platform command tables and the resolver that reads them.

Tables are keyed by platform identifier (``win32``, ``darwin``, ``linux``,
plus ``default`` for anything else), then by action class, then by logical
action name. Resolution tries the exact key first, then the generic template
for the action class on that platform, and gives up with a ResolutionError.
"""
import math
import shlex
import sys
from dataclasses import dataclass
from types import MappingProxyType
from urllib.parse import quote, quote_plus

from . import intents
from .apps import build_app_tables, canonical_app_name
from .config import APPS_FILE, INFO_TIMEOUT_SECONDS, WHATSAPP_WEB_URL


NOT_SUPPORTED = "not-supported-on-platform"
UNKNOWN_ACTION = "unknown-action"

PLATFORMS = ("win32", "darwin", "linux")
DEFAULT_PLATFORM = "default"


class ResolutionError(Exception):
    def __init__(self, kind: str, message: str):
        super().__init__(message)
        self.kind = kind


@dataclass(frozen=True)
class Invocation:
    command: str
    action: str
    timeout: float | None = None
    fallback: "Invocation | None" = None


def current_platform() -> str:
    return sys.platform


def table_key(platform_id: str) -> str:
    p = (platform_id or "").strip().lower()
    if p.startswith("win"):
        return "win32"
    if p.startswith("linux"):
        return "linux"
    if p == "darwin":
        return "darwin"
    return DEFAULT_PLATFORM


def shell_quote(value: str, platform_id: str) -> str:
    if table_key(platform_id) == "win32":
        cleaned = "".join(ch for ch in value if ch not in '"&|<>^%')
        return f'"{cleaned}"'
    return shlex.quote(value)


_MAC_PREFS = "open -b com.apple.systempreferences /System/Library/PreferencePanes/"

_LINUX_QUERIES = {
    "system": "lsb_release -a 2>/dev/null || cat /etc/os-release",
    "memory": 'sudo -n dmidecode --type memory 2>/dev/null | grep -E "Size|Speed|Type:" || free -h',
    "storage": "df -h --total && lsblk",
    "cpu": "lscpu",
    "network": "ifconfig || ip addr show",
    "battery": (
        "upower -i /org/freedesktop/UPower/devices/battery_BAT0 2>/dev/null"
        " || cat /sys/class/power_supply/BAT*/capacity 2>/dev/null"
    ),
    "temperature": "sensors 2>/dev/null || cat /sys/class/thermal/thermal_zone*/temp 2>/dev/null",
}

_POSIX_FOLDERS = {
    "downloads": "$HOME/Downloads",
    "documents": "$HOME/Documents",
    "desktop": "$HOME/Desktop",
    "pictures": "$HOME/Pictures",
    "music": "$HOME/Music",
}


def _folders(opener: str, paths: dict) -> dict:
    return {name: f'{opener} "{path}"' for name, path in paths.items()}


_TABLES = {
    "win32": {
        "url": {"open": 'start "" {url}'},
        "app": {
            "calculator": "calc",
            "notepad": "notepad",
            "filemanager": "explorer",
            "whatsapp": "start whatsapp:",
        },
        "folder": _folders("explorer", {
            "downloads": "%USERPROFILE%\\Downloads",
            "documents": "%USERPROFILE%\\Documents",
            "desktop": "%USERPROFILE%\\Desktop",
            "pictures": "%USERPROFILE%\\Pictures",
            "music": "%USERPROFILE%\\Music",
        }),
        "settings": {
            "main": "start ms-settings:",
            "network": "start ms-settings:network",
            "display": "start ms-settings:display",
            "sound": "start ms-settings:sound",
            "bluetooth": "start ms-settings:bluetooth",
            "privacy": "start ms-settings:privacy",
        },
        "power": {
            "shutdown": "shutdown /s /t {seconds}",
            "restart": "shutdown /r /t 10",
            "sleep": "rundll32.exe powrprof.dll,SetSuspendState 0,1,0",
        },
        "volume": {
            "up": "nircmd.exe changesysvolume 6553",
            "down": "nircmd.exe changesysvolume -6553",
            "mute": "nircmd.exe mutesysvolume 1",
        },
        "messaging": {
            "call": "start whatsapp://call?phone={contact}",
            "message": "start whatsapp://send?phone={contact}",
        },
        "query": {
            "system": "wmic os get Caption,Version /format:list",
            "memory": "wmic memorychip get Capacity,Speed,Manufacturer /format:list",
            "storage": "wmic logicaldisk get Size,FreeSpace,Caption /format:list",
            "cpu": "wmic cpu get Name,NumberOfCores,NumberOfLogicalProcessors,MaxClockSpeed /format:list",
            "network": "ipconfig /all",
            "battery": "wmic path Win32_Battery get EstimatedChargeRemaining,BatteryStatus /format:list",
            "temperature": (
                "wmic /namespace:\\\\root\\wmi PATH MSAcpi_ThermalZoneTemperature"
                " get CurrentTemperature /format:list"
            ),
        },
    },
    "darwin": {
        "url": {"open": "open {url}"},
        "app": {
            "calculator": "open -a Calculator",
            "notepad": "open -a TextEdit",
            "filemanager": "open -a Finder",
            "whatsapp": "open -a WhatsApp",
        },
        "folder": _folders("open", _POSIX_FOLDERS),
        "settings": {
            "main": "open -b com.apple.systempreferences",
            "network": _MAC_PREFS + "Network.prefPane",
            "display": _MAC_PREFS + "Displays.prefPane",
            "sound": _MAC_PREFS + "Sound.prefPane",
            "bluetooth": _MAC_PREFS + "Bluetooth.prefPane",
            "privacy": _MAC_PREFS + "Security.prefPane",
        },
        "power": {
            "shutdown": "sudo -n shutdown -h +{minutes}",
            "restart": "sudo -n shutdown -r now",
            "sleep": "pmset sleepnow",
        },
        "volume": {
            "up": 'osascript -e "set volume output volume (output volume of (get volume settings) + 10)"',
            "down": 'osascript -e "set volume output volume (output volume of (get volume settings) - 10)"',
            "mute": 'osascript -e "set volume output muted true"',
        },
        "messaging": {
            "call": "open whatsapp://call?phone={contact}",
            "message": "open whatsapp://send?phone={contact}",
        },
        "query": {
            "system": "sw_vers",
            "memory": "system_profiler SPMemoryDataType",
            "storage": "df -h / && diskutil list",
            "cpu": "sysctl -n machdep.cpu.brand_string && sysctl -n hw.ncpu",
            "network": "ifconfig || ip addr show",
            "battery": "pmset -g batt",
            "temperature": (
                "sudo -n powermetrics --samplers smc -n 1 2>/dev/null | grep -i temp"
                ' || echo "Temperature monitoring requires admin privileges"'
            ),
        },
    },
    "linux": {
        "url": {"open": "xdg-open {url}"},
        "app": {
            "calculator": "gnome-calculator || kcalc || xcalc",
            "notepad": "gedit || kwrite || mousepad",
            "filemanager": "nautilus || dolphin || thunar || xdg-open ~",
            "whatsapp": "xdg-open " + WHATSAPP_WEB_URL,
        },
        "folder": _folders("xdg-open", _POSIX_FOLDERS),
        "settings": {
            "main": "gnome-control-center || systemsettings5 || unity-control-center",
            "network": "gnome-control-center network || systemsettings5 kcm_networkmanagement",
            "display": "gnome-control-center display || systemsettings5 kcm_displayconfiguration",
            "sound": "gnome-control-center sound || systemsettings5 kcm_pulseaudio",
            "bluetooth": "gnome-control-center bluetooth || systemsettings5 kcm_bluetooth",
            "privacy": "gnome-control-center privacy",
        },
        "power": {
            "shutdown": "sudo -n shutdown -h +{minutes}",
            "restart": "sudo -n reboot",
            "sleep": "systemctl suspend",
        },
        "volume": {
            "up": "amixer -D pulse sset Master 10%+",
            "down": "amixer -D pulse sset Master 10%-",
            "mute": "amixer -D pulse sset Master mute",
        },
        "messaging": {
            "call": "xdg-open whatsapp://call?phone={contact}",
            "message": "xdg-open whatsapp://send?phone={contact}",
        },
        "query": dict(_LINUX_QUERIES),
    },
    # unknown unix-likes: only what xdg-utils and coreutils can be relied on for
    DEFAULT_PLATFORM: {
        "url": {"open": "xdg-open {url}"},
        "folder": _folders("xdg-open", _POSIX_FOLDERS),
        "messaging": {
            "call": "xdg-open whatsapp://call?phone={contact}",
            "message": "xdg-open whatsapp://send?phone={contact}",
        },
        "query": {
            "system": "uname -a",
            "storage": "df -h",
            "network": "ifconfig || ip addr show",
        },
    },
}

_GENERIC = {
    "win32": {
        "named-app": 'start "" {name}',
        "folder": _TABLES["win32"]["folder"]["downloads"],
        "settings": _TABLES["win32"]["settings"]["main"],
    },
    "darwin": {
        "named-app": "open -a {name}",
        "folder": _TABLES["darwin"]["folder"]["downloads"],
        "settings": _TABLES["darwin"]["settings"]["main"],
    },
    "linux": {
        "named-app": "{name}",
        "folder": _TABLES["linux"]["folder"]["downloads"],
        "settings": _TABLES["linux"]["settings"]["main"],
    },
    DEFAULT_PLATFORM: {
        "named-app": "{name}",
        "folder": _TABLES[DEFAULT_PLATFORM]["folder"]["downloads"],
    },
}


def _freeze(tables: dict) -> MappingProxyType:
    return MappingProxyType({
        k: _freeze(v) if isinstance(v, dict) else v
        for k, v in tables.items()
    })


TABLES = _freeze(_TABLES)
GENERIC = _freeze(_GENERIC)

_URL_TARGETS = {
    intents.OPEN_WEATHER: "weather.com",
}

_SIMPLE_ACTIONS = {
    intents.LAUNCH_APP: ("app", "app"),
    intents.OPEN_FILE_LOCATION: ("folder", "location"),
    intents.OPEN_SETTINGS: ("settings", "setting"),
}

_FIXED_ACTIONS = {
    intents.RESTART: ("power", "restart"),
    intents.SLEEP: ("power", "sleep"),
    intents.VOLUME_UP: ("volume", "up"),
    intents.VOLUME_DOWN: ("volume", "down"),
    intents.MUTE: ("volume", "mute"),
}

_MESSAGING = {
    intents.WHATSAPP_CALL: "call",
    intents.WHATSAPP_MESSAGE: "message",
}


def full_url(url: str) -> str:
    return url if url.startswith("http") else f"https://{url}"


def search_url(intent: str, query: str) -> str:
    if intent == intents.WEB_SEARCH:
        return f"google.com/search?q={quote(query, safe='')}" if query else "google.com"
    return f"youtube.com/results?search_query={quote(query, safe='')}" if query else "youtube.com"


class ActionResolver:
    def __init__(self, named_apps=None, aliases=None):
        if named_apps is None or aliases is None:
            built_apps, built_aliases = build_app_tables(APPS_FILE)
            named_apps = built_apps if named_apps is None else named_apps
            aliases = built_aliases if aliases is None else aliases
        self.named_apps = named_apps
        self.aliases = aliases

    def _lookup(self, platform: str, action_class: str, key: str) -> str | None:
        return TABLES.get(platform, {}).get(action_class, {}).get(key)

    def _require(self, platform: str, action_class: str, key: str) -> str:
        template = self._lookup(platform, action_class, key)
        if template is None:
            template = GENERIC.get(platform, {}).get(action_class)
        if template is None:
            raise ResolutionError(
                NOT_SUPPORTED,
                f'"{key}" ({action_class}) is not available on platform {platform}',
            )
        return template

    def open_url(self, url: str, platform_id: str) -> Invocation:
        platform = table_key(platform_id)
        template = self._require(platform, "url", "open")
        return Invocation(
            command=template.format(url=shell_quote(full_url(url), platform_id)),
            action="open-url",
        )

    def _named_app(self, name: str, platform_id: str) -> Invocation:
        platform = table_key(platform_id)
        key = canonical_app_name(name, self.aliases)
        apps_platform = platform if platform in self.named_apps else "linux"
        command = self.named_apps.get(apps_platform, {}).get(key)
        if command is None:
            template = self._require(platform, "named-app", key)
            command = template.format(name=shell_quote(name, platform_id))
        return Invocation(command=command, action=f"named-app:{key}")

    def resolve(self, intent: str, params: dict | None, platform_id: str) -> Invocation:
        params = dict(params or {})
        platform = table_key(platform_id)

        if intent == intents.OPEN_URL:
            return self.open_url(params.get("url", ""), platform_id)

        if intent in (intents.WEB_SEARCH, intents.VIDEO_SEARCH):
            return self.open_url(search_url(intent, params.get("query", "")), platform_id)

        if intent in _URL_TARGETS:
            return self.open_url(_URL_TARGETS[intent], platform_id)

        if intent in _SIMPLE_ACTIONS:
            action_class, param = _SIMPLE_ACTIONS[intent]
            key = params.get(param, "")
            if action_class != "app":
                command = self._require(platform, action_class, key)
            else:
                command = self._lookup(platform, action_class, key)
            if command is None:
                raise ResolutionError(
                    NOT_SUPPORTED,
                    f'Application "{key}" not available on this platform',
                )
            return Invocation(command=command, action=f"{action_class}:{key}")

        if intent == intents.LAUNCH_NAMED_APP:
            return self._named_app(params.get("app", ""), platform_id)

        if intent in _MESSAGING:
            kind = _MESSAGING[intent]
            template = self._require(platform, "messaging", kind)
            contact = quote_plus(params.get("contact", "contact"))
            return Invocation(
                command=template.format(contact=contact),
                action=f"messaging:{kind}",
                fallback=self.open_url(WHATSAPP_WEB_URL, platform_id),
            )

        if intent == intents.SHUTDOWN:
            seconds = max(0, int(params.get("seconds") or 0))
            template = self._require(platform, "power", "shutdown")
            return Invocation(
                command=template.format(seconds=seconds, minutes=math.ceil(seconds / 60)),
                action="power:shutdown",
            )

        if intent in _FIXED_ACTIONS:
            action_class, key = _FIXED_ACTIONS[intent]
            return Invocation(
                command=self._require(platform, action_class, key),
                action=f"{action_class}:{key}",
            )

        if intent in intents.INFO_INTENTS:
            return self.query(intents.INFO_INTENTS[intent], platform_id)

        raise ResolutionError(UNKNOWN_ACTION, f"No host action for intent {intent!r}")

    def query(self, kind: str, platform_id: str, timeout: float = INFO_TIMEOUT_SECONDS) -> Invocation:
        platform = table_key(platform_id)
        return Invocation(
            command=self._require(platform, "query", kind),
            action=f"query:{kind}",
            timeout=timeout,
        )
