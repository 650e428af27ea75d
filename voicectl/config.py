import os

from dotenv import load_dotenv

load_dotenv()


def _env_float(name: str, default: float) -> float:
    raw = (os.environ.get(name) or "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


HOST = os.environ.get("HOST", "0.0.0.0")
PORT = int(os.environ.get("PORT") or 3000)

DATABASE_URL = os.environ.get("DATABASE_URL", "sqlite+aiosqlite:///voicectl.db")
CONNECT_TIMEOUT_SECONDS = _env_float("VOICECTL_CONNECT_TIMEOUT", 5.0)
RECONNECT_INTERVAL_SECONDS = _env_float("VOICECTL_RECONNECT_INTERVAL", 30.0)

INFO_TIMEOUT_SECONDS = _env_float("VOICECTL_INFO_TIMEOUT", 10.0)
LAUNCH_GRACE_SECONDS = _env_float("VOICECTL_LAUNCH_GRACE", 1.0)
APPS_FILE = os.environ.get("VOICECTL_APPS_FILE") or None

FALLBACK_CAPACITY = 100
DEFAULT_HISTORY_LIMIT = 50
DEFAULT_SHUTDOWN_SECONDS = 60

SOURCES = {"voice", "text"}
STATUS_SUCCESS = "success"
STATUS_ERROR = "error"


URL_SUFFIXES = (".com", ".org", ".net", ".io")

WHATSAPP_CONTACTS = {
    "mom": "Mom",
    "dad": "Dad",
    "friend": "Friend",
}
WHATSAPP_WEB_URL = "https://web.whatsapp.com"

FILE_LOCATIONS = ("downloads", "documents", "desktop", "pictures", "music")

SETTINGS_KEYWORDS = {
    "network": ("wifi", "network"),
    "display": ("display", "screen"),
    "sound": ("sound", "audio"),
    "bluetooth": ("bluetooth",),
    "privacy": ("privacy",),
}


UNRECOGNIZED_RESPONSE = (
    '❌ Command not recognized. Try: "open google.com", "search weather", '
    '"open calculator", or "what time is it"'
)

ERROR_RESPONSES = {
    "app-not-found": (
        "❌ Application not found or not installed. "
        "Please ensure the requested application is installed and accessible."
    ),
    "unavailable": (
        "❌ Command not available on this system. "
        "This feature may require additional software installation."
    ),
    "permission-denied": (
        "❌ Permission denied. This command may require administrator privileges."
    ),
    "generic": "❌ Error executing command: {error}",
}


RESPONSES = {
    "open-url": "✅ Opening {url}",
    "web-search": "✅ Searching Google for: {query}",
    "web-search-home": "✅ Opening Google",
    "video-search": "✅ Searching YouTube for: {query}",
    "video-search-home": "✅ Opening YouTube",
    "get-time": "🕐 Current time: {time}",
    "get-date": "📅 Current date: {date}",
    "open-weather": "🌤️ Opening weather information",
    "whatsapp-call": "📞 Calling {contact} on WhatsApp",
    "whatsapp-message": "💬 Opening WhatsApp chat with {contact}",
    "open-file-location": "📁 Opening {label} folder",
    "open-settings": "⚙️ Opening {label} Settings",
    "launch-named-app": "🚀 Opening {app}",
    "shutdown": "⚠️ System will shutdown in {seconds} seconds",
    "restart": "🔄 System restart initiated",
    "sleep": "😴 System going to sleep",
    "volume-up": "🔊 Volume increased",
    "volume-down": "🔉 Volume decreased",
    "mute": "🔇 Volume muted",
}

APP_RESPONSES = {
    "calculator": "🧮 Opening calculator",
    "notepad": "📝 Opening text editor",
    "whatsapp": "💬 Opening WhatsApp",
    "filemanager": "📁 Opening File Manager",
}

SETTINGS_LABELS = {
    "main": "System",
    "network": "Network",
    "display": "Display",
    "sound": "Sound",
    "bluetooth": "Bluetooth",
    "privacy": "Privacy",
}
