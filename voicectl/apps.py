import os
import json
from types import MappingProxyType

from .logui import info, warn


NAMED_APPS = {
    "win32": {
        "chrome": "start chrome",
        "firefox": "start firefox",
        "edge": "start msedge",
        "notepad": "notepad",
        "calculator": "calc",
        "paint": "mspaint",
        "word": "start winword",
        "excel": "start excel",
        "powerpoint": "start powerpnt",
        "outlook": "start outlook",
        "teams": "start ms-teams:",
        "zoom": "start zoommtg:",
        "discord": "start discord:",
        "spotify": "start spotify:",
        "steam": "start steam:",
        "vscode": "code",
        "photoshop": "start photoshop",
        "illustrator": "start illustrator",
        "premiere": "start premiere",
        "aftereffects": "start aftereffects",
    },
    "darwin": {
        "chrome": 'open -a "Google Chrome"',
        "firefox": "open -a Firefox",
        "safari": "open -a Safari",
        "textedit": "open -a TextEdit",
        "calculator": "open -a Calculator",
        "word": 'open -a "Microsoft Word"',
        "excel": 'open -a "Microsoft Excel"',
        "powerpoint": 'open -a "Microsoft PowerPoint"',
        "outlook": 'open -a "Microsoft Outlook"',
        "teams": 'open -a "Microsoft Teams"',
        "zoom": "open -a zoom.us",
        "discord": "open -a Discord",
        "spotify": "open -a Spotify",
        "steam": "open -a Steam",
        "vscode": 'open -a "Visual Studio Code"',
        "photoshop": 'open -a "Adobe Photoshop"',
        "illustrator": 'open -a "Adobe Illustrator"',
        "premiere": 'open -a "Adobe Premiere Pro"',
    },
    "linux": {
        "chrome": "google-chrome || chromium-browser",
        "firefox": "firefox",
        "gedit": "gedit",
        "calculator": "gnome-calculator || kcalc",
        "libreoffice": "libreoffice",
        "writer": "libreoffice --writer",
        "calc": "libreoffice --calc",
        "impress": "libreoffice --impress",
        "thunderbird": "thunderbird",
        "discord": "discord",
        "spotify": "spotify",
        "steam": "steam",
        "vscode": "code",
        "gimp": "gimp",
        "inkscape": "inkscape",
    },
}

# spoken forms that should hit the same table key
ALIASES = {
    "google chrome": "chrome",
    "chromium": "chrome",
    "mozilla firefox": "firefox",
    "microsoft edge": "edge",
    "ms word": "word",
    "microsoft word": "word",
    "microsoft excel": "excel",
    "microsoft powerpoint": "powerpoint",
    "microsoft outlook": "outlook",
    "microsoft teams": "teams",
    "vs code": "vscode",
    "visual studio code": "vscode",
    "after effects": "aftereffects",
    "premiere pro": "premiere",
}


def extract_app_name(text: str) -> str:
    t = (text or "").strip().lower()
    t = " ".join(t.split())
    prefixes = ("open ", "launch ", "start ", "run ")
    for p in prefixes:
        if t.startswith(p):
            return t[len(p):].strip()
    return t


def canonical_app_name(name: str, aliases: dict | None = None) -> str:
    q = " ".join((name or "").strip().lower().split())
    if q.startswith("the "):
        q = q[4:]
    for suffix in (" app", " application"):
        if q.endswith(suffix) and q != suffix.strip():
            q = q[: -len(suffix)]
    table = ALIASES if aliases is None else aliases
    return table.get(q, q)


def load_apps_config(path: str | None) -> tuple[dict, dict]:
    """Read extra named applications from an apps.json file.

    Format::

        {"apps": [{"id": "obsidian", "aliases": ["obsidian notes"],
                   "commands": {"linux": "obsidian", "darwin": "open -a Obsidian"}}]}

    Returns ``(commands_by_platform, aliases)``. Invalid entries are skipped;
    a missing or unreadable file yields empty mappings.
    """
    if not path:
        return {}, {}
    if not os.path.exists(path):
        warn(f"apps file not found: {path}. Using built-in app tables only.")
        return {}, {}

    try:
        with open(path, "r", encoding="utf-8") as f:
            cfg = json.load(f)
    except (OSError, ValueError) as e:
        warn(f"apps file read failed: {e}")
        return {}, {}

    apps = cfg.get("apps", []) if isinstance(cfg, dict) else []
    commands: dict[str, dict[str, str]] = {}
    aliases: dict[str, str] = {}
    loaded = 0
    for a in apps or []:
        if not isinstance(a, dict):
            continue
        app_id = " ".join(str(a.get("id") or "").strip().lower().split())
        per_platform = a.get("commands") or {}
        if not app_id or not isinstance(per_platform, dict):
            continue

        entries = {
            str(p).strip().lower(): os.path.expandvars(str(cmd).strip())
            for p, cmd in per_platform.items()
            if str(p).strip() and str(cmd).strip()
        }
        if not entries:
            continue

        for platform_id, cmd in entries.items():
            commands.setdefault(platform_id, {})[app_id] = cmd
        for al in a.get("aliases") or []:
            al = " ".join(str(al).strip().lower().split())
            if al:
                aliases[al] = app_id
        loaded += 1

    info(f"Apps loaded: {loaded} ({os.path.basename(path)})")
    return commands, aliases


def build_app_tables(path: str | None = None):
    """Merge built-in tables with apps.json into read-only mappings."""
    extra_commands, extra_aliases = load_apps_config(path)
    merged = {}
    for platform_id in set(NAMED_APPS) | set(extra_commands):
        table = dict(NAMED_APPS.get(platform_id, {}))
        table.update(extra_commands.get(platform_id, {}))
        merged[platform_id] = MappingProxyType(table)
    aliases = dict(ALIASES)
    aliases.update(extra_aliases)
    return MappingProxyType(merged), MappingProxyType(aliases)
