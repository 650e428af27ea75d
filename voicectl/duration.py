import re

from .config import DEFAULT_SHUTDOWN_SECONDS


_UNIT_RE = re.compile(
    r"^(seconds?|secs?|s|sekends?|minutes?|mins?|m|hours?|hrs?|h)$",
    re.IGNORECASE,
)

_NUMBER_WORDS = {
    "a": 1, "an": 1,
    "one": 1, "two": 2, "three": 3, "four": 4, "five": 5,
    "six": 6, "seven": 7, "eight": 8, "nine": 9, "ten": 10,
    "eleven": 11, "twelve": 12, "thirteen": 13, "fourteen": 14, "fifteen": 15,
    "sixteen": 16, "seventeen": 17, "eighteen": 18, "nineteen": 19, "twenty": 20,
    "thirty": 30, "forty": 40, "fifty": 50, "sixty": 60,
}


def _parse_num(token: str) -> int | None:
    t = (token or "").strip().lower()
    if not t:
        return None
    if t.isdigit():
        return int(t)
    return _NUMBER_WORDS.get(t)


def _unit_to_seconds(unit: str) -> int:
    u = unit.strip().lower()
    if u.startswith("h"):
        return 3600
    if u.startswith("m"):
        return 60
    return 1


def parse_duration(text: str) -> int | None:
    """Return the first "<number> <unit>" span in text as seconds.

    The number may be digits or an English number word; a bare number with no
    unit is not a duration. "5 minutes" -> 300, "ten sec" -> 10.
    """
    raw = " ".join((text or "").strip().lower().split())
    if not raw:
        return None

    # "5min" and "30s" arrive glued together from typed input
    tokens = re.findall(r"\d+|[a-z]+", raw)
    for i in range(len(tokens) - 1):
        n = _parse_num(tokens[i])
        if n is None:
            continue
        if not _UNIT_RE.match(tokens[i + 1]):
            continue
        # "a" and "an" only count when a unit follows, e.g. "in a minute"
        return n * _unit_to_seconds(tokens[i + 1])
    return None


def shutdown_delay(text: str, default: int = DEFAULT_SHUTDOWN_SECONDS) -> int:
    seconds = parse_duration(text)
    if seconds is None or seconds < 0:
        return default
    return seconds
