import os
from datetime import datetime


LEVELS = {"DEBUG": 10, "INFO": 20, "WARN": 30, "ERROR": 40}
LOG_LEVEL = os.environ.get("VOICECTL_LOG", "INFO").upper()


def set_level(name: str) -> str:
    global LOG_LEVEL
    level = (name or "").strip().upper()
    if level == "WARNING":
        level = "WARN"
    if level in LEVELS:
        LOG_LEVEL = level
    return LOG_LEVEL


def _ts():
    return datetime.now().strftime("%H:%M:%S")


def describe_exc(e: BaseException) -> str:
    text = str(e).strip()
    return f"{type(e).__name__}: {text}" if text else type(e).__name__


def log(level: str, msg: str):
    if LEVELS.get(level, 20) >= LEVELS.get(LOG_LEVEL, 20):
        print(f"{_ts()} [{level:<5}] {msg}", flush=True)

def debug(msg):
    log("DEBUG", msg)

def info(msg):
    log("INFO", msg)

def warn(msg):
    log("WARN", msg)

def error(msg):
    log("ERROR", msg)
