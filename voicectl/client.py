import socket

import requests

from .logui import error


def is_port_open(host: str, port: int, timeout=0.25) -> bool:
    try:
        with socket.create_connection((host, port), timeout=timeout):
            return True
    except OSError:
        return False


class CommandClient:
    """Small synchronous client for a running voicectl server."""

    def __init__(self, base_url: str, timeout: float = 15):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def _call(self, method: str, path: str, **kwargs):
        try:
            r = requests.request(method, self.base_url + path, timeout=self.timeout, **kwargs)
        except requests.exceptions.RequestException as e:
            error(f"API connection error: {e}")
            return None
        if r.status_code == 200:
            return r.json()
        try:
            detail = r.json().get("error", "")
        except ValueError:
            detail = r.text
        error(f"API error: HTTP {r.status_code} {detail}".rstrip())
        return None

    def status(self):
        return self._call("GET", "/api/status")

    def execute(self, text: str, source: str = "text"):
        return self._call("POST", "/api/execute", json={"text": text, "type": source})

    def history(self, limit: int | None = None):
        params = {"limit": limit} if limit is not None else None
        return self._call("GET", "/api/history", params=params)

    def clear_history(self):
        return self._call("DELETE", "/api/history")

    def info(self, kind: str):
        return self._call("GET", f"/api/{kind}-info")
