import platform
import socket
import time
from typing import Awaitable, Callable

import psutil

from .logui import debug
from .platforms import ActionResolver, Invocation, ResolutionError
from .system import ExecutionError


INFO_KINDS = ("system", "memory", "storage", "cpu", "network", "battery", "temperature")

# how much raw command output each report shows
DETAIL_LIMITS = {
    "system": 200,
    "memory": 300,
    "cpu": 400,
    "network": 300,
}

GB = 1024 ** 3

Executor = Callable[[Invocation], Awaitable[str]]


def _gb(n: float) -> str:
    return f"{n / GB:.2f}"


def _cpu_model() -> str:
    model = (platform.processor() or "").strip()
    if model and model != platform.machine():
        return model
    try:
        with open("/proc/cpuinfo", "r", encoding="utf-8") as f:
            for line in f:
                if line.lower().startswith("model name"):
                    return line.split(":", 1)[1].strip()
    except OSError:
        pass
    return model or platform.machine() or "Unknown"


def _clip(details: str | None, kind: str) -> str | None:
    if details is None:
        return None
    limit = DETAIL_LIMITS.get(kind)
    return details[:limit] if limit else details


def _system(platform_id: str, details: str | None) -> str:
    vm = psutil.virtual_memory()
    uptime_hours = int((time.time() - psutil.boot_time()) // 3600)
    used = vm.total - vm.available
    os_details = details if details is not None else f"{platform_id} {platform.machine()}"
    return (
        "💻 System Information:\n"
        f"🖥️ Hostname: {socket.gethostname()}\n"
        f"⚙️ Platform: {platform_id} ({platform.machine()})\n"
        f"🕐 Uptime: {uptime_hours} hours\n"
        f"🧠 Memory: {_gb(used)}GB used / {_gb(vm.total)}GB total ({_gb(vm.available)}GB free)\n"
        f"📋 OS Details: {os_details}"
    )


def _memory(platform_id: str, details: str | None) -> str:
    vm = psutil.virtual_memory()
    used = vm.total - vm.available
    percent = (used / vm.total * 100) if vm.total else 0.0
    return (
        "🧠 Memory Information:\n"
        f"📊 Total RAM: {_gb(vm.total)} GB\n"
        f"✅ Used: {_gb(used)} GB ({percent:.1f}%)\n"
        f"🆓 Free: {_gb(vm.available)} GB\n"
        f"📋 Details: {details if details is not None else 'Detailed memory info not available'}"
    )


def _storage(platform_id: str, details: str | None) -> str:
    return f"💾 Storage Information:\n{details if details is not None else 'Storage information not available'}"


def _cpu(platform_id: str, details: str | None) -> str:
    try:
        freq = psutil.cpu_freq()
    except (NotImplementedError, OSError):
        # no cpufreq interface, common in containers
        freq = None
    speed = f"{freq.current:.0f}" if freq else "Unknown"
    return (
        "⚡ CPU Information:\n"
        f"🔧 Model: {_cpu_model()}\n"
        f"🔢 Cores: {psutil.cpu_count() or 'Unknown'}\n"
        f"⚡ Speed: {speed} MHz\n"
        f"📋 Details: {details if details is not None else 'Detailed CPU info not available'}"
    )


def _family(family) -> str | None:
    if family == socket.AF_INET:
        return "IPv4"
    if family == socket.AF_INET6:
        return "IPv6"
    return None


def _network(platform_id: str, details: str | None) -> str:
    lines = ["🌐 Network Information:"]
    for name, addrs in psutil.net_if_addrs().items():
        for addr in addrs:
            family = _family(addr.family)
            if family is None:
                continue
            if addr.address.startswith("127.") or addr.address == "::1":
                continue
            lines.append(f"📡 {name}: {addr.address} ({family})")
    text = "\n".join(lines) + "\n"
    if details is None:
        return text + "\n📋 Additional network details not available"
    return text + f"\n📋 Details: {details}"


def _battery(platform_id: str, details: str | None) -> str:
    if details is None:
        return "🔋 Battery: Information not available"
    if not details.strip() or details == "No output":
        return "🔋 Battery: Not available (Desktop computer or battery info inaccessible)"
    return f"🔋 Battery Information:\n{details}"


def _temperature(platform_id: str, details: str | None) -> str:
    if details is None:
        return "🌡️ Temperature: Information not available"
    if not details.strip() or details == "No output":
        return "🌡️ Temperature: Sensors not available or require additional permissions"
    return f"🌡️ Temperature Information:\n{details}"


FORMATTERS = {
    "system": _system,
    "memory": _memory,
    "storage": _storage,
    "cpu": _cpu,
    "network": _network,
    "battery": _battery,
    "temperature": _temperature,
}


async def describe(kind: str, platform_id: str, resolver: ActionResolver, executor: Executor) -> str:
    """Build the report for one informational query.

    Host facts come from psutil; the platform's query command adds detail.
    A missing or failing query command only drops the detail section.
    """
    if kind not in FORMATTERS:
        raise ValueError(f"unknown info kind: {kind}")
    try:
        details = await executor(resolver.query(kind, platform_id))
    except (ResolutionError, ExecutionError) as e:
        debug(f"{kind} details unavailable: {e}")
        details = None
    return FORMATTERS[kind](platform_id, _clip(details, kind))
