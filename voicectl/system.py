import asyncio
import errno

from .config import LAUNCH_GRACE_SECONDS
from .logui import debug, warn
from .platforms import Invocation


NOT_FOUND = "not-found"
PERMISSION_DENIED = "permission-denied"
TIMEOUT = "timeout"
OTHER = "other"

# 127: POSIX shell "command not found"; 9009: cmd.exe "is not recognized"
NOT_FOUND_EXIT_CODES = {127, 9009}
PERMISSION_EXIT_CODES = {126}

# reapers for launched apps that outlive their grace period
_running: set[asyncio.Task] = set()


class ExecutionError(Exception):
    def __init__(self, kind: str, message: str, exit_code: int | None = None):
        super().__init__(message)
        self.kind = kind
        self.exit_code = exit_code


def _decode(data: bytes | None) -> str:
    return (data or b"").decode("utf-8", errors="replace")


def classify_exit(returncode: int, stderr: str) -> str:
    if returncode in NOT_FOUND_EXIT_CODES:
        return NOT_FOUND
    if returncode in PERMISSION_EXIT_CODES or "permission denied" in stderr.lower():
        return PERMISSION_DENIED
    return OTHER


async def _spawn(command: str, **kwargs):
    debug(f"Exec: {command}")
    try:
        return await asyncio.create_subprocess_shell(
            command,
            stdin=asyncio.subprocess.DEVNULL,
            **kwargs,
        )
    except FileNotFoundError as e:
        raise ExecutionError(NOT_FOUND, f"{command.split()[0]}: {e.strerror or e}") from e
    except PermissionError as e:
        raise ExecutionError(PERMISSION_DENIED, f"permission denied: {e}") from e
    except OSError as e:
        if e.errno == errno.ENOENT:
            raise ExecutionError(NOT_FOUND, str(e)) from e
        raise ExecutionError(OTHER, str(e)) from e


async def run_shell(command: str, timeout: float | None = None) -> str:
    """Run one shell command and return its output.

    stdout wins, then stderr, then the literal "No output". A non-zero exit
    raises ExecutionError; so does running past ``timeout`` (the child is
    killed first).
    """
    proc = await _spawn(
        command,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )

    try:
        if timeout is None:
            out, err = await proc.communicate()
        else:
            out, err = await asyncio.wait_for(proc.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        try:
            proc.kill()
        except ProcessLookupError:
            pass
        await proc.wait()
        raise ExecutionError(TIMEOUT, f"Command timed out after {timeout:g}s") from None

    stdout, stderr = _decode(out), _decode(err)
    if proc.returncode != 0:
        kind = classify_exit(proc.returncode, stderr)
        detail = stderr.strip() or stdout.strip() or f"exit code {proc.returncode}"
        raise ExecutionError(kind, detail, exit_code=proc.returncode)
    return stdout or stderr or "No output"


async def launch(command: str, grace: float | None = None) -> str:
    """Start a host action without holding on to it.

    The child gets no pipes and its own session, so apps it starts never
    keep the caller waiting. A launcher that exits within ``grace`` seconds
    is judged by its exit code; one still running after that is the app
    itself and is left alone.
    """
    grace = LAUNCH_GRACE_SECONDS if grace is None else grace
    proc = await _spawn(
        command,
        stdout=asyncio.subprocess.DEVNULL,
        stderr=asyncio.subprocess.DEVNULL,
        start_new_session=True,
    )

    try:
        returncode = await asyncio.wait_for(proc.wait(), timeout=grace)
    except asyncio.TimeoutError:
        debug(f"Still running after {grace:g}s, detaching: {command}")
        reaper = asyncio.create_task(proc.wait())
        _running.add(reaper)
        reaper.add_done_callback(_running.discard)
        return "No output"

    if returncode != 0:
        raise ExecutionError(classify_exit(returncode, ""), f"exit code {returncode}", exit_code=returncode)
    return "No output"


async def execute(invocation: Invocation, timeout: float | None = None) -> str:
    """Queries (bounded) are captured with run_shell; actions go through launch."""
    limit = invocation.timeout if timeout is None else timeout
    try:
        if limit is None:
            return await launch(invocation.command)
        return await run_shell(invocation.command, timeout=limit)
    except ExecutionError as e:
        if invocation.fallback is None:
            raise
        warn(f"{invocation.action} failed ({e.kind}: {e}); trying {invocation.fallback.command}")
        return await execute(invocation.fallback)
