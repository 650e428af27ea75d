from dataclasses import dataclass, field
from datetime import datetime
from typing import Awaitable, Callable

from . import hostinfo, intents
from .config import (
    APP_RESPONSES,
    ERROR_RESPONSES,
    RESPONSES,
    SETTINGS_LABELS,
    STATUS_ERROR,
    STATUS_SUCCESS,
    UNRECOGNIZED_RESPONSE,
)
from .logui import describe_exc, error, info
from .platforms import ActionResolver, Invocation, ResolutionError, current_platform
from .system import NOT_FOUND, PERMISSION_DENIED, ExecutionError, execute


@dataclass(frozen=True)
class Outcome:
    status: str
    response: str
    intent: str = intents.UNRECOGNIZED
    params: dict = field(default_factory=dict)


def render_response(intent: str, params: dict) -> str:
    if intent == intents.LAUNCH_APP:
        app = params.get("app", "")
        return APP_RESPONSES.get(app, f"🚀 Opening {app}")
    if intent == intents.OPEN_FILE_LOCATION:
        return RESPONSES[intent].format(label=params.get("location", "").capitalize())
    if intent == intents.OPEN_SETTINGS:
        label = SETTINGS_LABELS.get(params.get("setting", "main"), "System")
        return RESPONSES[intent].format(label=label)
    if intent in (intents.WEB_SEARCH, intents.VIDEO_SEARCH) and not params.get("query"):
        return RESPONSES[f"{intent}-home"]
    return RESPONSES[intent].format(**params)


def error_response(e: BaseException) -> str:
    if isinstance(e, ResolutionError):
        return ERROR_RESPONSES["unavailable"]
    if isinstance(e, ExecutionError):
        if e.kind == NOT_FOUND:
            key = "app-not-found" if e.exit_code is not None else "unavailable"
            return ERROR_RESPONSES[key]
        if e.kind == PERMISSION_DENIED:
            return ERROR_RESPONSES["permission-denied"]
    return ERROR_RESPONSES["generic"].format(error=str(e) or type(e).__name__)


class CommandProcessor:
    """Runs one command through classify -> resolve -> execute.

    ``executor`` is the only thing that touches the host. Tests pass a fake
    that records invocations instead of spawning processes.
    """

    def __init__(
        self,
        executor: Callable[[Invocation], Awaitable[str]] | None = None,
        resolver: ActionResolver | None = None,
        platform_id: str | None = None,
        rules: tuple[intents.Rule, ...] = intents.RULES,
    ):
        self.executor = executor or execute
        self.resolver = resolver or ActionResolver()
        self.platform_id = platform_id or current_platform()
        self.rules = rules

    async def describe(self, kind: str) -> str:
        return await hostinfo.describe(kind, self.platform_id, self.resolver, self.executor)

    async def _run(self, intent: str, params: dict) -> str:
        if intent == intents.GET_TIME:
            return RESPONSES[intent].format(time=datetime.now().strftime("%I:%M:%S %p"))
        if intent == intents.GET_DATE:
            return RESPONSES[intent].format(date=datetime.now().strftime("%A, %B %d, %Y"))
        if intent in intents.INFO_INTENTS:
            return await self.describe(intents.INFO_INTENTS[intent])

        invocation = self.resolver.resolve(intent, params, self.platform_id)
        await self.executor(invocation)
        return render_response(intent, params)

    async def process(self, text: str, source: str = "text") -> Outcome:
        intent, params = intents.classify(text, self.rules)
        info(f"Command ({source}): \"{intents.normalize(text)}\" -> {intent}")

        if intent == intents.UNRECOGNIZED:
            return Outcome(STATUS_ERROR, UNRECOGNIZED_RESPONSE, intent, params)

        try:
            response = await self._run(intent, params)
        except Exception as e:
            error(f"Command execution error: {describe_exc(e)}")
            return Outcome(STATUS_ERROR, error_response(e), intent, params)
        return Outcome(STATUS_SUCCESS, response, intent, params)
