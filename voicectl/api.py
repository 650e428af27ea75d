import asyncio
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from .config import DEFAULT_HISTORY_LIMIT, RECONNECT_INTERVAL_SECONDS, SOURCES
from .logui import describe_exc, error, info
from .models import CommandRecord
from .processor import CommandProcessor
from .storage import StorageFailover

MISSING_FIELDS = "Missing required fields: text, type"

# endpoint kind -> wording used in the 500 message
INFO_ENDPOINTS = {
    "system": "system",
    "memory": "memory",
    "storage": "storage",
    "cpu": "CPU",
    "network": "network",
}


class ExecuteRequest(BaseModel):
    text: str | None = None
    type: str | None = None


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def parse_limit(raw: str | None) -> int:
    try:
        limit = int(raw)
    except (TypeError, ValueError):
        return DEFAULT_HISTORY_LIMIT
    return limit if limit >= 1 else DEFAULT_HISTORY_LIMIT


def _fail(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def create_app(
    storage: StorageFailover | None = None,
    processor: CommandProcessor | None = None,
    reconnect_interval: float = RECONNECT_INTERVAL_SECONDS,
) -> FastAPI:
    storage = storage or StorageFailover()
    processor = processor or CommandProcessor()

    app = FastAPI(title="voicectl")
    app.state.storage = storage
    app.state.processor = processor
    app.state.watch_task = None

    @app.on_event("startup")
    async def _startup():
        info(f"Platform: {processor.platform_id}")
        storage.start()
        if reconnect_interval > 0:
            app.state.watch_task = asyncio.create_task(storage.watch(reconnect_interval))

    @app.on_event("shutdown")
    async def _shutdown():
        task = app.state.watch_task
        if task is not None:
            task.cancel()
        await storage.close()

    @app.exception_handler(RequestValidationError)
    async def _bad_body(request: Request, exc: RequestValidationError):
        return _fail(400, MISSING_FIELDS)

    @app.get("/api/status")
    async def status():
        return {"status": "online", "platform": processor.platform_id, "timestamp": _now_iso()}

    @app.post("/api/execute")
    async def execute(req: ExecuteRequest, request: Request):
        if not (req.text or "").strip() or not req.type:
            return _fail(400, MISSING_FIELDS)
        if req.type not in SOURCES:
            return _fail(400, f"Invalid type: {req.type} (expected voice or text)")

        try:
            outcome = await processor.process(req.text, req.type)
            saved = await storage.save(CommandRecord(
                text=req.text,
                source=req.type,
                status=outcome.status,
                response=outcome.response,
                platform=processor.platform_id,
                client_context=request.headers.get("user-agent", ""),
            ))
        except Exception as e:
            error(f"API error: {describe_exc(e)}")
            return _fail(500, "Internal server error")

        return {
            "id": saved.id,
            "response": outcome.response,
            "status": outcome.status,
            "timestamp": saved.timestamp.isoformat() if saved.timestamp else _now_iso(),
        }

    @app.get("/api/history")
    async def history(limit: str | None = None):
        try:
            records = await storage.list(parse_limit(limit))
        except Exception as e:
            error(f"History fetch error: {describe_exc(e)}")
            return _fail(500, "Failed to fetch history")
        return [r.to_dict() for r in records]

    @app.delete("/api/history")
    async def clear_history():
        try:
            await storage.clear()
        except Exception as e:
            error(f"History clear error: {describe_exc(e)}")
            return _fail(500, "Failed to clear history")
        return {"message": "History cleared successfully"}

    def _info_route(kind: str, label: str):
        async def handler():
            try:
                return {"info": await processor.describe(kind)}
            except Exception as e:
                error(f"{label} info error: {describe_exc(e)}")
                return _fail(500, f"Failed to get {label} information")
        handler.__name__ = f"{kind}_info"
        return handler

    for kind, label in INFO_ENDPOINTS.items():
        app.add_api_route(f"/api/{kind}-info", _info_route(kind, label), methods=["GET"])

    return app


app = create_app()
