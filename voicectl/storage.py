import asyncio
from contextlib import asynccontextmanager

from sqlalchemy import delete, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from .config import CONNECT_TIMEOUT_SECONDS, DATABASE_URL, FALLBACK_CAPACITY
from .history import CommandHistory
from .logui import debug, describe_exc, info, warn
from .models import Base, Command, CommandRecord

# anything a store call can raise that means "the database is not usable right now";
# ImportError covers a DATABASE_URL naming an async driver that is not installed
STORAGE_ERRORS = (SQLAlchemyError, OSError, asyncio.TimeoutError, ImportError)


class StorageState:
    def __init__(self, capacity: int = FALLBACK_CAPACITY):
        self.persistent_available = False
        self.ready = asyncio.Event()
        self.buffer = CommandHistory(capacity)

    def demote(self, reason: str = ""):
        if self.persistent_available:
            warn(f"Storage: database unavailable, using in-memory history ({reason})")
        self.persistent_available = False

    def promote(self):
        if not self.persistent_available:
            info("Storage: database available")
        self.persistent_available = True


class StorageFailover:
    """Command history backed by SQL, falling back to a bounded in-memory buffer.

    ``start()`` begins one connection attempt in the background. Until it
    finishes, every operation waits on ``state.ready`` (at most
    ``connect_timeout`` seconds). Store failures never propagate: the call
    demotes to the buffer and completes there. ``probe()`` / ``watch()``
    bring the database back once it answers again.
    """

    def __init__(
        self,
        url: str = DATABASE_URL,
        connect_timeout: float = CONNECT_TIMEOUT_SECONDS,
        capacity: int = FALLBACK_CAPACITY,
    ):
        self.url = url
        self.connect_timeout = connect_timeout
        self.state = StorageState(capacity)
        self.engine = None
        self._sessionmaker = None
        self._connect_task: asyncio.Task | None = None

    @property
    def persistent_available(self) -> bool:
        return self.state.persistent_available

    def start(self) -> asyncio.Task:
        if self._connect_task is None:
            self._connect_task = asyncio.create_task(self._connect())
        return self._connect_task

    def _ensure_engine(self):
        if self.engine is None:
            self.engine = create_async_engine(self.url)
            # keep attributes loaded after commit; records are built outside the session
            self._sessionmaker = async_sessionmaker(
                bind=self.engine,
                class_=AsyncSession,
                autoflush=False,
                expire_on_commit=False,
            )

    async def _open(self):
        self._ensure_engine()
        async with self.engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
            await conn.run_sync(Base.metadata.create_all)

    async def _connect(self):
        try:
            await asyncio.wait_for(self._open(), timeout=self.connect_timeout)
            self.state.promote()
        except STORAGE_ERRORS as e:
            warn(f"Storage: could not connect to database, using in-memory history ({describe_exc(e)})")
            self.state.demote(describe_exc(e))
        finally:
            self.state.ready.set()

    async def _await_ready(self):
        if self.state.ready.is_set():
            return
        self.start()
        try:
            await asyncio.wait_for(self.state.ready.wait(), timeout=self.connect_timeout)
        except asyncio.TimeoutError:
            warn("Storage: still connecting, serving from in-memory history")

    @asynccontextmanager
    async def session(self):
        """Transactional scope: commit on success, rollback on error."""
        async with self._sessionmaker() as db:
            try:
                yield db
                await db.commit()
            except Exception:
                await db.rollback()
                raise

    async def save(self, record: CommandRecord) -> CommandRecord:
        await self._await_ready()
        if self.state.persistent_available:
            try:
                async with self.session() as db:
                    row = record.to_row()
                    db.add(row)
                    await db.flush()
                return CommandRecord.from_row(row)
            except STORAGE_ERRORS as e:
                self.state.demote(f"save failed: {describe_exc(e)}")
        return self.state.buffer.push(record)

    async def list(self, limit: int) -> list[CommandRecord]:
        await self._await_ready()
        if self.state.persistent_available:
            try:
                async with self.session() as db:
                    result = await db.execute(
                        select(Command)
                        .order_by(Command.timestamp.desc(), Command.id.desc())
                        .limit(limit)
                    )
                    rows = result.scalars().all()
                return [CommandRecord.from_row(r) for r in rows]
            except STORAGE_ERRORS as e:
                self.state.demote(f"list failed: {describe_exc(e)}")
        return self.state.buffer.latest(limit)

    async def clear(self):
        await self._await_ready()
        if self.state.persistent_available:
            try:
                async with self.session() as db:
                    await db.execute(delete(Command))
                return
            except STORAGE_ERRORS as e:
                self.state.demote(f"clear failed: {describe_exc(e)}")
        self.state.buffer.clear()

    async def probe(self) -> bool:
        try:
            await asyncio.wait_for(self._open(), timeout=self.connect_timeout)
        except STORAGE_ERRORS as e:
            debug(f"Storage: reconnect attempt failed ({describe_exc(e)})")
            self.state.demote(describe_exc(e))
            return False
        self.state.promote()
        return True

    async def watch(self, interval: float):
        """Probe every ``interval`` seconds while degraded. Runs until cancelled."""
        while True:
            await asyncio.sleep(interval)
            if not self.state.persistent_available:
                await self.probe()

    async def close(self):
        if self._connect_task is not None and not self._connect_task.done():
            self._connect_task.cancel()
        if self.engine is not None:
            await self.engine.dispose()
