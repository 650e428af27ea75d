import datetime
from dataclasses import dataclass

from sqlalchemy import Column, DateTime, Integer, String, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


class Command(Base):
    """One processed command. Rows are inserted and bulk-deleted, never updated."""
    __tablename__ = "commands"

    id = Column(Integer, primary_key=True, autoincrement=True)
    text = Column(Text, nullable=False)
    source = Column(String(16), nullable=False)
    timestamp = Column(DateTime(timezone=True), default=utcnow, index=True, nullable=False)
    status = Column(String(16), nullable=False)
    response = Column(Text, nullable=False)
    platform = Column(String(32), nullable=False)
    client_context = Column(Text)


@dataclass(frozen=True)
class CommandRecord:
    text: str
    source: str
    status: str
    response: str
    platform: str
    client_context: str | None = None
    id: str | None = None
    timestamp: datetime.datetime | None = None

    @classmethod
    def from_row(cls, row: Command, with_context: bool = False) -> "CommandRecord":
        ts = row.timestamp
        # SQLite hands back naive datetimes even for timezone=True columns
        if ts is not None and ts.tzinfo is None:
            ts = ts.replace(tzinfo=datetime.timezone.utc)
        return cls(
            id=str(row.id),
            text=row.text,
            source=row.source,
            timestamp=ts,
            status=row.status,
            response=row.response,
            platform=row.platform,
            client_context=row.client_context if with_context else None,
        )

    def to_row(self) -> Command:
        return Command(
            text=self.text,
            source=self.source,
            status=self.status,
            response=self.response,
            platform=self.platform,
            client_context=self.client_context,
        )

    def to_dict(self) -> dict:
        """Read projection; client_context is never exposed."""
        return {
            "id": self.id,
            "text": self.text,
            "source": self.source,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
            "status": self.status,
            "response": self.response,
            "platform": self.platform,
        }
