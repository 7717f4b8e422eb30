"""A single persisted conversation turn and its storage record shape."""

from dataclasses import dataclass
from datetime import datetime, timezone
import time

USER = "user"
ASSISTANT = "assistant"
SYSTEM = "system"
ROLES = frozenset({USER, ASSISTANT, SYSTEM})


def said_at_now() -> str:
    """UTC timestamp with nanosecond precision, e.g. 2026-10-19T07:00:00.123456789Z.

    Zero-padded so string comparison matches chronological order.
    """
    seconds, nanos = divmod(time.time_ns(), 1_000_000_000)
    stamp = datetime.fromtimestamp(seconds, tz=timezone.utc).strftime("%Y-%m-%dT%H:%M:%S")
    return f"{stamp}.{nanos:09d}Z"


def turn_id(message_id: str, role: str, user: str) -> str:
    return f"{message_id}#{role}#{user}"


@dataclass(frozen=True)
class Turn:
    id: str
    thread_ts: str
    content: str
    said_at: str
    role: str

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Turn id must not be empty")
        if not self.thread_ts:
            raise ValueError(f"Turn {self.id} has no thread_ts")
        if self.role not in ROLES:
            raise ValueError(f"Turn {self.id} has invalid role {self.role!r}")

    def to_item(self) -> dict:
        return {
            "id": self.id,
            "content": self.content,
            "threadTs": self.thread_ts,
            "saidAt": self.said_at,
            "role": self.role,
        }

    @classmethod
    def from_item(cls, item: dict) -> "Turn":
        try:
            return cls(
                id=item["id"],
                thread_ts=item["threadTs"],
                content=item.get("content", ""),
                said_at=item["saidAt"],
                role=item["role"],
            )
        except KeyError as exc:
            raise ValueError(f"Stored turn is missing field {exc}") from exc

    def to_message(self) -> dict:
        """Reduce to the {role, content} pair the completion API expects."""
        return {"role": self.role, "content": self.content}
