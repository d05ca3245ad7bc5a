from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Union


def utc_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class Trigger:
    message: str
    replies: list[str]
    created_by: str | None = None
    created_at: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"message": self.message, "replies": list(self.replies)}
        if self.created_by is not None:
            data["createdBy"] = self.created_by
        if self.created_at is not None:
            data["createdAt"] = self.created_at
        return data

    @classmethod
    def from_dict(cls, raw: Any) -> Trigger | None:
        """Build a trigger from a persisted record, or None if it is unusable.

        A scalar `replies` value is read as a single reply; records without a
        message or without any reply are dropped.
        """

        if not isinstance(raw, dict):
            return None
        message = raw.get("message")
        if not isinstance(message, str) or not message:
            return None

        replies = raw.get("replies")
        if isinstance(replies, str):
            replies = [replies]
        if not isinstance(replies, list):
            return None
        replies = [str(r) for r in replies if r is not None]
        if not replies:
            return None

        created_by = raw.get("createdBy")
        created_at = raw.get("createdAt")
        return cls(
            message=message,
            replies=replies,
            created_by=str(created_by) if created_by is not None else None,
            created_at=str(created_at) if created_at is not None else None,
        )


@dataclass
class BrainStats:
    total_conversations: int = 0
    total_teachers: int = 0
    created_at: str | None = None
    updated_at: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "totalConversations": self.total_conversations,
            "totalTeachers": self.total_teachers,
        }
        if self.created_at is not None:
            data["createdAt"] = self.created_at
        if self.updated_at is not None:
            data["updatedAt"] = self.updated_at
        return data

    @classmethod
    def from_dict(cls, raw: Any) -> BrainStats:
        if not isinstance(raw, dict):
            return cls()
        created_at = raw.get("createdAt")
        updated_at = raw.get("updatedAt")
        return cls(
            created_at=str(created_at) if created_at is not None else None,
            updated_at=str(updated_at) if updated_at is not None else None,
        )


@dataclass
class BrainState:
    triggers: list[Trigger] = field(default_factory=list)
    teachers: dict[str, int] = field(default_factory=dict)
    stats: BrainStats = field(default_factory=BrainStats)

    def find(self, message: str) -> int | None:
        for position, trigger in enumerate(self.triggers):
            if trigger.message == message:
                return position
        return None

    def get(self, message: str) -> Trigger | None:
        position = self.find(message)
        return None if position is None else self.triggers[position]

    def recompute_stats(self, now: str | None = None) -> None:
        self.stats.total_conversations = len(self.triggers)
        self.stats.total_teachers = len(self.teachers)
        if now is not None:
            self.stats.updated_at = now

    def to_dict(self) -> dict[str, Any]:
        return {
            "triggers": [t.to_dict() for t in self.triggers],
            "teacherLedger": dict(self.teachers),
            "stats": self.stats.to_dict(),
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> BrainState:
        """Rebuild a state from a persisted record.

        Accepts the older `conversations`/`teachers` keys. Duplicate messages
        are merged into their first occurrence, keeping file order. Stats are
        derived again from what was actually loaded.
        """

        items = raw.get("triggers", raw.get("conversations"))
        triggers: list[Trigger] = []
        by_message: dict[str, Trigger] = {}
        for item in items if isinstance(items, list) else []:
            trigger = Trigger.from_dict(item)
            if trigger is None:
                continue
            existing = by_message.get(trigger.message)
            if existing is not None:
                existing.replies.extend(trigger.replies)
                continue
            by_message[trigger.message] = trigger
            triggers.append(trigger)

        ledger = raw.get("teacherLedger", raw.get("teachers"))
        teachers: dict[str, int] = {}
        if isinstance(ledger, dict):
            for identity, count in ledger.items():
                if isinstance(count, int) and not isinstance(count, bool):
                    teachers[str(identity)] = count

        state = cls(triggers=triggers, teachers=teachers, stats=BrainStats.from_dict(raw.get("stats")))
        state.recompute_stats()
        return state


@dataclass(frozen=True)
class RemoveRequest:
    trigger: str
    index: str | None = None


@dataclass(frozen=True)
class ListRequest:
    target: str


@dataclass(frozen=True)
class EditRequest:
    trigger: str
    replacement: str


@dataclass(frozen=True)
class TeachRequest:
    trigger: str
    replies: tuple[str, ...]
    teacher_id: str | None = None


@dataclass(frozen=True)
class TextRequest:
    text: str
    sender_id: str | None = None


@dataclass(frozen=True)
class WelcomeRequest:
    pass


BrainRequest = Union[RemoveRequest, ListRequest, EditRequest, TeachRequest, TextRequest, WelcomeRequest]


@dataclass
class MutationResult:
    action: str
    trigger: str
    found: bool = True
    changed: bool = False
    persisted: bool = False
    data: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class QueryResult:
    payload: dict[str, Any]
    ok: bool = True
