from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Any

from baby_api.engine.core.models import BrainState, MutationResult, QueryResult


DEFAULT_RESPONSES: tuple[str, ...] = (
    "I'm still learning! Can you teach me how to respond to that?",
    "That's interesting! Tell me more.",
    "I don't understand that yet. Can you explain?",
    "Wow, that's new to me!",
    "Can you teach me what to say when someone says that?",
)

WELCOME_MESSAGE = "Welcome to Baby API"


def _message(text: str, ok: bool = True) -> QueryResult:
    return QueryResult(payload={"message": text}, ok=ok)


@dataclass
class Reporter:
    """Formats the payloads returned to callers."""

    rng: random.Random = field(default_factory=random.Random)
    fallback_pool: tuple[str, ...] = DEFAULT_RESPONSES

    def reply(self, text: str | None) -> QueryResult:
        if text is None:
            text = self.rng.choice(self.fallback_pool)
        return QueryResult(payload={"reply": text})

    def taught(self, result: MutationResult) -> QueryResult:
        if not result.persisted:
            return _message(f'Failed to save "{result.trigger}"', ok=False)
        return QueryResult(payload={"message": f'Successfully taught "{result.trigger}"', **result.data})

    def edited(self, result: MutationResult, replacement: str) -> QueryResult:
        if not result.found:
            return _message("Conversation not found")
        if not result.persisted:
            return _message(f'Failed to save edit of "{result.trigger}"', ok=False)
        return _message(f'Edited "{result.trigger}" to "{replacement}"')

    def removed(self, result: MutationResult) -> QueryResult:
        # Unknown triggers still report removal.
        if result.changed and not result.persisted:
            return _message(f'Failed to remove "{result.trigger}"', ok=False)
        return _message(f'Removed "{result.trigger}" from database')

    def reply_removed(self, result: MutationResult | None) -> QueryResult:
        if result is None or not result.found:
            return _message("Conversation or index not found")
        index = result.data["index"]
        if not result.persisted:
            return _message(f'Failed to remove reply at index {index} from "{result.trigger}"', ok=False)
        return _message(f'Removed reply at index {index} from "{result.trigger}"')

    @staticmethod
    def listing(state: BrainState, target: str) -> QueryResult:
        if target == "all":
            return QueryResult(
                payload={
                    "length": len(state.triggers),
                    "teacher": {"teacherList": [{identity: count} for identity, count in state.teachers.items()]},
                }
            )
        trigger = state.get(target)
        return QueryResult(payload={"data": len(trigger.replies) if trigger else 0})

    @staticmethod
    def welcome(state: BrainState) -> QueryResult:
        return QueryResult(payload={"message": WELCOME_MESSAGE, "stats": state.stats.to_dict()})

    @staticmethod
    def stats(state: BrainState) -> dict[str, Any]:
        return {"status": "success", "data": state.stats.to_dict()}

    @staticmethod
    def health(state: BrainState, timestamp: str) -> dict[str, Any]:
        return {
            "status": "healthy",
            "timestamp": timestamp,
            "data": {"conversations": len(state.triggers), "teachers": len(state.teachers)},
        }

    @staticmethod
    def info(state: BrainState, version: str) -> dict[str, Any]:
        return {
            "status": "OK",
            "message": "Baby API is running!",
            "version": version,
            "stats": state.stats.to_dict(),
        }
