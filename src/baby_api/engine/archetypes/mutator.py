from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Sequence

from baby_api.engine.core.models import BrainState, MutationResult, Trigger, utc_iso
from baby_api.engine.core.store import Store


logger = logging.getLogger("baby_api.engine")


@dataclass
class MutationEngine:
    """Applies teach/edit/remove to the store.

    Each operation runs as one `Store.update` call: the decision (does the
    trigger exist, is the index valid) and the write happen under the same
    lock, and stats are recomputed from the resulting state before saving.
    """

    store: Store
    clock: Callable[[], str] = field(default=utc_iso)

    def _touch(self, state: BrainState) -> None:
        state.recompute_stats(self.clock())

    def teach(self, trigger: str, replies: Sequence[str], teacher_id: str | None = None) -> MutationResult | None:
        replies = [r for r in replies if r]
        if not trigger or not replies:
            return None

        def apply(state: BrainState) -> MutationResult:
            now = self.clock()
            existing = state.get(trigger)
            if existing is None:
                existing = Trigger(message=trigger, replies=list(replies), created_by=teacher_id, created_at=now)
                state.triggers.append(existing)
            else:
                existing.replies.extend(replies)

            if teacher_id:
                state.teachers[teacher_id] = state.teachers.get(teacher_id, 0) + 1

            state.recompute_stats(now)
            return MutationResult(
                action="teach",
                trigger=trigger,
                changed=True,
                data={
                    "teacher": teacher_id,
                    "teachs": state.teachers.get(teacher_id, 0) if teacher_id else 0,
                    "replyCount": len(existing.replies),
                },
            )

        result = self.store.update(apply)
        logger.info(
            "teach trigger=%r replies=%d teacher=%s persisted=%s",
            trigger,
            len(replies),
            teacher_id,
            result.persisted,
        )
        return result

    def edit(self, trigger: str, replacement: str) -> MutationResult:
        def apply(state: BrainState) -> MutationResult:
            existing = state.get(trigger)
            if existing is None:
                return MutationResult(action="edit", trigger=trigger, found=False)

            existing.replies = [replacement]
            self._touch(state)
            return MutationResult(action="edit", trigger=trigger, changed=True)

        result = self.store.update(apply)
        logger.info("edit trigger=%r found=%s persisted=%s", trigger, result.found, result.persisted)
        return result

    def remove(self, trigger: str) -> MutationResult:
        """Delete a whole trigger. Removing an unknown trigger is a no-op."""

        def apply(state: BrainState) -> MutationResult:
            position = state.find(trigger)
            if position is None:
                return MutationResult(action="remove", trigger=trigger, found=False)

            del state.triggers[position]
            self._touch(state)
            return MutationResult(action="remove", trigger=trigger, changed=True)

        result = self.store.update(apply)
        logger.info("remove trigger=%r found=%s persisted=%s", trigger, result.found, result.persisted)
        return result

    def remove_reply(self, trigger: str, index: int) -> MutationResult:
        """Delete one reply; the trigger goes away with its last reply."""

        def apply(state: BrainState) -> MutationResult:
            position = state.find(trigger)
            if position is None:
                return MutationResult(action="remove_reply", trigger=trigger, found=False)

            existing = state.triggers[position]
            if not 0 <= index < len(existing.replies):
                return MutationResult(action="remove_reply", trigger=trigger, found=False)

            del existing.replies[index]
            deleted = not existing.replies
            if deleted:
                del state.triggers[position]

            self._touch(state)
            return MutationResult(
                action="remove_reply",
                trigger=trigger,
                changed=True,
                data={"index": index, "replyCount": len(existing.replies), "triggerDeleted": deleted},
            )

        result = self.store.update(apply)
        logger.info(
            "remove_reply trigger=%r index=%d found=%s persisted=%s",
            trigger,
            index,
            result.found,
            result.persisted,
        )
        return result
