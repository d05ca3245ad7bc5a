from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from baby_api.engine.archetypes.matcher import Matcher
from baby_api.engine.archetypes.mutator import MutationEngine
from baby_api.engine.archetypes.reporter import Reporter
from baby_api.engine.core.models import (
    BrainRequest,
    EditRequest,
    ListRequest,
    QueryResult,
    RemoveRequest,
    TeachRequest,
    TextRequest,
    WelcomeRequest,
    utc_iso,
)
from baby_api.engine.core.store import Store


logger = logging.getLogger("baby_api.engine")


def parse_index(raw: str | None) -> int | None:
    """Return a reply position from a raw index, or None if it is not a non-negative integer."""

    if raw is None:
        return None
    text = raw.strip()
    if not text.isdecimal():
        return None
    return int(text)


@dataclass
class RunManager:
    """Single entry point for brain requests.

    Exactly one branch runs per request. Reads work on a fresh snapshot from
    the store; mutations go through the engine, which serializes them.
    """

    store: Store
    matcher: Matcher
    mutator: MutationEngine
    reporter: Reporter
    version: str = "1.0.0"

    def run(self, request: BrainRequest) -> QueryResult:
        if isinstance(request, RemoveRequest):
            return self._remove(request)
        if isinstance(request, ListRequest):
            return self.reporter.listing(self.store.load(), request.target)
        if isinstance(request, EditRequest):
            result = self.mutator.edit(request.trigger, request.replacement)
            return self.reporter.edited(result, request.replacement)
        if isinstance(request, TeachRequest):
            return self._teach(request)
        if isinstance(request, TextRequest):
            state = self.store.load()
            return self.reporter.reply(self.matcher.match(request.text, state.triggers))
        if isinstance(request, WelcomeRequest):
            return self.reporter.welcome(self.store.load())
        raise TypeError(f"unsupported request: {type(request).__name__}")

    def _remove(self, request: RemoveRequest) -> QueryResult:
        if request.index is None:
            return self.reporter.removed(self.mutator.remove(request.trigger))

        index = parse_index(request.index)
        if index is None:
            logger.info("remove_reply trigger=%r rejected index=%r", request.trigger, request.index)
            return self.reporter.reply_removed(None)
        result = self.mutator.remove_reply(request.trigger, index)
        return self.reporter.reply_removed(result)

    def _teach(self, request: TeachRequest) -> QueryResult:
        result = self.mutator.teach(request.trigger, request.replies, request.teacher_id)
        if result is None:
            # Nothing usable to teach; answer like an unrecognized request.
            return self.reporter.welcome(self.store.load())
        return self.reporter.taught(result)

    def stats(self) -> dict[str, Any]:
        return self.reporter.stats(self.store.load())

    def health(self) -> dict[str, Any]:
        return self.reporter.health(self.store.load(), utc_iso())

    def info(self) -> dict[str, Any]:
        return self.reporter.info(self.store.load(), self.version)
