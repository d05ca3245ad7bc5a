"""Chat handler: turn request parameters into a brain request and run it."""

from __future__ import annotations

from typing import Any, Mapping

from baby_api.engine.archetypes.run_manager import RunManager
from baby_api.engine.core.models import (
    BrainRequest,
    EditRequest,
    ListRequest,
    QueryResult,
    RemoveRequest,
    TeachRequest,
    TextRequest,
    WelcomeRequest,
)
from baby_api.engine.factory import build_default_brain


def _values(params: Mapping[str, Any], name: str) -> list[str]:
    raw = params.get(name)
    if raw is None:
        return []
    if isinstance(raw, (list, tuple)):
        items = raw
    else:
        items = [raw]
    return [str(item) for item in items if item is not None and str(item) != ""]


def _first(params: Mapping[str, Any], name: str) -> str | None:
    values = _values(params, name)
    return values[0] if values else None


def build_request(params: Mapping[str, Any]) -> BrainRequest:
    """Pick the request intent from query parameters.

    Priority: remove > list > edit > teach > text > welcome. Empty values
    count as absent, and an incomplete edit or teach pair falls through to
    the next intent. `reply` may carry one value or several.
    """

    remove = _first(params, "remove")
    if remove is not None:
        return RemoveRequest(trigger=remove, index=_first(params, "index"))

    target = _first(params, "list")
    if target is not None:
        return ListRequest(target=target)

    edit = _first(params, "edit")
    replacement = _first(params, "replace")
    if edit is not None and replacement is not None:
        return EditRequest(trigger=edit, replacement=replacement)

    teach = _first(params, "teach")
    replies = _values(params, "reply")
    if teach is not None and replies:
        return TeachRequest(trigger=teach, replies=tuple(replies), teacher_id=_first(params, "senderID"))

    text = _first(params, "text")
    if text is not None:
        return TextRequest(text=text, sender_id=_first(params, "senderID"))

    return WelcomeRequest()


def run_query(params: Mapping[str, Any], brain: RunManager | None = None) -> QueryResult:
    brain = brain or build_default_brain()
    return brain.run(build_request(params))


def handle_query(params: Mapping[str, Any], brain: RunManager | None = None) -> dict[str, Any]:
    """Handle one query and return its response payload.

    Uses the environment-configured brain unless one is passed in.
    """

    return run_query(params, brain).payload
