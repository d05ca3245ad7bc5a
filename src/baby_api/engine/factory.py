from __future__ import annotations

import random
import threading
from pathlib import Path

from baby_api.config.settings import get_settings
from baby_api.engine.archetypes.matcher import Matcher
from baby_api.engine.archetypes.mutator import MutationEngine
from baby_api.engine.archetypes.reporter import Reporter
from baby_api.engine.archetypes.run_manager import RunManager
from baby_api.engine.core.store import Store


_DEFAULT_BRAIN: RunManager | None = None
_DEFAULT_BRAIN_LOCK = threading.Lock()


def build_brain(
    data_file: Path | str,
    *,
    rng: random.Random | None = None,
    version: str = "1.0.0",
    initialize: bool = True,
) -> RunManager:
    """Wire a store, matcher, mutation engine and reporter around one data file."""

    rng = rng or random.Random()
    store = Store(data_file)
    if initialize:
        store.initialize()

    return RunManager(
        store=store,
        matcher=Matcher(rng=rng),
        mutator=MutationEngine(store=store),
        reporter=Reporter(rng=rng),
        version=version,
    )


def build_default_brain() -> RunManager:
    """Build (and memoize) the brain configured from the environment."""

    global _DEFAULT_BRAIN
    if _DEFAULT_BRAIN is not None:
        return _DEFAULT_BRAIN

    with _DEFAULT_BRAIN_LOCK:
        if _DEFAULT_BRAIN is None:
            settings = get_settings()
            _DEFAULT_BRAIN = build_brain(
                settings.data_file,
                rng=random.Random(settings.random_seed),
                version=settings.version,
            )
    return _DEFAULT_BRAIN
