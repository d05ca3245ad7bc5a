from __future__ import annotations

import random

import pytest

from baby_api.config.settings import get_settings
from baby_api.engine import factory
from baby_api.engine.core import store as store_module
from baby_api.engine.factory import build_brain


class FirstChoice(random.Random):
    """Deterministic stand-in: always picks the first candidate."""

    def choice(self, seq):
        return seq[0]


@pytest.fixture
def first_choice_rng():
    return FirstChoice()


@pytest.fixture
def data_file(tmp_path):
    return tmp_path / "baby_data.json"


@pytest.fixture
def brain(data_file):
    return build_brain(data_file, rng=random.Random(1234))


@pytest.fixture
def failing_writes(monkeypatch):
    """Make every store write fail at the final rename."""

    def fail(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr(store_module.os, "replace", fail)


@pytest.fixture
def default_brain_env(monkeypatch, data_file):
    """Point the memoized default brain at a fresh data file."""

    monkeypatch.setenv("BABY_DATA_FILE", str(data_file))
    monkeypatch.setattr(factory, "_DEFAULT_BRAIN", None)
    get_settings.cache_clear()
    yield data_file
    get_settings.cache_clear()
