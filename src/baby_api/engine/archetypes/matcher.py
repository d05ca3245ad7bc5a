from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Sequence

from baby_api.engine.core.models import Trigger


@dataclass
class Matcher:
    """Picks a taught reply for an input message.

    Exact match wins; otherwise the first stored trigger contained in the input
    is used. Storage order decides between several substring candidates.
    """

    rng: random.Random = field(default_factory=random.Random)

    def locate(self, text: str, triggers: Sequence[Trigger]) -> Trigger | None:
        for trigger in triggers:
            if trigger.message == text:
                return trigger

        for trigger in triggers:
            if trigger.message in text:
                return trigger

        return None

    def match(self, text: str, triggers: Sequence[Trigger]) -> str | None:
        trigger = self.locate(text, triggers)
        if trigger is None or not trigger.replies:
            return None
        return self.rng.choice(trigger.replies)
