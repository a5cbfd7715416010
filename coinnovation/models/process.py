"""
Process model: the ordered sequence of co-innovation steps and gateways.

A Step's position in the sequence is its layout slot and its 1-based step
number. ``next_steps`` are weak references: ids that may name no step.
The model is built once per load and never mutated.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Iterator

from coinnovation.core.exceptions import DuplicateStepError

logger = logging.getLogger(__name__)

STEP_TYPE_STEP = "step"
STEP_TYPE_GATEWAY = "gateway"
STEP_TYPES = {STEP_TYPE_STEP, STEP_TYPE_GATEWAY}


@dataclass(frozen=True)
class Step:
    """A process node: an activity (``step``) or a decision point (``gateway``).

    ``inputs``/``outputs``/``duration``/``owner`` are meaningful for steps,
    ``criteria``/``outcomes`` for gateways; both sets are always present.
    """

    id: str
    title: str = ""
    type: str = STEP_TYPE_STEP
    description: str = ""
    details: str = ""
    inputs: tuple[str, ...] = ()
    outputs: tuple[str, ...] = ()
    duration: str = ""
    owner: str = ""
    criteria: tuple[str, ...] = ()
    outcomes: tuple[str, ...] = ()
    next_steps: tuple[str, ...] = field(default=())

    @property
    def is_gateway(self) -> bool:
        return self.type == STEP_TYPE_GATEWAY

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "type": self.type,
            "description": self.description,
            "details": self.details,
            "inputs": list(self.inputs),
            "outputs": list(self.outputs),
            "duration": self.duration,
            "owner": self.owner,
            "criteria": list(self.criteria),
            "outcomes": list(self.outcomes),
            "nextSteps": list(self.next_steps),
        }


class ProcessModel:
    """Read-only ordered step sequence with id lookup.

    Raises:
        DuplicateStepError: If two steps share an id. Lookups would be
            ambiguous, so the whole sequence is rejected at load time.
    """

    def __init__(self, steps) -> None:
        self._steps: tuple[Step, ...] = tuple(steps)
        duplicates = [sid for sid, n in Counter(s.id for s in self._steps).items() if n > 1]
        if duplicates:
            raise DuplicateStepError(duplicates)
        self._by_id: dict[str, Step] = {s.id: s for s in self._steps}
        self._positions: dict[str, int] = {s.id: i for i, s in enumerate(self._steps)}

    @property
    def steps(self) -> tuple[Step, ...]:
        return self._steps

    @property
    def ids(self) -> tuple[str, ...]:
        return tuple(s.id for s in self._steps)

    def __len__(self) -> int:
        return len(self._steps)

    def __iter__(self) -> Iterator[Step]:
        return iter(self._steps)

    def __contains__(self, step_id: object) -> bool:
        return step_id in self._by_id

    def get(self, step_id: str | None) -> Step | None:
        """Return the step with ``step_id``, or None. Never raises."""
        if step_id is None:
            return None
        try:
            return self._by_id.get(step_id)
        except TypeError:
            # unhashable id from a malformed request
            return None

    def index_of(self, step_id: str | None) -> int | None:
        if step_id is None:
            return None
        try:
            return self._positions.get(step_id)
        except TypeError:
            return None

    def resolve_next_steps(self, step: Step) -> tuple[Step, ...]:
        """Return the existing targets of ``step.next_steps`` in declared order.

        Dangling ids are dropped, so every returned step is a valid
        navigation target.
        """
        resolved = []
        for next_id in step.next_steps:
            target = self.get(next_id)
            if target is None:
                logger.debug("Step %s: next step %r does not exist, skipped", step.id, next_id)
                continue
            resolved.append(target)
        return tuple(resolved)
