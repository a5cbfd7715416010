"""Project index — cross-references tracked projects to process steps.

Projects whose ``current_stage`` names no step are excluded from every
aggregate; they are reported separately by ``untracked()`` and never
treated as an error. Both inputs are immutable, so every aggregate is
computed once and cached for the session.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from coinnovation.models.process import ProcessModel
from coinnovation.models.project import STATUS_BLOCKED, STATUS_ON_TRACK, Project

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StageSummary:
    """Status breakdown for the projects at one stage."""

    total: int = 0
    on_track: int = 0
    blocked: int = 0

    def to_dict(self) -> dict:
        return {"total": self.total, "on_track": self.on_track, "blocked": self.blocked}


class ProjectIndex:
    """Per-step project lookups and counts over an immutable model."""

    def __init__(self, model: ProcessModel, projects) -> None:
        self._model = model
        self._projects: tuple[Project, ...] = tuple(projects)

        by_stage: dict[str, list[Project]] = {step_id: [] for step_id in model.ids}
        untracked: list[Project] = []
        for project in self._projects:
            bucket = by_stage.get(project.current_stage)
            if bucket is None:
                untracked.append(project)
            else:
                bucket.append(project)

        self._by_stage: dict[str, tuple[Project, ...]] = {
            step_id: tuple(items) for step_id, items in by_stage.items()
        }
        self._untracked: tuple[Project, ...] = tuple(untracked)
        if self._untracked:
            logger.info(
                "%d project(s) reference unknown stages and are excluded from stage counts: %s",
                len(self._untracked),
                ", ".join(sorted({p.current_stage or "<empty>" for p in self._untracked})),
            )

    @property
    def projects(self) -> tuple[Project, ...]:
        return self._projects

    def counts(self) -> dict[str, int]:
        """Map every step id, in step order, to its project count."""
        return {step_id: len(items) for step_id, items in self._by_stage.items()}

    def count(self, step_id: str) -> int:
        return len(self._by_stage.get(step_id, ()))

    def projects_at(self, step_id: str) -> tuple[Project, ...]:
        """Projects at ``step_id`` in source order; ``()`` for an unknown step."""
        return self._by_stage.get(step_id, ())

    def summary(self, step_id: str) -> StageSummary:
        stage_projects = self.projects_at(step_id)
        return StageSummary(
            total=len(stage_projects),
            on_track=sum(1 for p in stage_projects if p.status == STATUS_ON_TRACK),
            blocked=sum(1 for p in stage_projects if p.status == STATUS_BLOCKED),
        )

    def tracked_total(self) -> int:
        """Sum of all stage counts; equals ``len(projects)`` only when nothing is untracked."""
        return sum(len(items) for items in self._by_stage.values())

    def untracked(self) -> tuple[Project, ...]:
        return self._untracked
