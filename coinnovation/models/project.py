"""Tracked project records and their status vocabulary."""

from __future__ import annotations

from dataclasses import dataclass

STATUS_ON_TRACK = "on-track"
STATUS_BLOCKED = "blocked"

STATUS_LABELS = {
    STATUS_ON_TRACK: "On-Track",
    STATUS_BLOCKED: "Blocked",
}


def status_label(status: str) -> str:
    """Badge text for a project status."""
    if status in STATUS_LABELS:
        return STATUS_LABELS[status]
    return status.replace("-", " ").replace("_", " ").title() if status else "Unknown"


@dataclass(frozen=True)
class Project:
    """A project currently occupying one stage of the process.

    ``current_stage`` is a weak reference to a Step id. ``next_steps`` is
    free text, unrelated to ``Step.next_steps``. ``progress`` is kept exactly
    as parsed, including values above 100.
    """

    id: str
    name: str = ""
    current_stage: str = ""
    status: str = ""
    next_steps: str = ""
    blocking_reason: str | None = None
    progress: int = 0

    @property
    def is_blocked(self) -> bool:
        return self.status == STATUS_BLOCKED

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "currentStage": self.current_stage,
            "status": self.status,
            "nextSteps": self.next_steps,
            "blockingReason": self.blocking_reason,
            "progress": self.progress,
        }
