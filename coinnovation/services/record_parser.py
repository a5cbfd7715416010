"""Record parser — raw JSON records to Step / Project entities.

Parsing is total: malformed fields degrade to defaults, nothing here raises
for a bad record. The only failure surfaced upward is a malformed envelope
(``DataSourceError``), which the flow loader degrades to an empty set.

Wire formats:
  - list fields (inputs, outputs, criteria, outcomes, nextSteps) arrive as
    ``|``-joined text
  - ``progress`` arrives as a numeric string
"""

from __future__ import annotations

import logging
import math
import re
from typing import Any, Callable, TypeVar

from coinnovation.core.exceptions import DataSourceError
from coinnovation.models.process import STEP_TYPE_STEP, STEP_TYPES, Step
from coinnovation.models.project import Project

logger = logging.getLogger(__name__)

LIST_DELIMITER = "|"

# Leading optional sign + digits, after whitespace ("45", " 45%", "45.9")
_INT_PREFIX = re.compile(r"\s*([+-]?\d+)")

T = TypeVar("T")


def _text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def parse_list(value: Any) -> tuple[str, ...]:
    """Split a ``|``-joined string into trimmed items.

    Empty or whitespace-only input yields ``()``, never ``("",)``.
    A JSON list is accepted as already split.
    """
    if value is None:
        return ()
    if isinstance(value, (list, tuple)):
        return tuple(_text(v).strip() for v in value)
    text = _text(value)
    if not text.strip():
        return ()
    return tuple(item.strip() for item in text.split(LIST_DELIMITER))


def parse_progress(value: Any) -> int:
    """Parse a progress value; anything unparseable becomes 0.

    Integers pass through, floats truncate, strings use their leading
    integer prefix (``"45%"`` → 45). Values above 100 are kept.
    """
    if isinstance(value, bool) or value is None:
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else 0
    match = _INT_PREFIX.match(_text(value))
    if not match:
        return 0
    try:
        return int(match.group(1))
    except ValueError:
        # digit run beyond the interpreter's int conversion limit
        return 0


def _optional_text(value: Any) -> str | None:
    text = _text(value)
    return text if text.strip() else None


def parse_step(record: Any) -> Step:
    """Build a Step from a raw process record."""
    if not isinstance(record, dict):
        record = {}
    step_type = _text(record.get("type")).strip().lower()
    if step_type not in STEP_TYPES:
        logger.debug("Step %r has unknown type %r, treated as %r",
                     record.get("id"), record.get("type"), STEP_TYPE_STEP)
        step_type = STEP_TYPE_STEP
    return Step(
        id=_text(record.get("id")).strip(),
        title=_text(record.get("title")),
        type=step_type,
        description=_text(record.get("description")),
        details=_text(record.get("details")),
        inputs=parse_list(record.get("inputs")),
        outputs=parse_list(record.get("outputs")),
        duration=_text(record.get("duration")),
        owner=_text(record.get("owner")),
        criteria=parse_list(record.get("criteria")),
        outcomes=parse_list(record.get("outcomes")),
        next_steps=parse_list(record.get("nextSteps")),
    )


def parse_project(record: Any) -> Project:
    """Build a Project from a raw project record."""
    if not isinstance(record, dict):
        record = {}
    return Project(
        id=_text(record.get("id")).strip(),
        name=_text(record.get("name")),
        current_stage=_text(record.get("currentStage")).strip(),
        status=_text(record.get("status")).strip(),
        next_steps=_text(record.get("nextSteps")),
        blocking_reason=_optional_text(record.get("blockingReason")),
        progress=parse_progress(record.get("progress")),
    )


def parse_envelope(
    payload: Any,
    parse_record: Callable[[Any], T],
    source: str = "data source",
) -> list[T]:
    """Parse every record of a ``{"data": [...]}`` envelope.

    Raises:
        DataSourceError: If the payload is not an envelope with a ``data`` list.
    """
    if not isinstance(payload, dict):
        raise DataSourceError(source, f"expected a JSON object, got {type(payload).__name__}")
    records = payload.get("data")
    if not isinstance(records, list):
        raise DataSourceError(source, "envelope has no 'data' array")
    return [parse_record(record) for record in records]
