"""Layout engine — deterministic node positions and connectors.

The ordered steps are laid out on a serpentine grid: ``per_row`` nodes per
row, even rows left→right, odd rows right→left, so the connector path never
jumps back across the canvas. With the default policy the 8-step process
becomes two rows of four:

    1 → 2 → 3 → 4
                ↓
    8 ← 7 ← 6 ← 5

Connector direction is derived from the row/column deltas of each
consecutive pair:

    same row, column increases  → "horizontal"
    same row, column decreases  → "horizontal-reverse"
    row changes                 → "vertical"

``compute_layout`` is pure: the same (width, step_count, policy) always
gives an equal Layout, so it can be re-run on every resize.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from coinnovation.core.exceptions import LayoutError

DIRECTION_HORIZONTAL = "horizontal"
DIRECTION_HORIZONTAL_REVERSE = "horizontal-reverse"
DIRECTION_VERTICAL = "vertical"


@dataclass(frozen=True)
class LayoutPolicy:
    """Footprint and grid parameters for the flowchart."""

    per_row: int = 4
    serpentine: bool = True
    node_width: float = 160
    node_height: float = 80
    horizontal_gap: float = 40
    vertical_gap: float = 100
    top_offset: float = 80
    arrow_inset: float = 10
    height: float = 500
    default_width: float = 1200

    def to_dict(self) -> dict:
        return {
            "per_row": self.per_row,
            "serpentine": self.serpentine,
            "node_width": self.node_width,
            "node_height": self.node_height,
            "horizontal_gap": self.horizontal_gap,
            "vertical_gap": self.vertical_gap,
        }


@dataclass(frozen=True)
class NodePosition:
    """Bounding box of one node; ``index`` is the step's sequence position."""

    index: int
    row: int
    column: int
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def center_x(self) -> float:
        return self.x + self.width / 2

    @property
    def center_y(self) -> float:
        return self.y + self.height / 2

    def to_dict(self) -> dict:
        return {
            "index": self.index,
            "row": self.row,
            "column": self.column,
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
        }


@dataclass(frozen=True)
class Connector:
    """Directed edge between consecutive nodes, endpoints already inset."""

    from_index: int
    to_index: int
    direction: str
    x1: float
    y1: float
    x2: float
    y2: float

    @property
    def path(self) -> str:
        """SVG path data, e.g. ``M380,120 L410,120``."""
        return f"M{_num(self.x1)},{_num(self.y1)} L{_num(self.x2)},{_num(self.y2)}"

    def to_dict(self) -> dict:
        return {
            "from_index": self.from_index,
            "to_index": self.to_index,
            "direction": self.direction,
            "path": self.path,
        }


@dataclass(frozen=True)
class Layout:
    width: float
    height: float
    positions: tuple[NodePosition, ...]
    connectors: tuple[Connector, ...]

    def to_dict(self) -> dict:
        return {
            "width": self.width,
            "height": self.height,
            "positions": [p.to_dict() for p in self.positions],
            "connectors": [c.to_dict() for c in self.connectors],
        }


def _num(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.2f}".rstrip("0").rstrip(".")


def _container_width(value: float | None, default: float) -> float:
    """Usable width, or ``default`` when missing, non-positive or not a finite float."""
    if not value:
        return float(default)
    try:
        width = float(value)
    except (OverflowError, TypeError, ValueError):
        return float(default)
    if not math.isfinite(width) or width <= 0:
        return float(default)
    return width


def _grid_cell(index: int, columns: int, serpentine: bool) -> tuple[int, int]:
    row, column = divmod(index, columns)
    if serpentine and row % 2 == 1:
        column = columns - 1 - column
    return row, column


def classify_direction(source: NodePosition, target: NodePosition) -> str:
    if source.row != target.row:
        return DIRECTION_VERTICAL
    if target.column > source.column:
        return DIRECTION_HORIZONTAL
    return DIRECTION_HORIZONTAL_REVERSE


def _connect(source: NodePosition, target: NodePosition, inset: float) -> Connector:
    direction = classify_direction(source, target)
    if direction == DIRECTION_HORIZONTAL:
        start = (source.right, source.center_y)
        end = (target.x - inset, target.center_y)
    elif direction == DIRECTION_HORIZONTAL_REVERSE:
        start = (source.x, source.center_y)
        end = (target.right + inset, target.center_y)
    else:
        start = (source.center_x, source.bottom)
        end = (target.center_x, target.y - inset)
    return Connector(
        from_index=source.index,
        to_index=target.index,
        direction=direction,
        x1=start[0],
        y1=start[1],
        x2=end[0],
        y2=end[1],
    )


def compute_layout(
    container_width: float | None,
    step_count: int,
    policy: LayoutPolicy | None = None,
) -> Layout:
    """Place ``step_count`` nodes centered within ``container_width``.

    A missing, non-positive or non-finite width falls back to ``policy.default_width``.

    Raises:
        LayoutError: If ``step_count`` or ``policy.per_row`` is below 1.
    """
    policy = policy or LayoutPolicy()
    if step_count < 1:
        raise LayoutError(f"layout requires at least one step, got {step_count}")
    if policy.per_row < 1:
        raise LayoutError(f"per_row must be positive, got {policy.per_row}")

    width = _container_width(container_width, policy.default_width)
    columns = min(policy.per_row, step_count)
    pitch_x = policy.node_width + policy.horizontal_gap
    pitch_y = policy.node_height + policy.vertical_gap
    block_width = columns * policy.node_width + (columns - 1) * policy.horizontal_gap
    start_x = (width - block_width) / 2

    positions = []
    for index in range(step_count):
        row, column = _grid_cell(index, columns, policy.serpentine)
        positions.append(NodePosition(
            index=index,
            row=row,
            column=column,
            x=start_x + column * pitch_x,
            y=policy.top_offset + row * pitch_y,
            width=policy.node_width,
            height=policy.node_height,
        ))

    connectors = tuple(
        _connect(positions[i], positions[i + 1], policy.arrow_inset)
        for i in range(step_count - 1)
    )
    height = max(float(policy.height), positions[-1].bottom + policy.top_offset)
    return Layout(width=width, height=height, positions=tuple(positions), connectors=connectors)
