"""View adapter — (context, layout, controller state) → renderable view models.

Every function here is pure: it reads the immutable FlowContext, a Layout
and the controller's current state and returns plain dicts. The HTML page
and the JSON API render the same dicts, so the desktop flowchart, the
mobile list and the detail panel always agree.
"""

from __future__ import annotations

from coinnovation.core.exceptions import NotFoundError
from coinnovation.models.process import STEP_TYPE_GATEWAY, Step
from coinnovation.models.project import Project, status_label
from coinnovation.services.flow_service import FlowContext
from coinnovation.services.layout_engine import Layout
from coinnovation.services.selection_controller import SelectionController

PAGE_TITLE = "AEM Co-Innovation Process"
PAGE_SUBTITLE = "From Idea to Impact"
CHART_TITLE = "Co-Innovation Journey"
LOAD_ERROR_MESSAGE = "Failed to load co-innovation process data."
NO_PROJECTS_MESSAGE = "No projects currently at this stage."

SHAPE_RECT = "rect"
SHAPE_DIAMOND = "diamond"


def _diamond_points(width: float, height: float) -> str:
    half_w, half_h = width / 2, height / 2
    points = [(half_w, 0), (width, half_h), (half_w, height), (0, half_h)]
    return " ".join(f"{x:g},{y:g}" for x, y in points)


def count_label(count: int) -> str | None:
    if count <= 0:
        return None
    return f"{count} project{'' if count == 1 else 's'}"


def build_flowchart(context: FlowContext, layout: Layout) -> dict:
    """Desktop flowchart: positioned nodes with count badges, plus connectors."""
    counts = context.index.counts()
    nodes = []
    for step, pos in zip(context.model.steps, layout.positions):
        count = counts.get(step.id, 0)
        node = {
            "id": step.id,
            "number": pos.index + 1,
            "title": step.title,
            "type": step.type,
            "shape": SHAPE_DIAMOND if step.type == STEP_TYPE_GATEWAY else SHAPE_RECT,
            "x": pos.x,
            "y": pos.y,
            "width": pos.width,
            "height": pos.height,
            "count": count,
            "show_badge": count > 0,
        }
        if node["shape"] == SHAPE_DIAMOND:
            node["diamond_points"] = _diamond_points(pos.width, pos.height)
        nodes.append(node)

    return {
        "width": layout.width,
        "height": layout.height,
        "nodes": nodes,
        "connectors": [c.to_dict() for c in layout.connectors],
    }


def build_mobile_list(context: FlowContext) -> list[dict]:
    """Mobile list: one item per step, in process order."""
    counts = context.index.counts()
    items = []
    for number, step in enumerate(context.model.steps, start=1):
        count = counts.get(step.id, 0)
        items.append({
            "id": step.id,
            "number": number,
            "title": step.title,
            "type": step.type,
            "description": step.description,
            "count": count,
            "count_label": count_label(count),
            "duration": step.duration or None,
        })
    return items


def _type_sections(step: Step) -> tuple[list[dict], list[dict]]:
    if step.type == STEP_TYPE_GATEWAY:
        sections = [
            {"heading": "Decision Criteria", "items": list(step.criteria)},
            {"heading": "Possible Outcomes", "items": list(step.outcomes)},
        ]
        return sections, []
    sections = [
        {"heading": "Inputs", "items": list(step.inputs)},
        {"heading": "Outputs", "items": list(step.outputs)},
    ]
    info_cards = [
        {"label": "Duration", "value": step.duration},
        {"label": "Owner", "value": step.owner},
    ]
    return sections, info_cards


def project_card(project: Project) -> dict:
    return {
        "id": project.id,
        "name": project.name,
        "status": project.status,
        "status_label": status_label(project.status),
        "blocked": project.is_blocked,
        "progress": project.progress,
        # the bar is capped; the model keeps the raw value
        "progress_width": max(0, min(100, project.progress)),
        "next_steps": project.next_steps,
        "blocking_reason": project.blocking_reason,
    }


def build_step_detail(context: FlowContext, step_id: str) -> dict:
    """Detail panel projection for one step.

    Raises:
        NotFoundError: If ``step_id`` is not a known step.
    """
    step = context.model.get(step_id)
    if step is None:
        raise NotFoundError(resource="Step", resource_id=step_id)

    sections, info_cards = _type_sections(step)
    stage_projects = context.index.projects_at(step.id)
    return {
        "id": step.id,
        "number": context.model.index_of(step.id) + 1,
        "title": step.title,
        "type": step.type,
        "badge": step.type,
        "description": step.description,
        "details": step.details,
        "sections": sections,
        "info_cards": info_cards,
        "next_steps": [
            {"id": target.id, "title": target.title}
            for target in context.model.resolve_next_steps(step)
        ],
        "summary": context.index.summary(step.id).to_dict(),
        "projects": [project_card(p) for p in stage_projects],
        "empty_message": None if stage_projects else NO_PROJECTS_MESSAGE,
    }


def build_view(context: FlowContext, layout: Layout, controller: SelectionController) -> dict:
    """Whole-page view model for the current controller state."""
    active_id = controller.active_step_id if controller.is_open else None
    return {
        "ok": True,
        "header": {"title": PAGE_TITLE, "subtitle": PAGE_SUBTITLE},
        "chart": {
            "title": CHART_TITLE,
            "subtitle": f"{len(context.model)}-Step Process from Discovery to Delivery",
        },
        "flowchart": build_flowchart(context, layout),
        "mobile_list": build_mobile_list(context),
        "panel": {
            "open": active_id is not None,
            "active_step_id": active_id,
            "detail": build_step_detail(context, active_id) if active_id is not None else None,
        },
        "totals": {
            "projects": len(context.projects),
            "tracked": context.index.tracked_total(),
            "untracked": len(context.index.untracked()),
        },
    }


def build_error_view(message: str = LOAD_ERROR_MESSAGE) -> dict:
    """Placeholder shown instead of the flowchart when loading fails."""
    return {
        "ok": False,
        "header": {"title": PAGE_TITLE, "subtitle": PAGE_SUBTITLE},
        "error": message,
    }
