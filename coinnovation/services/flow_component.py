"""Flow component — one mounted instance of the process visualization.

Owns the pieces that change over a session (the controller state and the
current layout) and translates view intents into transitions:

    select(step_id)      node / list item picked       → controller.select_step
    navigate(step_id)    next-step link in the panel   → controller.navigate_to
    dismiss(trigger)     cancel key / outside click / close button → close
    resize(width)        debounced re-layout (newest width wins)

``mount_flow`` is the page-level entry point: fetch → build → first render,
or the error placeholder when the process data cannot be loaded.
"""

from __future__ import annotations

import logging

from coinnovation.core.exceptions import FlowLoadError
from coinnovation.integrations.data_source_gateway import DataSourceGateway
from coinnovation.services import view_adapter
from coinnovation.services.flow_service import FlowContext, load_flow_context
from coinnovation.services.layout_engine import Layout, LayoutPolicy, compute_layout
from coinnovation.services.selection_controller import SelectionController
from coinnovation.utils.debounce import Debouncer

logger = logging.getLogger(__name__)

RESIZE_DEBOUNCE_MS = 250


class FlowComponent:
    def __init__(
        self,
        context: FlowContext,
        policy: LayoutPolicy | None = None,
        debounce_ms: int = RESIZE_DEBOUNCE_MS,
        timer_factory=None,
    ) -> None:
        self.context = context
        self.policy = policy or LayoutPolicy()
        self.controller = SelectionController(context.model)
        self._layout: Layout | None = None
        debouncer_kwargs = {"timer_factory": timer_factory} if timer_factory else {}
        self._resize = Debouncer(self.relayout, wait_ms=debounce_ms, **debouncer_kwargs)

    @property
    def layout(self) -> Layout:
        if self._layout is None:
            raise RuntimeError("FlowComponent.mount() must be called before reading the layout")
        return self._layout

    @property
    def mounted(self) -> bool:
        return self._layout is not None

    def mount(self, container_width: float | None = None) -> "FlowComponent":
        self._layout = compute_layout(container_width, len(self.context.model), self.policy)
        return self

    def relayout(self, container_width: float | None) -> Layout:
        self._layout = compute_layout(container_width, len(self.context.model), self.policy)
        logger.debug("Re-layout width=%s", self._layout.width)
        return self._layout

    def resize(self, container_width: float | None) -> None:
        """Schedule a re-layout; a newer resize cancels the pending one."""
        self._resize.call(container_width)

    def flush_resize(self) -> None:
        self._resize.flush()

    def select(self, step_id: str | None) -> bool:
        return self.controller.select_step(step_id)

    def navigate(self, step_id: str | None) -> bool:
        return self.controller.navigate_to(step_id)

    def dismiss(self, trigger: str) -> bool:
        return self.controller.dismiss(trigger)

    def close(self) -> bool:
        return self.controller.close()

    def render(self) -> dict:
        return view_adapter.build_view(self.context, self.layout, self.controller)

    def dispose(self) -> None:
        self._resize.cancel()


def mount_flow(
    process_location: str,
    projects_location: str,
    container_width: float | None = None,
    *,
    gateway: DataSourceGateway | None = None,
    policy: LayoutPolicy | None = None,
    debounce_ms: int = RESIZE_DEBOUNCE_MS,
) -> tuple[FlowComponent | None, dict]:
    """Fetch, build and render once.

    Returns ``(component, view)``; on load failure the component is None
    and the view is the error placeholder.
    """
    try:
        context = load_flow_context(process_location, projects_location, gateway=gateway)
    except FlowLoadError as exc:
        logger.error("Co-innovation flow not rendered: %s", exc)
        return None, view_adapter.build_error_view()

    component = FlowComponent(context, policy=policy, debounce_ms=debounce_ms).mount(container_width)
    return component, component.render()
