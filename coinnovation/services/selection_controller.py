"""Selection / navigation controller for the step detail panel.

States:
    closed            — no step shown (initial)
    open(step_id)     — panel shows ``step_id``

Transitions:
    select   closed|open → open    (known step only; unknown id is a no-op)
    navigate open        → open    (next-step link inside an open panel)
    close    open        → closed  (closed → closed is a no-op)

Dismiss triggers (cancel key, click outside the panel, close button) all
map to ``close``. Nothing here raises for a bad id.
"""

from __future__ import annotations

import logging

from coinnovation.models.process import ProcessModel, Step

logger = logging.getLogger(__name__)

STATE_CLOSED = "closed"
STATE_OPEN = "open"

SELECTION_TRANSITIONS = {
    STATE_CLOSED: {"select": STATE_OPEN},
    STATE_OPEN:   {"select": STATE_OPEN, "navigate": STATE_OPEN, "close": STATE_CLOSED},
}

TRIGGER_CANCEL_KEY = "cancel_key"
TRIGGER_OUTSIDE_CLICK = "outside_click"
TRIGGER_CLOSE_BUTTON = "close_button"
DISMISS_TRIGGERS = {TRIGGER_CANCEL_KEY, TRIGGER_OUTSIDE_CLICK, TRIGGER_CLOSE_BUTTON}


def validate_selection_transition(state: str, action: str) -> bool:
    """Return True if ``action`` is allowed from ``state``."""
    return action in SELECTION_TRANSITIONS.get(state, {})


class SelectionController:
    """Owns the active step and panel visibility."""

    def __init__(self, model: ProcessModel) -> None:
        self._model = model
        self._state = STATE_CLOSED
        self._active_step_id: str | None = None

    @property
    def state(self) -> str:
        return self._state

    @property
    def is_open(self) -> bool:
        return self._state == STATE_OPEN

    @property
    def active_step_id(self) -> str | None:
        return self._active_step_id

    @property
    def active_step(self) -> Step | None:
        return self._model.get(self._active_step_id)

    def _apply(self, action: str, step_id: str | None = None) -> bool:
        if not validate_selection_transition(self._state, action):
            logger.debug("Ignored %s from state=%s", action, self._state)
            return False
        new_state = SELECTION_TRANSITIONS[self._state][action]
        logger.debug("Selection %s: %s -> %s step_id=%s",
                     action, self._state, new_state, step_id)
        self._state = new_state
        self._active_step_id = step_id if new_state == STATE_OPEN else None
        return True

    def select_step(self, step_id: str | None) -> bool:
        """Open the panel on ``step_id``. Returns False (no change) if unknown."""
        if self._model.get(step_id) is None:
            logger.debug("Ignored selection of unknown step %r", step_id)
            return False
        return self._apply("select", step_id)

    def navigate_to(self, step_id: str | None) -> bool:
        """Re-target an open panel via a next-step link."""
        if self._model.get(step_id) is None:
            logger.debug("Ignored navigation to unknown step %r", step_id)
            return False
        return self._apply("navigate", step_id)

    def close(self) -> bool:
        """Close the panel. Returns True only if it was open."""
        return self._apply("close")

    def dismiss(self, trigger: str) -> bool:
        if trigger not in DISMISS_TRIGGERS:
            logger.debug("Ignored unknown dismiss trigger %r", trigger)
            return False
        return self.close()

    def next_step_links(self) -> tuple[Step, ...]:
        """Valid navigation targets of the active step, in declared order."""
        step = self.active_step
        if step is None:
            return ()
        return self._model.resolve_next_steps(step)
