"""
Co-Innovation Process Flow
Immutable domain models: process steps and tracked projects.
"""

from coinnovation.models.process import (  # noqa: F401
    STEP_TYPE_GATEWAY,
    STEP_TYPE_STEP,
    STEP_TYPES,
    ProcessModel,
    Step,
)
from coinnovation.models.project import (  # noqa: F401
    STATUS_BLOCKED,
    STATUS_ON_TRACK,
    Project,
    status_label,
)
