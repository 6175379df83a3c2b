"""
Project: configuración, validación, planificación y detección de drift.
"""

from styx.core.project.models import StyxConfig
from styx.core.project.validator import REQUIRED_KEYS, build_config, missing_required
from styx.core.project.planner import RESOURCE_ORDER, ApplyReport, apply_plan, classify, plan_resources
from styx.core.project.detector import StateDiff, detect_drift

__all__ = [
    "StyxConfig",
    "REQUIRED_KEYS",
    "build_config",
    "missing_required",
    "RESOURCE_ORDER",
    "ApplyReport",
    "apply_plan",
    "classify",
    "plan_resources",
    "StateDiff",
    "detect_drift",
]
