from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from decimal import Decimal, InvalidOperation

import yaml

from load_planner.rounding import to_decimal

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
HANDLER_NAME = "load_planner"

# Fraction of a unit's footprint that must rest on tops of units directly below
SUPPORT_MIN_RATIO = Decimal("0.6")
MAX_CONTAINER_ITERATIONS = 50
GEOMETRY_TOLERANCE_CM = Decimal("0.001")


@dataclass
class PlannerSettings:
    support_min_ratio: Decimal = SUPPORT_MIN_RATIO
    max_iterations: int = MAX_CONTAINER_ITERATIONS
    tolerance: Decimal = GEOMETRY_TOLERANCE_CM
    log_level: str = "INFO"

    def __post_init__(self):
        self.support_min_ratio = to_decimal(self.support_min_ratio)
        self.tolerance = to_decimal(self.tolerance)
        self.max_iterations = int(self.max_iterations)
        if not Decimal("0") <= self.support_min_ratio <= Decimal("1"):
            raise ValueError("support_min_ratio must be between 0 and 1")
        if self.max_iterations < 1:
            raise ValueError("max_iterations must be at least 1")
        if self.tolerance < 0:
            raise ValueError("tolerance must not be negative")


def load_settings(content: str | None) -> PlannerSettings:
    """Build settings from the optional ``planner:`` mapping of a YAML document.

    Missing keys fall back to the defaults; unknown keys are rejected so that
    typos do not silently change the packing policy.
    """
    if not content or not content.strip():
        return PlannerSettings()
    try:
        data = yaml.safe_load(content) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"settings YAML could not be parsed: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError("settings YAML must be a mapping")
    section = data.get("planner") or {}
    if not isinstance(section, dict):
        raise ValueError("planner section must be a mapping")
    known = {f.name for f in fields(PlannerSettings)}
    unknown = sorted(set(section) - known)
    if unknown:
        raise ValueError(f"unknown planner settings: {', '.join(unknown)}")
    try:
        return PlannerSettings(**section)
    except (InvalidOperation, TypeError) as exc:
        raise ValueError(f"invalid planner setting value: {exc}") from exc


def configure_logging(level: str = "INFO") -> logging.Logger:
    logger = logging.getLogger("load_planner")
    logger.setLevel(level.upper())
    if not any(h.get_name() == HANDLER_NAME for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.set_name(HANDLER_NAME)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    return logger
