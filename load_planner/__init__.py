from load_planner.config import PlannerSettings, configure_logging, load_settings
from load_planner.io import (
    CargoInputError,
    ContainerSpecError,
    expand_units,
    load_cargo_csv,
    normalize_cargo_rows,
    parse_container_yaml,
)
from load_planner.packing import AnchorPacker, pack_container
from load_planner.planner import fill_containers, generate_solutions, sort_units
from load_planner.reporting import build_placement_rows, build_solution_summary, summarize_solution

__all__ = [
    "PlannerSettings",
    "configure_logging",
    "load_settings",
    "CargoInputError",
    "ContainerSpecError",
    "expand_units",
    "load_cargo_csv",
    "normalize_cargo_rows",
    "parse_container_yaml",
    "AnchorPacker",
    "pack_container",
    "fill_containers",
    "generate_solutions",
    "sort_units",
    "build_placement_rows",
    "build_solution_summary",
    "summarize_solution",
]
