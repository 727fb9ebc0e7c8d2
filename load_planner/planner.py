from __future__ import annotations

import copy
import logging
from collections import Counter
from decimal import Decimal
from typing import Iterable, Sequence

from load_planner.config import PlannerSettings
from load_planner.io import CargoInputError, ContainerSpecError, expand_units
from load_planner.models import (
    CargoItem,
    ContainerType,
    FillResult,
    PackedContainer,
    Solution,
    Unit,
    UnpackedEntry,
)
from load_planner.packing import pack_container
from load_planner.strategies import STRATEGIES, Strategy

logger = logging.getLogger(__name__)


def sort_units(units: Iterable[Unit]) -> list[Unit]:
    """Low priority first (packed deepest), then heavier, then larger units."""
    return sorted(
        units,
        key=lambda u: (
            u.priority_rank,
            -u.weight_kg,
            -u.volume_cm3,
        ),
    )


def remove_placed(remaining: list[Unit], container: PackedContainer) -> list[Unit]:
    placed_counts = Counter(item.cargo_id for item in container.items)
    consumed: Counter[str] = Counter()
    result = []
    for unit in remaining:
        if consumed[unit.cargo_id] < placed_counts[unit.cargo_id]:
            consumed[unit.cargo_id] += 1
        else:
            result.append(unit)
    return result


def fill_containers(
    units: Sequence[Unit],
    ranked_types: Sequence[ContainerType],
    settings: PlannerSettings | None = None,
) -> FillResult:
    settings = settings or PlannerSettings()
    if not ranked_types:
        raise ContainerSpecError("利用可能なコンテナ仕様がありません")
    target = ranked_types[0]
    remaining = list(units)
    containers: list[PackedContainer] = []
    total_cost = Decimal("0")
    iterations = 0
    stalled = False
    while remaining and iterations < settings.max_iterations:
        iterations += 1
        packed = pack_container(target, remaining, settings=settings, index=len(containers) + 1)
        if not packed.items:
            stalled = True
            logger.info("%s cannot take any of the %d remaining units", target.id, len(remaining))
            break
        containers.append(packed)
        total_cost += target.cost
        remaining = remove_placed(remaining, packed)
        logger.info(
            "%s: %d units, %s kg, volume %.1f%%",
            packed.container_id,
            len(packed.items),
            packed.total_weight,
            float(packed.volume_ratio) * 100,
        )
    if remaining and not stalled:
        logger.warning(
            "container iteration cap (%d) reached with %d units left", settings.max_iterations, len(remaining)
        )
    return FillResult(
        containers=containers,
        remaining=remaining,
        total_cost=total_cost,
        iterations=iterations,
        stalled=stalled,
    )


def aggregate_unpacked(units: Iterable[Unit]) -> list[UnpackedEntry]:
    counts = Counter(unit.cargo_id for unit in units)
    return [UnpackedEntry(cargo_id=cargo_id, quantity=qty) for cargo_id, qty in counts.items()]


def build_solution(strategy: Strategy, fill: FillResult) -> Solution:
    capacity = sum((c.total_volume for c in fill.containers), Decimal("0"))
    used_volume = sum((c.utilization_volume for c in fill.containers), Decimal("0"))
    max_weight = sum((c.container_type.max_weight_kg for c in fill.containers), Decimal("0"))
    loaded_weight = sum((c.total_weight for c in fill.containers), Decimal("0"))
    return Solution(
        id=strategy.id,
        name=strategy.name,
        description=strategy.description,
        containers=fill.containers,
        total_cost=fill.total_cost,
        total_volume_util=used_volume / capacity if capacity > 0 else Decimal("0"),
        total_weight_util=loaded_weight / max_weight if max_weight > 0 else Decimal("0"),
        unpacked=aggregate_unpacked(fill.remaining),
        iterations=fill.iterations,
        stalled=fill.stalled,
    )


def validate_inputs(cargo: Sequence[CargoItem], containers: Sequence[ContainerType]) -> list[ContainerType]:
    if not cargo:
        raise CargoInputError("貨物リストが空です")
    if sum(item.quantity for item in cargo) <= 0:
        raise CargoInputError("積載対象の貨物がありません (数量がすべて0です)")
    enabled = [c for c in containers if c.enabled]
    if not enabled:
        raise ContainerSpecError("有効なコンテナ仕様がありません")
    return enabled


def run_strategy(
    strategy: Strategy,
    sorted_units: Sequence[Unit],
    containers: Sequence[ContainerType],
    settings: PlannerSettings | None = None,
) -> Solution:
    queue = copy.deepcopy(list(sorted_units))
    fill = fill_containers(queue, strategy.rank(containers), settings=settings)
    solution = build_solution(strategy, fill)
    logger.info(
        "%s: %d containers, cost %s, %d SKUs unpacked",
        strategy.id,
        solution.container_count,
        solution.total_cost,
        len(solution.unpacked),
    )
    if solution.unpacked:
        logger.warning(
            "%s left cargo unpacked: %s",
            strategy.id,
            ", ".join(f"{e.cargo_id} x{e.quantity}" for e in solution.unpacked),
        )
    return solution


def generate_solutions(
    cargo: Sequence[CargoItem],
    containers: Sequence[ContainerType],
    settings: PlannerSettings | None = None,
) -> list[Solution]:
    """Pack the cargo once per strategy and return one Solution for each.

    Raises ``CargoInputError`` / ``ContainerSpecError`` when there is nothing
    to pack or no enabled container; after that it always returns a
    best-effort result with leftovers listed in ``Solution.unpacked``.
    """
    settings = settings or PlannerSettings()
    enabled = validate_inputs(cargo, containers)
    units = sort_units(expand_units(cargo))
    logger.info("planning %d units of %d SKUs into %d container types", len(units), len(cargo), len(enabled))
    return [run_strategy(strategy, units, enabled, settings=settings) for strategy in STRATEGIES]
