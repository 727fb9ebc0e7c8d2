from __future__ import annotations

from typing import Iterable, Sequence

from load_planner.fit import evaluate_fit, find_unloadable
from load_planner.models import CargoItem, ContainerType, Solution


def unpacked_warnings(solution: Solution) -> list[str]:
    return [
        f"{solution.name}: {entry.cargo_id} が {entry.quantity} 個積み残しです"
        for entry in solution.unpacked
    ]


def describe_unloadable(item: CargoItem, containers: Sequence[ContainerType]) -> str:
    enabled = [c for c in containers if c.enabled]
    fits = [evaluate_fit(item, c) for c in enabled]
    if not any(f.fits for f in fits):
        return f"{item.id}: 寸法 {item.length_cm}x{item.width_cm}x{item.height_cm}cm はどのコンテナにも収まりません"
    if all(f.overweight for f in fits):
        return f"{item.id}: 1個あたりの重量 {item.weight_kg}kg がどのコンテナの最大積載量も超えています"
    return f"{item.id}: 寸法と重量の両方を満たすコンテナがありません"


def collect_warnings(
    solutions: Iterable[Solution],
    cargo: Sequence[CargoItem],
    containers: Sequence[ContainerType],
) -> list[str]:
    messages = [describe_unloadable(item, containers) for item in find_unloadable(cargo, containers)]
    for solution in solutions:
        messages.extend(unpacked_warnings(solution))
    return messages
