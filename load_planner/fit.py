from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from load_planner.models import CargoItem, ContainerType, Orientation, Unit


@dataclass
class FitResult:
    container_id: str
    fits: bool
    overweight: bool
    over_length_cm: Decimal
    over_width_cm: Decimal
    over_height_cm: Decimal
    chosen_orientation: Orientation


def allowed_orientations(item: CargoItem | Unit) -> list[Orientation]:
    """Native orientation first, then the floor-plane quarter turn when allowed.

    Units are never tipped, so height always stays on the vertical axis.
    """
    native = Orientation(item.length_cm, item.width_cm, item.height_cm, rotated=False)
    if not item.can_rotate or item.length_cm == item.width_cm:
        return [native]
    return [native, Orientation(item.width_cm, item.length_cm, item.height_cm, rotated=True)]


def evaluate_fit(item: CargoItem | Unit, container: ContainerType) -> FitResult:
    best = None
    for orientation in allowed_orientations(item):
        over_L = max(Decimal("0"), orientation.length_cm - container.length_cm)
        over_W = max(Decimal("0"), orientation.width_cm - container.width_cm)
        over_H = max(Decimal("0"), orientation.height_cm - container.height_cm)
        score = over_L + over_W + over_H
        if best is None or score < best[0]:
            best = (score, orientation, over_L, over_W, over_H)
    score, orientation, over_L, over_W, over_H = best
    return FitResult(
        container_id=container.id,
        fits=score == 0,
        overweight=item.weight_kg > container.max_weight_kg,
        over_length_cm=over_L,
        over_width_cm=over_W,
        over_height_cm=over_H,
        chosen_orientation=orientation,
    )


def find_unloadable(items: Iterable[CargoItem], containers: Iterable[ContainerType]) -> list[CargoItem]:
    """Cargo that no enabled container can take, by size or by unit weight."""
    enabled = [c for c in containers if c.enabled]
    result = []
    for item in items:
        if item.quantity <= 0:
            continue
        fits = [evaluate_fit(item, container) for container in enabled]
        if not any(f.fits and not f.overweight for f in fits):
            result.append(item)
    return result
