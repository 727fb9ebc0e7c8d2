from __future__ import annotations

import logging
from decimal import Decimal
from typing import Iterable, List

from load_planner.config import PlannerSettings
from load_planner.fit import allowed_orientations
from load_planner.models import Anchor, ContainerType, Orientation, PackedContainer, PlacedItem, Unit

logger = logging.getLogger(__name__)

ORIGIN: Anchor = (Decimal("0"), Decimal("0"), Decimal("0"))


def anchor_score(anchor: Anchor) -> Decimal:
    x, y, z = anchor
    return x * Decimal("10000") + y * Decimal("100") + z


def overlap_1d(a1: Decimal, a2: Decimal, b1: Decimal, b2: Decimal, tol: Decimal) -> Decimal:
    span = min(a2, b2) - max(a1, b1)
    return span if span > tol else Decimal("0")


def boxes_overlap(a: PlacedItem, b: PlacedItem, tol: Decimal = Decimal("0")) -> bool:
    """Strict axis-aligned intersection; boxes sharing a face do not overlap."""
    return (
        a.x < b.x2 - tol
        and a.x2 > b.x + tol
        and a.y < b.y2 - tol
        and a.y2 > b.y + tol
        and a.z < b.z2 - tol
        and a.z2 > b.z + tol
    )


def support_ratio(candidate: PlacedItem, placed: Iterable[PlacedItem], tol: Decimal) -> Decimal:
    """Share of the candidate's footprint resting on tops level with its bottom."""
    footprint = candidate.length_cm * candidate.width_cm
    if footprint <= 0:
        return Decimal("0")
    supported = Decimal("0")
    for item in placed:
        if abs(item.y2 - candidate.y) > tol:
            continue
        dx = overlap_1d(candidate.x, candidate.x2, item.x, item.x2, tol)
        dz = overlap_1d(candidate.z, candidate.z2, item.z, item.z2, tol)
        supported += dx * dz
    return supported / footprint


class AnchorPacker:
    def __init__(self, container_type: ContainerType, settings: PlannerSettings | None = None, index: int = 1):
        self.container_type = container_type
        self.settings = settings or PlannerSettings()
        self.tol = self.settings.tolerance
        self.index = index
        self.placed: List[PlacedItem] = []
        self.anchors: List[Anchor] = [ORIGIN]
        self.current_weight = Decimal("0")
        self.used_volume = Decimal("0")

    def _in_bounds(self, box: PlacedItem) -> bool:
        spec = self.container_type
        return (
            box.x >= 0
            and box.y >= 0
            and box.z >= 0
            and box.x2 <= spec.length_cm
            and box.y2 <= spec.height_cm
            and box.z2 <= spec.width_cm
        )

    def _collides(self, box: PlacedItem) -> bool:
        return any(boxes_overlap(box, other) for other in self.placed)

    def _is_supported(self, box: PlacedItem) -> bool:
        if abs(box.y) <= self.tol:
            return True
        return support_ratio(box, self.placed, self.tol) >= self.settings.support_min_ratio

    def _candidate(self, unit: Unit, anchor: Anchor, orientation: Orientation) -> PlacedItem:
        x, y, z = anchor
        return PlacedItem(
            cargo_id=unit.cargo_id,
            unit_id=unit.unit_id,
            x=x,
            y=y,
            z=z,
            length_cm=orientation.length_cm,
            width_cm=orientation.width_cm,
            height_cm=orientation.height_cm,
            weight_kg=unit.weight_kg,
            rotated=orientation.rotated,
            color=unit.color,
        )

    def _accepts(self, box: PlacedItem) -> bool:
        return self._in_bounds(box) and not self._collides(box) and self._is_supported(box)

    def _find_position(self, unit: Unit) -> PlacedItem | None:
        orientations = allowed_orientations(unit)
        for anchor in sorted(self.anchors):
            for orientation in orientations:
                box = self._candidate(unit, anchor, orientation)
                if self._accepts(box):
                    return box
        return None

    def _is_inside_placed(self, anchor: Anchor) -> bool:
        x, y, z = anchor
        for box in self.placed:
            if (
                box.x + self.tol < x < box.x2 - self.tol
                and box.y + self.tol < y < box.y2 - self.tol
                and box.z + self.tol < z < box.z2 - self.tol
            ):
                return True
        return False

    def _anchor_in_bounds(self, anchor: Anchor) -> bool:
        x, y, z = anchor
        spec = self.container_type
        return (
            -self.tol <= x < spec.length_cm - self.tol
            and -self.tol <= y < spec.height_cm - self.tol
            and -self.tol <= z < spec.width_cm - self.tol
        )

    def _prune_anchors(self):
        kept: List[Anchor] = []
        for anchor in self.anchors:
            if not self._anchor_in_bounds(anchor) or self._is_inside_placed(anchor):
                continue
            if any(all(abs(a - b) <= self.tol for a, b in zip(anchor, other)) for other in kept):
                continue
            kept.append(anchor)
        self.anchors = kept

    def place_unit(self, unit: Unit) -> bool:
        if self.current_weight + unit.weight_kg > self.container_type.max_weight_kg:
            logger.debug("%s skipped in %s: weight budget exceeded", unit.unit_id, self.container_id)
            return False
        box = self._find_position(unit)
        if box is None:
            logger.debug("%s has no accepting anchor in %s", unit.unit_id, self.container_id)
            return False
        self.placed.append(box)
        self.current_weight += unit.weight_kg
        self.used_volume += box.volume_cm3
        self.anchors.remove((box.x, box.y, box.z))
        self.anchors.extend(
            [
                (box.x2, box.y, box.z),
                (box.x, box.y2, box.z),
                (box.x, box.y, box.z2),
            ]
        )
        self._prune_anchors()
        logger.debug(
            "%s placed at (%s, %s, %s) score %s%s in %s",
            unit.unit_id,
            box.x,
            box.y,
            box.z,
            anchor_score((box.x, box.y, box.z)),
            " rotated" if box.rotated else "",
            self.container_id,
        )
        return True

    @property
    def container_id(self) -> str:
        return f"{self.container_type.id}-{self.index}"

    def pack(self, units: Iterable[Unit]) -> PackedContainer:
        for unit in units:
            self.place_unit(unit)
        return self.result()

    def result(self) -> PackedContainer:
        return PackedContainer(
            container_type=self.container_type,
            container_id=self.container_id,
            items=list(self.placed),
            total_weight=self.current_weight,
            total_volume=self.container_type.volume_cm3,
            utilization_volume=self.used_volume,
            utilization_weight=self.current_weight,
        )


def pack_container(
    container_type: ContainerType,
    units: Iterable[Unit],
    settings: PlannerSettings | None = None,
    index: int = 1,
) -> PackedContainer:
    return AnchorPacker(container_type, settings=settings, index=index).pack(units)
