from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Tuple

PRIORITY_RANK = {"Low": 1, "Medium": 2, "High": 3}
CARGO_TYPES = ("Carton", "Pallet", "Drum", "Crate", "Irregular")

Anchor = Tuple[Decimal, Decimal, Decimal]


@dataclass
class CargoItem:
    id: str
    name: str
    length_cm: Decimal
    width_cm: Decimal
    height_cm: Decimal
    weight_kg: Decimal
    quantity: int
    can_rotate: bool = True
    priority: str = "Medium"
    color: str = "#60a5fa"
    cargo_type: str = "Carton"


@dataclass
class Unit:
    unit_id: str
    cargo_id: str
    unit_no: int
    name: str
    length_cm: Decimal
    width_cm: Decimal
    height_cm: Decimal
    weight_kg: Decimal
    volume_cm3: Decimal
    can_rotate: bool
    priority: str
    color: str

    @property
    def priority_rank(self) -> int:
        return PRIORITY_RANK[self.priority]


@dataclass(frozen=True)
class ContainerType:
    id: str
    name: str
    length_cm: Decimal
    width_cm: Decimal
    height_cm: Decimal
    max_weight_kg: Decimal
    cost: Decimal
    enabled: bool = True

    @property
    def volume_cm3(self) -> Decimal:
        return self.length_cm * self.width_cm * self.height_cm


@dataclass
class Orientation:
    length_cm: Decimal
    width_cm: Decimal
    height_cm: Decimal
    rotated: bool


@dataclass
class PlacedItem:
    cargo_id: str
    unit_id: str
    x: Decimal
    y: Decimal
    z: Decimal
    length_cm: Decimal
    width_cm: Decimal
    height_cm: Decimal
    weight_kg: Decimal
    rotated: bool
    color: str

    @property
    def x2(self) -> Decimal:
        return self.x + self.length_cm

    @property
    def y2(self) -> Decimal:
        return self.y + self.height_cm

    @property
    def z2(self) -> Decimal:
        return self.z + self.width_cm

    @property
    def volume_cm3(self) -> Decimal:
        return self.length_cm * self.width_cm * self.height_cm


@dataclass
class PackedContainer:
    container_type: ContainerType
    container_id: str
    items: List[PlacedItem] = field(default_factory=list)
    total_weight: Decimal = Decimal("0")
    total_volume: Decimal = Decimal("0")
    utilization_volume: Decimal = Decimal("0")
    utilization_weight: Decimal = Decimal("0")

    @property
    def volume_ratio(self) -> Decimal:
        if self.total_volume <= 0:
            return Decimal("0")
        return self.utilization_volume / self.total_volume

    @property
    def weight_ratio(self) -> Decimal:
        if self.container_type.max_weight_kg <= 0:
            return Decimal("0")
        return self.utilization_weight / self.container_type.max_weight_kg


@dataclass
class UnpackedEntry:
    cargo_id: str
    quantity: int


@dataclass
class FillResult:
    containers: List[PackedContainer]
    remaining: List[Unit]
    total_cost: Decimal
    iterations: int
    stalled: bool


@dataclass
class Solution:
    id: str
    name: str
    description: str
    containers: List[PackedContainer]
    total_cost: Decimal
    total_volume_util: Decimal
    total_weight_util: Decimal
    unpacked: List[UnpackedEntry]
    iterations: int = 0
    stalled: bool = False

    @property
    def container_count(self) -> int:
        return len(self.containers)
