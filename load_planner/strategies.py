from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, List

from load_planner.models import ContainerType

COST_SAVER = "COST_SAVER"
OPERATION_EFFICIENCY = "OPERATION_EFFICIENCY"


@dataclass(frozen=True)
class Strategy:
    id: str
    name: str
    description: str
    sort_key: Callable[[ContainerType], object]

    def rank(self, containers: Iterable[ContainerType]) -> List[ContainerType]:
        """Enabled container types, best first. Ties keep catalog order."""
        return sorted((c for c in containers if c.enabled), key=self.sort_key)


def _cost_per_volume(container: ContainerType):
    return container.cost / container.volume_cm3


def _negative_volume(container: ContainerType):
    return -container.volume_cm3


STRATEGIES = (
    Strategy(
        id=COST_SAVER,
        name="方案1: 総コスト最小化 (推奨)",
        description="容積あたりの運賃が安い箱型を優先します。作業の手間が増える場合があります。",
        sort_key=_cost_per_volume,
    ),
    Strategy(
        id=OPERATION_EFFICIENCY,
        name="方案2: 作業効率優先",
        description="大容量の箱型を優先し、コンテナ本数を減らして管理しやすくします。",
        sort_key=_negative_volume,
    ),
)


def get_strategy(strategy_id: str) -> Strategy:
    for strategy in STRATEGIES:
        if strategy.id == strategy_id:
            return strategy
    raise KeyError(f"unknown strategy: {strategy_id}")
