from __future__ import annotations

from collections import Counter
from typing import Iterable

import pandas as pd

from load_planner.models import Solution
from load_planner.rounding import cm3_to_m3, round_ratio

CIRCLED = {
    1: "①",
    2: "②",
    3: "③",
    4: "④",
    5: "⑤",
    6: "⑥",
    7: "⑦",
    8: "⑧",
    9: "⑨",
    10: "⑩",
    11: "⑪",
    12: "⑫",
    13: "⑬",
    14: "⑭",
    15: "⑮",
    16: "⑯",
    17: "⑰",
    18: "⑱",
    19: "⑲",
    20: "⑳",
}

PLACEMENT_COLUMNS = [
    "container_label",
    "container_id",
    "container_type",
    "container_index",
    "sequence",
    "cargo_id",
    "unit_id",
    "x_cm",
    "y_cm",
    "z_cm",
    "length_cm",
    "width_cm",
    "height_cm",
    "weight_kg",
    "rotated",
    "color",
]


def label_container(container_type: str, index: int) -> str:
    suffix = CIRCLED.get(index, str(index))
    return f"{container_type} {suffix}"


def build_placement_rows(solution: Solution) -> pd.DataFrame:
    rows = []
    for index, container in enumerate(solution.containers, start=1):
        for sequence, item in enumerate(container.items, start=1):
            rows.append(
                {
                    "container_label": label_container(container.container_type.id, index),
                    "container_id": container.container_id,
                    "container_type": container.container_type.id,
                    "container_index": index,
                    "sequence": sequence,
                    "cargo_id": item.cargo_id,
                    "unit_id": item.unit_id,
                    "x_cm": item.x,
                    "y_cm": item.y,
                    "z_cm": item.z,
                    "length_cm": item.length_cm,
                    "width_cm": item.width_cm,
                    "height_cm": item.height_cm,
                    "weight_kg": item.weight_kg,
                    "rotated": item.rotated,
                    "color": item.color,
                }
            )
    df = pd.DataFrame(rows, columns=PLACEMENT_COLUMNS)
    if df.empty:
        return df
    df = df.sort_values(by=["container_index", "y_cm", "x_cm", "z_cm", "sequence"])
    return df.reset_index(drop=True)


def build_container_rows(solution: Solution) -> pd.DataFrame:
    rows = []
    for index, container in enumerate(solution.containers, start=1):
        ctype = container.container_type
        rows.append(
            {
                "container_label": label_container(ctype.id, index),
                "container_id": container.container_id,
                "container_name": ctype.name,
                "units": len(container.items),
                "cost": ctype.cost,
                "loaded_kg": container.total_weight,
                "max_weight_kg": ctype.max_weight_kg,
                "used_m3": cm3_to_m3(container.utilization_volume),
                "capacity_m3": cm3_to_m3(container.total_volume),
                "volume_util": round_ratio(container.volume_ratio),
                "weight_util": round_ratio(container.weight_ratio),
            }
        )
    return pd.DataFrame(rows)


def build_unpacked_rows(solution: Solution) -> pd.DataFrame:
    return pd.DataFrame(
        [{"cargo_id": e.cargo_id, "quantity": e.quantity} for e in solution.unpacked],
        columns=["cargo_id", "quantity"],
    )


def summarize_solution(solution: Solution) -> dict:
    """Plain-data digest of a solution for downstream narrative reports."""
    composition = Counter(c.container_type.id for c in solution.containers)
    return {
        "id": solution.id,
        "name": solution.name,
        "total_cost": solution.total_cost,
        "container_count": solution.container_count,
        "containers": dict(composition),
        "container_names": [c.container_type.name for c in solution.containers],
        "volume_util": round_ratio(solution.total_volume_util),
        "weight_util": round_ratio(solution.total_weight_util),
        "unpacked": [{"cargo_id": e.cargo_id, "quantity": e.quantity} for e in solution.unpacked],
    }


def build_solution_summary(solutions: Iterable[Solution]) -> pd.DataFrame:
    rows = []
    for solution in solutions:
        summary = summarize_solution(solution)
        rows.append(
            {
                "strategy": summary["id"],
                "name": summary["name"],
                "total_cost": summary["total_cost"],
                "container_count": summary["container_count"],
                "containers": ", ".join(f"{k} x{v}" for k, v in summary["containers"].items()),
                "volume_util": summary["volume_util"],
                "weight_util": summary["weight_util"],
                "unpacked_units": sum(e["quantity"] for e in summary["unpacked"]),
            }
        )
    return pd.DataFrame(rows)
