from __future__ import annotations

import io
from decimal import Decimal
from typing import Iterable

import pandas as pd
import yaml

from load_planner.models import CARGO_TYPES, PRIORITY_RANK, CargoItem, ContainerType, Unit
from load_planner.rounding import ceil_cm, to_decimal

REQUIRED_COLUMNS = [
    "id",
    "name",
    "quantity",
    "length_cm",
    "width_cm",
    "height_cm",
    "weight_kg",
]

OPTIONAL_COLUMNS = {
    "can_rotate": True,
    "priority": "Medium",
    "color": "#60a5fa",
    "cargo_type": "Carton",
}

CONTAINER_KEYS = ["id", "length_cm", "width_cm", "height_cm", "max_weight_kg", "cost"]

MAX_DIM_CM = Decimal("20000")
MAX_WEIGHT_KG = Decimal("100000")
MAX_QTY = 10000

COLUMN_ALIASES = {
    "id": "id",
    "sku": "id",
    "itemid": "id",
    "cargoid": "id",
    "name": "name",
    "cargoname": "name",
    "desc": "name",
    "qty": "quantity",
    "quantity": "quantity",
    "l": "length_cm",
    "length": "length_cm",
    "lengthcm": "length_cm",
    "w": "width_cm",
    "width": "width_cm",
    "widthcm": "width_cm",
    "h": "height_cm",
    "height": "height_cm",
    "heightcm": "height_cm",
    "gross": "weight_kg",
    "grosskg": "weight_kg",
    "weight": "weight_kg",
    "weightkg": "weight_kg",
    "rotate": "can_rotate",
    "canrotate": "can_rotate",
    "rotateallowed": "can_rotate",
    "priority": "priority",
    "color": "color",
    "colour": "color",
    "type": "cargo_type",
    "cargotype": "cargo_type",
}


def _normalize_column_name(name: str) -> str:
    return "".join(ch for ch in str(name).strip() if ch.isalnum()).lower()


def _apply_column_aliases(df: pd.DataFrame) -> pd.DataFrame:
    rename_map: dict[str, str] = {}
    for col in df.columns:
        normalized = _normalize_column_name(col)
        target = COLUMN_ALIASES.get(normalized)
        if target:
            rename_map[col] = target
    if rename_map:
        df = df.rename(columns=rename_map)
    return df


class CargoInputError(ValueError):
    pass


class ContainerSpecError(ValueError):
    pass


def _is_blank(value) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and pd.isna(value):
        return True
    return isinstance(value, str) and not value.strip()


def _parse_bool(value, default: bool) -> bool:
    if _is_blank(value):
        return default
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in {"1", "true", "yes", "y"}:
        return True
    if text in {"0", "false", "no", "n"}:
        return False
    return default


def _parse_choice(value, choices, default: str) -> str | None:
    if _is_blank(value):
        return default
    text = str(value).strip().lower()
    for choice in choices:
        if choice.lower() == text:
            return choice
    return None


def load_cargo_csv(content: str) -> pd.DataFrame:
    data = pd.read_csv(io.StringIO(content))
    return _apply_column_aliases(data)


def ensure_columns(df: pd.DataFrame) -> pd.DataFrame:
    missing = [col for col in REQUIRED_COLUMNS if col not in df.columns]
    if missing:
        raise CargoInputError(f"必須カラムが不足しています: {', '.join(missing)}")
    for col, default in OPTIONAL_COLUMNS.items():
        if col not in df.columns:
            df[col] = default
    return df


def normalize_cargo_rows(df: pd.DataFrame) -> list[CargoItem]:
    df = ensure_columns(df)
    rows: list[CargoItem] = []
    seen_ids: set[str] = set()
    for row_no, (_, row) in enumerate(df.iterrows(), start=1):

        def parse_decimal_field(field_name: str):
            raw = row.get(field_name)
            try:
                value = to_decimal(raw)
            except Exception as exc:  # noqa: BLE001
                raise CargoInputError(
                    f"{field_name} の値 '{raw}' は数値に変換できません (行 {row_no})"
                ) from exc
            if not value.is_finite():
                raise CargoInputError(f"{field_name} の値 '{raw}' は数値に変換できません (行 {row_no})")
            return value

        try:
            quantity = int(row["quantity"])
        except Exception as exc:  # noqa: BLE001
            raise CargoInputError(
                f"quantity の値 '{row.get('quantity')}' は整数に変換できません (行 {row_no})"
            ) from exc

        length_cm = ceil_cm(parse_decimal_field("length_cm"))
        width_cm = ceil_cm(parse_decimal_field("width_cm"))
        height_cm = ceil_cm(parse_decimal_field("height_cm"))
        weight_kg = parse_decimal_field("weight_kg")

        if quantity < 0:
            raise CargoInputError(f"quantityは0以上である必要があります (行 {row_no})")
        if quantity > MAX_QTY:
            raise CargoInputError(f"quantityが上限({MAX_QTY})を超えています (行 {row_no})")
        for label, value in (("length_cm", length_cm), ("width_cm", width_cm), ("height_cm", height_cm)):
            if value <= 0:
                raise CargoInputError(f"{label}は0より大きい必要があります (行 {row_no})")
            if value > MAX_DIM_CM:
                raise CargoInputError(f"{label}が上限({MAX_DIM_CM}cm)を超えています (行 {row_no})")
        if weight_kg < 0:
            raise CargoInputError(f"weight_kgは0以上である必要があります (行 {row_no})")
        if weight_kg > MAX_WEIGHT_KG:
            raise CargoInputError(f"weight_kgが上限({MAX_WEIGHT_KG}kg)を超えています (行 {row_no})")

        priority = _parse_choice(row.get("priority"), PRIORITY_RANK, OPTIONAL_COLUMNS["priority"])
        if priority is None:
            raise CargoInputError(
                f"priority の値 '{row.get('priority')}' は High / Medium / Low のいずれかで指定してください (行 {row_no})"
            )
        cargo_type = _parse_choice(row.get("cargo_type"), CARGO_TYPES, OPTIONAL_COLUMNS["cargo_type"])
        if cargo_type is None:
            raise CargoInputError(f"cargo_type の値 '{row.get('cargo_type')}' は未対応です (行 {row_no})")

        cargo_id = str(row["id"]).strip()
        if not cargo_id or cargo_id.lower() == "nan":
            raise CargoInputError(f"id が空です (行 {row_no})")
        if cargo_id in seen_ids:
            raise CargoInputError(f"id '{cargo_id}' が重複しています (行 {row_no})")
        seen_ids.add(cargo_id)

        color = row.get("color")
        rows.append(
            CargoItem(
                id=cargo_id,
                name=str(row["name"]).strip(),
                length_cm=length_cm,
                width_cm=width_cm,
                height_cm=height_cm,
                weight_kg=weight_kg,
                quantity=quantity,
                can_rotate=_parse_bool(row.get("can_rotate"), True),
                priority=priority,
                color=OPTIONAL_COLUMNS["color"] if _is_blank(color) else str(color).strip(),
                cargo_type=cargo_type,
            )
        )
    return rows


def normalize_container_rows(records: Iterable[dict]) -> list[ContainerType]:
    containers: list[ContainerType] = []
    seen_ids: set[str] = set()
    for idx, record in enumerate(records, start=1):
        if not isinstance(record, dict):
            raise ContainerSpecError(f"コンテナ仕様はマッピングで指定してください (項目 {idx})")
        missing = [key for key in CONTAINER_KEYS if _is_blank(record.get(key))]
        if missing:
            raise ContainerSpecError(f"コンテナ仕様の必須項目が不足しています: {', '.join(missing)} (項目 {idx})")
        values = {}
        for key in CONTAINER_KEYS[1:]:
            try:
                values[key] = to_decimal(record[key])
            except Exception as exc:  # noqa: BLE001
                raise ContainerSpecError(f"{key} の値 '{record[key]}' は数値に変換できません (項目 {idx})") from exc
        for key in ("length_cm", "width_cm", "height_cm", "max_weight_kg"):
            if values[key] <= 0:
                raise ContainerSpecError(f"{key}は0より大きい必要があります (項目 {idx})")
        if values["cost"] < 0:
            raise ContainerSpecError(f"costは0以上である必要があります (項目 {idx})")
        container_id = str(record["id"]).strip()
        if container_id in seen_ids:
            raise ContainerSpecError(f"コンテナ id '{container_id}' が重複しています (項目 {idx})")
        seen_ids.add(container_id)
        containers.append(
            ContainerType(
                id=container_id,
                name=str(record.get("name") or container_id),
                length_cm=values["length_cm"],
                width_cm=values["width_cm"],
                height_cm=values["height_cm"],
                max_weight_kg=values["max_weight_kg"],
                cost=values["cost"],
                enabled=_parse_bool(record.get("enabled"), True),
            )
        )
    return containers


def parse_container_yaml(content: str) -> list[ContainerType]:
    try:
        data = yaml.safe_load(content) or {}
    except yaml.YAMLError as exc:
        raise ContainerSpecError(f"コンテナ仕様のYAMLを解析できません: {exc}") from exc
    if not isinstance(data, dict):
        raise ContainerSpecError("コンテナ仕様は containers: のリストで指定してください")
    return normalize_container_rows(data.get("containers") or [])


def expand_units(items: Iterable[CargoItem]) -> list[Unit]:
    units: list[Unit] = []
    for item in items:
        volume_cm3 = item.length_cm * item.width_cm * item.height_cm
        for i in range(1, item.quantity + 1):
            units.append(
                Unit(
                    unit_id=f"{item.id}#{i}",
                    cargo_id=item.id,
                    unit_no=i,
                    name=item.name,
                    length_cm=item.length_cm,
                    width_cm=item.width_cm,
                    height_cm=item.height_cm,
                    weight_kg=item.weight_kg,
                    volume_cm3=volume_cm3,
                    can_rotate=item.can_rotate,
                    priority=item.priority,
                    color=item.color,
                )
            )
    return units
