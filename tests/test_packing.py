from decimal import Decimal

from load_planner.config import PlannerSettings
from load_planner.fit import allowed_orientations
from load_planner.io import expand_units
from load_planner.models import CargoItem, ContainerType
from load_planner.packing import AnchorPacker, anchor_score, boxes_overlap, pack_container
from load_planner.planner import sort_units


def _container(L, W, H, max_weight="1000", cost="100", cid="BOX") -> ContainerType:
    return ContainerType(
        id=cid,
        name=cid,
        length_cm=Decimal(str(L)),
        width_cm=Decimal(str(W)),
        height_cm=Decimal(str(H)),
        max_weight_kg=Decimal(max_weight),
        cost=Decimal(cost),
    )


def _cargo(cid, L, W, H, weight, qty=1, rotate=False, priority="Low") -> CargoItem:
    return CargoItem(
        id=cid,
        name=cid,
        length_cm=Decimal(str(L)),
        width_cm=Decimal(str(W)),
        height_cm=Decimal(str(H)),
        weight_kg=Decimal(str(weight)),
        quantity=qty,
        can_rotate=rotate,
        priority=priority,
    )


def _units(*items):
    return sort_units(expand_units(items))


def test_single_unit_goes_to_origin():
    packed = pack_container(_container(200, 200, 200), _units(_cargo("A", 100, 100, 100, 10)))

    assert len(packed.items) == 1
    item = packed.items[0]
    assert (item.x, item.y, item.z) == (0, 0, 0)
    assert packed.utilization_volume == Decimal("1000000")
    assert packed.total_volume == Decimal("8000000")
    assert packed.total_weight == Decimal("10")


def test_fills_along_length_before_width():
    packed = pack_container(_container(200, 100, 100), _units(_cargo("A", 100, 100, 100, 10, qty=2)))

    assert [(i.x, i.y, i.z) for i in packed.items] == [(0, 0, 0), (100, 0, 0)]


def test_stacks_before_moving_along_length():
    # anchors sort by x first, so (0, H, 0) beats (L, 0, 0)
    packed = pack_container(_container(200, 100, 200), _units(_cargo("A", 100, 100, 100, 10, qty=2)))

    assert [(i.x, i.y, i.z) for i in packed.items] == [(0, 0, 0), (0, 100, 0)]


def test_insufficient_support_rejects_overhanging_unit():
    units = _units(
        _cargo("BASE", 100, 100, 50, 50),
        _cargo("PLANK", 200, 100, 50, 5),
    )
    packed = pack_container(_container(200, 100, 200), units)

    assert [i.cargo_id for i in packed.items] == ["BASE"]


def test_partial_support_above_threshold_is_accepted():
    units = _units(
        _cargo("BASE", 150, 100, 50, 50),
        _cargo("PLANK", 200, 100, 50, 5),
    )
    packed = pack_container(_container(200, 100, 200), units)

    plank = [i for i in packed.items if i.cargo_id == "PLANK"][0]
    assert (plank.x, plank.y, plank.z) == (0, 50, 0)


def test_support_threshold_follows_settings():
    units = _units(
        _cargo("BASE", 100, 100, 50, 50),
        _cargo("PLANK", 200, 100, 50, 5),
    )
    settings = PlannerSettings(support_min_ratio=Decimal("0.5"))
    packed = pack_container(_container(200, 100, 200), units, settings=settings)

    assert [i.cargo_id for i in packed.items] == ["BASE", "PLANK"]


def test_floor_rotation_used_only_when_allowed():
    container = _container(100, 200, 100)

    rotated = pack_container(container, _units(_cargo("A", 200, 100, 50, 10, rotate=True)))
    assert len(rotated.items) == 1
    item = rotated.items[0]
    assert item.rotated is True
    assert (item.length_cm, item.width_cm, item.height_cm) == (100, 200, 50)

    fixed = pack_container(container, _units(_cargo("A", 200, 100, 50, 10, rotate=False)))
    assert fixed.items == []


def test_native_orientation_preferred_when_both_fit():
    packed = pack_container(_container(300, 300, 100), _units(_cargo("A", 200, 100, 50, 10, rotate=True)))

    assert packed.items[0].rotated is False
    assert packed.items[0].length_cm == 200


def test_weight_budget_skips_unit_but_keeps_packing():
    units = _units(
        _cargo("HEAVY", 50, 50, 50, 60),
        _cargo("MID", 50, 50, 50, 50),
        _cargo("LIGHT", 50, 50, 50, 30),
    )
    packed = pack_container(_container(200, 200, 200, max_weight="100"), units)

    assert [i.cargo_id for i in packed.items] == ["HEAVY", "LIGHT"]
    assert packed.total_weight == Decimal("90")


def test_unfit_unit_does_not_stop_later_units():
    units = _units(
        _cargo("BIG", 300, 100, 100, 50),
        _cargo("SMALL", 100, 100, 100, 10),
    )
    packed = pack_container(_container(200, 200, 200), units)

    assert [i.cargo_id for i in packed.items] == ["SMALL"]


def test_anchor_pruning_drops_duplicates_and_out_of_bounds():
    packer = AnchorPacker(_container(100, 100, 100))
    packer.anchors = [
        (Decimal("10"), Decimal("0"), Decimal("0")),
        (Decimal("10.0005"), Decimal("0"), Decimal("0")),
        (Decimal("100"), Decimal("0"), Decimal("0")),
        (Decimal("0"), Decimal("0"), Decimal("150")),
    ]
    packer._prune_anchors()

    assert packer.anchors == [(Decimal("10"), Decimal("0"), Decimal("0"))]


def test_anchor_inside_placed_box_is_pruned():
    packer = AnchorPacker(_container(200, 200, 200))
    packer.place_unit(_units(_cargo("A", 100, 100, 100, 10))[0])
    packer.anchors.append((Decimal("50"), Decimal("50"), Decimal("50")))
    packer._prune_anchors()

    assert (Decimal("50"), Decimal("50"), Decimal("50")) not in packer.anchors
    assert (Decimal("0"), Decimal("0"), Decimal("0")) not in packer.anchors
    assert (Decimal("100"), Decimal("0"), Decimal("0")) in packer.anchors


def test_anchor_score_orders_x_then_y_then_z():
    assert anchor_score((Decimal("1"), Decimal("0"), Decimal("0"))) > anchor_score(
        (Decimal("0"), Decimal("99"), Decimal("99"))
    )
    assert anchor_score((Decimal("0"), Decimal("1"), Decimal("0"))) > anchor_score(
        (Decimal("0"), Decimal("0"), Decimal("99"))
    )


def test_boxes_touching_faces_do_not_overlap():
    packed = pack_container(_container(200, 100, 100), _units(_cargo("A", 100, 100, 100, 10, qty=2)))
    a, b = packed.items

    assert not boxes_overlap(a, b)
    assert boxes_overlap(a, a)


def test_unit_slightly_longer_than_container_is_not_placed():
    packed = pack_container(_container(200, 200, 200), _units(_cargo("A", "200.001", 100, 100, 10)))

    assert packed.items == []


def test_unit_exactly_filling_container_is_placed():
    packed = pack_container(_container(200, 200, 200), _units(_cargo("A", 200, 200, 200, 10)))

    assert len(packed.items) == 1
    assert packed.items[0].x2 == Decimal("200")


def test_candidate_overlapping_by_less_than_tolerance_is_rejected():
    packer = AnchorPacker(_container(300, 100, 100))
    first, second = _units(_cargo("A", 100, 100, 100, 10, qty=2))
    packer.place_unit(first)
    orientation = allowed_orientations(second)[0]
    candidate = packer._candidate(second, (Decimal("99.9995"), Decimal("0"), Decimal("0")), orientation)

    assert not packer._accepts(candidate)


def test_first_accepting_orientation_wins_at_first_anchor():
    # native does not fit at the origin, the quarter turn does
    packer = AnchorPacker(_container(150, 250, 100))
    unit = _units(_cargo("A", 200, 100, 50, 10, rotate=True))[0]

    assert packer.place_unit(unit) is True
    placed = packer.placed[0]
    assert (placed.x, placed.y, placed.z) == (0, 0, 0)
    assert placed.rotated is True
