import pytest

from aurora_compass.compass_core.model import GeoPoint, Hemisphere, Target
from aurora_compass.compass_core.selector import (
    filter_hemisphere,
    rank_targets,
    score_target,
    select_best,
)


def test_score_target_horizon_bias():
    assert score_target(50.0, 10.0) == 750.0
    assert score_target(50.0, -5.0) == 0.0
    assert score_target(50.0, -30.0) == 0.0
    assert score_target(50.0, -3.0) == 100.0
    assert score_target(50.0, 10.0, horizon_bias_deg=0.0) == 500.0


def test_empty_and_wrong_hemisphere_yield_none(tromso):
    assert select_best(tromso, [], "north") is None
    south_only = [Target("S1", -70.0, 20.0, 80.0)]
    assert select_best(tromso, south_only, Hemisphere.NORTH) is None


def test_hemisphere_filter_boundary():
    t = Target("edge", -0.5, 0.0, 50.0)
    obs = GeoPoint(0.0, 0.0, 0.0)
    assert filter_hemisphere([t], "north") == []
    assert filter_hemisphere([t], "south") == [t]
    assert select_best(obs, [t], "north") is None
    best = select_best(obs, [t], "south")
    assert best is not None and best.target.id == "edge"
    # Latitude zero belongs to the north.
    assert filter_hemisphere([Target("eq", 0.0, 0.0, 1.0)], "N")[0].id == "eq"


def test_tie_goes_to_first_in_input_order(tromso):
    first = Target("first", 71.0, 20.0, 50.0)
    second = Target("second", 71.0, 20.0, 50.0)
    assert select_best(tromso, [first, second], "north").target.id == "first"
    assert select_best(tromso, [second, first], "north").target.id == "second"


def test_all_zero_scores_pick_first(tromso):
    # Far below the horizon: both scores clip to zero.
    a = Target("a", 10.0, -160.0, 90.0)
    b = Target("b", 12.0, -150.0, 90.0)
    best = select_best(tromso, [a, b], "north")
    assert best.score == 0.0
    assert best.target.id == "a"


def test_high_elevation_beats_distant_high_probability():
    obs = GeoPoint(69.0, 19.0, 0.0)
    near = Target("near", 69.5, 19.0, 30.0)
    far = Target("far", 75.0, 19.0, 90.0)
    best = select_best(obs, [far, near], "north")
    assert best.target.id == "near"
    assert best.look.elevation_deg > 45.0


def test_same_location_higher_probability_wins(tromso):
    low = Target("low", 70.5, 19.0, 20.0)
    high = Target("high", 70.5, 19.0, 21.0)
    assert select_best(tromso, [low, high], "north").target.id == "high"


def test_target_altitude_is_applied_uniformly(tromso):
    t = Target("t", 73.0, 19.0, 50.0)
    high = select_best(tromso, [t], "north", target_altitude_m=110_000.0)
    ground = select_best(tromso, [t], "north", target_altitude_m=0.0)
    assert high.look.elevation_deg > ground.look.elevation_deg
    assert ground.look.elevation_deg < 0.0
    assert high.look.surface_distance_m == pytest.approx(ground.look.surface_distance_m)


def test_rank_targets_orders_by_score_and_keeps_ties(tromso):
    a = Target("a", 71.0, 20.0, 50.0)
    b = Target("b", 71.0, 20.0, 50.0)
    c = Target("c", 70.0, 19.0, 90.0)
    s = Target("s", -60.0, 19.0, 99.0)
    ranked = rank_targets(tromso, [a, b, s, c], "north")
    assert [r.target.id for r in ranked] == ["c", "a", "b"]
    assert select_best(tromso, [a, b, s, c], "north").target.id == ranked[0].target.id


def test_unknown_hemisphere_raises(tromso, target_a):
    with pytest.raises(ValueError):
        select_best(tromso, [target_a], "east")
