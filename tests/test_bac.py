"""Tests for drink units and the BAC simulator. Run from project root: pytest tests/ -v"""
import itertools
from datetime import timezone

import pytest

from stddrinks.calculations import (
    MAX_STEPS,
    STEP_MS,
    UNKNOWN_LABEL,
    EliminationProfile,
    Sex,
    bac_from_units,
    simulate_bac,
    time_label,
)
from stddrinks.drinks import DrinkEvent, generate_drink_name, net_alcohol_units, new_drink

# 2024-01-01T20:00:00Z
T0 = 1_704_139_200_000.0
MINUTE = 60_000


def pint(ts=T0):
    return new_drink(570, 5.0, ts)


def test_net_alcohol_units():
    assert net_alcohol_units(570, 5.0) == pytest.approx(2.24865)
    assert net_alcohol_units(0, 40) == 0
    assert net_alcohol_units(30, 0) == 0
    assert pint().net_units == pytest.approx(2.24865)


def test_new_drink_validates():
    with pytest.raises(ValueError):
        new_drink(0, 5.0, T0)
    with pytest.raises(ValueError):
        new_drink(100, 101, T0)
    for bad in ("nan", float("inf"), float("-inf")):
        with pytest.raises(ValueError):
            new_drink(bad, 5.0, T0)
        with pytest.raises(ValueError):
            new_drink(100, bad, T0)
        with pytest.raises(ValueError):
            new_drink(100, 5.0, bad)
    with pytest.raises(ValueError):
        new_drink(100, 5.0, 1e20)
    with pytest.raises(ValueError):
        pint().with_timestamp(float("inf"))


def test_generate_drink_name():
    assert generate_drink_name(425, 4.8) == "Schooner of Full Strength"
    assert generate_drink_name(750, 13.5) == "Longneck of Red Wine"
    assert generate_drink_name(570, 5.5) == "Pint (5.5%)"
    assert generate_drink_name(330, 40.0) == "330ml Spirits"
    assert generate_drink_name(330, 4.2) == "Custom Drink (330ml @ 4.2%)"
    assert new_drink(425, 4.8, T0).name == "Schooner of Full Strength"
    assert new_drink(425, 4.8, T0, name="VB").name == "VB"


def test_with_timestamp_returns_new_event():
    d = pint()
    moved = d.with_timestamp(T0 + MINUTE)
    assert moved.id == d.id
    assert moved.timestamp_ms == T0 + MINUTE
    assert d.timestamp_ms == T0


def test_bac_from_units():
    assert bac_from_units(5.44, 80, Sex.MALE) == pytest.approx(0.1)
    assert bac_from_units(4.4, 80, Sex.FEMALE) == pytest.approx(0.1)


def test_empty_drinks_empty_curve(profile):
    assert simulate_bac([], profile) == []


def test_single_pint_under_threshold(profile, utc):
    samples = simulate_bac([pint()], profile, tz=utc)
    assert samples[0].time_ms == T0
    assert samples[0].bac == pytest.approx(2.24865 / (80 * 0.68))
    assert samples[0].label == "20:00"
    assert max(s.bac for s in samples) < 0.05


def test_time_strictly_ascending_and_non_negative(profile, utc):
    drinks = [pint(), pint(T0 + 40 * MINUTE), new_drink(30, 40, T0 + 95 * MINUTE)]
    samples = simulate_bac(drinks, profile, tz=utc)
    for a, b in zip(samples, samples[1:]):
        assert b.time_ms - a.time_ms == STEP_MS
    assert all(s.bac >= 0 for s in samples)
    assert len(samples) <= MAX_STEPS + 1


def test_order_independence(profile, utc):
    drinks = [pint(), pint(T0 + 20 * MINUTE), new_drink(150, 13.5, T0 + 65 * MINUTE)]
    expected = simulate_bac(drinks, profile, tz=utc)
    for perm in itertools.permutations(drinks):
        assert simulate_bac(list(perm), profile, tz=utc) == expected


def test_order_independence_same_instant(profile, utc):
    drinks = [
        new_drink(30, 2.7, T0),
        new_drink(30, 3.5, T0),
        new_drink(30, 40.0, T0),
        new_drink(150, 13.5, T0 + 7 * MINUTE),
        new_drink(30, 2.7, T0 + 7 * MINUTE),
    ]
    outputs = {tuple(simulate_bac(list(perm), profile, tz=utc)) for perm in itertools.permutations(drinks)}
    assert len(outputs) == 1


def test_input_not_mutated(profile):
    drinks = [pint(T0 + 30 * MINUTE), pint()]
    before = list(drinks)
    simulate_bac(drinks, profile)
    assert drinks == before


def test_simultaneous_drinks_jump_at_start(profile):
    a, b = pint(), pint()
    samples = simulate_bac([a, b], profile)
    assert samples[0].bac == pytest.approx(bac_from_units(2 * a.net_units, 80, Sex.MALE))


def test_near_simultaneous_drink_counted_once(profile):
    a, b = pint(), pint(T0 + 500)
    samples = simulate_bac([a, b], profile)
    units = 2 * a.net_units
    assert samples[0].bac == pytest.approx(bac_from_units(units, 80, Sex.MALE))
    # One step of first-hour burn: 2 units/hour over 12 steps.
    assert samples[1].bac == pytest.approx(bac_from_units(units - 2.0 / 12, 80, Sex.MALE))


def test_later_drink_lands_in_half_open_interval(profile):
    burn = 2.0 / 12
    first, boundary, later = pint(), pint(T0 + 5 * MINUTE), pint(T0 + 7 * MINUTE)
    samples = simulate_bac([first, boundary, later], profile)
    x = first.net_units
    assert samples[1].bac == pytest.approx(bac_from_units(2 * x - burn, 80, Sex.MALE))
    assert samples[2].bac == pytest.approx(bac_from_units(3 * x - 2 * burn, 80, Sex.MALE))


def test_decay_floor_is_zero_not_negative():
    profile = EliminationProfile(first_hour_burn=60.0, subsequent_hour_burn=60.0, weight_kg=80.0)
    samples = simulate_bac([new_drink(30, 40.0, T0)], profile)
    assert samples[0].bac > 0
    assert samples[1].bac == 0.0
    # Flatlined one sample past the last drink.
    assert len(samples) == 3
    assert samples[2].bac == 0.0


def test_flatline_stops_early(profile):
    samples = simulate_bac([pint()], profile)
    assert len(samples) < MAX_STEPS + 1
    assert samples[-1].bac <= 0.001
    assert samples[-2].time_ms > T0


def test_first_hour_then_subsequent_burn(profile):
    big = new_drink(2000, 40.0, T0)
    samples = simulate_bac([big], profile)
    units = big.net_units
    # 12 steps at first-hour burn, then per-hour rate.
    assert samples[12].bac == pytest.approx(bac_from_units(units - 2.0, 80, Sex.MALE))
    assert samples[24].bac == pytest.approx(bac_from_units(units - 3.0, 80, Sex.MALE))


def test_weight_clamp(utc):
    drinks = [pint()]
    zero = EliminationProfile(2.0, 1.0, weight_kg=0.0)
    one = EliminationProfile(2.0, 1.0, weight_kg=1.0)
    negative = EliminationProfile(2.0, 1.0, weight_kg=-5.0)
    assert simulate_bac(drinks, zero, tz=utc) == simulate_bac(drinks, one, tz=utc)
    assert simulate_bac(drinks, negative, tz=utc) == simulate_bac(drinks, one, tz=utc)
    assert bac_from_units(1.0, 0, Sex.MALE) == pytest.approx(1 / 0.68)


def test_horizon_is_bounded():
    profile = EliminationProfile(first_hour_burn=0.0, subsequent_hour_burn=0.0, weight_kg=80.0)
    samples = simulate_bac([new_drink(5000, 60.0, T0)], profile)
    assert len(samples) == MAX_STEPS + 1
    assert samples[-1].time_ms == T0 + MAX_STEPS * STEP_MS


def test_sex_parse():
    assert Sex.parse("female") is Sex.FEMALE
    assert Sex.parse(False) is Sex.FEMALE
    assert Sex.parse("MALE") is Sex.MALE
    assert Sex.parse("unknown", default=Sex.FEMALE) is Sex.FEMALE
    assert Sex.parse(None) is Sex.MALE


def test_drink_dict_roundtrip_keeps_id():
    d = new_drink(425, 4.8, T0)
    restored = DrinkEvent.from_dict(d.to_dict())
    assert restored == d


def test_time_label_out_of_range():
    assert time_label(float("inf")) == UNKNOWN_LABEL
    assert time_label(1e20) == UNKNOWN_LABEL
    assert time_label(T0, timezone.utc) == "20:00"


def test_unvalidated_events_do_not_crash(profile):
    far = DrinkEvent(volume_ml=570, abv=5.0, timestamp_ms=1e20)
    broken = DrinkEvent(volume_ml=570, abv=5.0, timestamp_ms=float("nan"))
    samples = simulate_bac([far, broken], profile)
    assert samples[0].time_ms == 1e20
    assert all(s.label == UNKNOWN_LABEL for s in samples)
    assert simulate_bac([broken], profile) == []
