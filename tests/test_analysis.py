import pytest

from stddrinks.analysis import (
    LEGAL_LIMIT_BAC,
    ThresholdStatus,
    bac_at,
    closest_sample,
    find_peak,
    summarize,
)
from stddrinks.calculations import BacSample, EliminationProfile, simulate_bac
from stddrinks.drinks import new_drink

T0 = 1_704_139_200_000.0
MINUTE = 60_000


def _samples(*bacs):
    return [BacSample(T0 + i * 5 * MINUTE, bac, f"s{i}") for i, bac in enumerate(bacs)]


def test_summary_of_nothing_is_none():
    assert summarize([]) is None


def test_single_pint_under_threshold(profile, utc):
    samples = simulate_bac([new_drink(570, 5.0, T0)], profile, tz=utc)
    summary = summarize(samples)
    assert summary.status == ThresholdStatus.UNDER_THRESHOLD
    assert summary.peak_bac == pytest.approx(0.0413, abs=1e-4)
    assert summary.peak_index == 0
    assert summary.crossing_time_ms is None
    assert summary.crossing_label is None
    assert summary.is_projected is False


def test_four_pints_cross_back_under(profile, utc):
    drinks = [new_drink(570, 5.0, T0) for _ in range(4)]
    samples = simulate_bac(drinks, profile, tz=utc)
    summary = summarize(samples)
    assert summary.status == ThresholdStatus.OVER_THRESHOLD
    assert summary.peak_bac == pytest.approx(0.1653, abs=1e-4)
    assert summary.is_projected is False

    crossing = next(i for i, s in enumerate(samples) if s.time_ms == summary.crossing_time_ms)
    assert samples[crossing].bac <= LEGAL_LIMIT_BAC
    assert all(s.bac > LEGAL_LIMIT_BAC for s in samples[:crossing])
    # 12 first-hour steps remove 2 units, then 52 more steps at 1 unit/hour.
    assert crossing == 64
    assert summary.crossing_label == "01:20"


def test_horizon_exhaustion_is_projected():
    profile = EliminationProfile(first_hour_burn=0.0, subsequent_hour_burn=0.0, weight_kg=80.0)
    samples = simulate_bac([new_drink(5000, 60.0, T0)], profile)
    summary = summarize(samples)
    assert summary.status == ThresholdStatus.OVER_THRESHOLD
    assert summary.is_projected is True
    assert summary.crossing_time_ms == samples[-1].time_ms
    assert summary.crossing_label == samples[-1].label


def test_peak_ties_keep_earliest():
    samples = _samples(0.02, 0.07, 0.07, 0.04)
    assert find_peak(samples) == 1
    summary = summarize(samples)
    assert summary.peak_index == 1
    assert summary.crossing_label == "s3"


def test_crossing_exactly_at_limit():
    summary = summarize(_samples(0.08, 0.06, 0.05, 0.03))
    assert summary.crossing_label == "s2"


def test_peak_exactly_at_limit_is_over():
    summary = summarize(_samples(0.05, 0.04))
    assert summary.status == ThresholdStatus.OVER_THRESHOLD
    assert summary.crossing_label == "s0"


def test_closest_sample():
    samples = _samples(0.01, 0.02, 0.03)
    assert closest_sample(samples, T0 + 6 * MINUTE).label == "s1"
    assert closest_sample(samples, T0 + 2.5 * MINUTE).label == "s0"
    assert closest_sample(samples, T0 - 1) is None
    assert closest_sample(samples, T0 + 11 * MINUTE) is None
    assert closest_sample([], T0) is None


def test_bac_at():
    samples = _samples(0.01, 0.02, 0.03)
    assert bac_at(samples, T0 + 9 * MINUTE) == 0.03
    assert bac_at(samples, T0 + 60 * MINUTE) == 0.0


def test_summary_to_dict():
    data = summarize(_samples(0.08, 0.04)).to_dict()
    assert data["status"] == "over"
    assert data["peak_bac"] == 0.08
    assert data["crossing_label"] == "s1"
