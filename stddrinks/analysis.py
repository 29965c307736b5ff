"""Read-side analysis of a simulated BAC curve.

Peak detection, the 0.05 threshold crossing, and the "now" marker lookup all
work on samples already produced by calculations.simulate_bac.
"""

import enum
from dataclasses import dataclass
from typing import List, Optional, Sequence

from stddrinks.calculations import BacSample

LEGAL_LIMIT_BAC = 0.05


class ThresholdStatus(str, enum.Enum):
    UNDER_THRESHOLD = "under"
    OVER_THRESHOLD = "over"


@dataclass(frozen=True)
class SessionSummary:
    peak_bac: float
    peak_index: int
    status: ThresholdStatus
    crossing_time_ms: Optional[float] = None
    crossing_label: Optional[str] = None
    # True when the curve ended while still over the limit.
    is_projected: bool = False

    def to_dict(self) -> dict:
        return {
            "peak_bac": round(self.peak_bac, 4),
            "peak_index": self.peak_index,
            "status": self.status.value,
            "crossing_time_ms": self.crossing_time_ms,
            "crossing_label": self.crossing_label,
            "is_projected": self.is_projected,
        }


def find_peak(samples: Sequence[BacSample]) -> int:
    """Index of the first sample holding the maximum BAC."""
    peak_index = 0
    for i in range(1, len(samples)):
        if samples[i].bac > samples[peak_index].bac:
            peak_index = i
    return peak_index


def summarize(samples: Sequence[BacSample], limit: float = LEGAL_LIMIT_BAC) -> Optional[SessionSummary]:
    """Peak BAC and when the curve drops back to the limit. None for no samples."""
    if not samples:
        return None

    peak_index = find_peak(samples)
    peak = samples[peak_index].bac
    if peak < limit:
        return SessionSummary(peak, peak_index, ThresholdStatus.UNDER_THRESHOLD)

    for sample in samples[peak_index:]:
        if sample.bac <= limit:
            return SessionSummary(
                peak,
                peak_index,
                ThresholdStatus.OVER_THRESHOLD,
                crossing_time_ms=sample.time_ms,
                crossing_label=sample.label,
            )

    last = samples[-1]
    return SessionSummary(
        peak,
        peak_index,
        ThresholdStatus.OVER_THRESHOLD,
        crossing_time_ms=last.time_ms,
        crossing_label=last.label,
        is_projected=True,
    )


def closest_sample(samples: List[BacSample], now_ms: float) -> Optional[BacSample]:
    """Sample nearest to now_ms, or None when now falls outside the curve."""
    if not samples:
        return None
    if now_ms < samples[0].time_ms or now_ms > samples[-1].time_ms:
        return None
    closest = samples[0]
    for sample in samples[1:]:
        if abs(sample.time_ms - now_ms) < abs(closest.time_ms - now_ms):
            closest = sample
    return closest


def bac_at(samples: List[BacSample], now_ms: float) -> float:
    sample = closest_sample(samples, now_ms)
    return sample.bac if sample is not None else 0.0
