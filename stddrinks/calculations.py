"""BAC simulation using Widmark-style dilution and stepped elimination.

Model:
- BAC = net_units / (weight_kg * r), 1 net unit ~= 10 g ethanol
- r = 0.68 (male), 0.55 (female)
- Elimination, applied every 5 simulated minutes:
    first hour after the earliest drink: first_hour_burn spread over the hour
    afterwards: subsequent_hour_burn units per hour

first_hour_burn is a total for the whole first hour, while
subsequent_hour_burn is a rate. Existing profiles depend on this asymmetry.
"""

import enum
import logging
import math
from dataclasses import dataclass
from datetime import datetime, tzinfo
from typing import Any, Iterable, List, Optional

from stddrinks.drinks import DrinkEvent

logger = logging.getLogger(__name__)

# Distribution ratio (Widmark r)
R_MALE = 0.68
R_FEMALE = 0.55

STEP_MINUTES = 5
STEP_MS = STEP_MINUTES * 60 * 1000
HOUR_MS = 60 * 60 * 1000
# 24 hours of simulated time.
MAX_STEPS = (24 * 60) // STEP_MINUTES

# Drinks this close to the first one count as consumed at the start.
SIMULTANEOUS_EPSILON_MS = 1000
FLATLINE_BAC = 0.001

# Label for times the platform clock cannot represent.
UNKNOWN_LABEL = "--:--"


class Sex(str, enum.Enum):
    MALE = "male"
    FEMALE = "female"

    @classmethod
    def parse(cls, value: Any, default: Optional["Sex"] = None) -> "Sex":
        """Lenient parse of 'male'/'female'/bools; falls back to default (male)."""
        if isinstance(value, Sex):
            return value
        if isinstance(value, bool):
            return cls.MALE if value else cls.FEMALE
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in {"male", "m", "true", "1"}:
                return cls.MALE
            if lowered in {"female", "f", "false", "0"}:
                return cls.FEMALE
        return default or cls.MALE


@dataclass(frozen=True)
class EliminationProfile:
    first_hour_burn: float  # units over the whole first hour
    subsequent_hour_burn: float  # units per hour after that
    weight_kg: float
    sex: Sex = Sex.MALE

    @property
    def effective_weight_kg(self) -> float:
        return self.weight_kg if self.weight_kg > 0 else 1.0

    @property
    def distribution_constant(self) -> float:
        return R_MALE if self.sex == Sex.MALE else R_FEMALE

    def to_dict(self) -> dict:
        return {
            "first_hour_burn": self.first_hour_burn,
            "subsequent_hour_burn": self.subsequent_hour_burn,
            "weight_kg": self.weight_kg,
            "sex": self.sex.value,
        }


@dataclass(frozen=True)
class BacSample:
    time_ms: float
    bac: float  # percent, e.g. 0.05 for 0.05%
    label: str

    def to_dict(self) -> dict:
        return {"time_ms": self.time_ms, "bac": self.bac, "label": self.label}


def bac_from_units(net_units: float, weight_kg: float, sex: Sex = Sex.MALE) -> float:
    """BAC (%) for net_units of alcohol in the body. Weight <= 0 counts as 1 kg."""
    w = weight_kg if weight_kg > 0 else 1.0
    r = R_MALE if sex == Sex.MALE else R_FEMALE
    return net_units / (w * r)


def time_label(time_ms: float, tz: Optional[tzinfo] = None) -> str:
    """Clock label 'HH:MM'; local time unless tz is given."""
    try:
        return datetime.fromtimestamp(time_ms / 1000.0, tz).strftime("%H:%M")
    except (OverflowError, OSError, ValueError):
        return UNKNOWN_LABEL


def simulate_bac(
    drinks: Iterable[DrinkEvent],
    profile: EliminationProfile,
    tz: Optional[tzinfo] = None,
) -> List[BacSample]:
    """Step the BAC curve forward from the earliest drink in 5 minute steps.

    Stops one sample after BAC flatlines past the last drink, or after 24
    simulated hours. Returns [] when there are no drinks. Input order is
    irrelevant; the caller's collection is never modified. Drinks with a
    non-finite timestamp are ignored.
    """
    # Total order so same-instant drinks are summed identically for any input order.
    ordered = sorted(
        (d for d in drinks if math.isfinite(d.timestamp_ms)),
        key=lambda d: (d.timestamp_ms, d.net_units, d.id),
    )
    if not ordered:
        return []

    weight = profile.effective_weight_kg
    r = profile.distribution_constant
    first_step_burn = profile.first_hour_burn / 60.0 * STEP_MINUTES
    later_step_burn = profile.subsequent_hour_burn / 60.0 * STEP_MINUTES

    start = ordered[0].timestamp_ms
    last_drink = ordered[-1].timestamp_ms

    units = 0.0
    i = 0
    while i < len(ordered) and ordered[i].timestamp_ms - start < SIMULTANEOUS_EPSILON_MS:
        units += ordered[i].net_units
        i += 1

    samples = [BacSample(start, units / (weight * r), time_label(start, tz))]

    current = start
    elapsed = 0
    steps = 0
    while steps < MAX_STEPS:
        next_time = current + STEP_MS

        # Remaining drinks all lie after current: (current, next_time]
        while i < len(ordered) and ordered[i].timestamp_ms <= next_time:
            units += ordered[i].net_units
            i += 1

        burn = first_step_burn if elapsed < HOUR_MS else later_step_burn
        if units > 0:
            units = max(0.0, units - burn)

        bac = units / (weight * r)
        samples.append(BacSample(next_time, bac, time_label(next_time, tz)))

        if current > last_drink and bac <= FLATLINE_BAC:
            break

        current = next_time
        elapsed += STEP_MS
        steps += 1

    logger.debug("Simulated %d samples for %d drinks", len(samples), len(ordered))
    return samples
