"""
Drinking session: elimination profile plus the drink log shown in the UI.
The simulator only ever receives an immutable snapshot of the log.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from stddrinks import analysis, calculations
from stddrinks.calculations import BacSample, EliminationProfile, Sex
from stddrinks.drinks import DrinkEvent, new_drink

MIN_WEIGHT_KG = 30.0
MAX_WEIGHT_KG = 250.0
MAX_BURN = 10.0


def _clamp_float(value: Any, default: float, min_value: float, max_value: float) -> float:
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        parsed = default
    if not math.isfinite(parsed):
        parsed = default
    return max(min_value, min(max_value, parsed))


def profile_from_dict(raw: Any, defaults: EliminationProfile) -> EliminationProfile:
    """Build a profile from untrusted input, clamping each field."""
    if not isinstance(raw, dict):
        return defaults
    return EliminationProfile(
        first_hour_burn=_clamp_float(raw.get("first_hour_burn"), defaults.first_hour_burn, 0.0, MAX_BURN),
        subsequent_hour_burn=_clamp_float(
            raw.get("subsequent_hour_burn"), defaults.subsequent_hour_burn, 0.0, MAX_BURN
        ),
        weight_kg=_clamp_float(raw.get("weight_kg"), defaults.weight_kg, MIN_WEIGHT_KG, MAX_WEIGHT_KG),
        sex=Sex.parse(raw.get("sex"), default=defaults.sex),
    )


@dataclass
class Session:
    profile: EliminationProfile
    # Newest first, matching how the log is displayed.
    _drinks: List[DrinkEvent] = field(default_factory=list)

    @property
    def drinks(self) -> List[DrinkEvent]:
        return list(self._drinks)

    def snapshot(self) -> Tuple[DrinkEvent, ...]:
        return tuple(self._drinks)

    def add_event(self, event: DrinkEvent) -> DrinkEvent:
        self._drinks.insert(0, event)
        return event

    def add_drink(
        self,
        volume_ml: float,
        abv: float,
        timestamp_ms: float,
        name: Optional[str] = None,
    ) -> DrinkEvent:
        return self.add_event(new_drink(volume_ml, abv, timestamp_ms, name=name))

    def remove_drink(self, drink_id: str) -> bool:
        before = len(self._drinks)
        self._drinks = [d for d in self._drinks if d.id != drink_id]
        return len(self._drinks) != before

    def set_timestamp(self, drink_id: str, timestamp_ms: float) -> bool:
        for i, d in enumerate(self._drinks):
            if d.id == drink_id:
                self._drinks[i] = d.with_timestamp(timestamp_ms)
                return True
        return False

    def clear(self) -> None:
        self._drinks = []

    @property
    def total_standard_drinks(self) -> float:
        return sum(d.net_units for d in self._drinks)

    def curve(self, tz=None) -> List[BacSample]:
        return calculations.simulate_bac(self.snapshot(), self.profile, tz=tz)

    def summary(self, tz=None) -> Optional[analysis.SessionSummary]:
        return analysis.summarize(self.curve(tz=tz))

    def bac_now(self, now_ms: float, tz=None) -> float:
        return analysis.bac_at(self.curve(tz=tz), now_ms)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "profile": self.profile.to_dict(),
            "drinks": [d.to_dict() for d in self._drinks],
        }

    @classmethod
    def from_dict(cls, raw: Any, defaults: EliminationProfile) -> "Session":
        """Rebuild from cookie data; malformed drinks are skipped."""
        if not isinstance(raw, dict):
            return cls(profile=defaults)
        model = cls(profile=profile_from_dict(raw.get("profile"), defaults))
        drinks_raw = raw.get("drinks", [])
        if isinstance(drinks_raw, list):
            for item in drinks_raw:
                if not isinstance(item, dict):
                    continue
                try:
                    event = DrinkEvent.from_dict(item)
                except (KeyError, TypeError, ValueError):
                    continue
                model._drinks.append(event)
        return model
