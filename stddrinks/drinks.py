"""Drink events and standard-drink helpers.

Australian standard drink = 10 g ethanol.
Net alcohol units = volume (L) x ABV (%) x 0.789.
"""

import math
import uuid
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Tuple

# Ethanol density (g/mL); folded into the volume x ABV -> units conversion.
ETHANOL_DENSITY = 0.789

# Grams of ethanol in one Australian standard drink.
STANDARD_DRINK_GRAMS = 10.0

MAX_ABV = 100.0

# 9999-12-31T23:59:59Z; anything later cannot be rendered as a clock time.
MAX_TIMESTAMP_MS = 253_402_300_799_000.0

# Common Australian serving sizes (label, mL).
COMMON_SIZES: List[Tuple[str, float]] = [
    ("Nip/Shot", 30),
    ("Small Wine", 100),
    ("Std Wine", 150),
    ("Pot/Middy", 285),
    ("Stubby/Can", 375),
    ("Schooner", 425),
    ("Pint", 570),
    ("Longneck", 750),
    ("Bottle (Wine)", 750),
    ("Jug", 1140),
]

# Common strengths (label, % ABV).
COMMON_ABV: List[Tuple[str, float]] = [
    ("Light Beer", 2.7),
    ("Mid Strength", 3.5),
    ("Full Strength", 4.8),
    ("Cider", 5.0),
    ("IPA/Craft", 6.5),
    ("White Wine", 11.5),
    ("Champagne", 12.0),
    ("Red Wine", 13.5),
    ("Fortified", 18.0),
    ("Spirits", 40.0),
]


def net_alcohol_units(volume_ml: float, abv: float) -> float:
    """Standard drinks in a serving of volume_ml at abv percent (5.0 = 5%)."""
    return max(0.0, (volume_ml / 1000.0) * abv * ETHANOL_DENSITY)


def _new_id() -> str:
    return uuid.uuid4().hex


def validate_serving(volume_ml: Any, abv: Any) -> Tuple[float, float]:
    volume_ml = float(volume_ml)
    abv = float(abv)
    if not math.isfinite(volume_ml) or volume_ml <= 0:
        raise ValueError("volume_ml must be a finite number > 0")
    if not math.isfinite(abv) or abv < 0 or abv > MAX_ABV:
        raise ValueError("abv must be between 0 and 100")
    return volume_ml, abv


def validate_timestamp_ms(timestamp_ms: Any) -> float:
    timestamp_ms = float(timestamp_ms)
    if not math.isfinite(timestamp_ms) or timestamp_ms < 0 or timestamp_ms > MAX_TIMESTAMP_MS:
        raise ValueError("timestamp_ms must be epoch milliseconds between 1970 and 9999")
    return timestamp_ms


@dataclass(frozen=True)
class DrinkEvent:
    """A logged drink. Timestamp corrections produce a new event."""

    volume_ml: float
    abv: float  # percent, e.g. 5.0 for 5%
    timestamp_ms: float  # epoch milliseconds
    name: str = "Drink"
    id: str = field(default_factory=_new_id)

    @property
    def net_units(self) -> float:
        return net_alcohol_units(self.volume_ml, self.abv)

    def with_timestamp(self, timestamp_ms: float) -> "DrinkEvent":
        return replace(self, timestamp_ms=validate_timestamp_ms(timestamp_ms))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "volume_ml": self.volume_ml,
            "abv": self.abv,
            "timestamp_ms": self.timestamp_ms,
            "standard_drinks": round(self.net_units, 3),
        }

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "DrinkEvent":
        """Rebuild a stored drink; raises ValueError for values new_drink would reject."""
        volume_ml, abv = validate_serving(raw["volume_ml"], raw["abv"])
        return cls(
            volume_ml=volume_ml,
            abv=abv,
            timestamp_ms=validate_timestamp_ms(raw["timestamp_ms"]),
            name=str(raw.get("name") or "Drink"),
            id=str(raw.get("id") or _new_id()),
        )


def _size_label(volume_ml: float) -> Optional[str]:
    return next((label for label, v in COMMON_SIZES if v == volume_ml), None)


def _abv_label(abv: float) -> Optional[str]:
    return next((label for label, v in COMMON_ABV if v == abv), None)


def _fmt(value: float) -> str:
    # 425.0 -> "425", 4.8 -> "4.8"
    return f"{value:g}"


def generate_drink_name(volume_ml: float, abv: float) -> str:
    """Name a drink from preset labels, e.g. 'Schooner of Full Strength'."""
    size_label = _size_label(volume_ml)
    abv_label = _abv_label(abv)

    if size_label and abv_label:
        # "Bottle (Wine)" + "Red Wine" -> "Bottle of Red Wine"
        clean_size = size_label.split("(")[0].strip()
        return f"{clean_size} of {abv_label}"
    if size_label:
        return f"{size_label} ({_fmt(abv)}%)"
    if abv_label:
        return f"{_fmt(volume_ml)}ml {abv_label}"
    return f"Custom Drink ({_fmt(volume_ml)}ml @ {_fmt(abv)}%)"


def new_drink(
    volume_ml: float,
    abv: float,
    timestamp_ms: float,
    name: Optional[str] = None,
) -> DrinkEvent:
    """Validate inputs and build a DrinkEvent, naming it from presets if needed."""
    volume_ml, abv = validate_serving(volume_ml, abv)
    timestamp_ms = validate_timestamp_ms(timestamp_ms)
    label = (name or "").strip() or generate_drink_name(volume_ml, abv)
    return DrinkEvent(volume_ml=volume_ml, abv=abv, timestamp_ms=timestamp_ms, name=label)


def list_common_sizes() -> List[Dict[str, Any]]:
    """Serving-size presets for UI dropdowns."""
    return [{"label": label, "volume_ml": v} for label, v in COMMON_SIZES]


def list_common_abv() -> List[Dict[str, Any]]:
    """Strength presets for UI dropdowns."""
    return [{"label": label, "abv": v} for label, v in COMMON_ABV]
