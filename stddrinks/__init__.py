"""
Standard drinks tracker: drink log, stepped BAC simulation, and 0.05 limit analysis.
Use from project root: python -m stddrinks.main
"""

from stddrinks.drinks import (
    COMMON_ABV,
    COMMON_SIZES,
    DrinkEvent,
    generate_drink_name,
    net_alcohol_units,
    new_drink,
)
from stddrinks.calculations import (
    BacSample,
    EliminationProfile,
    Sex,
    bac_from_units,
    simulate_bac,
)
from stddrinks.analysis import (
    LEGAL_LIMIT_BAC,
    SessionSummary,
    ThresholdStatus,
    closest_sample,
    summarize,
)
from stddrinks.session import Session
from stddrinks.interpreter import DrinkInterpreter, ServiceError
from stddrinks.graph import curve_data, save_bac_graph

__all__ = [
    "Session",
    "DrinkEvent",
    "EliminationProfile",
    "BacSample",
    "SessionSummary",
    "ThresholdStatus",
    "Sex",
    "simulate_bac",
    "summarize",
    "closest_sample",
    "bac_from_units",
    "net_alcohol_units",
    "new_drink",
    "generate_drink_name",
    "curve_data",
    "save_bac_graph",
    "DrinkInterpreter",
    "ServiceError",
    "COMMON_SIZES",
    "COMMON_ABV",
    "LEGAL_LIMIT_BAC",
]
