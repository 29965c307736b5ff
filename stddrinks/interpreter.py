"""Natural-language drink interpretation.

An interpreter turns free text ("two schooners of VB and a shot") into drink
candidates. The simulator never depends on how that happens; callers convert
candidates to DrinkEvents and surface failures as advisory messages.
"""

from __future__ import annotations

import json
import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Iterable

import requests

from stddrinks.drinks import MAX_ABV, DrinkEvent, net_alcohol_units, new_drink

logger = logging.getLogger(__name__)

NO_DRINKS_MESSAGE = "Could not identify any drinks."
SERVICE_FAILURE_MESSAGE = "Failed to process request."

GEMINI_ENDPOINT = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"
DEFAULT_GEMINI_MODEL = "gemini-2.5-flash"

SYSTEM_INSTRUCTION = """\
You are an expert bartender and Australian alcohol regulations specialist.
Your task is to analyze user input describing drinks and extract the estimated volume (in milliliters) and Alcohol By Volume (ABV percentage).

Guidelines:
1. Identify common drink names and map them to typical Australian serving sizes if not specified (e.g., "Schooner" = 425ml, "Pint" = 570ml, "Pot" = 285ml, "Glass of wine" = 150ml).
2. Estimate ABV based on the drink type if not specified (e.g., "Beer" ~ 4.5-5%, "Wine" ~ 12-14%, "Vodka" ~ 40%).
3. Be precise with brand knowledge (e.g., "Guinness" is typically 4.2%, "VB" is 4.9%).
4. Return a list of identified drinks.
"""

RESPONSE_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "drinks": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "name": {"type": "STRING", "description": "A concise name of the drink"},
                    "volumeMl": {"type": "NUMBER", "description": "Volume in milliliters"},
                    "abv": {"type": "NUMBER", "description": "Alcohol by Volume percentage (e.g., 5.0 for 5%)"},
                },
                "required": ["name", "volumeMl", "abv"],
            },
        }
    },
}


class ServiceError(RuntimeError):
    """Raised when the interpretation service fails or returns garbage."""


@dataclass(frozen=True)
class DrinkCandidate:
    name: str
    volume_ml: float
    abv: float

    @property
    def net_units(self) -> float:
        return net_alcohol_units(self.volume_ml, self.abv)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "volume_ml": self.volume_ml,
            "abv": self.abv,
            "standard_drinks": round(self.net_units, 3),
        }


class DrinkInterpreter(ABC):
    @abstractmethod
    def interpret(self, text: str) -> list[DrinkCandidate]:
        """Return recognized drinks; an empty list means nothing was recognized."""


def parse_candidates(payload: Any) -> list[DrinkCandidate]:
    """Validate a {"drinks": [{name, volumeMl, abv}, ...]} payload (dict or JSON text)."""
    if isinstance(payload, (str, bytes)):
        try:
            payload = json.loads(payload or '{"drinks": []}')
        except ValueError as exc:
            raise ServiceError("Interpreter returned invalid JSON") from exc
    if not isinstance(payload, dict):
        raise ServiceError("Interpreter payload must be an object")
    drinks = payload.get("drinks", [])
    if not isinstance(drinks, list):
        raise ServiceError("Interpreter payload 'drinks' must be a list")

    candidates: list[DrinkCandidate] = []
    for item in drinks:
        if not isinstance(item, dict):
            raise ServiceError("Interpreter drink entries must be objects")
        try:
            volume = float(item["volumeMl"])
            abv = float(item["abv"])
        except (KeyError, TypeError, ValueError) as exc:
            raise ServiceError("Interpreter drink entry is missing volumeMl/abv") from exc
        if not (math.isfinite(volume) and math.isfinite(abv)) or volume <= 0 or abv < 0 or abv > MAX_ABV:
            logger.warning("Dropping implausible drink candidate: %r", item)
            continue
        name = str(item.get("name") or "").strip() or "Drink"
        candidates.append(DrinkCandidate(name=name, volume_ml=volume, abv=abv))
    return candidates


class StaticInterpreter(DrinkInterpreter):
    """Offline keyword matcher: each known keyword found in the text yields its drink."""

    def __init__(self, known: dict[str, tuple[float, float]]):
        self._known = {k.lower(): v for k, v in known.items()}

    def interpret(self, text: str) -> list[DrinkCandidate]:
        lowered = (text or "").lower()
        found = []
        for keyword, (volume_ml, abv) in self._known.items():
            for _ in range(lowered.count(keyword)):
                found.append(DrinkCandidate(name=keyword.title(), volume_ml=volume_ml, abv=abv))
        return found


class GeminiInterpreter(DrinkInterpreter):
    """Interpret drink descriptions with the Gemini generateContent REST API."""

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_GEMINI_MODEL,
        session: requests.Session | None = None,
        timeout: float = 15.0,
    ):
        self.api_key = api_key
        self.model = model
        self.session = session or requests.Session()
        self.timeout = timeout

    def _request_body(self, text: str) -> dict[str, Any]:
        return {
            "systemInstruction": {"parts": [{"text": SYSTEM_INSTRUCTION}]},
            "contents": [{"role": "user", "parts": [{"text": text}]}],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": RESPONSE_SCHEMA,
            },
        }

    def interpret(self, text: str) -> list[DrinkCandidate]:
        if not self.api_key:
            raise ServiceError("GEMINI_API_KEY is not configured")
        url = GEMINI_ENDPOINT.format(model=self.model)
        try:
            res = self.session.post(
                url,
                params={"key": self.api_key},
                json=self._request_body(text),
                timeout=self.timeout,
            )
            res.raise_for_status()
            body = res.json()
        except (requests.RequestException, ValueError) as exc:
            logger.exception("Gemini request failed")
            raise ServiceError("Failed to interpret drink description.") from exc

        try:
            raw_text = body["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError) as exc:
            logger.error("Unexpected Gemini response shape: %s", str(body)[:200])
            raise ServiceError("Failed to interpret drink description.") from exc
        return parse_candidates(raw_text)


def candidates_to_events(candidates: Iterable[DrinkCandidate], timestamp_ms: float) -> list[DrinkEvent]:
    """All candidates become drinks logged at timestamp_ms."""
    return [new_drink(c.volume_ml, c.abv, timestamp_ms, name=c.name) for c in candidates]
