"""Standard drinks Flask app.

Run from project root:
    python app.py
"""

import logging
import os
import time
from datetime import timedelta
from typing import Any

from flask import Flask, jsonify, request, session as flask_session

from stddrinks.analysis import closest_sample, summarize
from stddrinks.config import load_config
from stddrinks.drinks import list_common_abv, list_common_sizes, validate_timestamp_ms
from stddrinks.interpreter import (
    NO_DRINKS_MESSAGE,
    SERVICE_FAILURE_MESSAGE,
    DrinkInterpreter,
    GeminiInterpreter,
    ServiceError,
    candidates_to_events,
)
from stddrinks.logging_setup import configure_logging
from stddrinks.session import Session, profile_from_dict

logger = logging.getLogger(__name__)

CONFIG = load_config()

app = Flask(__name__)
app.config["SECRET_KEY"] = CONFIG.secret_key
app.config["SESSION_COOKIE_SAMESITE"] = "Lax"
app.config["SESSION_COOKIE_HTTPONLY"] = True
app.config["SESSION_COOKIE_SECURE"] = CONFIG.session_cookie_secure
app.config["PERMANENT_SESSION_LIFETIME"] = timedelta(days=1)
# Tests swap in an offline interpreter here.
app.config["DRINK_INTERPRETER"] = None

SESSION_KEY = "drink_session"
MAX_TEXT_LENGTH = 500


def _now_ms() -> float:
    return time.time() * 1000


def _parse_ms(value: Any, default: float) -> float:
    """Missing values use default; anything else must be a valid epoch-ms timestamp."""
    if value is None or value == "":
        return default
    try:
        return validate_timestamp_ms(value)
    except TypeError:
        raise ValueError("timestamp_ms must be a number") from None


def get_session() -> Session:
    return Session.from_dict(flask_session.get(SESSION_KEY), CONFIG.default_profile)


def set_session(model: Session) -> None:
    flask_session[SESSION_KEY] = model.to_dict()


def _get_interpreter() -> DrinkInterpreter:
    interpreter = app.config.get("DRINK_INTERPRETER")
    if interpreter is None:
        interpreter = GeminiInterpreter(CONFIG.gemini_api_key, model=CONFIG.gemini_model)
        app.config["DRINK_INTERPRETER"] = interpreter
    return interpreter


def _state_payload(model: Session, now_ms: float) -> dict[str, Any]:
    samples = model.curve()
    summary = summarize(samples)
    now_sample = closest_sample(samples, now_ms)
    return {
        "profile": model.profile.to_dict(),
        "drinks": [d.to_dict() for d in model.drinks],
        "drink_count": len(model.drinks),
        "total_standard_drinks": round(model.total_standard_drinks, 2),
        "curve": [s.to_dict() for s in samples],
        "summary": summary.to_dict() if summary is not None else None,
        "now": now_sample.to_dict() if now_sample is not None else None,
        "bac_now": round(now_sample.bac, 4) if now_sample is not None else 0,
    }


@app.errorhandler(ValueError)
def handle_value_error(exc: ValueError):
    return jsonify({"error": str(exc)}), 400


@app.route("/healthz")
def healthz():
    return jsonify({"ok": True})


@app.route("/api/presets")
def api_presets():
    return jsonify({"sizes": list_common_sizes(), "abv": list_common_abv()})


@app.route("/api/state")
def api_state():
    now_ms = _parse_ms(request.args.get("now_ms"), _now_ms())
    return jsonify(_state_payload(get_session(), now_ms))


@app.route("/api/setup", methods=["POST"])
def api_setup():
    data = request.get_json() or {}
    model = get_session()
    model.profile = profile_from_dict(data, model.profile)
    set_session(model)
    return jsonify(model.profile.to_dict())


@app.route("/api/drink", methods=["POST"])
def api_drink():
    data = request.get_json() or {}
    if "volume_ml" not in data or "abv" not in data:
        return jsonify({"error": "volume_ml and abv are required"}), 400
    try:
        volume_ml = float(data["volume_ml"])
        abv = float(data["abv"])
    except (TypeError, ValueError):
        return jsonify({"error": "volume_ml and abv must be numbers"}), 400
    timestamp_ms = _parse_ms(data.get("timestamp_ms"), _now_ms())

    model = get_session()
    drink = model.add_drink(volume_ml, abv, timestamp_ms, name=data.get("name"))
    set_session(model)
    return jsonify({"ok": True, "drink": drink.to_dict()})


@app.route("/api/drink/remove", methods=["POST"])
def api_drink_remove():
    data = request.get_json() or {}
    model = get_session()
    if not model.remove_drink(str(data.get("id", ""))):
        return jsonify({"error": "Drink not found"}), 404
    set_session(model)
    return jsonify({"ok": True, "drink_count": len(model.drinks)})


@app.route("/api/drink/timestamp", methods=["POST"])
def api_drink_timestamp():
    data = request.get_json() or {}
    try:
        timestamp_ms = validate_timestamp_ms(data.get("timestamp_ms"))
    except (TypeError, ValueError):
        return jsonify({"error": "Valid timestamp_ms is required"}), 400
    model = get_session()
    if not model.set_timestamp(str(data.get("id", "")), timestamp_ms):
        return jsonify({"error": "Drink not found"}), 404
    set_session(model)
    return jsonify({"ok": True})


@app.route("/api/clear", methods=["POST"])
def api_clear():
    model = get_session()
    model.clear()
    set_session(model)
    return jsonify({"ok": True})


@app.route("/api/interpret", methods=["POST"])
def api_interpret():
    data = request.get_json() or {}
    text = str(data.get("text", "")).strip()
    if not text:
        return jsonify({"error": "Describe what you drank"}), 400
    if len(text) > MAX_TEXT_LENGTH:
        return jsonify({"error": f"Description must be {MAX_TEXT_LENGTH} characters or fewer"}), 400

    try:
        candidates = _get_interpreter().interpret(text)
    except ServiceError:
        logger.warning("Drink interpretation failed for %d chars of input", len(text))
        return jsonify({"error": SERVICE_FAILURE_MESSAGE}), 502
    if not candidates:
        return jsonify({"error": NO_DRINKS_MESSAGE}), 422

    timestamp_ms = _parse_ms(data.get("timestamp_ms"), _now_ms())
    model = get_session()
    added = [model.add_event(e) for e in candidates_to_events(candidates, timestamp_ms)]
    set_session(model)
    return jsonify({"ok": True, "drinks": [d.to_dict() for d in added]})


if __name__ == "__main__":
    configure_logging(CONFIG.log_level, json_format=CONFIG.log_json)
    port = int(os.environ.get("PORT", 5000))
    app.run(host="0.0.0.0", port=port, debug=os.environ.get("FLASK_DEBUG", "0") == "1")
