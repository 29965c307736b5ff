"""
Standard drinks CLI demo. Run from project root: python -m stddrinks.main
Simulates a session, prints peak BAC and when it drops under 0.05, and optionally saves a graph.
"""

import argparse
import logging
import sys
import time

from stddrinks.analysis import ThresholdStatus, summarize
from stddrinks.calculations import EliminationProfile, Sex, simulate_bac
from stddrinks.config import load_config
from stddrinks.drinks import new_drink
from stddrinks.graph import save_bac_graph
from stddrinks.logging_setup import configure_logging

logger = logging.getLogger(__name__)


def parse_drink(spec: str, start_ms: float):
    """VOLUME:ABV[:MINUTES] -> DrinkEvent, MINUTES after start."""
    parts = spec.split(":")
    if len(parts) not in (2, 3):
        raise argparse.ArgumentTypeError(f"Expected VOLUME:ABV[:MINUTES], got {spec!r}")
    try:
        volume, abv = float(parts[0]), float(parts[1])
        minutes = float(parts[2]) if len(parts) == 3 else 0.0
        return new_drink(volume, abv, start_ms + minutes * 60_000)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Invalid drink {spec!r}: {exc}")


def build_parser(defaults: EliminationProfile) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Standard drinks: simulate BAC over time")
    parser.add_argument("--weight", type=float, default=defaults.weight_kg, help="Body weight (kg)")
    parser.add_argument("--female", action="store_true", help="Use the female distribution constant")
    parser.add_argument(
        "--first-hour-burn",
        type=float,
        default=defaults.first_hour_burn,
        help="Standard drinks burned over the whole first hour",
    )
    parser.add_argument(
        "--subsequent-burn",
        type=float,
        default=defaults.subsequent_hour_burn,
        help="Standard drinks burned per hour after the first",
    )
    parser.add_argument(
        "--drink",
        action="append",
        default=[],
        metavar="VOLUME:ABV[:MINUTES]",
        help="Drink in mL and %% ABV, MINUTES after the first (repeatable)",
    )
    parser.add_argument("--demo", action="store_true", help="Run with demo drinks (2 pints now, 1 schooner at 60 min)")
    parser.add_argument("--graph", type=str, metavar="FILE", help="Save BAC graph to FILE (e.g. bac_graph.png)")
    parser.add_argument("--log-level", default=None, help="Logging level")
    parser.add_argument("--json-logs", action="store_true", help="Emit logs in JSON format")
    return parser


def main(argv=None):
    config = load_config()
    parser = build_parser(config.default_profile)
    args = parser.parse_args(argv)
    configure_logging(args.log_level or config.log_level, json_format=args.json_logs or config.log_json)

    start_ms = time.time() * 1000
    try:
        drinks = [parse_drink(s, start_ms) for s in args.drink]
    except argparse.ArgumentTypeError as exc:
        parser.error(str(exc))

    if args.demo or not drinks:
        drinks = [
            new_drink(570, 4.8, start_ms),
            new_drink(570, 4.8, start_ms),
            new_drink(425, 4.8, start_ms + 60 * 60_000),
        ]
        print("Demo session: 2 pints at 0 min, 1 schooner at 60 min")

    profile = EliminationProfile(
        first_hour_burn=args.first_hour_burn,
        subsequent_hour_burn=args.subsequent_burn,
        weight_kg=args.weight,
        sex=Sex.FEMALE if args.female else Sex.MALE,
    )
    samples = simulate_bac(drinks, profile)
    summary = summarize(samples)

    total = sum(d.net_units for d in drinks)
    print(f"Weight: {profile.weight_kg} kg, standard drinks: {total:.2f}")
    print(f"Peak BAC: {summary.peak_bac:.3f}% at {samples[summary.peak_index].label}")
    if summary.status == ThresholdStatus.UNDER_THRESHOLD:
        print("Likely under 0.05 limit")
    elif summary.is_projected:
        print(f"Still over 0.05 at {summary.crossing_label} (end of 24h projection)")
    else:
        print(f"Below 0.05 at {summary.crossing_label}")
    print(f"Curve points: {len(samples)} ({samples[0].label} to {samples[-1].label})")

    if args.graph:
        try:
            path = save_bac_graph(samples, output_path=args.graph, summary=summary)
            print(f"Graph saved: {path}")
        except ImportError:
            logger.error("matplotlib not installed. pip install matplotlib")
            sys.exit(1)

    return 0


if __name__ == "__main__":
    sys.exit(main() or 0)
