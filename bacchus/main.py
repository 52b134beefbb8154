"""
BAC tracker CLI demo. Run from project root: python -m bacchus.main
Creates a sample session, prints current BAC, projections and curve, and optionally saves a graph.
"""

import argparse
import logging
import sys
from datetime import timedelta

from bacchus.errors import InvalidInput
from bacchus.graph import save_bac_graph
from bacchus.profile import Profile
from bacchus.session import Session
from bacchus.validation import utcnow


def main():
    parser = argparse.ArgumentParser(description="BAC tracker: log drinks and view BAC over time")
    parser.add_argument("--weight", type=float, default=75.0, help="Body weight (kg)")
    parser.add_argument("--female", action="store_true", help="Female (default male)")
    parser.add_argument(
        "--frequency",
        default="occasionally",
        choices=["rarely", "occasionally", "regularly", "frequently"],
        help="How often you drink; sets the elimination rate",
    )
    parser.add_argument("--meal", action="store_true", help="Add a full meal before the first drink")
    parser.add_argument("--interval", type=float, default=15.0, help="Curve sampling interval (minutes)")
    parser.add_argument("--graph", type=str, metavar="FILE", help="Save BAC graph to FILE (e.g. bac_graph.png)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    try:
        profile = Profile(
            weight_kg=args.weight,
            gender="female" if args.female else "male",
            drinking_frequency=args.frequency,
        )
    except InvalidInput as exc:
        print(f"Invalid profile: {exc}", file=sys.stderr)
        return 2

    # Demo: 2 beers two hours ago and one glass of wine an hour ago.
    now = utcnow()
    session = Session(profile=profile, start_time=now - timedelta(hours=2.5))
    if args.meal:
        session.add_food_preset("full_meal", consumed_at=now - timedelta(hours=2.5))
    session.add_drink_preset("beer", consumed_at=now - timedelta(hours=2))
    session.add_drink_preset("beer", consumed_at=now - timedelta(hours=2))
    session.add_drink_preset("wine", consumed_at=now - timedelta(hours=1))
    print("Demo session: 2 beers 2h ago, 1 wine 1h ago" + (", full meal 2.5h ago" if args.meal else ""))

    summary = session.summary(now)
    print(f"Weight: {profile.weight_kg} kg, beta {profile.elimination_rate} g/L/h")
    print(f"BAC now: {summary['current_bac']:.2f} g/L ({summary['danger_level']})")
    print(f"Max BAC: {summary['max_bac']:.2f} g/L")
    print(f"Legal limit in: {summary['time_to_legal']}, sober in: {summary['time_to_zero']}")

    try:
        samples = session.series(interval_minutes=args.interval)
    except InvalidInput as exc:
        print(f"Invalid interval: {exc}", file=sys.stderr)
        return 2
    print(f"Curve points: {len(samples)} every {args.interval:g} min")

    if args.graph:
        try:
            path = save_bac_graph(samples, output_path=args.graph)
            print(f"Graph saved: {path}")
        except ImportError:
            print("matplotlib not installed. pip install matplotlib", file=sys.stderr)
            return 1

    return 0


if __name__ == "__main__":
    sys.exit(main() or 0)
