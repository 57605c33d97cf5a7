"""
Print the sample dashboard a fresh session starts with.
Usage:
  python seed.py                 # full snapshot as JSON
  python seed.py --stats         # only the counters
  python seed.py --ticks 20      # also run 20 simulated notification ticks
"""
import argparse
import json
import random
from dataclasses import asdict

from app import create_app
from blueprints.core.services import snapshot_json
from blueprints.notifications.simulator import ManualScheduler


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--stats", action="store_true", help="print only assignment counters")
    parser.add_argument("--ticks", type=int, default=0, help="simulated notification ticks to run")
    parser.add_argument("--seed", type=int, default=None, help="random seed for the ticks")
    args = parser.parse_args()

    scheduler = ManualScheduler()
    app = create_app("test", scheduler=scheduler, rng=random.Random(args.seed))
    session = app.extensions["dashboard"]
    if args.ticks:
        session.start_arrivals()
        scheduler.advance(session.arrivals.interval * args.ticks)
        session.stop_arrivals()

    snap = session.snapshot()
    if args.stats:
        print(json.dumps(asdict(snap.stats), indent=2))
        return
    print(json.dumps(snapshot_json(snap), indent=2, ensure_ascii=False))


if __name__ == "__main__":
    main()
