"""
Run the habitat simulation from the command line.

Loads the data pack, steps until the requested number of days or until no
animal species survives, and prints a summary every N steps.
"""

import argparse
import json
import time
from pathlib import Path

from habitat.constants import DEFAULT_FIELD_HEIGHT, DEFAULT_FIELD_WIDTH, STEP_SUMMARY_INTERVAL
from habitat.simulation import HabitatSimulation


REPO_ROOT = Path(__file__).parent.parent


def main():
    parser = argparse.ArgumentParser(description="Grid ecosystem simulation (predators, prey, plants, disease)")
    parser.add_argument("--steps", type=int, default=500, help="maximum number of days to simulate")
    parser.add_argument("--seed", type=int, default=None, help="RNG seed (overrides habitat.yaml)")
    parser.add_argument("--height", type=int, default=DEFAULT_FIELD_HEIGHT)
    parser.add_argument("--width", type=int, default=DEFAULT_FIELD_WIDTH)
    parser.add_argument("--delay", type=float, default=0.0, help="seconds to sleep between steps")
    parser.add_argument("--summary-interval", type=int, default=STEP_SUMMARY_INTERVAL)
    parser.add_argument("--data-root", type=Path, default=REPO_ROOT / "data")
    parser.add_argument("--schema-dir", type=Path, default=REPO_ROOT / "schemas")
    parser.add_argument("--snapshot", type=Path, default=None, help="write final state as JSON")
    args = parser.parse_args()

    sim = HabitatSimulation.from_data_pack(
        args.data_root,
        schema_dir=args.schema_dir,
        height=args.height,
        width=args.width,
        seed=args.seed
    )

    for _ in range(args.steps):
        if not sim.is_viable():
            print(f"[WARN] No animal species left after {sim.step_count} steps")
            break

        sim.step()

        if args.summary_interval > 0 and sim.step_count % args.summary_interval == 0:
            sim.print_step_summary()

        if args.delay > 0:
            time.sleep(args.delay)

    sim.print_step_summary()

    stats = sim.get_step_stats()
    print(f"\nTotal births: {stats['total_births']}")
    for cause, count in stats['total_deaths'].items():
        print(f"  {cause:12s} {count:6d}")

    if args.snapshot:
        with open(args.snapshot, 'w') as f:
            json.dump(sim.get_snapshot(), f, indent=2)
        print(f"[OK] Snapshot written to {args.snapshot}")


if __name__ == "__main__":
    main()
