# scripts/smoke.py
"""
Smoke Test Script for the Saga Scribe timeline service.

Builds the app in-process, seeds it, and walks the client-side flow once:
three views, a drag reorder with refetch, and a dialog create.

Usage
-----
1. Use the bundled sample series:
    $ uv run python scripts/smoke.py

2. Use another seed document:
    $ uv run python scripts/smoke.py --seed path/to/series.json --series 4
"""

import argparse
import logging
import sys
import traceback
from pathlib import Path

from dotenv import load_dotenv
from fastapi.testclient import TestClient

from sagascribe.api.app import create_app
from sagascribe.client.http import TimelineApiClient
from sagascribe.core.timeline.service import TimelineService

# --------------------------------------------------------------------------- #
# Environment Setup
# --------------------------------------------------------------------------- #
env_path = Path(".env")
if env_path.exists():
    load_dotenv(env_path)
    print("✅ Loaded .env file")

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)

DEFAULT_SEED = Path(__file__).resolve().parent.parent / "samples" / "ember_crown.json"


def main() -> None:
    """Execute the smoke test workflow."""
    parser = argparse.ArgumentParser(description="Run Saga Scribe Smoke Test")
    parser.add_argument("--seed", "-s", type=Path, default=DEFAULT_SEED, help="Seed JSON file")
    parser.add_argument("--series", type=int, default=1, help="Series id to exercise")
    args = parser.parse_args()

    if not args.seed.exists():
        print(f"❌ Error: Seed file not found at {args.seed}")
        sys.exit(1)

    print(f"🚀 Starting Saga Scribe smoke test with {args.seed.name}...")

    try:
        with TestClient(create_app(seed_file=args.seed)) as http:
            service = TimelineService(TimelineApiClient(http))
            sid = args.series

            chrono = service.view(sid, "chronological")
            print("\n--- CHRONOLOGICAL ---")
            for e in chrono.flatten():
                print(f"  {e.date or '-':>20}  #{e.id} {e.title}")

            narrative = service.view(sid, "narrative")
            print("\n--- NARRATIVE ---")
            for group in narrative.groups or []:
                print(f"  [{group.title}]")
                for e in group.events:
                    print(f"    {e.position:>3}. #{e.id} {e.title}")

            target = next((g for g in narrative.groups or [] if len(g.events) > 1), None)
            if target is not None:
                first, last = target.events[0], target.events[-1]
                print(f"\n--- REORDER: drop #{last.id} onto #{first.id} in {target.title} ---")
                result = service.move(sid, target.book_id, last.id, first.id)
                if result is None or result.is_err():
                    print("❌ Reorder failed")
                    sys.exit(1)
                after = service.group_events(sid, target.book_id)
                print("  " + ", ".join(f"#{e.id}@{e.position}" for e in after))

            dialog = service.dialog()
            dialog.open_create(series_id=sid)
            dialog.set_field("title", "Smoke test event")
            created = dialog.submit()
            if created.is_err():
                print(f"❌ {created.unwrap_err().describe()}")
                sys.exit(1)
            print(f"\n✅ Created event #{created.unwrap().id}; notices:")
            for notice in service.notifier.notices:
                print(f"  - {notice.title}")

    except Exception:
        print("\n❌ CRITICAL FAILURE in Smoke Test:")
        traceback.print_exc()
        sys.exit(1)

    print("\n✅ Smoke test finished.")


if __name__ == "__main__":
    main()
