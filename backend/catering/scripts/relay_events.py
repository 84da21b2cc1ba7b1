"""
Order event relay worker.

Drains the order event outbox into the statistics store. Run once, or with
--interval to keep polling.

Run with: python -m catering.scripts.relay_events [--interval SECONDS]
"""

import argparse
import logging
import time

from catering.config import get_settings
from catering.core.database import SessionLocal
from catering.core.documents import get_stats_collection
from catering.services.events import relay_pending_events
from catering.services.stats import MenuStatsAggregator

logger = logging.getLogger(__name__)


def run_once(aggregator: MenuStatsAggregator) -> int:
    db = SessionLocal()
    try:
        return relay_pending_events(db, aggregator)
    finally:
        db.close()


def main():
    parser = argparse.ArgumentParser(description="Relay pending order events to the statistics store")
    parser.add_argument("--interval", type=float, default=None, help="Poll every N seconds instead of running once")
    args = parser.parse_args()

    logging.basicConfig(level=get_settings().log_level)
    aggregator = MenuStatsAggregator(get_stats_collection())

    if args.interval is None:
        print(f"Dispatched {run_once(aggregator)} events")
        return

    while True:
        try:
            run_once(aggregator)
        except Exception:
            logger.exception("Relay run failed")
        time.sleep(args.interval)


if __name__ == "__main__":
    main()
