from __future__ import annotations

import argparse
import json
import logging
import time

from app.config import load_config, setup_logging
from app.services.container import ServiceContainer

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Run the UnifiedScheduler without starting the web server."""
    parser = argparse.ArgumentParser(prog="farm-scheduler")
    parser.add_argument(
        "--once",
        action="store_true",
        help="Run the jobs that are currently due, print their results and exit",
    )
    parser.add_argument(
        "--list-jobs",
        action="store_true",
        help="Print the configured jobs and exit",
    )
    args = parser.parse_args(argv)

    config = load_config()
    setup_logging(debug=config.DEBUG, log_dir=config.log_dir)

    container = ServiceContainer.build(config)

    if args.list_jobs:
        print(json.dumps([job.to_dict() for job in container.scheduler.get_jobs()], indent=2))
        container.shutdown()
        return 0

    if args.once:
        results = container.scheduler.run_pending()
        print(json.dumps([r.to_dict() for r in results], indent=2, default=str))
        container.shutdown()
        return 0 if all(r.success for r in results) else 1

    container.scheduler.start()
    logger.info("Scheduler running (press Ctrl+C to stop)")
    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        logger.info("Stopping scheduler...")
    finally:
        try:
            container.shutdown()
        except (RuntimeError, OSError):
            logger.exception("Failed to shut down scheduler cleanly")
            return 1
    return 0


if __name__ == "__main__":
    import sys

    raise SystemExit(main(sys.argv[1:]))
