"""Command-line trigger for the price schedule batch (run from cron)"""

import argparse
import asyncio
import json
import logging
import sys
from typing import List, Optional

from optioil_gateway.config import settings
from optioil_gateway.infrastructure.clients.batch_trigger import BatchTriggerClient, BatchTriggerError
from optioil_gateway.infrastructure.observability.logging import setup_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="optioil-apply-schedules",
        description="Apply all due company product price schedules via the gateway",
    )
    parser.add_argument("--base-url", default=settings.gateway_base_url, help="Gateway base URL")
    parser.add_argument("--log-level", default=settings.log_level)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)

    if not settings.scheduler_secret:
        logging.error("SCHEDULER_SECRET not configured")
        return 2

    client = BatchTriggerClient(base_url=args.base_url)
    try:
        result = asyncio.run(client.apply_schedules())
    except BatchTriggerError as e:
        logging.error(f"Price schedule batch failed: {e}")
        return 1

    logging.info(
        result.get("message", "Price schedule batch finished"),
        extra={"applied_count": result.get("appliedCount"), "failed_count": result.get("failedCount")},
    )
    json.dump(result, sys.stdout, ensure_ascii=False, indent=2)
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
