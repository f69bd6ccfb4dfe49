"""Run one order through the order-processing state machine.

Usage:
    orderflow --order-id order-1 --items laptop mouse --total 999.99 \
        --endpoint-url http://localhost:4566
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import time
from decimal import Decimal
from typing import Any, Sequence

from orderflow.backends import create_backends
from orderflow.core.config import AppSettings
from orderflow.core.exceptions import OrderFlowError
from orderflow.core.logging import configure_logging
from orderflow.models.execution import WorkflowRunReport
from orderflow.orchestration.runner import WorkflowRunner
from orderflow.pipelines.orders import build_order_definition, order_postcondition

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="orderflow", description="Run an order through the Step Functions order pipeline",
    )
    parser.add_argument("--order-id", default=None, help="Order id (default: order-<epoch ms>)")
    parser.add_argument("--items", nargs="+", default=["laptop", "mouse", "keyboard"],
                        help="Line items")
    parser.add_argument("--total", type=Decimal, default=Decimal("999.99"), help="Order total")
    parser.add_argument("--endpoint-url", default=None,
                        help="Step Functions endpoint (e.g. http://localhost:4566)")
    parser.add_argument("--region", default=None, help="AWS region for all clients")
    parser.add_argument("--role-arn", default=None, help="Execution role for the state machine")
    parser.add_argument("--poll-interval", type=float, default=None, help="Seconds between polls")
    parser.add_argument("--max-attempts", type=int, default=None, help="Maximum status polls")
    parser.add_argument("--archive", action="store_true",
                        help="Store the run report in the configured S3 bucket")
    parser.add_argument("--notify", action="store_true",
                        help="Send the run report to the configured SQS queue")
    parser.add_argument("--log-level", default=None, help="Log level (default from settings)")
    return parser


def settings_from_args(args: argparse.Namespace, settings: AppSettings | None = None) -> AppSettings:
    """Apply command-line overrides on top of environment settings."""
    settings = settings or AppSettings()
    sfn: dict[str, Any] = {}
    if args.endpoint_url:
        sfn["endpoint_url"] = args.endpoint_url
    if args.region:
        sfn["region"] = args.region
    if args.role_arn:
        sfn["role_arn"] = args.role_arn
    monitor: dict[str, Any] = {}
    if args.poll_interval is not None:
        monitor["poll_interval_seconds"] = args.poll_interval
    if args.max_attempts is not None:
        monitor["max_attempts"] = args.max_attempts

    update: dict[str, Any] = {
        "sfn": settings.sfn.model_copy(update=sfn),
        "monitor": settings.monitor.model_copy(update=monitor),
    }
    if args.region:
        update["s3"] = settings.s3.model_copy(update={"region": args.region})
        update["sqs"] = settings.sqs.model_copy(update={"region": args.region})
    if args.log_level:
        update["log_level"] = args.log_level
    return settings.model_copy(update=update)


def publish_report(report: WorkflowRunReport, *, object_store=None, queue=None) -> None:
    body = report.model_dump_json()
    if object_store is not None:
        key = f"reports/{report.execution_handle.rsplit(':', 1)[-1] or 'unlaunched'}.json"
        object_store.put(key, body, content_type="application/json")
        logger.info("Archived run report", extra={"key": key})
    if queue is not None:
        message_id = queue.send(body)
        logger.info("Published run report", extra={"message_id": message_id})


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = settings_from_args(args)
    configure_logging(settings.log_level)

    orchestration, object_store, queue = create_backends(settings)
    runner = WorkflowRunner(orchestration, settings, postcondition=order_postcondition())

    order = {
        "orderId": args.order_id or f"order-{int(time.time() * 1000)}",
        "items": args.items,
        "total": args.total,
    }
    report = runner.run(build_order_definition(), order)

    try:
        publish_report(
            report,
            object_store=object_store if args.archive else None,
            queue=queue if args.notify else None,
        )
    except OrderFlowError as exc:
        logger.error("Could not publish run report", extra={"error": str(exc)})

    print(json.dumps(report.model_dump(mode="json"), indent=2, default=str))
    return 0 if report.ok else 1


if __name__ == "__main__":
    sys.exit(main())
