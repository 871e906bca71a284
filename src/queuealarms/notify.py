"""Run summary notification and the best-effort call wrapper."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable

from botocore.exceptions import BotoCoreError, ClientError

if TYPE_CHECKING:
    from .reconciler import RunSummary

logger = logging.getLogger(__name__)

RULE = "=" * 40


def best_effort(description: str, operation: Callable[..., Any], *args: Any, **kwargs: Any) -> bool:
    """Call ``operation`` and log the outcome.

    AWS errors are logged as warnings and reported as ``False``; they never
    count as failed operations. Any other exception propagates.
    """
    try:
        operation(*args, **kwargs)
    except (ClientError, BotoCoreError) as e:
        logger.warning("%s failed (non-critical): %s", description, e)
        return False
    logger.debug("%s succeeded", description)
    return True


def build_subject(summary: "RunSummary") -> str:
    return f"SQS Alarm Reconciliation: {summary.created} created, {summary.deleted} deleted"


def build_summary_message(summary: "RunSummary") -> str:
    """Render the human-readable run summary used for SNS and the console."""
    lines = [
        "SQS CloudWatch Alarm Reconciliation Complete",
        "",
        RULE,
        "SUMMARY",
        RULE,
        f"✓ Alarms Created:   {summary.created}",
        f"✗ Alarms Deleted:   {summary.deleted}",
        f"→ Alarms Unchanged: {summary.skipped}",
        f"⚠ Errors:           {summary.failed}",
        "",
        f"Region: {summary.region}",
        f"Timestamp: {summary.timestamp:%Y-%m-%d %H:%M:%S}",
    ]

    sections = [
        ("Created Alarms:", summary.created_alarms),
        ("Deleted Alarms:", summary.deleted_alarms),
        ("Failed Operations:", summary.failed_operations),
    ]
    for title, names in sections:
        if names:
            lines.extend(["", title])
            lines.extend(f"  • {name}" for name in names)

    return "\n".join(lines) + "\n"


def publish_summary(sns_client: Any, topic_arn: str | None, summary: "RunSummary") -> bool:
    """Publish the run summary to SNS. Failures are logged, never raised."""
    if not topic_arn:
        logger.info("No notification target configured, skipping summary notification")
        return False

    logger.info("Sending summary notification to %s", topic_arn)
    sent = best_effort(
        "Summary notification",
        sns_client.publish,
        TopicArn=topic_arn,
        Subject=build_subject(summary),
        Message=build_summary_message(summary),
    )
    if sent:
        logger.info("Summary notification sent successfully")
    return sent
