"""Reconciliation of CloudWatch alarms against SQS queues.

The diff is a pair of independent set differences over two name snapshots:

* queues without an alarm -> create
* alarms without a queue  -> delete (orphans)

Combined mode applies the diff immediately and notifies; split mode only
builds the plan so it can be written to a plan file.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .config import ReconcilerConfig
from .inventory import InventoryFetcher
from .naming import (
    NamingConvention,
    alarm_description,
    alarm_name_from_resource,
    resource_name_from_alarm,
    threshold_for,
)
from .notify import best_effort, publish_summary

logger = logging.getLogger(__name__)

METRIC_NAMESPACE = "AWS/SQS"
METRIC_NAME = "ApproximateNumberOfMessagesVisible"
MANAGED_BY_TAG = {"Key": "ManagedBy", "Value": "Automation"}


@dataclass(frozen=True)
class CreateAction:
    """An alarm to create for a queue that has none."""
    queue_name: str
    alarm_name: str
    threshold: int


@dataclass
class ReconciliationPlan:
    """The create/delete actions computed from one pair of snapshots."""
    region: str
    convention: NamingConvention
    creates: List[CreateAction] = field(default_factory=list)
    deletes: List[str] = field(default_factory=list)
    # Queues whose alarm already exists; never persisted
    unchanged: List[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.creates and not self.deletes


@dataclass
class RunSummary:
    """Outcome of one combined-mode run."""
    region: str
    timestamp: datetime = field(default_factory=datetime.now)
    created_alarms: List[str] = field(default_factory=list)
    deleted_alarms: List[str] = field(default_factory=list)
    failed_operations: List[str] = field(default_factory=list)
    skipped: int = 0

    @property
    def created(self) -> int:
        return len(self.created_alarms)

    @property
    def deleted(self) -> int:
        return len(self.deleted_alarms)

    @property
    def failed(self) -> int:
        return len(self.failed_operations)

    @property
    def succeeded(self) -> bool:
        return self.failed == 0

    def record_failure(self, kind: str, alarm_name: str) -> None:
        self.failed_operations.append(f"{kind}:{alarm_name}")

    def as_dict(self) -> Dict[str, Any]:
        return {
            "region": self.region,
            "timestamp": self.timestamp.isoformat(),
            "created": self.created,
            "deleted": self.deleted,
            "skipped": self.skipped,
            "failed": self.failed,
            "created_alarms": list(self.created_alarms),
            "deleted_alarms": list(self.deleted_alarms),
            "failed_operations": list(self.failed_operations),
        }


def compute_plan(
    queues: Iterable[str],
    alarms: Iterable[str],
    convention: NamingConvention,
    default_threshold: int,
    region: str,
) -> ReconciliationPlan:
    """Diff queue names against managed alarm names.

    ``alarms`` must already be filtered to ``convention``.
    """
    queue_set = set(queues)
    alarm_set = set(alarms)
    plan = ReconciliationPlan(region=region, convention=convention)

    for queue in sorted(queue_set):
        expected = alarm_name_from_resource(queue, convention)
        if expected in alarm_set:
            plan.unchanged.append(queue)
        else:
            plan.creates.append(CreateAction(queue, expected, threshold_for(queue, default_threshold)))

    for alarm in sorted(alarm_set):
        if resource_name_from_alarm(alarm, convention) not in queue_set:
            plan.deletes.append(alarm)

    return plan


class AlarmReconciler:
    """Applies a plan against CloudWatch, one call at a time."""

    def __init__(self, config: ReconcilerConfig, cloudwatch_client: Any, sts_client: Any | None = None):
        self.config = config
        self.cloudwatch = cloudwatch_client
        self.sts = sts_client
        self._account_id = config.aws_account_id
        self._account_lookup_done = False

    @property
    def region(self) -> str:
        return self.config.aws_region

    def apply(self, plan: ReconciliationPlan) -> RunSummary:
        summary = RunSummary(region=plan.region, skipped=len(plan.unchanged))

        logger.info("Phase 1: Creating Missing Alarms")
        for queue in plan.unchanged:
            logger.info("Alarm already exists for: %s", queue)
        for action in plan.creates:
            logger.warning("Missing alarm for: %s", action.queue_name)
            self.create_alarm(action, summary)

        logger.info("Phase 2: Deleting Orphaned Alarms")
        if not plan.deletes:
            logger.info("No orphaned alarms to delete")
        for alarm_name in plan.deletes:
            logger.warning("Orphaned alarm found: %s (queue no longer exists)", alarm_name)
            self.delete_alarm(alarm_name, summary)

        return summary

    def create_alarm(self, action: CreateAction, summary: RunSummary) -> bool:
        logger.info("Creating alarm: %s (threshold: %s)", action.alarm_name, action.threshold)
        targets = [self.config.notification_target] if self.config.notification_target else []
        try:
            self.cloudwatch.put_metric_alarm(
                AlarmName=action.alarm_name,
                AlarmDescription=alarm_description(action.queue_name, action.threshold),
                Namespace=METRIC_NAMESPACE,
                MetricName=METRIC_NAME,
                Dimensions=[{"Name": "QueueName", "Value": action.queue_name}],
                Statistic="Average",
                Period=self.config.alarm.period_seconds,
                EvaluationPeriods=1,
                Threshold=float(action.threshold),
                ComparisonOperator="GreaterThanOrEqualToThreshold",
                TreatMissingData="notBreaching",
                AlarmActions=targets,
                OKActions=targets,
            )
        except (ClientError, BotoCoreError) as e:
            logger.error("✗ Failed to create alarm: %s (%s)", action.alarm_name, e)
            summary.record_failure("CREATE", action.alarm_name)
            return False

        logger.info("✓ Created alarm: %s", action.alarm_name)
        summary.created_alarms.append(action.alarm_name)
        best_effort(f"Tagging alarm {action.alarm_name}", self._tag_alarm, action)
        return True

    def delete_alarm(self, alarm_name: str, summary: RunSummary) -> bool:
        logger.info("Deleting orphaned alarm: %s", alarm_name)
        try:
            self.cloudwatch.delete_alarms(AlarmNames=[alarm_name])
        except (ClientError, BotoCoreError) as e:
            logger.error("✗ Failed to delete alarm: %s (%s)", alarm_name, e)
            summary.record_failure("DELETE", alarm_name)
            return False

        logger.info("✓ Deleted alarm: %s", alarm_name)
        summary.deleted_alarms.append(alarm_name)
        return True

    def _resolve_account_id(self) -> Optional[str]:
        # At most one STS lookup per run, even when it fails
        if self._account_id is None and self.sts is not None and not self._account_lookup_done:
            self._account_lookup_done = True
            self._account_id = self.sts.get_caller_identity()["Account"]
        return self._account_id

    def _tag_alarm(self, action: CreateAction) -> None:
        account_id = self._resolve_account_id()
        if not account_id:
            logger.info("Account ID unknown, not tagging %s", action.alarm_name)
            return
        arn = f"arn:aws:cloudwatch:{self.region}:{account_id}:alarm:{action.alarm_name}"
        self.cloudwatch.tag_resource(
            ResourceARN=arn,
            Tags=[MANAGED_BY_TAG, {"Key": "QueueName", "Value": action.queue_name}],
        )


def _client(clients: Optional[Dict[str, Any]], name: str, region: str) -> Any:
    if clients and name in clients:
        return clients[name]
    return boto3.client(name, region_name=region)


def build_plan(
    config: ReconcilerConfig,
    clients: Optional[Dict[str, Any]] = None,
    convention: NamingConvention | None = None,
) -> ReconciliationPlan:
    """Fetch both inventories and compute the plan. Performs no mutation."""
    convention = convention or config.convention_for(NamingConvention.SUFFIX)
    region = config.aws_region
    fetcher = InventoryFetcher(
        _client(clients, "sqs", region),
        _client(clients, "cloudwatch", region),
        region,
    )
    queues = fetcher.list_resources()
    alarms = fetcher.list_managed_alarms(convention)
    for queue in sorted(queues):
        logger.debug("  → Queue: %s", queue)

    return compute_plan(queues, alarms, convention, config.alarm.threshold, region)


def run_reconciliation(
    config: ReconcilerConfig,
    clients: Optional[Dict[str, Any]] = None,
    convention: NamingConvention | None = None,
    notify: bool = True,
) -> RunSummary:
    """Combined mode: fetch, diff, apply, then publish the summary."""
    convention = convention or config.convention_for(NamingConvention.PREFIX)
    region = config.aws_region
    logger.info("Starting reconciliation process (region=%s, convention=%s)", region, convention.value)

    cloudwatch = _client(clients, "cloudwatch", region)
    plan = build_plan(config, clients={**(clients or {}), "cloudwatch": cloudwatch}, convention=convention)

    # Every queue lands in creates or unchanged, so both empty means no queues.
    # A failed listing looks the same; applying the plan would delete every alarm.
    if not plan.creates and not plan.unchanged:
        logger.warning("No queues to process, skipping alarm changes")
        summary = RunSummary(region=region)
    else:
        sts = None
        if not config.aws_account_id and plan.creates:
            sts = _client(clients, "sts", region)
        summary = AlarmReconciler(config, cloudwatch, sts).apply(plan)

    if notify:
        sns = _client(clients, "sns", region) if config.notification_target else None
        publish_summary(sns, config.notification_target, summary)

    if summary.succeeded:
        logger.info("Reconciliation completed successfully!")
    else:
        logger.warning("Reconciliation completed with %d error(s)", summary.failed)
    return summary
