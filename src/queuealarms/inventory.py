"""Inventory fetching: SQS queues and the alarms managed for them.

Both listings make a single, unpaginated call. A failed call is logged and
treated as an empty inventory; callers cannot distinguish "nothing exists"
from "the call failed".
"""

from __future__ import annotations

import logging
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from .naming import NamingConvention, matches_convention, resource_name_from_url

logger = logging.getLogger(__name__)


class InventoryFetcher:
    """Lists queues and managed alarms in one region."""

    def __init__(self, sqs_client: Any, cloudwatch_client: Any, region: str):
        self.sqs = sqs_client
        self.cloudwatch = cloudwatch_client
        self.region = region

    def list_resources(self) -> set[str]:
        """Return the names of all queues in the region."""
        logger.info("Fetching all SQS queues in region: %s", self.region)
        try:
            resp = self.sqs.list_queues()
        except (ClientError, BotoCoreError) as e:
            # Same outcome as an empty account: nothing to reconcile
            logger.warning("Failed to list SQS queues in %s: %s", self.region, e)
            return set()

        urls = resp.get("QueueUrls") or []
        if not urls:
            logger.warning("No SQS queues found in region %s", self.region)
            return set()

        names = {resource_name_from_url(url) for url in urls}
        logger.info("Found %d SQS queue(s)", len(names))
        return names

    def list_managed_alarms(self, convention: NamingConvention) -> set[str]:
        """Return the names of alarms following ``convention``."""
        logger.info("Fetching CloudWatch alarms (%s convention)...", convention.value)
        params: dict[str, Any] = {}
        if convention is NamingConvention.PREFIX:
            params["AlarmNamePrefix"] = convention.marker

        try:
            resp = self.cloudwatch.describe_alarms(**params)
        except (ClientError, BotoCoreError) as e:
            logger.warning("Failed to describe CloudWatch alarms in %s: %s", self.region, e)
            return set()

        names = {
            alarm["AlarmName"]
            for alarm in resp.get("MetricAlarms", [])
            if matches_convention(alarm.get("AlarmName", ""), convention)
        }
        if names:
            logger.info("Found %d existing alarm(s)", len(names))
        else:
            logger.info("No existing queue alarms found")
        return names
