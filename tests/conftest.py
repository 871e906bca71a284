"""Pytest configuration and shared fixtures for queue alarm reconciler tests."""

from __future__ import annotations

import pytest
from botocore.exceptions import ClientError

from queuealarms.config import ReconcilerConfig

QUEUE_URL_BASE = "https://sqs.us-east-1.amazonaws.com/123456789012"
TOPIC_ARN = "arn:aws:sns:us-east-1:123456789012:queue-alarms"


def client_error(operation: str, code: str = "AccessDenied") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": "boom"}}, operation)


class DummySQS:
    def __init__(self, queue_names=None, error=None):
        self._names = queue_names or []
        self._error = error
        self.calls = 0

    def list_queues(self, **kwargs):
        self.calls += 1
        if self._error:
            raise self._error
        if not self._names:
            # SQS omits QueueUrls entirely when there are no queues
            return {}
        return {"QueueUrls": [f"{QUEUE_URL_BASE}/{name}" for name in self._names]}


class DummyCW:
    def __init__(self, alarm_names=None, describe_error=None, fail_create=(), fail_delete=(), fail_tag=False):
        self.alarm_names = list(alarm_names or [])
        self.describe_error = describe_error
        self.fail_create = set(fail_create)
        self.fail_delete = set(fail_delete)
        self.fail_tag = fail_tag
        self.describe_calls = []
        self.put_calls = []
        self.delete_calls = []
        self.tag_calls = []

    def describe_alarms(self, **kwargs):
        self.describe_calls.append(kwargs)
        if self.describe_error:
            raise self.describe_error
        prefix = kwargs.get("AlarmNamePrefix", "")
        return {"MetricAlarms": [{"AlarmName": n} for n in self.alarm_names if n.startswith(prefix)]}

    def put_metric_alarm(self, **kwargs):
        self.put_calls.append(kwargs)
        if kwargs["AlarmName"] in self.fail_create:
            raise client_error("PutMetricAlarm", "LimitExceeded")
        return {}

    def delete_alarms(self, AlarmNames=None):
        self.delete_calls.append(AlarmNames)
        if AlarmNames[0] in self.fail_delete:
            raise client_error("DeleteAlarms", "ResourceNotFound")
        return {}

    def tag_resource(self, ResourceARN=None, Tags=None):
        self.tag_calls.append({"ResourceARN": ResourceARN, "Tags": Tags})
        if self.fail_tag:
            raise client_error("TagResource")
        return {}


class DummySNS:
    def __init__(self, error=None):
        self.published = []
        self._error = error

    def publish(self, TopicArn=None, Subject=None, Message=None):
        if self._error:
            raise self._error
        self.published.append({"TopicArn": TopicArn, "Subject": Subject, "Message": Message})
        return {"MessageId": "m-1"}


class DummySTS:
    def __init__(self, account="123456789012"):
        self.account = account
        self.calls = 0

    def get_caller_identity(self):
        self.calls += 1
        return {"Account": self.account}


@pytest.fixture
def sample_config() -> ReconcilerConfig:
    """Sample configuration for testing."""
    return ReconcilerConfig(
        environment="dev",
        aws_region="us-east-1",
        aws_account_id="123456789012",
        notification_target=TOPIC_ARN,
    )


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep reconciler settings from the host environment out of tests."""
    test_env_vars = [
        "ENVIRONMENT",
        "AWS_REGION",
        "AWS_ACCOUNT_ID",
        "ALARM_THRESHOLD",
        "ALARM_PERIOD",
        "SNS_TOPIC_ARN",
        "ALARM_NAMING_CONVENTION",
        "PLAN_PATH",
        "LOG_LEVEL",
    ]
    for var in test_env_vars:
        monkeypatch.delenv(var, raising=False)
    yield
