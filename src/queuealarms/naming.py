"""Naming and threshold policy for queue alarms.

Maps a queue to its alarm name (and back) under one of two naming
conventions, and picks the alarm threshold from the queue class.
Everything here is pure; no AWS calls.
"""

from __future__ import annotations

from enum import Enum

ALARM_PREFIX = "SQS-HighMessageCount-"
ALARM_SUFFIX = "-cloudwatch-alarm"

DEAD_LETTER_SUFFIXES = ("-dlq", "-dead-letter", "_dlq")
DEAD_LETTER_THRESHOLD = 1
DEFAULT_THRESHOLD = 5


class NamingConvention(str, Enum):
    """How an alarm name is derived from a queue name."""

    PREFIX = "prefix"
    SUFFIX = "suffix"

    @property
    def marker(self) -> str:
        return ALARM_PREFIX if self is NamingConvention.PREFIX else ALARM_SUFFIX

    @property
    def plan_key(self) -> str:
        """Key of the convention line in a plan file."""
        return "ALARM_PREFIX" if self is NamingConvention.PREFIX else "ALARM_SUFFIX"

    @classmethod
    def from_plan_key(cls, key: str) -> "NamingConvention":
        for convention in cls:
            if convention.plan_key == key:
                return convention
        raise ValueError(f"Unknown naming convention key: {key}")


class ResourceClass(str, Enum):
    DEAD_LETTER = "dead-letter"
    NORMAL = "normal"


def resource_name_from_url(url: str) -> str:
    """Return the queue name from a queue URL.

    Example: https://sqs.us-east-1.amazonaws.com/123456789012/orders -> orders
    """
    if not url:
        raise ValueError("Queue URL must not be empty")
    return url.rsplit("/", 1)[-1]


def alarm_name_from_resource(name: str, convention: NamingConvention) -> str:
    """Return the alarm name for a queue under ``convention``."""
    if convention is NamingConvention.PREFIX:
        return f"{ALARM_PREFIX}{name}"
    return f"{name}{ALARM_SUFFIX}"


def matches_convention(alarm_name: str, convention: NamingConvention) -> bool:
    """True when the alarm name carries the convention's marker."""
    if convention is NamingConvention.PREFIX:
        return alarm_name.startswith(ALARM_PREFIX)
    return alarm_name.endswith(ALARM_SUFFIX)


def resource_name_from_alarm(alarm_name: str, convention: NamingConvention) -> str:
    """Inverse of :func:`alarm_name_from_resource`.

    Raises:
        ValueError: if the alarm name does not carry the convention's marker
    """
    if not matches_convention(alarm_name, convention):
        raise ValueError(f"Alarm {alarm_name!r} does not follow the {convention.value} convention")
    if convention is NamingConvention.PREFIX:
        return alarm_name[len(ALARM_PREFIX):]
    return alarm_name[: -len(ALARM_SUFFIX)]


def classify(name: str) -> ResourceClass:
    """Classify a queue as dead-letter or normal by its name suffix."""
    if name.endswith(DEAD_LETTER_SUFFIXES):
        return ResourceClass.DEAD_LETTER
    return ResourceClass.NORMAL


def is_dead_letter(name: str) -> bool:
    return classify(name) is ResourceClass.DEAD_LETTER


def threshold_for(name: str, default_threshold: int = DEFAULT_THRESHOLD) -> int:
    """Dead-letter queues alert on any message; other queues use the default."""
    if is_dead_letter(name):
        return DEAD_LETTER_THRESHOLD
    return default_threshold


def alarm_description(name: str, threshold: int) -> str:
    if is_dead_letter(name):
        return f"🚨 CRITICAL: Messages detected in Dead Letter Queue: {name}"
    return f"Alert when SQS queue {name} has {threshold} or more messages available"
