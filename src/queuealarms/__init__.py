"""Queue Alarm Reconciler - CloudWatch alarm coverage for SQS queues.

Creates a message-backlog alarm for every queue that lacks one and removes
alarms whose queue no longer exists.
"""

__version__ = "0.1.0"

from .config import ReconcilerConfig
from .exceptions import ConfigurationError, PlanFormatError, ReconcilerError
from .naming import NamingConvention
from .reconciler import ReconciliationPlan, RunSummary, build_plan, run_reconciliation

__all__ = [
    "ReconcilerConfig",
    "ReconcilerError",
    "ConfigurationError",
    "PlanFormatError",
    "NamingConvention",
    "ReconciliationPlan",
    "RunSummary",
    "build_plan",
    "run_reconciliation",
]
