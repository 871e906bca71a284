import logging
from typing import Any, Dict, Optional

from queuealarms.config import ReconcilerConfig
from queuealarms.exceptions import ConfigurationError
from queuealarms.naming import NamingConvention
from queuealarms.reconciler import run_reconciliation

logger = logging.getLogger("alarm_reconciler_lambda")
logger.setLevel(logging.INFO)


def lambda_handler(event: Optional[Dict[str, Any]], context: Any = None, clients: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Scheduled alarm reconciliation Lambda.

    Configuration comes from the environment (AWS_REGION, ALARM_THRESHOLD,
    ALARM_PERIOD, SNS_TOPIC_ARN, ALARM_NAMING_CONVENTION). The event may set
    'naming_convention' and 'notify' to override them for one invocation.

    The function supports dependency injection of `clients` for unit tests. Expected keys: 'sqs', 'cloudwatch', 'sns', 'sts'.
    """
    event = event or {}

    try:
        cfg = ReconcilerConfig.from_env()
        convention = NamingConvention(event["naming_convention"]) if event.get("naming_convention") else None
    except (ConfigurationError, ValueError) as e:
        logger.error("Invalid configuration: %s", e)
        return {"status": "error", "reason": "invalid_config"}

    summary = run_reconciliation(cfg, clients=clients, convention=convention, notify=bool(event.get("notify", True)))

    result = summary.as_dict()
    result["status"] = "ok" if summary.succeeded else "error"
    logger.info("Reconciliation finished: %s", {k: result[k] for k in ("created", "deleted", "skipped", "failed")})
    return result
