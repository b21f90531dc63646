"""Lambda handler backing the Custom::Events::Rule resource type.

Accepts `clients` and `notifier` injection for unit tests. Expected client
key: 'events'.
"""
from __future__ import annotations

import logging
from typing import Any, Dict

from cfn_events.config import HandlerConfig
from cfn_events.dispatch import dispatch
from cfn_events.exceptions import ConfigurationError
from cfn_events.logging_config import configure_logging
from cfn_events.resources.rule import RuleReconciler
from cfn_events.response import CloudFormationNotifier

logger = logging.getLogger("events_rule_lambda")
logger.setLevel(logging.INFO)


def _load_config() -> HandlerConfig:
    try:
        return HandlerConfig.from_env()
    except ConfigurationError as exc:
        logger.warning("Invalid configuration, using defaults: %s", exc)
        return HandlerConfig()


def lambda_handler(event: Dict[str, Any], context: Any = None, *, clients: Dict[str, Any] | None = None, notifier: Any | None = None) -> Dict[str, Any]:
    cfg = _load_config()
    configure_logging(cfg)
    clients = clients or {}

    events_client = clients.get("events")
    if events_client is None:
        import boto3

        events_client = boto3.client("events", region_name=cfg.aws_region, endpoint_url=cfg.events_endpoint_url)

    notifier = notifier or CloudFormationNotifier(timeout=cfg.response_timeout_seconds)
    outcome = dispatch(event, context, RuleReconciler(events_client), notifier)
    return outcome.to_dict()
