"""Route a CloudFormation request to a reconciler and report the result."""

from __future__ import annotations

import json
import logging
from typing import Any, Mapping, Protocol

from .exceptions import UnknownRequestTypeError
from .models import LifecycleEvent, ReconciliationOutcome, RequestType
from .response import Notifier

logger = logging.getLogger(__name__)


class Reconciler(Protocol):
    def create(self, event: LifecycleEvent) -> ReconciliationOutcome: ...

    def update(self, event: LifecycleEvent) -> ReconciliationOutcome: ...

    def delete(self, event: LifecycleEvent) -> ReconciliationOutcome: ...


def reconcile(event: LifecycleEvent, reconciler: Reconciler) -> ReconciliationOutcome:
    """Run the reconciler method matching the request type."""
    try:
        if event.request_type == RequestType.CREATE.value:
            return reconciler.create(event)
        if event.request_type == RequestType.UPDATE.value:
            return reconciler.update(event)
        if event.request_type == RequestType.DELETE.value:
            return reconciler.delete(event)
        raise UnknownRequestTypeError(event.request_type)
    except UnknownRequestTypeError as e:
        logger.error("%s", e)
        return ReconciliationOutcome.failed(reason=str(e))
    except Exception as e:
        logger.exception("Unhandled error reconciling %s", event.logical_resource_id)
        return ReconciliationOutcome.failed(event.physical_resource_id, reason=f"Unhandled error: {e}")


def dispatch(
    raw_event: Mapping[str, Any],
    context: Any,
    reconciler: Reconciler,
    notifier: Notifier,
) -> ReconciliationOutcome:
    """Handle one custom resource request end to end.

    Exactly one response is sent to CloudFormation for every call, including
    unknown request types and unexpected errors.
    """
    logger.info("Received event: %s", json.dumps(_redact(raw_event), default=str))
    try:
        event = LifecycleEvent.from_dict(raw_event)
    except (TypeError, ValueError) as e:
        logger.exception("Malformed request for %s", raw_event.get("LogicalResourceId"))
        outcome = ReconciliationOutcome.failed(
            raw_event.get("PhysicalResourceId") or None, reason=f"Malformed request: {e}"
        )
    else:
        outcome = reconcile(event, reconciler)
    logger.info(
        "%s %s %s -> %s",
        raw_event.get("ResourceType") or "Custom::Events",
        raw_event.get("RequestType"),
        raw_event.get("LogicalResourceId"),
        outcome.status.value,
    )
    notifier.send(
        raw_event,
        context,
        outcome.status,
        outcome.data,
        physical_resource_id=outcome.physical_resource_id,
        reason=outcome.reason,
    )
    return outcome


def _redact(event: Mapping[str, Any]) -> dict[str, Any]:
    # The pre-signed URL grants write access to the response object
    redacted = dict(event)
    if "ResponseURL" in redacted:
        redacted["ResponseURL"] = "<redacted>"
    return redacted
