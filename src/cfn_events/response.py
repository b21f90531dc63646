"""Send custom resource results back to CloudFormation.

CloudFormation waits for a PUT of a JSON response document to the
pre-signed S3 URL in the request's ``ResponseURL``. A missing response is
treated as a timeout failure, so every invocation must call ``send`` once.
"""

from __future__ import annotations

import json
import logging
import urllib.request
from typing import Any, Dict, List, Mapping, Optional, Protocol

from .models import ResponseStatus

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    def send(
        self,
        event: Mapping[str, Any],
        context: Any,
        status: ResponseStatus,
        data: Mapping[str, Any],
        physical_resource_id: Optional[str] = None,
        reason: Optional[str] = None,
        no_echo: bool = False,
    ) -> Dict[str, Any]: ...


def build_response_body(
    event: Mapping[str, Any],
    context: Any,
    status: ResponseStatus,
    data: Mapping[str, Any],
    physical_resource_id: Optional[str] = None,
    reason: Optional[str] = None,
    no_echo: bool = False,
) -> Dict[str, Any]:
    log_stream = getattr(context, "log_stream_name", None) or "unknown"
    return {
        "Status": ResponseStatus(status).value,
        "Reason": reason or f"See the details in CloudWatch Log Stream: {log_stream}",
        "PhysicalResourceId": physical_resource_id or log_stream,
        "StackId": event.get("StackId"),
        "RequestId": event.get("RequestId"),
        "LogicalResourceId": event.get("LogicalResourceId"),
        "NoEcho": no_echo,
        "Data": dict(data or {}),
    }


class CloudFormationNotifier:
    """PUTs the response document to the event's ``ResponseURL``."""

    def __init__(self, timeout: float = 30.0):
        self.timeout = timeout

    def send(
        self,
        event: Mapping[str, Any],
        context: Any,
        status: ResponseStatus,
        data: Mapping[str, Any],
        physical_resource_id: Optional[str] = None,
        reason: Optional[str] = None,
        no_echo: bool = False,
    ) -> Dict[str, Any]:
        body = build_response_body(event, context, status, data, physical_resource_id, reason, no_echo)
        response_url = event.get("ResponseURL")
        if not response_url:
            logger.error("No ResponseURL in event, cannot report %s", body["Status"])
            return body

        json_body = json.dumps(body).encode("utf-8")
        logger.info("Response body: %s", json_body.decode("utf-8"))

        # S3 pre-signed URLs are signed without a content type
        headers = {"content-type": "", "content-length": str(len(json_body))}
        request = urllib.request.Request(response_url, data=json_body, headers=headers, method="PUT")
        try:
            with urllib.request.urlopen(request, timeout=self.timeout) as resp:
                logger.info("Status code: %s", resp.status)
        except Exception as e:
            logger.error("send(..) failed executing PUT to ResponseURL: %s", e, exc_info=True)
        return body


class RecordingNotifier:
    """Keeps responses in memory instead of sending them."""

    def __init__(self) -> None:
        self.responses: List[Dict[str, Any]] = []

    def send(
        self,
        event: Mapping[str, Any],
        context: Any,
        status: ResponseStatus,
        data: Mapping[str, Any],
        physical_resource_id: Optional[str] = None,
        reason: Optional[str] = None,
        no_echo: bool = False,
    ) -> Dict[str, Any]:
        body = build_response_body(event, context, status, data, physical_resource_id, reason, no_echo)
        self.responses.append(body)
        return body

    @property
    def last(self) -> Optional[Dict[str, Any]]:
        return self.responses[-1] if self.responses else None
