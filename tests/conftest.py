"""Pytest configuration and shared fixtures for the custom resource tests."""

from __future__ import annotations

import os
from typing import Any, Dict

import pytest
from botocore.exceptions import ClientError

from cfn_events.response import RecordingNotifier

STACK_ID = "arn:aws:cloudformation:us-east-1:123456789012:stack/my-stack/1c2fa620-982a-11e3-aff7-50e2416294e0"
RULE_ARN_PREFIX = "arn:aws:events:us-east-1:123456789012:rule/"


def client_error(code: str = "ValidationException", message: str = "boom", operation: str = "PutRule") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": message}}, operation)


class DummyEventsClient:
    """Stand-in for boto3's events client.

    ``responses`` maps operation name to the dict returned; ``errors`` maps
    operation name to the exception raised.
    """

    def __init__(self, responses: Dict[str, Any] | None = None, errors: Dict[str, Exception] | None = None):
        self.responses = responses or {}
        self.errors = errors or {}
        self.calls: list[tuple[str, Dict[str, Any]]] = []

    def _invoke(self, operation: str, kwargs: Dict[str, Any]) -> Dict[str, Any]:
        self.calls.append((operation, kwargs))
        if operation in self.errors:
            raise self.errors[operation]
        return self.responses.get(operation, {})

    def operations(self) -> list[str]:
        return [op for op, _ in self.calls]

    def put_rule(self, **kwargs):
        return self._invoke("put_rule", kwargs)

    def delete_rule(self, **kwargs):
        return self._invoke("delete_rule", kwargs)

    def enable_rule(self, **kwargs):
        return self._invoke("enable_rule", kwargs)

    def disable_rule(self, **kwargs):
        return self._invoke("disable_rule", kwargs)

    def describe_rule(self, **kwargs):
        return self._invoke("describe_rule", kwargs)

    def put_targets(self, **kwargs):
        return self._invoke("put_targets", kwargs)

    def remove_targets(self, **kwargs):
        return self._invoke("remove_targets", kwargs)


class DummyContext:
    log_stream_name = "2024/01/01/[$LATEST]abcdef"


def make_event(request_type: str, properties: Dict[str, Any] | None = None, physical_id: str | None = None, **extra) -> Dict[str, Any]:
    event = {
        "RequestType": request_type,
        "ServiceToken": "arn:aws:lambda:us-east-1:123456789012:function:cfn-events",
        "ResponseURL": "https://cloudformation-custom-resource-response-useast1.s3.amazonaws.com/presigned",
        "StackId": STACK_ID,
        "RequestId": "unique-request-id",
        "LogicalResourceId": "MyResource",
        "ResourceType": "Custom::Events::Rule",
        "ResourceProperties": dict(properties or {}),
    }
    if physical_id is not None:
        event["PhysicalResourceId"] = physical_id
    event.update(extra)
    return event


@pytest.fixture
def events_client() -> DummyEventsClient:
    return DummyEventsClient()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def context() -> DummyContext:
    return DummyContext()


@pytest.fixture
def fixed_suffix():
    return lambda: "ABCDEFGHIJKLM"


@pytest.fixture(autouse=True)
def clean_environment():
    """Clean up environment variables after each test."""
    yield
    test_env_vars = ["ENVIRONMENT", "LOG_LEVEL", "STRUCTURED_LOGGING", "RESPONSE_TIMEOUT_SECONDS", "EVENTS_ENDPOINT_URL"]
    for var in test_env_vars:
        if var in os.environ:
            del os.environ[var]
