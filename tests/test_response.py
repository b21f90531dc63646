import json
import urllib.error

import pytest

from conftest import DummyContext, make_event
from cfn_events.models import ResponseStatus
from cfn_events.response import CloudFormationNotifier, RecordingNotifier, build_response_body


class FakeHTTPResponse:
    status = 200

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


@pytest.fixture
def captured_requests(monkeypatch):
    captured = []

    def fake_urlopen(request, timeout=None):
        captured.append((request, timeout))
        return FakeHTTPResponse()

    monkeypatch.setattr("cfn_events.response.urllib.request.urlopen", fake_urlopen)
    return captured


def test_build_response_body_defaults_physical_id_to_log_stream():
    body = build_response_body(make_event("Create", {}), DummyContext(), ResponseStatus.FAILED, {})

    assert body["Status"] == "FAILED"
    assert body["PhysicalResourceId"] == DummyContext.log_stream_name
    assert body["Reason"] == f"See the details in CloudWatch Log Stream: {DummyContext.log_stream_name}"
    assert body["NoEcho"] is False


def test_build_response_body_without_context():
    body = build_response_body(make_event("Create", {}), None, ResponseStatus.SUCCESS, {"Arn": "a"}, "r1", reason="done")

    assert body["PhysicalResourceId"] == "r1"
    assert body["Reason"] == "done"
    assert body["Data"] == {"Arn": "a"}


def test_notifier_puts_json_to_response_url(captured_requests):
    event = make_event("Create", {})

    CloudFormationNotifier(timeout=5).send(event, DummyContext(), ResponseStatus.SUCCESS, {"Arn": "a"}, "r1")

    assert len(captured_requests) == 1
    request, timeout = captured_requests[0]
    assert timeout == 5
    assert request.get_method() == "PUT"
    assert request.full_url == event["ResponseURL"]
    assert request.get_header("Content-type") == ""
    body = json.loads(request.data.decode("utf-8"))
    assert body["Status"] == "SUCCESS"
    assert body["PhysicalResourceId"] == "r1"
    assert body["StackId"] == event["StackId"]
    assert body["RequestId"] == event["RequestId"]
    assert body["LogicalResourceId"] == "MyResource"
    assert body["Data"] == {"Arn": "a"}


def test_notifier_logs_put_failure(monkeypatch, caplog):
    def failing_urlopen(request, timeout=None):
        raise urllib.error.URLError("unreachable")

    monkeypatch.setattr("cfn_events.response.urllib.request.urlopen", failing_urlopen)

    body = CloudFormationNotifier().send(make_event("Delete", {}, physical_id="r1"), DummyContext(), ResponseStatus.SUCCESS, {}, "r1")

    assert body["Status"] == "SUCCESS"
    assert any("failed executing PUT" in r.getMessage() for r in caplog.records)


def test_notifier_without_response_url_does_not_send(captured_requests):
    event = make_event("Create", {})
    del event["ResponseURL"]

    CloudFormationNotifier().send(event, DummyContext(), ResponseStatus.FAILED, {})

    assert captured_requests == []


def test_recording_notifier_keeps_responses():
    notifier = RecordingNotifier()

    assert notifier.last is None
    notifier.send(make_event("Create", {}), None, ResponseStatus.SUCCESS, {}, "r1")

    assert notifier.last["PhysicalResourceId"] == "r1"
