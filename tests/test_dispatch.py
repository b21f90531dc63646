import logging
from unittest.mock import Mock

from conftest import DummyEventsClient, make_event
from cfn_events.dispatch import dispatch
from cfn_events.models import ReconciliationOutcome, ResponseStatus
from cfn_events.resources import RuleReconciler, TargetReconciler


def test_unknown_request_type_sends_failed_without_physical_id(notifier, context, caplog):
    reconciler = Mock()
    event = make_event("Invalid", {})

    with caplog.at_level(logging.ERROR):
        outcome = dispatch(event, context, reconciler, notifier)

    assert outcome.status is ResponseStatus.FAILED
    assert outcome.physical_resource_id is None
    assert len(notifier.responses) == 1
    assert notifier.last["Status"] == "FAILED"
    assert notifier.last["Data"] == {}
    # no physical id assigned yet, so the log stream name is reported
    assert notifier.last["PhysicalResourceId"] == context.log_stream_name
    assert "Unknown RequestType provided: Invalid" in [r.getMessage() for r in caplog.records]
    reconciler.create.assert_not_called()
    reconciler.update.assert_not_called()
    reconciler.delete.assert_not_called()


def test_routes_each_request_type(notifier, context):
    reconciler = Mock()
    reconciler.create.return_value = ReconciliationOutcome.success({}, "c")
    reconciler.update.return_value = ReconciliationOutcome.success({}, "u")
    reconciler.delete.return_value = ReconciliationOutcome.success({}, "d")

    dispatch(make_event("Create", {}), context, reconciler, notifier)
    dispatch(make_event("Update", {}, physical_id="u"), context, reconciler, notifier)
    dispatch(make_event("Delete", {}, physical_id="d"), context, reconciler, notifier)

    assert [r["PhysicalResourceId"] for r in notifier.responses] == ["c", "u", "d"]
    reconciler.create.assert_called_once()
    reconciler.update.assert_called_once()
    reconciler.delete.assert_called_once()


def test_unexpected_exception_still_sends_one_failure(notifier, context):
    reconciler = Mock()
    reconciler.update.side_effect = RuntimeError("kaboom")

    outcome = dispatch(make_event("Update", {}, physical_id="r1"), context, reconciler, notifier)

    assert outcome.status is ResponseStatus.FAILED
    assert len(notifier.responses) == 1
    assert notifier.last["PhysicalResourceId"] == "r1"
    assert "kaboom" in notifier.last["Reason"]


def test_rule_create_scenario_end_to_end(notifier, context):
    client = DummyEventsClient(responses={"put_rule": {"RuleArn": "arn:aws:events:us-east-1:123456789012:rule/r1"}})
    event = make_event("Create", {"Name": "r1", "State": "DISABLED"})

    dispatch(event, context, RuleReconciler(client), notifier)

    assert notifier.responses == [
        {
            "Status": "SUCCESS",
            "Reason": f"See the details in CloudWatch Log Stream: {context.log_stream_name}",
            "PhysicalResourceId": "r1",
            "StackId": event["StackId"],
            "RequestId": "unique-request-id",
            "LogicalResourceId": "MyResource",
            "NoEcho": False,
            "Data": {"Arn": "arn:aws:events:us-east-1:123456789012:rule/r1"},
        }
    ]


def test_target_update_dispatches_to_upsert(notifier, context):
    client = DummyEventsClient()
    event = make_event("Update", {"Rule": "r1", "Arn": "arn:aws:sqs:us-east-1:1:q"}, physical_id="MyResource-EXISTING00000")

    outcome = dispatch(event, context, TargetReconciler(client), notifier)

    assert outcome.succeeded
    assert client.operations() == ["put_targets"]
    assert notifier.last["PhysicalResourceId"] == "MyResource-EXISTING00000"


def test_target_delete_scenario(notifier, context):
    client = DummyEventsClient(responses={"remove_targets": {"FailedEntryCount": 0, "FailedEntries": []}})
    event = make_event("Delete", {"Rule": "r1", "Arn": "arn:aws:sqs:us-east-1:1:q"}, physical_id="MyResource-EXISTING00000")

    dispatch(event, context, TargetReconciler(client), notifier)

    assert notifier.last["Status"] == "SUCCESS"
    assert notifier.last["Data"] == {}
    assert notifier.last["PhysicalResourceId"] == "MyResource-EXISTING00000"


def test_response_url_is_not_logged(notifier, context, caplog):
    reconciler = Mock()
    reconciler.delete.return_value = ReconciliationOutcome.success({}, "r1")

    with caplog.at_level(logging.INFO):
        dispatch(make_event("Delete", {}, physical_id="r1"), context, reconciler, notifier)

    assert not any("presigned" in r.getMessage() for r in caplog.records)


def test_malformed_request_still_sends_one_failure(notifier, context, caplog):
    reconciler = Mock()
    event = make_event("Update", physical_id="r1")
    event["ResourceProperties"] = "not-a-mapping"

    with caplog.at_level(logging.ERROR):
        outcome = dispatch(event, context, reconciler, notifier)

    assert outcome.status is ResponseStatus.FAILED
    assert len(notifier.responses) == 1
    assert notifier.last["Status"] == "FAILED"
    assert notifier.last["PhysicalResourceId"] == "r1"
    assert notifier.last["Reason"].startswith("Malformed request:")
    assert any(r.exc_info for r in caplog.records)
    reconciler.update.assert_not_called()
