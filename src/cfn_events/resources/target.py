"""Custom::Events::Target reconciler.

Adds a target to a rule, or updates it in place when it is already
attached. Template declaration::

    CloudWatchEventsRuleTarget:
      Type: Custom::Events::Target
      Properties:
        ServiceToken: !ImportValue CustomResource-CloudWatchEventsTargetLambdaArn
        Rule: !Ref CloudWatchEventsRule   # required, the rule name
        Arn: STRING                       # required, the target ARN
        RoleArn: STRING
        Input: STRING | MAP
        InputPath: STRING
        InputTransformer:
          InputTemplate: STRING
          InputPathsMap: {KEY: JSONPATH}
        KinesisParameters:
          PartitionKeyPath: STRING
        RunCommandParameters:
          RunCommandTargets:
            - Key: STRING
              Values: [STRING]
        EcsParameters:
          TaskDefinitionArn: STRING
          TaskCount: NUMBER

The target Id is generated on create and becomes the physical id. It must
stay stable across updates, otherwise PutTargets adds a second target
instead of replacing the first.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..exceptions import CustomResourceError, PartialEntryFailureError, PropertyValidationError
from ..models import LifecycleEvent, ReconciliationOutcome
from ..naming import default_target_id, is_valid_events_name
from .base import BaseReconciler, parse_properties


class _TargetParameters(BaseModel):
    # Keys not modelled here are passed through to the events API as-is.
    model_config = ConfigDict(populate_by_name=True, extra="allow", frozen=True)


class InputTransformer(_TargetParameters):
    input_template: str = Field(..., alias="InputTemplate")
    input_paths_map: Optional[Dict[str, str]] = Field(None, alias="InputPathsMap")


class KinesisParameters(_TargetParameters):
    partition_key_path: str = Field(..., alias="PartitionKeyPath")


class RunCommandTarget(_TargetParameters):
    key: str = Field(..., alias="Key")
    target_values: List[str] = Field(..., alias="Values")


class RunCommandParameters(_TargetParameters):
    run_command_targets: List[RunCommandTarget] = Field(..., alias="RunCommandTargets")


class EcsParameters(_TargetParameters):
    task_definition_arn: str = Field(..., alias="TaskDefinitionArn")
    # CloudFormation passes numbers as strings
    task_count: Optional[int] = Field(None, alias="TaskCount")


class TargetDesiredState(BaseModel):
    """Target properties as declared in the template."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    rule: str = Field(..., alias="Rule")
    arn: str = Field(..., alias="Arn")
    role_arn: Optional[str] = Field(None, alias="RoleArn")
    input: Optional[str] = Field(None, alias="Input")
    input_path: Optional[str] = Field(None, alias="InputPath")
    input_transformer: Optional[InputTransformer] = Field(None, alias="InputTransformer")
    kinesis_parameters: Optional[KinesisParameters] = Field(None, alias="KinesisParameters")
    run_command_parameters: Optional[RunCommandParameters] = Field(None, alias="RunCommandParameters")
    ecs_parameters: Optional[EcsParameters] = Field(None, alias="EcsParameters")

    @field_validator("input", mode="before")
    @classmethod
    def serialize_input(cls, v: Any) -> Any:
        if isinstance(v, (dict, list)):
            return json.dumps(v, separators=(",", ":"))
        return v

    @classmethod
    def from_properties(cls, properties: Mapping[str, Any]) -> "TargetDesiredState":
        return parse_properties(cls, properties, "Target")

    def to_target(self, target_id: str) -> Dict[str, Any]:
        """Build the PutTargets entry; unset fields are left out entirely."""
        target = self.model_dump(by_alias=True, exclude_none=True, exclude={"rule"})
        return {"Id": target_id, **target}


class TargetReconciler(BaseReconciler):
    """Put and remove a single target on a CloudWatch Events rule."""

    def resolve_target_id(self, event: LifecycleEvent) -> str:
        if event.is_update and event.physical_resource_id:
            return event.physical_resource_id
        return default_target_id(event.logical_resource_id, self.suffix_generator())

    def upsert(self, event: LifecycleEvent) -> ReconciliationOutcome:
        try:
            desired = TargetDesiredState.from_properties(event.resource_properties)
            target_id = self.resolve_target_id(event)
            params = {"Rule": desired.rule, "Targets": [desired.to_target(target_id)]}
            self.log.info("CloudWatchEvents PutTargets %s", json.dumps(params))
            response = self._call("put_targets", **params)
            self._raise_for_failed_entries(response, "put_targets")
        except PartialEntryFailureError as e:
            return ReconciliationOutcome.failed(event.physical_resource_id, reason=str(e))
        except CustomResourceError as e:
            return self._failed(event, e)

        return ReconciliationOutcome.success({}, target_id)

    # PutTargets is keyed by target Id, so both request types share it
    create = upsert
    update = upsert

    def delete(self, event: LifecycleEvent) -> ReconciliationOutcome:
        if not is_valid_events_name(event.physical_resource_id):
            self.log.warning("Target %s was never created, nothing to delete", event.physical_resource_id)
            return ReconciliationOutcome.success({}, event.physical_resource_id)

        try:
            rule = event.resource_properties.get("Rule")
            if not rule:
                raise PropertyValidationError("Invalid Target properties: Rule: Field required", resource_kind="Target")
            params = {"Rule": rule, "Ids": [event.physical_resource_id]}
            self.log.info("CloudWatchEvents RemoveTargets %s", json.dumps(params))
            response = self._call("remove_targets", **params)
            self._raise_for_failed_entries(response, "remove_targets")
        except PartialEntryFailureError as e:
            return ReconciliationOutcome.failed(event.physical_resource_id, reason=str(e))
        except CustomResourceError as e:
            return self._failed(event, e)

        return ReconciliationOutcome.success({}, event.physical_resource_id)

    def _raise_for_failed_entries(self, response: Mapping[str, Any], operation: str) -> None:
        """Log every failed entry, then raise if there were any.

        The call can succeed while individual entries fail; this resource
        only ever sends one entry, so any failure is its own.
        """
        failed_count = response.get("FailedEntryCount") or 0
        if failed_count <= 0:
            return

        entries = list(response.get("FailedEntries") or [])
        for entry in entries:
            self.log.error("%s: %s", entry.get("ErrorCode"), entry.get("ErrorMessage"))

        summary = "; ".join(f"{e.get('ErrorCode')}: {e.get('ErrorMessage')}" for e in entries)
        raise PartialEntryFailureError(
            f"{operation} reported {failed_count} failed entries: {summary}",
            failed_entries=entries,
        )
