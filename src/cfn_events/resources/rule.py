"""Custom::Events::Rule reconciler.

Template declaration::

    CloudWatchEventsRule:
      Type: Custom::Events::Rule
      Properties:
        ServiceToken: !ImportValue CustomResource-CloudWatchEventsRuleLambdaArn
        Name: STRING            # optional, generated when omitted
        Description: STRING
        EventPattern: STRING | MAP
        RoleArn: STRING
        ScheduleExpression: STRING   # e.g. "rate(5 minutes)"
        State: ENABLED | DISABLED

``!Ref`` returns the rule name and ``!GetAtt Rule.Arn`` the rule ARN.

Only ``State`` can be changed in place. Any other change provisions a
replacement rule under a new name; CloudFormation then deletes the old one.
Deleting a rule does not remove its targets, so a replacement leaves the
old targets behind until their own resources are deleted.
"""

from __future__ import annotations

import json
from typing import Any, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..exceptions import CustomResourceError, InvalidStateValueError
from ..models import LifecycleEvent, ReconciliationOutcome
from ..naming import default_rule_name, is_valid_events_name
from .base import BaseReconciler, parse_properties

ENABLED = "ENABLED"
DISABLED = "DISABLED"


def _same_pattern(current: Optional[str], desired: Optional[str]) -> bool:
    if current is None or desired is None:
        return current == desired
    try:
        return json.loads(current) == json.loads(desired)
    except ValueError:
        return current == desired


class RuleDesiredState(BaseModel):
    """Rule properties as declared in the template."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    name: Optional[str] = Field(None, alias="Name")
    description: Optional[str] = Field(None, alias="Description")
    event_pattern: Optional[str] = Field(None, alias="EventPattern")
    role_arn: Optional[str] = Field(None, alias="RoleArn")
    schedule_expression: Optional[str] = Field(None, alias="ScheduleExpression")
    state: Optional[str] = Field(None, alias="State")
    # Not a PutRule parameter; compared on update only when declared.
    arn: Optional[str] = Field(None, alias="Arn")

    @field_validator("event_pattern", mode="before")
    @classmethod
    def serialize_pattern(cls, v: Any) -> Any:
        if isinstance(v, (dict, list)):
            return json.dumps(v, separators=(",", ":"))
        return v

    @classmethod
    def from_properties(cls, properties: Mapping[str, Any]) -> "RuleDesiredState":
        return parse_properties(cls, properties, "Rule")

    def put_rule_params(self, name: str) -> dict[str, Any]:
        params = self.model_dump(by_alias=True, exclude_none=True, exclude={"name", "arn"})
        return {"Name": name, **params}

    def replacement_fields(self, current: Mapping[str, Any], physical_resource_id: str) -> List[str]:
        """Names of immutable fields that differ from the described rule."""
        changed = []
        if current.get("Name") != (self.name or physical_resource_id):
            changed.append("Name")
        if self.arn is not None and current.get("Arn") != self.arn:
            changed.append("Arn")
        if not _same_pattern(current.get("EventPattern"), self.event_pattern):
            changed.append("EventPattern")
        for key, desired in (
            ("ScheduleExpression", self.schedule_expression),
            ("Description", self.description),
            ("RoleArn", self.role_arn),
        ):
            if current.get(key) != desired:
                changed.append(key)
        return changed

    @property
    def effective_state(self) -> str:
        # PutRule enables a rule when State is omitted
        return self.state if self.state is not None else ENABLED


class RuleReconciler(BaseReconciler):
    """Create, update and delete a single CloudWatch Events rule."""

    def resolve_name(self, event: LifecycleEvent, desired: RuleDesiredState) -> str:
        if desired.name:
            return desired.name
        return default_rule_name(event.stack_id, event.logical_resource_id, self.suffix_generator())

    def create(self, event: LifecycleEvent) -> ReconciliationOutcome:
        try:
            desired = RuleDesiredState.from_properties(event.resource_properties)
            name = self.resolve_name(event, desired)
            params = desired.put_rule_params(name)
            self.log.info("CloudWatchEvents PutRule %s", json.dumps(params))
            response = self._call("put_rule", **params)
        except CustomResourceError as e:
            return self._failed(event, e)

        return ReconciliationOutcome.success({"Arn": response.get("RuleArn")}, name)

    def delete(self, event: LifecycleEvent) -> ReconciliationOutcome:
        # TODO: remove the rule's targets first so replaced rules do not keep
        # orphaned targets; needs ListTargetsByRule + RemoveTargets here.
        if not is_valid_events_name(event.physical_resource_id):
            self.log.warning("Rule %s was never created, nothing to delete", event.physical_resource_id)
            return ReconciliationOutcome.success({}, event.physical_resource_id)

        try:
            self._call("delete_rule", Name=event.physical_resource_id)
        except CustomResourceError as e:
            return self._failed(event, e)

        return ReconciliationOutcome.success({}, event.physical_resource_id)

    def update(self, event: LifecycleEvent) -> ReconciliationOutcome:
        physical_id = event.physical_resource_id or ""
        try:
            desired = RuleDesiredState.from_properties(event.resource_properties)
            current = self._call("describe_rule", Name=physical_id)
        except CustomResourceError as e:
            return self._failed(event, e)

        changed = desired.replacement_fields(current, physical_id)
        if changed:
            self.log.info("Rule %s requires replacement, changed: %s", physical_id, ", ".join(changed))
            return self.create(event)

        if current.get("State") == desired.effective_state:
            self.log.info("Rule %s unchanged", physical_id)
            return ReconciliationOutcome.success({}, physical_id)

        try:
            if desired.effective_state == ENABLED:
                self._call("enable_rule", Name=physical_id)
            elif desired.effective_state == DISABLED:
                self._call("disable_rule", Name=physical_id)
            else:
                raise InvalidStateValueError(desired.effective_state)
        except CustomResourceError as e:
            return self._failed(event, e)

        return ReconciliationOutcome.success(dict(event.resource_properties), physical_id)
