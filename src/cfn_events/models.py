"""Request and outcome records exchanged with CloudFormation."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping


class RequestType(str, Enum):
    CREATE = "Create"
    UPDATE = "Update"
    DELETE = "Delete"


class ResponseStatus(str, Enum):
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"


@dataclass(frozen=True)
class LifecycleEvent:
    """A single CloudFormation custom resource request.

    ``request_type`` keeps the raw value so that an unsupported type can be
    reported as-is. ``physical_resource_id`` is only present on Update and
    Delete.
    """

    request_type: str
    stack_id: str
    logical_resource_id: str
    resource_properties: Mapping[str, Any] = field(default_factory=dict)
    physical_resource_id: str | None = None
    old_resource_properties: Mapping[str, Any] | None = None
    request_id: str | None = None
    response_url: str | None = None
    resource_type: str | None = None
    raw: Mapping[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_dict(cls, event: Mapping[str, Any]) -> "LifecycleEvent":
        props = event.get("ResourceProperties") or {}
        old_props = event.get("OldResourceProperties")
        return cls(
            request_type=str(event.get("RequestType", "")),
            stack_id=str(event.get("StackId", "")),
            logical_resource_id=str(event.get("LogicalResourceId", "")),
            resource_properties=MappingProxyType(dict(props)),
            physical_resource_id=event.get("PhysicalResourceId") or None,
            old_resource_properties=MappingProxyType(dict(old_props)) if old_props is not None else None,
            request_id=event.get("RequestId"),
            response_url=event.get("ResponseURL"),
            resource_type=event.get("ResourceType"),
            raw=MappingProxyType(dict(event)),
        )

    @property
    def is_update(self) -> bool:
        return self.request_type == RequestType.UPDATE.value


@dataclass(frozen=True)
class ReconciliationOutcome:
    """Result of one reconciliation, sent to CloudFormation exactly once."""

    status: ResponseStatus
    data: dict[str, Any] = field(default_factory=dict)
    physical_resource_id: str | None = None
    reason: str | None = None

    @classmethod
    def success(cls, data: Mapping[str, Any] | None = None, physical_resource_id: str | None = None) -> "ReconciliationOutcome":
        return cls(ResponseStatus.SUCCESS, dict(data or {}), physical_resource_id)

    @classmethod
    def failed(cls, physical_resource_id: str | None = None, reason: str | None = None) -> "ReconciliationOutcome":
        # Failures never expose resource attributes.
        return cls(ResponseStatus.FAILED, {}, physical_resource_id, reason)

    @property
    def succeeded(self) -> bool:
        return self.status is ResponseStatus.SUCCESS

    def to_dict(self) -> dict[str, Any]:
        return {
            "Status": self.status.value,
            "Data": dict(self.data),
            "PhysicalResourceId": self.physical_resource_id,
            "Reason": self.reason,
        }
