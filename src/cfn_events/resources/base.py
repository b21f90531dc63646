"""Shared plumbing for the Rule and Target reconcilers."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Mapping, Optional, Type, TypeVar

from botocore.exceptions import BotoCoreError, ClientError
from pydantic import BaseModel, ValidationError

from ..exceptions import CustomResourceError, PropertyValidationError, TransportError
from ..models import LifecycleEvent, ReconciliationOutcome
from ..naming import unique_suffix

ModelT = TypeVar("ModelT", bound=BaseModel)


def parse_properties(model: Type[ModelT], properties: Mapping[str, Any], resource_kind: str) -> ModelT:
    """Validate ResourceProperties into a desired-state model."""
    try:
        return model.model_validate(dict(properties))
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg')}" for err in e.errors()
        )
        raise PropertyValidationError(
            f"Invalid {resource_kind} properties: {problems}", resource_kind=resource_kind
        ) from e


class BaseReconciler:
    """Holds the injected collaborators and wraps events API calls.

    Args:
        events_client: boto3 ``events`` client or a compatible fake
        suffix_generator: callable returning a random name suffix
        log: logger used for request and error logging
    """

    def __init__(
        self,
        events_client: Any,
        suffix_generator: Callable[[], str] = unique_suffix,
        log: Optional[logging.Logger] = None,
    ):
        self.events = events_client
        self.suffix_generator = suffix_generator
        self.log = log or logging.getLogger(type(self).__module__)

    def _call(self, operation: str, **params: Any) -> Dict[str, Any]:
        try:
            return getattr(self.events, operation)(**params) or {}
        except (ClientError, BotoCoreError) as e:
            raise TransportError.from_boto(e, operation) from e

    def _failed(self, event: LifecycleEvent, error: CustomResourceError) -> ReconciliationOutcome:
        """Log ``error`` with its traceback and build a FAILED outcome.

        The physical id of an existing resource is always echoed back;
        CloudFormation reads a changed id as a replacement.
        """
        self.log.error("%s", error, exc_info=error)
        return ReconciliationOutcome.failed(event.physical_resource_id, reason=str(error))
