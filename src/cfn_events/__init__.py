"""CloudFormation custom resources for CloudWatch Events rules and targets.

Each resource type is backed by a reconciler that turns a CloudFormation
Create/Update/Delete request into CloudWatch Events API calls and reports
the result back to CloudFormation.
"""

__version__ = "0.1.0"

from .dispatch import dispatch
from .exceptions import CustomResourceError, TransportError
from .models import LifecycleEvent, ReconciliationOutcome, RequestType, ResponseStatus
from .resources import RuleReconciler, TargetReconciler

__all__ = [
    "CustomResourceError",
    "LifecycleEvent",
    "ReconciliationOutcome",
    "RequestType",
    "ResponseStatus",
    "RuleReconciler",
    "TargetReconciler",
    "TransportError",
    "dispatch",
]
