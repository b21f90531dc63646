"""Reconcilers for the Custom::Events::Rule and Custom::Events::Target types."""

from .rule import RuleDesiredState, RuleReconciler
from .target import TargetDesiredState, TargetReconciler

__all__ = [
    "RuleDesiredState",
    "RuleReconciler",
    "TargetDesiredState",
    "TargetReconciler",
]
