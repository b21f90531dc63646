"""Name and id generation mimicking CloudFormation generated names."""

from __future__ import annotations

import base64
import re
import secrets

SUFFIX_LENGTH = 13

# Target Ids are limited to 64 characters and the composite
# AWSEvents_<rule>_<target> name to 100.
TARGET_ID_PREFIX_LENGTH = 50

_STACK_ARN_RE = re.compile(r"^.*stack/([^/]+)/.*")
_NON_ALNUM_RE = re.compile(r"[^0-9a-zA-Z]")
_EVENTS_NAME_RE = re.compile(r"^[.\-_A-Za-z0-9]{1,64}$")


def unique_suffix() -> str:
    """Return a random 13 character uppercase alphanumeric string."""
    suffix = ""
    while len(suffix) < SUFFIX_LENGTH:
        raw = base64.b64encode(secrets.token_bytes(20)).decode("ascii")
        suffix += _NON_ALNUM_RE.sub("", raw).upper()
    return suffix[:SUFFIX_LENGTH]


def stack_name_from_id(stack_id: str) -> str:
    """Extract the stack name from a stack ARN; other values pass through."""
    match = _STACK_ARN_RE.match(stack_id)
    if match:
        return match.group(1)
    return stack_id


def default_rule_name(stack_id: str, logical_resource_id: str, suffix: str) -> str:
    return f"{stack_name_from_id(stack_id)}-{logical_resource_id}-{suffix}"


def default_target_id(logical_resource_id: str, suffix: str) -> str:
    return f"{logical_resource_id[:TARGET_ID_PREFIX_LENGTH]}-{suffix}"


def is_valid_events_name(value: str | None) -> bool:
    """True when ``value`` could name a rule or a target Id.

    A failed first Create reports the Lambda log stream name as its physical
    id; such a value never names anything in CloudWatch Events.
    """
    return bool(value and _EVENTS_NAME_RE.match(value))
