"""Which workflow action may move a claim from which status, and to where.

An action applied from a status that has no entry here is a no-op for the
engine, not an error.
"""
from enum import Enum
from typing import Dict, FrozenSet

from .models.claim import ClaimStatus


class ClaimAction(str, Enum):
    SUBMIT = "SUBMIT"
    APPROVE = "APPROVE"
    REJECT = "REJECT"


# action -> {source status -> statuses the action may produce from it}
ACTION_TRANSITIONS: Dict[ClaimAction, Dict[ClaimStatus, FrozenSet[ClaimStatus]]] = {
    ClaimAction.SUBMIT: {
        ClaimStatus.DRAFT: frozenset({ClaimStatus.PENDING, ClaimStatus.REJECTED}),
    },
    ClaimAction.APPROVE: {
        ClaimStatus.PENDING: frozenset({ClaimStatus.APPROVED}),
    },
    ClaimAction.REJECT: {
        ClaimStatus.PENDING: frozenset({ClaimStatus.REJECTED}),
    },
}


def allowed_targets(action: ClaimAction, current_status: ClaimStatus) -> FrozenSet[ClaimStatus]:
    return ACTION_TRANSITIONS[action].get(current_status, frozenset())


def can_apply(action: ClaimAction, current_status: ClaimStatus) -> bool:
    return bool(allowed_targets(action, current_status))


def get_valid_transitions(current_status: ClaimStatus) -> FrozenSet[ClaimStatus]:
    targets: FrozenSet[ClaimStatus] = frozenset()
    for action in ClaimAction:
        targets |= allowed_targets(action, current_status)
    return targets
