"""
State machines for manager request status, owner approval and the tenant
payment-setup wizard.

Each machine is a transition table plus a validator; persistence stays in
the services that call them.
"""

import enum
from typing import Dict, FrozenSet, Optional, Tuple

from property_portal.models.manager_request import ApprovalStatus, RequestStatus
from property_portal.utils.exceptions import InvalidTransitionError

S = RequestStatus

# from_status -> allowed target statuses
STATUS_TRANSITIONS: Dict[RequestStatus, FrozenSet[RequestStatus]] = {
    S.PENDING: frozenset({S.WORKING, S.REJECTED}),
    S.WORKING: frozenset({S.FINISHED, S.REJECTED}),
    S.FINISHED: frozenset(),
    S.REJECTED: frozenset(),
}

TERMINAL_STATUSES = frozenset(s for s, targets in STATUS_TRANSITIONS.items() if not targets)

# Approval can only be recorded while work is still open
APPROVAL_OPEN_STATUSES = frozenset({S.PENDING, S.WORKING})


class RequestStatusMachine:
    """Validates workflow status changes on a manager request."""

    def can_transition(self, current: RequestStatus, target: RequestStatus) -> bool:
        if current == target:
            # Notes-only edits keep the status
            return True
        return target in STATUS_TRANSITIONS.get(current, frozenset())

    def validate(
        self,
        current: RequestStatus,
        target: RequestStatus,
        approval: Optional[ApprovalStatus] = None,
    ) -> None:
        """
        Raise InvalidTransitionError unless ``current -> target`` is allowed.

        A declined request may only move to rejected.
        """
        if not self.can_transition(current, target):
            raise InvalidTransitionError("status", current.value, target.value)

        if (
            approval == ApprovalStatus.DECLINED
            and target != current
            and target != S.REJECTED
        ):
            raise InvalidTransitionError("status", current.value, target.value)

    def allowed_targets(self, current: RequestStatus) -> list:
        return sorted(STATUS_TRANSITIONS.get(current, frozenset()), key=lambda s: s.value)


class ApprovalMachine:
    """
    Owner approval: unset -> approved | declined. Decisions are final.
    """

    def validate(
        self,
        current: Optional[ApprovalStatus],
        target: ApprovalStatus,
        status: RequestStatus,
    ) -> None:
        if current is not None and current != target:
            raise InvalidTransitionError("approval", current.value, target.value)

        if status not in APPROVAL_OPEN_STATUSES:
            raise InvalidTransitionError(
                "approval",
                current.value if current else "none",
                f"{target.value} (request is {status.value})",
            )


class PaymentSetupStep(int, enum.Enum):
    BANK = 1
    DEPOSIT = 2
    CARD = 3
    COMPLETE = 4


class PaymentSetupEvent(str, enum.Enum):
    BANK_CAPTURED = "bank_captured"
    BANK_ALREADY_EXISTS = "bank_already_exists"
    DEPOSIT_CHARGED = "deposit_charged"
    DEPOSIT_FAILED = "deposit_failed"
    CARD_CAPTURED = "card_captured"


P = PaymentSetupStep
E = PaymentSetupEvent

WIZARD_TRANSITIONS: Dict[Tuple[PaymentSetupStep, PaymentSetupEvent], PaymentSetupStep] = {
    (P.BANK, E.BANK_CAPTURED): P.DEPOSIT,
    (P.BANK, E.BANK_ALREADY_EXISTS): P.DEPOSIT,
    (P.DEPOSIT, E.DEPOSIT_CHARGED): P.CARD,
    (P.DEPOSIT, E.DEPOSIT_FAILED): P.BANK,
    (P.CARD, E.CARD_CAPTURED): P.COMPLETE,
}


class PaymentSetupMachine:
    """Linear wizard: bank account, security deposit, credit card, complete."""

    def next_step(self, current: PaymentSetupStep, event: PaymentSetupEvent) -> PaymentSetupStep:
        try:
            return WIZARD_TRANSITIONS[(current, event)]
        except KeyError:
            raise InvalidTransitionError("payment setup", current.name.lower(), event.value)

    def resume_step(self, has_checking: bool, deposit_paid: bool, has_card: bool) -> PaymentSetupStep:
        """
        Step to resume at from persisted flags.

        Uses the longest completed prefix of (bank, deposit, card), so a flag
        set out of order never skips an earlier step.
        """
        completed = 0
        for flag in (has_checking, deposit_paid, has_card):
            if not flag:
                break
            completed += 1
        return PaymentSetupStep(completed + 1)
