"""
Tests for the request status, owner approval and payment-setup state machines.
"""

import pytest

from property_portal.models.manager_request import ApprovalStatus, RequestStatus
from property_portal.services.workflow import (
    ApprovalMachine,
    PaymentSetupEvent,
    PaymentSetupMachine,
    PaymentSetupStep,
    RequestStatusMachine,
    TERMINAL_STATUSES,
)
from property_portal.utils.exceptions import InvalidTransitionError


class TestRequestStatusMachine:
    """Test status transitions for manager requests."""

    def setup_method(self):
        self.machine = RequestStatusMachine()

    @pytest.mark.parametrize("current,target", [
        (RequestStatus.PENDING, RequestStatus.WORKING),
        (RequestStatus.PENDING, RequestStatus.REJECTED),
        (RequestStatus.WORKING, RequestStatus.FINISHED),
        (RequestStatus.WORKING, RequestStatus.REJECTED),
    ])
    def test_allowed_transitions(self, current, target):
        self.machine.validate(current, target)

    @pytest.mark.parametrize("current,target", [
        (RequestStatus.PENDING, RequestStatus.FINISHED),
        (RequestStatus.FINISHED, RequestStatus.WORKING),
        (RequestStatus.REJECTED, RequestStatus.PENDING),
        (RequestStatus.WORKING, RequestStatus.PENDING),
    ])
    def test_forbidden_transitions(self, current, target):
        with pytest.raises(InvalidTransitionError):
            self.machine.validate(current, target)

    def test_same_status_is_allowed_for_notes_only_edits(self):
        for status in RequestStatus:
            self.machine.validate(status, status)

    def test_terminal_statuses(self):
        assert TERMINAL_STATUSES == {RequestStatus.FINISHED, RequestStatus.REJECTED}
        assert self.machine.allowed_targets(RequestStatus.FINISHED) == []

    def test_declined_request_can_only_be_rejected(self):
        with pytest.raises(InvalidTransitionError):
            self.machine.validate(RequestStatus.PENDING, RequestStatus.WORKING, ApprovalStatus.DECLINED)

        self.machine.validate(RequestStatus.PENDING, RequestStatus.REJECTED, ApprovalStatus.DECLINED)

    def test_transition_error_is_conflict(self):
        with pytest.raises(InvalidTransitionError) as exc_info:
            self.machine.validate(RequestStatus.FINISHED, RequestStatus.PENDING)
        assert exc_info.value.status_code == 409


class TestApprovalMachine:

    def setup_method(self):
        self.machine = ApprovalMachine()

    def test_first_decision_on_open_request(self):
        self.machine.validate(None, ApprovalStatus.APPROVED, RequestStatus.PENDING)
        self.machine.validate(None, ApprovalStatus.DECLINED, RequestStatus.WORKING)

    def test_decision_is_final(self):
        with pytest.raises(InvalidTransitionError):
            self.machine.validate(ApprovalStatus.APPROVED, ApprovalStatus.DECLINED, RequestStatus.PENDING)

    def test_repeating_the_same_decision_is_allowed(self):
        self.machine.validate(ApprovalStatus.APPROVED, ApprovalStatus.APPROVED, RequestStatus.WORKING)

    @pytest.mark.parametrize("status", [RequestStatus.FINISHED, RequestStatus.REJECTED])
    def test_no_decision_on_closed_request(self, status):
        with pytest.raises(InvalidTransitionError):
            self.machine.validate(None, ApprovalStatus.APPROVED, status)


class TestPaymentSetupMachine:

    def setup_method(self):
        self.machine = PaymentSetupMachine()

    def test_happy_path(self):
        step = PaymentSetupStep.BANK
        step = self.machine.next_step(step, PaymentSetupEvent.BANK_CAPTURED)
        assert step == PaymentSetupStep.DEPOSIT
        step = self.machine.next_step(step, PaymentSetupEvent.DEPOSIT_CHARGED)
        assert step == PaymentSetupStep.CARD
        step = self.machine.next_step(step, PaymentSetupEvent.CARD_CAPTURED)
        assert step == PaymentSetupStep.COMPLETE

    def test_existing_bank_account_advances(self):
        assert self.machine.next_step(
            PaymentSetupStep.BANK, PaymentSetupEvent.BANK_ALREADY_EXISTS
        ) == PaymentSetupStep.DEPOSIT

    def test_failed_deposit_returns_to_bank_step(self):
        assert self.machine.next_step(
            PaymentSetupStep.DEPOSIT, PaymentSetupEvent.DEPOSIT_FAILED
        ) == PaymentSetupStep.BANK

    def test_out_of_order_event_is_rejected(self):
        with pytest.raises(InvalidTransitionError):
            self.machine.next_step(PaymentSetupStep.BANK, PaymentSetupEvent.DEPOSIT_CHARGED)
        with pytest.raises(InvalidTransitionError):
            self.machine.next_step(PaymentSetupStep.COMPLETE, PaymentSetupEvent.CARD_CAPTURED)

    @pytest.mark.parametrize("flags,expected", [
        ((False, False, False), PaymentSetupStep.BANK),
        ((True, False, False), PaymentSetupStep.DEPOSIT),
        ((True, True, False), PaymentSetupStep.CARD),
        ((True, True, True), PaymentSetupStep.COMPLETE),
        ((False, True, True), PaymentSetupStep.BANK),
        ((True, False, True), PaymentSetupStep.DEPOSIT),
    ])
    def test_resume_step_uses_completed_prefix(self, flags, expected):
        assert self.machine.resume_step(*flags) == expected
