from datetime import date, datetime

import pytest

from src.crm_core.crm_core.core.enums import LeaveCategory, LeaveStatus, NotificationType
from src.crm_core.crm_core.core.exceptions import (
    AlreadyProcessedError,
    InvalidRangeError,
    NotFoundError,
    QuotaExceededError,
    ValidationError,
)
from src.crm_core.crm_core.leave.ledger import QuotaLedger
from src.crm_core.crm_core.leave.service import LeaveService
from src.crm_core.crm_core.notifications.registry import SessionRegistry
from src.crm_core.crm_core.notifications.service import NotificationHub

from tests.fakes import (
    ALICE,
    BOB,
    CAROL,
    FixedClock,
    InMemoryEmployees,
    InMemoryLeaveRequests,
    InMemoryNotifications,
    InMemoryQuotas,
)

NOW = datetime(2024, 12, 4, 10, 0)
SICK = LeaveCategory.SICK
VACATION = LeaveCategory.VACATION


class Harness:
    def __init__(self, requests=None, quotas=None):
        clock = FixedClock(NOW)
        self.quotas = quotas or InMemoryQuotas()
        self.requests = requests or InMemoryLeaveRequests()
        self.notifications = InMemoryNotifications()
        self.ledger = QuotaLedger(self.quotas)
        hub = NotificationHub(self.notifications, SessionRegistry(), clock=clock)
        self.service = LeaveService(
            self.requests,
            self.ledger,
            InMemoryEmployees.of(ALICE, BOB, CAROL),
            hub,
            clock=clock,
        )


class LosingDecisions(InMemoryLeaveRequests):
    """Someone else decides every request between our read and our update."""

    def decide(self, **kwargs) -> bool:
        return False


class RacingQuotas(InMemoryQuotas):
    """Another request consumes the same days just before every guarded increment."""

    def increment_used(self, *, quota_id, days, within_allowance=False, expected_used=None) -> bool:
        if within_allowance or expected_used is not None:
            super().increment_used(quota_id=quota_id, days=days)
            return False
        return super().increment_used(quota_id=quota_id, days=days)


class FailingCreate(InMemoryLeaveRequests):
    def create(self, **kwargs) -> int:
        raise RuntimeError("insert failed")


@pytest.fixture
def h():
    return Harness()


def test_end_date_before_start_date_is_rejected(h):
    with pytest.raises(InvalidRangeError):
        h.service.submit(ALICE.employee_id, SICK, date(2024, 12, 5), date(2024, 12, 4))
    assert h.requests.rows == {}


def test_first_sick_request_is_auto_approved(h):
    leave = h.service.submit(ALICE.employee_id, SICK, date(2024, 12, 4), date(2024, 12, 4), "flu")

    assert leave.status is LeaveStatus.AUTO_APPROVED
    assert leave.auto_approved is True
    assert leave.employee.first_name == "Alice"

    quota = h.ledger.get_quota(ALICE.employee_id, SICK, NOW)
    assert (quota.used, quota.remaining) == (1, 1)

    [note] = h.notifications.for_recipient(ALICE.employee_id)
    assert note.type is NotificationType.LEAVE_UPDATE
    assert note.title == "Sick Leave Auto-Approved"
    assert note.payload == {"request_id": leave.request_id, "status": "AUTO_APPROVED"}


def test_second_sick_request_in_same_month_needs_approval(h):
    h.service.submit(ALICE.employee_id, SICK, date(2024, 12, 4), date(2024, 12, 4))
    second = h.service.submit(ALICE.employee_id, SICK, date(2024, 12, 10), date(2024, 12, 10))

    assert second.status is LeaveStatus.PENDING
    assert second.auto_approved is False
    assert h.quotas.used(ALICE.employee_id, SICK) == 1

    [admin_note] = h.notifications.for_recipient(BOB.employee_id)
    assert admin_note.title == "New Sick Leave Request"
    assert "Alice Nguyen requested 1 sick day (1 days remaining in quota)" in admin_note.message
    assert h.notifications.for_recipient(CAROL.employee_id) == []


def test_sick_request_larger_than_allowance_goes_to_admins(h):
    leave = h.service.submit(ALICE.employee_id, SICK, date(2024, 12, 4), date(2024, 12, 6))

    assert leave.status is LeaveStatus.PENDING
    assert h.quotas.used(ALICE.employee_id, SICK) == 0
    [admin_note] = h.notifications.for_recipient(BOB.employee_id)
    assert "(Quota exhausted - 0/2 days used)" in admin_note.message


def test_failed_insert_returns_auto_approved_days():
    h = Harness(requests=FailingCreate())

    with pytest.raises(RuntimeError):
        h.service.submit(ALICE.employee_id, SICK, date(2024, 12, 4), date(2024, 12, 4))

    assert h.quotas.used(ALICE.employee_id, SICK) == 0


def test_vacation_over_quota_is_blocked_without_creating_request(h):
    with pytest.raises(QuotaExceededError) as exc:
        h.service.submit(ALICE.employee_id, VACATION, date(2024, 12, 2), date(2024, 12, 7))

    assert "Remaining: 5 days" in str(exc.value)
    assert h.requests.rows == {}


def test_vacation_submission_does_not_touch_ledger(h):
    leave = h.service.submit(ALICE.employee_id, VACATION, date(2024, 12, 16), date(2024, 12, 18), "trip")

    assert leave.status is LeaveStatus.PENDING
    assert h.quotas.used(ALICE.employee_id, VACATION) == 0
    assert h.notifications.rows == {}


def test_approving_vacation_consumes_quota_and_notifies_employee(h):
    leave = h.service.submit(ALICE.employee_id, VACATION, date(2024, 12, 16), date(2024, 12, 18))

    approved = h.service.approve(leave.request_id, BOB.employee_id, "enjoy")

    assert approved.status is LeaveStatus.APPROVED
    assert approved.approver_id == BOB.employee_id
    assert approved.approver.first_name == "Bob"
    assert approved.admin_comment == "enjoy"

    quota = h.ledger.get_quota(ALICE.employee_id, VACATION, NOW)
    assert (quota.used, quota.remaining) == (3, 2)

    [note] = h.notifications.for_recipient(ALICE.employee_id)
    assert note.title == "Leave Request Approved"
    assert "quarterly quota (5 days per quarter)" in note.message


def test_vacation_approval_rechecks_quota(h):
    first = h.service.submit(ALICE.employee_id, VACATION, date(2024, 12, 16), date(2024, 12, 18))
    second = h.service.submit(ALICE.employee_id, VACATION, date(2024, 12, 23), date(2024, 12, 25))

    h.service.approve(first.request_id, BOB.employee_id)
    with pytest.raises(QuotaExceededError):
        h.service.approve(second.request_id, BOB.employee_id)

    assert h.requests.get_by_id(second.request_id).status is LeaveStatus.PENDING
    assert h.quotas.used(ALICE.employee_id, VACATION) == 3


def test_approving_processed_request_leaves_quota_alone(h):
    leave = h.service.submit(ALICE.employee_id, VACATION, date(2024, 12, 16), date(2024, 12, 17))
    h.service.approve(leave.request_id, BOB.employee_id)

    with pytest.raises(AlreadyProcessedError):
        h.service.approve(leave.request_id, BOB.employee_id)

    assert h.quotas.used(ALICE.employee_id, VACATION) == 2


def test_auto_approved_request_cannot_be_approved_again(h):
    leave = h.service.submit(ALICE.employee_id, SICK, date(2024, 12, 4), date(2024, 12, 4))

    with pytest.raises(AlreadyProcessedError):
        h.service.approve(leave.request_id, BOB.employee_id)

    assert h.quotas.used(ALICE.employee_id, SICK) == 1


def test_losing_a_concurrent_decision_releases_quota():
    h = Harness(requests=LosingDecisions())
    leave = h.service.submit(ALICE.employee_id, VACATION, date(2024, 12, 16), date(2024, 12, 17))

    with pytest.raises(AlreadyProcessedError):
        h.service.approve(leave.request_id, BOB.employee_id)

    assert h.quotas.used(ALICE.employee_id, VACATION) == 0
    assert h.notifications.for_recipient(ALICE.employee_id) == []


def test_sick_approval_may_exceed_quota(h):
    h.service.submit(ALICE.employee_id, SICK, date(2024, 12, 2), date(2024, 12, 3))
    pending = h.service.submit(ALICE.employee_id, SICK, date(2024, 12, 9), date(2024, 12, 9))

    h.service.approve(pending.request_id, BOB.employee_id)

    quota = h.ledger.get_quota(ALICE.employee_id, SICK, NOW)
    assert (quota.used, quota.remaining) == (3, 0)


def test_missing_request_is_not_found(h):
    with pytest.raises(NotFoundError):
        h.service.approve(999, BOB.employee_id)


def test_reject_requires_comment(h):
    leave = h.service.submit(ALICE.employee_id, VACATION, date(2024, 12, 16), date(2024, 12, 17))

    with pytest.raises(ValidationError):
        h.service.reject(leave.request_id, BOB.employee_id, "   ")

    assert h.requests.get_by_id(leave.request_id).status is LeaveStatus.PENDING


def test_reject_stores_comment_and_notifies(h):
    leave = h.service.submit(ALICE.employee_id, VACATION, date(2024, 12, 16), date(2024, 12, 17))

    rejected = h.service.reject(leave.request_id, BOB.employee_id, "busy week")

    assert rejected.status is LeaveStatus.REJECTED
    assert rejected.admin_comment == "busy week"
    assert h.quotas.used(ALICE.employee_id, VACATION) == 0
    [note] = h.notifications.for_recipient(ALICE.employee_id)
    assert note.title == "Leave Request Rejected"
    assert note.message == "Your vacation leave request has been rejected"
    assert note.payload["comment"] == "busy week"


def test_listings_are_newest_first_and_filterable(h):
    h.service.submit(ALICE.employee_id, SICK, date(2024, 12, 4), date(2024, 12, 4))
    h.service.submit(CAROL.employee_id, VACATION, date(2024, 12, 16), date(2024, 12, 16))
    h.service.submit(ALICE.employee_id, VACATION, date(2024, 12, 20), date(2024, 12, 20))

    mine = h.service.my_requests(ALICE.employee_id)
    pending = h.service.all_requests(LeaveStatus.PENDING)

    assert [r.request_id for r in mine] == [3, 1]
    assert [r.request_id for r in pending] == [3, 2]
    assert len(h.service.all_requests()) == 3


def test_quotas_report_both_categories(h):
    h.service.submit(ALICE.employee_id, SICK, date(2024, 12, 4), date(2024, 12, 4))

    quotas = h.service.quotas(ALICE.employee_id)

    assert quotas["sick"].remaining == 1
    assert quotas["vacation"].remaining == 5


def test_sick_request_losing_the_first_consumption_waits_for_an_admin():
    h = Harness(quotas=RacingQuotas())

    leave = h.service.submit(ALICE.employee_id, SICK, date(2024, 12, 4), date(2024, 12, 4))

    assert leave.status is LeaveStatus.PENDING
    assert leave.auto_approved is False
    assert h.quotas.used(ALICE.employee_id, SICK) == 1
    [admin_note] = h.notifications.for_recipient(BOB.employee_id)
    assert "requested 1 sick day (1 days remaining in quota)" in admin_note.message
    assert h.notifications.for_recipient(ALICE.employee_id) == []


def test_vacation_approval_losing_the_balance_keeps_request_pending():
    h = Harness(quotas=RacingQuotas())
    leave = h.service.submit(ALICE.employee_id, VACATION, date(2024, 12, 16), date(2024, 12, 17))

    with pytest.raises(QuotaExceededError) as exc:
        h.service.approve(leave.request_id, BOB.employee_id)

    assert "balance changed" in str(exc.value)
    assert h.requests.get_by_id(leave.request_id).status is LeaveStatus.PENDING
    assert h.quotas.used(ALICE.employee_id, VACATION) == 2
    assert h.notifications.for_recipient(ALICE.employee_id) == []
