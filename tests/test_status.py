import pytest

from stampqr.errors import NotAuthorized, ValidationError
from stampqr.services.status import QrStatus

from .helpers import START


def test_pending_then_redeemed(services, customer):
    issued = services.issuance.issue_stamp_qr('biz_1', 3)
    assert services.status.check_status('biz_1', issued.redemption_id) is QrStatus.PENDING

    services.ledger.redeem(issued.token, 'cust_9')
    assert services.status.check_status('biz_1', issued.redemption_id) is QrStatus.REDEEMED


def test_expired_when_never_redeemed(services, business, clock):
    issued = services.issuance.issue_stamp_qr('biz_1', 3)
    clock.advance(30)
    assert services.status.check_status('biz_1', issued.redemption_id) is QrStatus.PENDING
    clock.advance(1)
    assert services.status.check_status('biz_1', issued.redemption_id) is QrStatus.EXPIRED


def test_redeemed_stays_redeemed_after_ttl(services, customer, clock):
    issued = services.issuance.issue_stamp_qr('biz_1', 3)
    services.ledger.redeem(issued.token, 'cust_9')
    clock.advance(3600)
    assert services.status.check_status('biz_1', issued.redemption_id) is QrStatus.REDEEMED


def test_status_does_not_consume(services, customer):
    issued = services.issuance.issue_stamp_qr('biz_1', 3)
    for _ in range(3):
        services.status.check_status('biz_1', issued.redemption_id)
    assert services.ledger.redeem(issued.token, 'cust_9').stamps_awarded == 3


def test_other_business_pending_query_not_authorized(services, business, other_business):
    issued = services.issuance.issue_stamp_qr('biz_1', 3)
    with pytest.raises(NotAuthorized):
        services.status.check_status(other_business.id, issued.redemption_id)


def test_other_business_redeemed_query_not_authorized(services, customer, other_business, clock):
    issued = services.issuance.issue_stamp_qr('biz_1', 3)
    services.ledger.redeem(issued.token, 'cust_9')
    clock.advance(3600)
    with pytest.raises(NotAuthorized):
        services.status.check_status(other_business.id, issued.redemption_id)


class TestWithoutCacheEntry:
    def test_caller_supplied_issue_time_inside_window(self, services, business):
        assert services.status.check_status('biz_1', 'r_unknown', issued_at=START - 10) is QrStatus.PENDING

    def test_caller_supplied_issue_time_outside_window(self, services, business):
        assert services.status.check_status('biz_1', 'r_unknown', issued_at=START - 31) is QrStatus.EXPIRED

    def test_unknown_id_is_expired(self, services, business):
        assert services.status.check_status('biz_1', 'r_unknown') is QrStatus.EXPIRED


def test_redemption_id_required(services, business):
    with pytest.raises(ValidationError):
        services.status.check_status('biz_1', '')
