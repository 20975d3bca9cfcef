import time
from enum import Enum

from ..errors import NotAuthorized, ValidationError
from ..repository import StampRepository
from .issuance import QR_TTL_SECONDS


class QrStatus(str, Enum):
    PENDING = 'pending'
    REDEEMED = 'redeemed'
    EXPIRED = 'expired'


class QrStatusService:
    """Read-only view of a QR's lifecycle for the business that issued it."""

    def __init__(self, pending, repository: StampRepository | None = None,
                 ttl: int = QR_TTL_SECONDS, clock=time.time):
        self.pending = pending
        self.repository = repository or StampRepository()
        self.ttl = ttl
        self.clock = clock

    def check_status(self, business_id: str, redemption_id: str, issued_at: int | None = None) -> QrStatus:
        if not redemption_id:
            raise ValidationError('redemption_id is required')

        record = self.repository.find_by_redemption_id(redemption_id)
        if record is not None:
            if record.business_id != business_id:
                raise NotAuthorized()
            return QrStatus.REDEEMED

        now = int(self.clock())
        entry = self.pending.lookup(redemption_id)
        if entry is not None:
            if entry['business_id'] != business_id:
                raise NotAuthorized()
            return QrStatus.PENDING if now <= entry['expires_at'] else QrStatus.EXPIRED

        # aged out of the cache, or never issued: either way no longer redeemable
        if issued_at is not None and now <= int(issued_at) + self.ttl:
            return QrStatus.PENDING
        return QrStatus.EXPIRED
