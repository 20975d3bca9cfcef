import time, logging
from datetime import datetime, timezone

from ..errors import (
    AlreadyRedeemed,
    CustomerNotFound,
    DuplicateKey,
    ExpiredToken,
    InvalidTokenType,
    MalformedToken,
    ValidationError,
)
from ..models import StampTransaction, SOURCE_QR_SCAN, SOURCE_MANUAL, SOURCE_PROMOTION
from ..repository import StampRepository
from .issuance import validate_stamps
from .tokens import QR_AUDIENCE, new_redemption_id

logger = logging.getLogger(__name__)

GRANT_SOURCES = (SOURCE_MANUAL, SOURCE_PROMOTION)
MAX_HISTORY = 200


def _qr_claims(claims: dict) -> tuple[str, str, int, int]:
    business_id = claims.get('businessId')
    redemption_id = claims.get('redemptionId')
    stamps = claims.get('stampsValue')
    expires_at = claims.get('expiresAt')
    if not isinstance(business_id, str) or not business_id:
        raise MalformedToken('businessId missing')
    if not isinstance(redemption_id, str) or not redemption_id:
        raise MalformedToken('redemptionId missing')
    if isinstance(expires_at, bool) or not isinstance(expires_at, int):
        raise MalformedToken('expiresAt missing')
    try:
        validate_stamps(stamps)
    except ValidationError as exc:
        raise MalformedToken(exc.message) from exc
    return business_id, redemption_id, stamps, expires_at


class RedemptionLedger:
    """Sole writer of StampTransaction rows and customer stamp balances."""

    def __init__(self, codec, repository: StampRepository | None = None, clock=time.time):
        self.codec = codec
        self.repository = repository or StampRepository()
        self.clock = clock

    def _now(self) -> datetime:
        return datetime.fromtimestamp(self.clock(), tz=timezone.utc)

    def redeem(self, token: str, customer_id: str) -> StampTransaction:
        if not customer_id:
            raise ValidationError('customer_id is required')
        claims = self.codec.decode(token)
        if claims.get('aud') != QR_AUDIENCE or claims.get('type') != 'qr':
            raise InvalidTokenType()
        business_id, redemption_id, stamps, expires_at = _qr_claims(claims)
        if int(self.clock()) > expires_at:
            raise ExpiredToken()
        if expires_at != claims['exp']:
            raise MalformedToken('expiresAt does not match envelope expiry')

        record = self._append(
            business_id=business_id,
            customer_id=customer_id,
            redemption_id=redemption_id,
            stamps=stamps,
            source=SOURCE_QR_SCAN,
            notes=None,
            count_visit=True,
        )
        logger.info('redeemed qr %s customer=%s stamps=%d', redemption_id, customer_id, stamps)
        return record

    def grant_manual(self, business_id: str, customer_id: str, stamps: int,
                     notes: str = '', source: str = SOURCE_MANUAL) -> StampTransaction:
        """Grant stamps without a QR scan. Promotions do not count as a visit."""
        if not customer_id:
            raise ValidationError('customer_id is required')
        validate_stamps(stamps, field='stamps')
        if source not in GRANT_SOURCES:
            raise ValidationError(f"source must be one of {', '.join(GRANT_SOURCES)}")

        record = self._append(
            business_id=business_id,
            customer_id=customer_id,
            redemption_id=f"{source[0]}-{new_redemption_id(self.clock)}",
            stamps=stamps,
            source=source,
            notes=notes or None,
            count_visit=source == SOURCE_MANUAL,
        )
        logger.info('granted %d %s stamps to customer=%s business=%s', stamps, source, customer_id, business_id)
        return record

    def history(self, business_id: str, customer_id: str | None = None, limit: int = 50):
        limit = max(1, min(int(limit), MAX_HISTORY))
        return self.repository.list_transactions(business_id, customer_id=customer_id, limit=limit)

    def _append(self, business_id, customer_id, redemption_id, stamps, source, notes, count_visit):
        now = self._now()
        record = StampTransaction(
            redemption_id=redemption_id,
            business_id=business_id,
            customer_id=customer_id,
            stamps_awarded=stamps,
            source=source,
            notes=notes,
            created_at=now,
        )
        try:
            with self.repository.transaction() as repo:
                # an unknown customer aborts before the record insert
                if not repo.increment_balance(customer_id, business_id, stamps,
                                              visited_at=now, count_visit=count_visit):
                    raise CustomerNotFound()
                repo.insert_transaction(record)
        except DuplicateKey as exc:
            logger.warning('replay rejected for redemption %s customer=%s', redemption_id, customer_id)
            raise AlreadyRedeemed() from exc
        return record
