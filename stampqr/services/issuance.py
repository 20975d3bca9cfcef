import time, logging
from dataclasses import dataclass, asdict

from ..errors import ValidationError
from .tokens import QR_AUDIENCE, new_redemption_id

logger = logging.getLogger(__name__)

QR_TTL_SECONDS = 30
MIN_STAMPS = 1
MAX_STAMPS = 10


def validate_stamps(value, field: str = 'stamps_value') -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f'{field} must be an integer')
    if not MIN_STAMPS <= value <= MAX_STAMPS:
        raise ValidationError(f'{field} must be between {MIN_STAMPS} and {MAX_STAMPS}')
    return value


@dataclass(frozen=True)
class IssuedQr:
    token: str
    redemption_id: str
    business_id: str
    stamps_value: int
    issued_at: int
    expires_at: int

    def to_dict(self) -> dict:
        return asdict(self)


class QrIssuanceService:
    def __init__(self, codec, pending, ttl: int = QR_TTL_SECONDS, clock=time.time):
        self.codec = codec
        self.pending = pending
        self.ttl = ttl
        self.clock = clock

    def issue_stamp_qr(self, business_id: str, stamps_value: int) -> IssuedQr:
        """Mint a single-use stamp QR for ``business_id``.

        The embedded ``expiresAt`` and the envelope ``exp`` are both
        ``issuedAt + ttl``; the ledger checks each of them.
        """
        if not business_id:
            raise ValidationError('business_id is required')
        validate_stamps(stamps_value)

        redemption_id = new_redemption_id(self.clock)
        issued_at = int(self.clock())
        expires_at = issued_at + self.ttl
        claims = {
            'businessId': business_id,
            'stampsValue': stamps_value,
            'redemptionId': redemption_id,
            'type': 'qr',
            'issuedAt': issued_at,
            'expiresAt': expires_at,
        }
        token = self.codec.encode(claims, ttl_seconds=self.ttl, audience=QR_AUDIENCE,
                                 issued_at=issued_at)
        self.pending.remember(redemption_id, business_id, stamps_value,
                              issued_at, expires_at, ttl=self.ttl)
        logger.info('issued stamp qr %s business=%s stamps=%d', redemption_id, business_id, stamps_value)
        return IssuedQr(
            token=token,
            redemption_id=redemption_id,
            business_id=business_id,
            stamps_value=stamps_value,
            issued_at=issued_at,
            expires_at=expires_at,
        )
