import time, secrets
import jwt

from ..errors import (
    ConfigurationError,
    ExpiredToken,
    InvalidSignature,
    InvalidTokenType,
    MalformedToken,
)

QR_AUDIENCE = 'qr-scan'
BUSINESS_AUDIENCE = 'business'

_ENVELOPE = ['iss', 'aud', 'iat', 'exp']
_B36 = '0123456789abcdefghijklmnopqrstuvwxyz'


def _base36(n: int) -> str:
    out = ''
    while True:
        n, rem = divmod(n, 36)
        out = _B36[rem] + out
        if not n:
            return out


def new_redemption_id(clock=time.time) -> str:
    """Time-ordered prefix plus 64 random bits, e.g. ``lq2w8k1c-9f2e4b7a01c3d5e6``."""
    return f"{_base36(int(clock() * 1000))}-{secrets.token_hex(8)}"


class TokenCodec:
    """Signs and verifies compact JWT envelopes.

    The secret is passed in explicitly so several independently keyed
    codecs can live in one process. Expiry is checked against ``clock``
    rather than the wall clock PyJWT would use.
    """

    def __init__(self, secret: str | None, issuer: str = 'go-out-loyalty',
                 algorithm: str = 'HS256', clock=time.time):
        self.secret = secret
        self.issuer = issuer
        self.algorithm = algorithm
        self.clock = clock

    def _key(self) -> str:
        if not self.secret:
            raise ConfigurationError('JWT_SECRET is not configured')
        return self.secret

    def encode(self, claims: dict, ttl_seconds: int, audience: str, issued_at: int | None = None) -> str:
        key = self._key()
        now = int(self.clock()) if issued_at is None else int(issued_at)
        payload = dict(claims)
        payload.update({
            'iss': self.issuer,
            'aud': audience,
            'iat': now,
            'exp': now + int(ttl_seconds),
        })
        return jwt.encode(payload, key, algorithm=self.algorithm)

    def decode(self, token: str, audience: str | None = None) -> dict:
        key = self._key()
        if not token or not isinstance(token, str):
            raise MalformedToken('missing token')
        options = {
            'verify_exp': False,
            'verify_iat': False,
            'verify_nbf': False,
            'verify_aud': audience is not None,
            'require': _ENVELOPE,
        }
        try:
            claims = jwt.decode(token, key, algorithms=[self.algorithm], options=options,
                                audience=audience, issuer=self.issuer)
        except jwt.InvalidSignatureError as exc:
            raise InvalidSignature() from exc
        except jwt.MissingRequiredClaimError as exc:
            raise MalformedToken(str(exc)) from exc
        except (jwt.InvalidAudienceError, jwt.InvalidIssuerError) as exc:
            raise InvalidTokenType() from exc
        except jwt.InvalidTokenError as exc:
            raise MalformedToken() from exc

        exp = claims['exp']
        if not isinstance(exp, int) or isinstance(exp, bool):
            raise MalformedToken('exp must be an integer')
        if int(self.clock()) > exp:
            raise ExpiredToken()
        return claims
