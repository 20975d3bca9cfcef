import hmac
from functools import wraps

from flask import current_app, g, request

from .errors import ExpiredToken, InvalidToken, Unauthenticated
from .models import db, Business
from .services import services
from .services.tokens import BUSINESS_AUDIENCE


def issue_business_token(business_id: str) -> str:
    ttl = current_app.config.get('BUSINESS_TOKEN_TTL', 7 * 24 * 3600)
    claims = {'businessId': business_id, 'type': 'business'}
    return services().codec.encode(claims, ttl_seconds=ttl, audience=BUSINESS_AUDIENCE)


def _request_token() -> str | None:
    token = request.cookies.get('auth_token')
    if token:
        return token
    auth = request.headers.get('Authorization', '')
    if auth.startswith('Bearer '):
        return auth[len('Bearer '):].strip() or None
    return None


def business_required(view):
    """Resolve the calling business into ``g.business`` or answer 401."""
    @wraps(view)
    def wrapper(*args, **kwargs):
        token = _request_token()
        if not token:
            raise Unauthenticated('no authentication token provided')
        try:
            claims = services().codec.decode(token, audience=BUSINESS_AUDIENCE)
        except ExpiredToken as exc:
            raise Unauthenticated('authentication token has expired') from exc
        except InvalidToken as exc:
            raise Unauthenticated('invalid authentication token') from exc
        if claims.get('type') != 'business':
            raise Unauthenticated('invalid token type')
        business_id = claims.get('businessId')
        business = db.session.get(Business, business_id) if isinstance(business_id, str) else None
        if business is None:
            raise Unauthenticated('business account not found')
        g.business = business
        return view(*args, **kwargs)
    return wrapper


def admin_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        api_key = request.headers.get('X-Admin-Key') or ''
        expected = current_app.config.get('ADMIN_API_KEY') or ''
        if not expected or not hmac.compare_digest(api_key.encode(), expected.encode()):
            raise Unauthenticated('admin key required')
        return view(*args, **kwargs)
    return wrapper
