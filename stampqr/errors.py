"""Error taxonomy shared by the services and the HTTP layer.

Every error carries a stable ``code`` and the HTTP status the API layer
answers with; the services never build responses themselves.
"""


class StampError(Exception):
    code = 'stamp_error'
    status_code = 400
    default_message = 'request failed'

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {'error': self.code, 'message': self.message}


class ConfigurationError(StampError):
    code = 'configuration_error'
    status_code = 500
    default_message = 'server configuration error'


class ValidationError(StampError):
    code = 'validation_error'
    default_message = 'invalid request'


class InvalidToken(StampError):
    code = 'invalid_token'
    default_message = 'invalid token'


class MalformedToken(InvalidToken):
    code = 'malformed_token'


class InvalidSignature(InvalidToken):
    code = 'invalid_signature'


class InvalidTokenType(InvalidToken):
    code = 'invalid_token_type'


class ExpiredToken(StampError):
    code = 'token_expired'
    status_code = 410
    default_message = 'expired, please rescan'


class AlreadyRedeemed(StampError):
    code = 'already_redeemed'
    status_code = 409
    default_message = 'already used'


class Unauthenticated(StampError):
    code = 'unauthorized'
    status_code = 401
    default_message = 'authentication required'


class NotAuthorized(StampError):
    code = 'not_authorized'
    status_code = 403
    default_message = 'not authorized for this business'


class NotFound(StampError):
    code = 'not_found'
    status_code = 404
    default_message = 'not found'


class BusinessNotFound(NotFound):
    code = 'business_not_found'
    default_message = 'business not found'


class CustomerNotFound(NotFound):
    code = 'customer_not_found'
    default_message = 'customer not enrolled with this business'


class RateLimited(StampError):
    code = 'rate_limited'
    status_code = 429
    default_message = 'too many requests, please try again later'


class PersistenceError(StampError):
    code = 'persistence_error'
    status_code = 503
    default_message = 'temporary storage failure, please retry'


class DuplicateKey(PersistenceError):
    """Raised by the repository when a unique key already exists."""

    def __init__(self, field: str, value):
        self.field = field
        self.value = value
        super().__init__(f'duplicate {field}: {value}')
