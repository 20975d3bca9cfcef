"""TokenCodec: envelope, expiry, tampering and configuration."""

import pytest

from stampqr.errors import (
    ConfigurationError,
    ExpiredToken,
    InvalidSignature,
    InvalidToken,
    InvalidTokenType,
    MalformedToken,
)
from stampqr.services.tokens import TokenCodec, new_redemption_id

from .helpers import SECRET, START, FakeClock


@pytest.fixture
def codec(clock):
    return TokenCodec(SECRET, clock=clock)


class TestEncodeDecode:
    def test_round_trip_adds_envelope(self, codec):
        token = codec.encode({'businessId': 'biz_1', 'stampsValue': 3}, ttl_seconds=30, audience='qr-scan')
        claims = codec.decode(token)

        assert claims['businessId'] == 'biz_1'
        assert claims['stampsValue'] == 3
        assert claims['iss'] == 'go-out-loyalty'
        assert claims['aud'] == 'qr-scan'
        assert claims['iat'] == START
        assert claims['exp'] == START + 30

    def test_token_is_url_safe(self, codec):
        token = codec.encode({'x': 'a/b+c?d'}, ttl_seconds=30, audience='qr-scan')
        assert set(token) <= set('ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_.')

    def test_matching_audience_accepted(self, codec):
        token = codec.encode({}, ttl_seconds=30, audience='business')
        assert codec.decode(token, audience='business')['aud'] == 'business'

    def test_wrong_audience_rejected(self, codec):
        token = codec.encode({}, ttl_seconds=30, audience='qr-scan')
        with pytest.raises(InvalidTokenType):
            codec.decode(token, audience='business')

    def test_other_issuer_rejected(self, clock):
        token = TokenCodec(SECRET, issuer='someone-else', clock=clock).encode({}, 30, 'qr-scan')
        with pytest.raises(InvalidTokenType):
            TokenCodec(SECRET, clock=clock).decode(token)


class TestExpiry:
    def test_valid_at_exact_expiry(self, codec, clock):
        token = codec.encode({}, ttl_seconds=30, audience='qr-scan')
        clock.advance(30)
        assert codec.decode(token)['exp'] == START + 30

    def test_expired_after_ttl(self, codec, clock):
        token = codec.encode({}, ttl_seconds=30, audience='qr-scan')
        clock.advance(31)
        with pytest.raises(ExpiredToken):
            codec.decode(token)

    def test_expiry_uses_injected_clock_not_wall_clock(self):
        # minted far in the past relative to the real clock
        clock = FakeClock(1_000_000)
        codec = TokenCodec(SECRET, clock=clock)
        token = codec.encode({}, ttl_seconds=30, audience='qr-scan')
        assert codec.decode(token)['iat'] == 1_000_000


class TestTampering:
    def test_other_key_fails_signature(self, codec, clock):
        token = TokenCodec('another-secret-0123456789abcdef0123456', clock=clock).encode({}, 30, 'qr-scan')
        with pytest.raises(InvalidSignature):
            codec.decode(token)

    def test_payload_swap_fails_signature(self, codec):
        a = codec.encode({'stampsValue': 1}, 30, 'qr-scan')
        b = codec.encode({'stampsValue': 10}, 30, 'qr-scan')
        header, _, sig = a.split('.')
        forged = '.'.join([header, b.split('.')[1], sig])
        with pytest.raises(InvalidSignature):
            codec.decode(forged)

    def test_single_character_change_never_alters_claims(self, codec):
        token = codec.encode({'businessId': 'biz_1', 'stampsValue': 3, 'redemptionId': 'r_abc'}, 30, 'qr-scan')
        original = codec.decode(token)
        for i, ch in enumerate(token):
            if ch == '.':
                continue
            tampered = token[:i] + ('A' if ch != 'A' else 'B') + token[i + 1:]
            try:
                claims = codec.decode(tampered)
            except InvalidToken:
                continue
            # only base64 padding bits changed; the signed bytes are identical
            assert claims == original

    @pytest.mark.parametrize('garbage', ['', 'abc', 'a.b.c', 'not a token at all'])
    def test_garbage_is_malformed(self, codec, garbage):
        with pytest.raises(MalformedToken):
            codec.decode(garbage)

    def test_missing_envelope_claims_is_malformed(self, codec):
        import jwt
        token = jwt.encode({'iss': 'go-out-loyalty', 'aud': 'qr-scan'}, SECRET, algorithm='HS256')
        with pytest.raises(MalformedToken):
            codec.decode(token)


class TestConfiguration:
    @pytest.mark.parametrize('secret', [None, ''])
    def test_encode_without_secret_fails_fast(self, secret, clock):
        with pytest.raises(ConfigurationError):
            TokenCodec(secret, clock=clock).encode({}, 30, 'qr-scan')

    def test_decode_without_secret_fails_fast(self, codec, clock):
        token = codec.encode({}, 30, 'qr-scan')
        with pytest.raises(ConfigurationError):
            TokenCodec(None, clock=clock).decode(token)

    def test_independent_instances_use_their_own_keys(self, clock):
        a = TokenCodec('a' * 40, clock=clock)
        b = TokenCodec('b' * 40, clock=clock)
        assert a.decode(a.encode({'k': 1}, 30, 'qr-scan'))['k'] == 1
        with pytest.raises(InvalidSignature):
            b.decode(a.encode({'k': 1}, 30, 'qr-scan'))


def test_redemption_ids_are_unique_and_time_prefixed(clock):
    ids = {new_redemption_id(clock) for _ in range(1000)}
    assert len(ids) == 1000
    prefixes = {i.split('-')[0] for i in ids}
    assert len(prefixes) == 1
