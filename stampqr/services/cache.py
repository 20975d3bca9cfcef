import time, json, logging, threading
import redis

from ..errors import RateLimited

logger = logging.getLogger(__name__)


class MemStore:
    """Thread-safe subset of the redis API used by this package."""

    def __init__(self, clock=time.time):
        self._data = {}
        self._exp = {}
        self._lock = threading.Lock()
        self._clock = clock

    def _cleanup(self):
        now = self._clock()
        expired = [k for k, ts in self._exp.items() if ts < now]
        for k in expired:
            self._data.pop(k, None)
            self._exp.pop(k, None)

    def incr(self, key):
        with self._lock:
            self._cleanup()
            v = int(self._data.get(key, '0')) + 1
            self._data[key] = str(v)
            return v

    def expire(self, key, ttl):
        with self._lock:
            self._cleanup()
            self._exp[key] = self._clock() + ttl

    def setex(self, key, ttl, value):
        with self._lock:
            self._cleanup()
            self._data[key] = value
            self._exp[key] = self._clock() + ttl

    def exists(self, key):
        with self._lock:
            self._cleanup()
            return 1 if key in self._data else 0

    def get(self, key):
        with self._lock:
            self._cleanup()
            return self._data.get(key)


def connect_store(url: str | None, use_redis: bool = True, clock=time.time):
    """Return a redis client, or a MemStore when redis is disabled or unreachable."""
    if use_redis and url:
        try:
            client = redis.from_url(url, decode_responses=True)
            client.ping()
            return client
        except redis.RedisError as exc:
            logger.warning('redis unavailable at %s (%s), using in-memory store', url, exc)
    return MemStore(clock=clock)


class PendingQrCache:
    """Outstanding, not yet consumed QR issuances keyed by redemption id."""

    def __init__(self, backend):
        self.backend = backend

    @staticmethod
    def _key(redemption_id: str) -> str:
        return f"qr:pending:{redemption_id}"

    def remember(self, redemption_id: str, business_id: str, stamps_value: int,
                 issued_at: int, expires_at: int, ttl: int):
        entry = {
            'business_id': business_id,
            'stamps_value': stamps_value,
            'issued_at': issued_at,
            'expires_at': expires_at,
        }
        self.backend.setex(self._key(redemption_id), ttl, json.dumps(entry))

    def lookup(self, redemption_id: str) -> dict | None:
        raw = self.backend.get(self._key(redemption_id))
        return json.loads(raw) if raw else None


def check_rate_ip(backend, ip: str, limit: int, window: int, now: float | None = None):
    if now is None:
        now = time.time()
    k = f"rl:ip:{ip}:{int(now // window)}"
    v = backend.incr(k)
    backend.expire(k, window)
    if v > limit:
        raise RateLimited()
