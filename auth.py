"""Per-client rate limiting for the proxy endpoints."""
import time
from collections import defaultdict

from fastapi import HTTPException, Request

# --- Rate Limiting ---
RATE_LIMIT_REQUESTS = 30
RATE_LIMIT_WINDOW = 60
_rate_buckets: dict = defaultdict(list)
_rate_check_counter = 0


def rate_limit_check(key: str) -> bool:
    """Return True if the request is allowed, False if rate-limited."""
    now = time.time()
    cutoff = now - RATE_LIMIT_WINDOW
    _rate_buckets[key] = [t for t in _rate_buckets[key] if t > cutoff]
    if len(_rate_buckets[key]) >= RATE_LIMIT_REQUESTS:
        return False
    _rate_buckets[key].append(now)
    return True


def rate_limit_cleanup():
    global _rate_check_counter
    _rate_check_counter += 1
    if _rate_check_counter % 100 == 0:
        now = time.time()
        cutoff = now - RATE_LIMIT_WINDOW
        stale = [key for key, ts in _rate_buckets.items() if not ts or ts[-1] < cutoff]
        for key in stale:
            del _rate_buckets[key]


def get_rate_limit_key(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for", "")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def enforce_rate_limit(request: Request):
    """FastAPI dependency that rejects clients over the sliding-window budget."""
    key = get_rate_limit_key(request)
    rate_limit_cleanup()
    if not rate_limit_check(key):
        raise HTTPException(429, "Too many requests. Please wait a minute.")
