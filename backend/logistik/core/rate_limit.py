"""
Rate Limiting Middleware
Sliding-window limits on login, signup, user administration and bulk purges
"""
from collections import defaultdict, deque
from typing import Deque, Dict, List, NamedTuple, Optional, Tuple
import threading
import time
import logging

from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from logistik.core.config import settings

logger = logging.getLogger(__name__)


class Rule(NamedTuple):
    prefix: str
    max_requests: int
    window_seconds: int
    # None means every method counts
    methods: Optional[Tuple[str, ...]] = None


WRITE_METHODS = ("POST", "PUT", "PATCH", "DELETE")

# First matching rule wins
RULES: List[Rule] = [
    Rule("/api/v1/auth/login", 5, 60),
    Rule("/api/v1/auth/signup", 3, 300),
    Rule("/api/v1/recycle-bin/empty", 3, 60),
    Rule("/manage-users", 30, 60),
    Rule("/api/v1/job-orders/", 30, 60, WRITE_METHODS),
    Rule("/api/v1/", 120, 60, WRITE_METHODS),
]


def client_key(request: Request) -> str:
    """Proxy-aware client address"""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client:
        return request.client.host
    return "unknown"


class SlidingWindowLimiter:
    """Per (rule, client) request timestamps, trimmed to the rule's window"""

    def __init__(self, rules: List[Rule] = RULES):
        self.rules = rules
        self._hits: Dict[str, Deque[float]] = defaultdict(deque)
        self._lock = threading.Lock()

    def rule_for(self, method: str, path: str) -> Optional[Rule]:
        for rule in self.rules:
            if not path.startswith(rule.prefix):
                continue
            if rule.methods is None or method in rule.methods:
                return rule
            return None
        return None

    def hit(self, rule: Rule, client: str, now: Optional[float] = None) -> Tuple[bool, int, int]:
        """Record one request; returns (allowed, remaining, retry_after_seconds)"""
        now = time.monotonic() if now is None else now
        key = f"{rule.prefix}|{client}"
        with self._lock:
            hits = self._hits[key]
            while hits and hits[0] <= now - rule.window_seconds:
                hits.popleft()
            if len(hits) >= rule.max_requests:
                retry_after = max(1, int(hits[0] + rule.window_seconds - now))
                return False, 0, retry_after
            hits.append(now)
            return True, rule.max_requests - len(hits), 0


class RateLimitMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, limiter: Optional[SlidingWindowLimiter] = None):
        super().__init__(app)
        self.limiter = limiter or SlidingWindowLimiter()

    async def dispatch(self, request: Request, call_next):
        if not settings.RATE_LIMIT_ENABLED:
            return await call_next(request)

        rule = self.limiter.rule_for(request.method, request.url.path)
        if rule is None:
            return await call_next(request)

        client = client_key(request)
        allowed, remaining, retry_after = self.limiter.hit(rule, client)
        if not allowed:
            logger.warning(f"Rate limit hit on {rule.prefix} by {client}")
            return JSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                content={"detail": "Terlalu banyak permintaan. Coba lagi nanti.",
                         "retry_after": retry_after},
                headers={"Retry-After": str(retry_after),
                         "X-RateLimit-Limit": str(rule.max_requests),
                         "X-RateLimit-Remaining": "0"},
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(rule.max_requests)
        response.headers["X-RateLimit-Remaining"] = str(remaining)
        return response
