"""
rate_limit.py — Global rate limiter instance.

Uses slowapi (a Starlette-compatible wrapper around the `limits` library).
Requests are keyed by client IP address. Every scan is a paid Gemini call,
so the endpoints that reach the model opt in.

Usage in routes:
    from fastapi import Request
    from sentinel.core.rate_limit import limiter

    @router.post("/scan")
    @limiter.limit("30/minute")
    async def scan(request: Request):
        ...
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

ANALYSIS_RATE = "30/minute"

limiter = Limiter(key_func=get_remote_address)
