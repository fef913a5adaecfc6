"""
api/limiter.py -- The process-wide slowapi Limiter for Shopfront.

Only POST /api/user/signin is limited, at LOGIN_RATE_LIMIT per client IP
(default 10/minute), to slow password guessing. Every other route, health
included, is unlimited. api/main.py mounts SlowAPIMiddleware and the 429
handler; api/routes/users.py attaches the signin limit.

Counters live in memory, so they reset on restart and are not shared
between worker processes.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address, storage_uri="memory://")
