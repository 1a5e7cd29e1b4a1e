from slowapi import Limiter
from slowapi.util import get_remote_address

from .config import settings


# Shared so routers can apply tighter per-route limits on top of the default
limiter = Limiter(key_func=get_remote_address, default_limits=[settings.rate_limit])
