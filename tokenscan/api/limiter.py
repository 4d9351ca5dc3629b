from slowapi import Limiter
from slowapi.util import get_remote_address

# Per-client cap on scan endpoints; every scan fans out to upstream APIs.
limiter = Limiter(key_func=get_remote_address)
