"""
Rate limiting por IP usando slowapi.
Los routers decoran sus endpoints con `@limiter.limit("30/minute")`.
"""
from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address)

# Límites por tipo de endpoint
READ_LIMIT = "60/minute"
NORMALIZE_LIMIT = "30/minute"
MUTATION_LIMIT = "10/minute"
