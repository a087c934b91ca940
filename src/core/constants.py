"""Core application constants."""

MILLISECONDS_PER_SECOND = 1000

REDACTED = "[REDACTED]"

# Strict-Transport-Security max-age, one year
DEFAULT_HSTS_MAX_AGE = 31536000
