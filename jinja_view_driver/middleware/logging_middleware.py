"""Request logging helpers with sensitive data redaction."""

import re

# View models come from query parameters; never log these values
SENSITIVE_PARAMS = [
    "api_key",
    "token",
    "password",
    "secret",
    "key",
    "access_token",
    "session",
    "authorization",
]

_SENSITIVE_PATTERN = re.compile(rf"(?i)\b({'|'.join(SENSITIVE_PARAMS)})=([^&\s\"]+)")


def redact_sensitive_data(url: str) -> str:
    """Redact sensitive query parameters from URL."""
    return _SENSITIVE_PATTERN.sub(r"\1=***REDACTED***", url)
