"""API-related constants."""

HTTP_500_INTERNAL_SERVER_ERROR = 500

CORRELATION_ID_HEADER = "X-Correlation-ID"
REQUEST_ID_HEADER = "X-Request-ID"

# Entity alert headers, read by clients to show notifications
ALERT_HEADER = "X-Comprehend-Alert"
ALERT_ERROR_HEADER = "X-Comprehend-Error"
ALERT_PARAMS_HEADER = "X-Comprehend-Params"
ALERT_APPLICATION_NAME = "comprehend"

PROFILES_PATH = "/api/profiles"

MAX_USER_AGENT_LENGTH = 200
