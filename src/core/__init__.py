"""Core infrastructure package for shared application functionality.

- **config**: Settings loaded from the environment and ``.env``
- **context**: Correlation ID storage for the current request
- **exceptions**: Exception hierarchy with error codes and severities
- **error_context**: Redaction of sensitive values before logging
- **logging**: Loguru setup with console and cloud formatters
- **observability**: OpenTelemetry tracing
- **types**: Type aliases shared across layers
"""
