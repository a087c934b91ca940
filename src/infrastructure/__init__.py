"""Infrastructure layer: persistence and external service clients.

- **database**: Async PostgreSQL access with SQLAlchemy 2.0 and a generic
  repository
- **storage**: Object storage client used by the upload endpoints
- **comprehend**: HTTP client for the Comprehend results API
"""
