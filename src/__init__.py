"""Comprehend - profile service with upload and analysis-result proxies.

Comprehend exposes CRUD over profiles stored in PostgreSQL, accepts file and
audio uploads that are handed to object storage, and proxies reads of Amazon
Comprehend results kept behind an API Gateway.

Architecture Overview:
- **API Layer**: FastAPI routers, middleware and exception handlers
- **Core Layer**: Configuration, logging, exceptions and tracing
- **Domain Layer**: The Profile entity and its repository
- **Infrastructure Layer**: Database sessions, object storage, HTTP clients
"""
