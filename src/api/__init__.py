"""HTTP API layer built on FastAPI.

- **main**: Application factory, lifespan and health endpoints
- **routes**: Profile CRUD, upload and Comprehend results routers
- **middleware**: Security headers, correlation IDs, request logging and
  exception handlers
- **schemas**: Pydantic request/response models
- **utils**: orjson responses and entity alert headers
"""
