"""API helpers: orjson response class and entity alert headers."""
