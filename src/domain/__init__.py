"""Domain layer: persisted entities and their repositories."""
