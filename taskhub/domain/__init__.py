"""Domain layer: entities and event payload definitions."""
