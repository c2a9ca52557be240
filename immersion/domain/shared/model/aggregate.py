from immersion.domain.shared.model.entity import Entity


class Aggregate(Entity):
    """Consistency boundary; only aggregates are loaded and saved by repositories."""
