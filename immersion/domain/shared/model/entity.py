from pydantic import BaseModel, ConfigDict


class Entity(BaseModel):
    """Base for domain objects with identity."""

    model_config = ConfigDict(validate_assignment=True)
