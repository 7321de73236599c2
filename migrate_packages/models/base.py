"""Base models for package migration."""

from pydantic import BaseModel, ConfigDict


class MigrateBaseModel(BaseModel):
    """Base model for all package migration models."""

    model_config = ConfigDict(
        extra="forbid",  # Don't allow extra fields
        frozen=False,  # Allow modification (can be changed per model)
        validate_assignment=True,  # Validate on attribute assignment
    )


class FrozenModel(MigrateBaseModel):
    """Base model for values that are shared across workers and never change during a run."""

    model_config = ConfigDict(frozen=True)


__all__ = ["MigrateBaseModel", "FrozenModel"]
