"""Shared Pydantic base models."""

from pydantic import BaseModel, ConfigDict


class StrictBaseModel(BaseModel):
    """Base model with strict, immutable defaults.

    Field aliases are accepted alongside field names so documents written
    with camelCase keys validate the same as Python keyword construction.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)
