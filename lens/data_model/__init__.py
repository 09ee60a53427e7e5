"""Shared data model primitives."""

from lens.data_model.base import StrictBaseModel


__all__ = ["StrictBaseModel"]
