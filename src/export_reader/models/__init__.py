"""Data models for the export reader."""

from .entity import DecodedEntity, KeyPath, PathElement, Property, PropertyValue

__all__ = ["DecodedEntity", "KeyPath", "PathElement", "Property", "PropertyValue"]
