"""Entity record schema and codec."""

from .codec import EntityDecoder, EntityEncoder

__all__ = ["EntityDecoder", "EntityEncoder"]
