"""Decoded entity model: key path, properties and typed values."""

from dataclasses import dataclass, field
from typing import Any, List, Optional
from ..types import Meaning


@dataclass(frozen=True)
class PathElement:
    """One segment of a key path: a type plus a string name or numeric id."""

    type: str
    name: Optional[str] = None
    id: Optional[int] = None

    @property
    def identifier(self) -> str:
        """Name of the element, else its decimal id, else an empty string."""
        if self.name is not None:
            return self.name
        if self.id is not None:
            return str(self.id)
        return ""


@dataclass
class KeyPath:
    """
    Ordered path of elements identifying a document.

    The last element names the document itself; the elements before it
    name its ancestors.
    """

    elements: List[PathElement]

    def __post_init__(self):
        """Validate path after initialization."""
        if not self.elements:
            raise ValueError("key path must have at least one element")

    @property
    def collection(self) -> str:
        """Ancestor types interleaved with ancestor identifiers, '/'-joined."""
        parts: List[str] = []
        for element in self.elements[:-1]:
            parts.append(element.type)
            parts.append(element.identifier)
        parts.append(self.elements[-1].type)
        return "/".join(parts)

    @property
    def document_id(self) -> str:
        return self.elements[-1].identifier

    @property
    def key(self) -> str:
        """Identifier of the first element, used by the backup shape."""
        return self.elements[0].identifier

    @classmethod
    def from_pairs(cls, *pairs) -> 'KeyPath':
        """
        Build a path from (type, identifier) pairs.

        Integer identifiers become ids, anything else becomes a name.
        """
        elements = []
        for kind, identifier in pairs:
            if isinstance(identifier, int):
                elements.append(PathElement(type=kind, id=identifier))
            else:
                elements.append(PathElement(type=kind, name=identifier))
        return cls(elements)


@dataclass
class PropertyValue:
    """
    Typed value of a property.

    Encoders populate at most one variant. When a record carries more than
    one, readers take the first of int64, boolean, string, double.
    """

    int64_value: Optional[int] = None
    boolean_value: Optional[bool] = None
    string_value: Optional[bytes] = None
    double_value: Optional[float] = None

    def is_empty(self) -> bool:
        return (self.int64_value is None and self.boolean_value is None
                and self.string_value is None and self.double_value is None)

    def text(self) -> str:
        """String variant decoded as UTF-8, empty when absent."""
        if self.string_value is None:
            return ""
        return self.string_value.decode("utf-8", errors="replace")


@dataclass
class Property:
    """A named entity property with its meaning tag and value."""

    name: str
    value: PropertyValue = field(default_factory=PropertyValue)
    multiple: bool = False
    meaning: int = Meaning.NO_MEANING

    @property
    def is_entity(self) -> bool:
        return self.meaning == Meaning.ENTITY_PROTO

    @property
    def is_timestamp(self) -> bool:
        return self.meaning == Meaning.GD_WHEN

    @classmethod
    def of(cls, name: str, value: Any, multiple: bool = False,
           meaning: int = Meaning.NO_MEANING) -> 'Property':
        """
        Build a property from a plain Python value.

        Args:
            name: Property name
            value: None, bool, int, float, str or bytes
            multiple: Whether the property is one value of a list
            meaning: Meaning tag

        Returns:
            Property with the matching variant populated
        """
        if value is None:
            typed = PropertyValue()
        elif isinstance(value, bool):
            typed = PropertyValue(boolean_value=value)
        elif isinstance(value, int):
            typed = PropertyValue(int64_value=value)
        elif isinstance(value, float):
            typed = PropertyValue(double_value=value)
        elif isinstance(value, str):
            typed = PropertyValue(string_value=value.encode("utf-8"))
        elif isinstance(value, bytes):
            typed = PropertyValue(string_value=value)
        else:
            raise TypeError(f"Unsupported property value type: {type(value).__name__}")
        return cls(name=name, value=typed, multiple=multiple, meaning=meaning)


@dataclass
class DecodedEntity:
    """
    Entity decoded from one logical record.

    Property order is the decode order and drives multi-valued grouping;
    it is never sorted. Nested entities may have no key.
    """

    key: Optional[KeyPath]
    properties: List[Property] = field(default_factory=list)

    def property_names(self) -> List[str]:
        return [prop.name for prop in self.properties]

