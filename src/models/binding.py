"""
Binding data models

Structures passed between the tag-tree compiler, the binding expression
compiler and the callback generator.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple, TYPE_CHECKING

if TYPE_CHECKING:
    from ..lib.jsast import Node


@dataclass
class AttributeItem:
    """
    A classified tag attribute.

    Attributes:
        name: Attribute name exactly as written (e.g. "ios:text", "on:tap")
        property_name: Local name with any prefix removed (e.g. "text", "style.color")
        prefix: Namespace/platform/event prefix, if any
        value: Attribute value, after the value formatter ran
        is_event_listener: The attribute wires an event rather than a property
        is_sub_property: The property name is a dotted path into the view
        is_binding: The value contains a {{ }} binding expression

    Example:
        For on:tap="{{ onTap }}":
        AttributeItem(name="on:tap", property_name="tap", prefix="on",
                      value="{{ onTap }}", is_event_listener=True,
                      is_sub_property=False, is_binding=True)
    """
    name: str
    property_name: str
    prefix: Optional[str]
    value: str
    is_event_listener: bool = False
    is_sub_property: bool = False
    is_binding: bool = False


@dataclass
class BindingDescriptor:
    """
    Compiled form of one {{ }} attribute.

    Attributes:
        property_name: Target view property (dotted for sub-properties)
        prefix: Attribute prefix, if any
        is_event_listener: Target is an event, the value is the handler
        is_sub_property: Target is a nested property path
        expression: Rewritten forward expression (identifiers moved under
                    the view model root, member/call chains null-safe,
                    converters applied)
        properties: Dependency identifiers in first-use order, no repeats
        is_two_way: View changes are written back to the binding context
        parent_key_expressions: Ancestor keys referenced through $parents
        special_reference_count: Number of $value/$parent/$parents uses
        to_model: (target, value) pair for writing back through converters
        source: The original attribute value
    """
    property_name: str
    prefix: Optional[str]
    is_event_listener: bool
    is_sub_property: bool
    expression: 'Node'
    properties: List[str] = field(default_factory=list)
    is_two_way: bool = False
    parent_key_expressions: List['Node'] = field(default_factory=list)
    special_reference_count: int = 0
    to_model: Optional[Tuple['Node', 'Node']] = None
    source: str = ''
