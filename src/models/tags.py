"""
Tag-tree data models

Per-tag context kept on the compiler's open-tag stack, plus the statement
buffer that tag contexts write generated code into.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from ..lib.jsast import IfStatement, Node
    from .binding import BindingDescriptor


class ElementKind(Enum):
    """
    What a tag context produces.

    VIEW            - a constructed element (including <slot>)
    COMMON_PROPERTY - Parent.property collecting child views
    TEMPLATE        - Parent.somethingTemplate, a single view factory
    KEYED_TEMPLATE  - <template key="..."> inside a template array
    TEMPLATE_ARRAY  - Parent.somethingTemplates, an array of keyed factories
    """
    VIEW = 'view'
    COMMON_PROPERTY = 'common_property'
    TEMPLATE = 'template'
    KEYED_TEMPLATE = 'keyed_template'
    TEMPLATE_ARRAY = 'template_array'


class SpecialTags:
    SLOT = 'slot'
    SLOT_CONTENT = 'slotContent'
    TEMPLATE = 'template'


KNOWN_PLATFORMS = ('android', 'ios', 'desktop')


class StatementBuffer:
    """
    Ordered list of generated nodes with positional insertion.

    Several contexts may share one buffer: a view writes into its parent's
    buffer, and a template's buffer is the body of the factory function it
    produced. The underlying list is handed out by reference for that reason.

    Example:
        >>> buffer = StatementBuffer()
        >>> buffer.append('a', 'c')
        >>> buffer.insert_at(1, ['b'])
        >>> buffer.statements
        ['a', 'b', 'c']
    """

    def __init__(self, statements: Optional[List['Node']] = None) -> None:
        self.statements: List['Node'] = statements if statements is not None else []

    def __len__(self) -> int:
        return len(self.statements)

    def __iter__(self):
        return iter(self.statements)

    def append(self, *nodes: 'Node') -> None:
        self.statements.extend(nodes)

    def extend(self, nodes: List['Node']) -> None:
        self.statements.extend(nodes)

    def insert_at(self, index: int, nodes: List['Node']) -> None:
        self.statements[index:index] = nodes

    def tail_take(self, index: int) -> List['Node']:
        """Remove and return everything from index onwards"""
        tail = self.statements[index:]
        del self.statements[index:]
        return tail


@dataclass
class TagContext:
    """
    State of one open tag.

    Attributes:
        tag_name: Qualified tag name; for Parent.property tags, the parent part
        kind: What the tag produces (None for slotContent)
        index: Tree index of the view this context writes to, -1 if none
        property_name: Property part of a Parent.property tag
        attributes: Raw attributes in document order
        nested_tag_count: Number of direct children opened so far
        child_indices: Tree indices of direct child views
        slot_child_indices: Child indices that are <slot> tags (their value is an array)
        slot_map: slotContent only - slot name to child indices
        buffer: Where this context's statements go
        splice_index: Insertion point used by slotContent and slot fallback
        namespaces: Prefixes declared on this tag, mapped to resolved module paths
        descriptors: Bindings compiled for this view
        slot_branch: The if-statement of a <slot> context
        is_custom_component: Namespaced element (may receive slot content)
        is_parent_for_slots: A slotContent child has been opened
        ignored: Subtree skipped after an error or by platform filtering
        has_open_child_tag: A direct child is currently open
    """
    tag_name: str
    kind: Optional[ElementKind] = None
    index: int = -1
    property_name: Optional[str] = None
    attributes: Dict[str, str] = field(default_factory=dict)
    nested_tag_count: int = 0
    child_indices: List[int] = field(default_factory=list)
    slot_child_indices: List[int] = field(default_factory=list)
    slot_map: Dict[str, List[int]] = field(default_factory=dict)
    buffer: StatementBuffer = field(default_factory=StatementBuffer)
    splice_index: int = 0
    namespaces: Dict[str, str] = field(default_factory=dict)
    descriptors: List['BindingDescriptor'] = field(default_factory=list)
    slot_branch: Optional['IfStatement'] = None
    is_custom_component: bool = False
    is_parent_for_slots: bool = False
    ignored: bool = False
    has_open_child_tag: bool = False

    @property
    def full_name(self) -> str:
        """Name as it appears in markup, e.g. 'ListView.itemTemplate'"""
        if self.property_name is not None:
            return f'{self.tag_name}.{self.property_name}'
        return self.tag_name
