"""
JavaScript syntax tree nodes

A small ESTree-flavoured node set used for two purposes:
1. The parsed form of a binding expression (see expression.py)
2. The generated output module (see tagtree.py, callbacks.py, assembler.py)

Nodes are plain mutable dataclasses. Child lists are shared by reference on
purpose: the tag-tree compiler keeps a handle on a block body while it is still
being filled, so e.g. a template factory's statements can be appended after the
arrow function has already been placed in its parent.

Traversal follows the standard library ``ast`` module: NodeVisitor dispatches
to ``visit_<ClassName>`` and NodeTransformer replaces nodes with the value
returned from the visit method.

Example:
    >>> node = member(ident('viewModel'), 'age')
    >>> node.type
    'MemberExpression'
"""

import re
from dataclasses import dataclass, field, fields
from typing import Any, Iterator, List, Optional, Union


IDENTIFIER_PATTERN = re.compile(r'^[A-Za-z_$][\w$]*$')


class Node:
    """Base class of every syntax tree node"""

    @property
    def type(self) -> str:
        return type(self).__name__

    def children_iter(self) -> Iterator[tuple[str, Any]]:
        """Yield (field name, value) pairs for every field of the node"""
        for f in fields(self):  # type: ignore[arg-type]
            yield f.name, getattr(self, f.name)


# --------------------------------------------------------------------------
# Expressions

@dataclass
class Identifier(Node):
    name: str


@dataclass
class StringLiteral(Node):
    value: str


@dataclass
class NumericLiteral(Node):
    value: Union[int, float]
    raw: Optional[str] = None


@dataclass
class BooleanLiteral(Node):
    value: bool


@dataclass
class NullLiteral(Node):
    pass


@dataclass
class TemplateElement(Node):
    raw: str
    cooked: str
    tail: bool = False


@dataclass
class TemplateLiteral(Node):
    quasis: List[TemplateElement]
    expressions: List[Node]


@dataclass
class SpreadElement(Node):
    argument: Node


@dataclass
class ArrayExpression(Node):
    # None marks a hole, e.g. [a, , b]
    elements: List[Optional[Node]] = field(default_factory=list)


@dataclass
class ObjectProperty(Node):
    key: Node
    value: Node
    computed: bool = False
    shorthand: bool = False


@dataclass
class ObjectExpression(Node):
    properties: List[Node] = field(default_factory=list)


@dataclass
class MemberExpression(Node):
    object: Node
    property: Node
    computed: bool = False
    optional: bool = False


@dataclass
class CallExpression(Node):
    callee: Node
    arguments: List[Node] = field(default_factory=list)
    optional: bool = False


@dataclass
class NewExpression(Node):
    callee: Node
    arguments: List[Node] = field(default_factory=list)


@dataclass
class ConditionalExpression(Node):
    test: Node
    consequent: Node
    alternate: Node


@dataclass
class BinaryExpression(Node):
    operator: str
    left: Node
    right: Node


@dataclass
class LogicalExpression(Node):
    operator: str
    left: Node
    right: Node


@dataclass
class UnaryExpression(Node):
    operator: str
    argument: Node


@dataclass
class UpdateExpression(Node):
    operator: str
    argument: Node
    prefix: bool = True


@dataclass
class AssignmentExpression(Node):
    operator: str
    left: Node
    right: Node


@dataclass
class SequenceExpression(Node):
    expressions: List[Node]


@dataclass
class ThisExpression(Node):
    pass


@dataclass
class ArrowFunctionExpression(Node):
    params: List[Node]
    body: Node


# --------------------------------------------------------------------------
# Patterns

@dataclass
class AssignmentPattern(Node):
    left: Node
    right: Node


@dataclass
class ObjectPattern(Node):
    properties: List[ObjectProperty]


# --------------------------------------------------------------------------
# Statements and declarations

@dataclass
class ExpressionStatement(Node):
    expression: Node


@dataclass
class EmptyStatement(Node):
    pass


@dataclass
class VariableDeclarator(Node):
    id: Node
    init: Optional[Node] = None


@dataclass
class VariableDeclaration(Node):
    kind: str
    declarations: List[VariableDeclarator]


@dataclass
class BlockStatement(Node):
    body: List[Node] = field(default_factory=list)


@dataclass
class IfStatement(Node):
    test: Node
    consequent: BlockStatement
    alternate: Optional[Node] = None


@dataclass
class ReturnStatement(Node):
    argument: Optional[Node] = None


@dataclass
class TryStatement(Node):
    block: BlockStatement
    finalizer: BlockStatement


@dataclass
class FunctionDeclaration(Node):
    id: Identifier
    params: List[Node]
    body: BlockStatement


@dataclass
class ClassMethod(Node):
    key: Identifier
    params: List[Node]
    body: BlockStatement


@dataclass
class ClassDeclaration(Node):
    id: Identifier
    body: List[ClassMethod]


@dataclass
class ExportDefaultDeclaration(Node):
    declaration: Node


@dataclass
class Program(Node):
    body: List[Node] = field(default_factory=list)


# --------------------------------------------------------------------------
# Traversal

class NodeVisitor:
    """
    Walk a syntax tree, calling ``visit_<ClassName>`` for every node.

    Nodes without a specific visitor fall through to ``generic_visit`` which
    simply visits all children in field order.
    """

    def visit(self, node: Node) -> Any:
        visitor = getattr(self, f'visit_{node.type}', self.generic_visit)
        return visitor(node)

    def generic_visit(self, node: Node) -> None:
        for _, value in node.children_iter():
            if isinstance(value, list):
                for item in value:
                    if isinstance(item, Node):
                        self.visit(item)
            elif isinstance(value, Node):
                self.visit(value)


class NodeTransformer(NodeVisitor):
    """
    NodeVisitor that replaces each visited node with the visitor's return
    value. Returning the node unchanged keeps it in place.
    """

    def generic_visit(self, node: Node) -> Node:
        for name, value in node.children_iter():
            if isinstance(value, list):
                value[:] = [
                    self.visit(item) if isinstance(item, Node) else item
                    for item in value
                ]
            elif isinstance(value, Node):
                setattr(node, name, self.visit(value))
        return node


# --------------------------------------------------------------------------
# Builders

def ident(name: str) -> Identifier:
    return Identifier(name)


def string(value: str) -> StringLiteral:
    return StringLiteral(value)


def identifier_isValid(name: str) -> bool:
    """True if name can be written as a bare JS identifier"""
    return IDENTIFIER_PATTERN.match(name) is not None


def member(obj: Node, prop: Union[str, Node], computed: bool = False, optional: bool = False) -> MemberExpression:
    """
    Build a member access. A string property becomes an Identifier, or a
    computed string literal when it is not a valid identifier.

    Example:
        >>> member(ident('slotViews1'), 'my-slot')
        MemberExpression(object=Identifier(name='slotViews1'),
                         property=StringLiteral(value='my-slot'), computed=True, optional=False)
    """
    if isinstance(prop, str):
        if identifier_isValid(prop):
            prop = Identifier(prop)
        else:
            prop = StringLiteral(prop)
            computed = True
    return MemberExpression(obj, prop, computed, optional)


def call(callee: Node, *args: Node) -> CallExpression:
    return CallExpression(callee, list(args))


def statement(expression: Node) -> ExpressionStatement:
    return ExpressionStatement(expression)


def assign(target: Node, value: Node) -> ExpressionStatement:
    return ExpressionStatement(AssignmentExpression('=', target, value))


def let(name: str, init: Optional[Node] = None, kind: str = 'let') -> VariableDeclaration:
    return VariableDeclaration(kind, [VariableDeclarator(Identifier(name), init)])


def require(module: str) -> CallExpression:
    return call(ident('require'), string(module))


def literal_make(value: Any) -> Node:
    """Convert a python scalar to the matching literal node"""
    if value is None:
        return NullLiteral()
    if isinstance(value, bool):
        return BooleanLiteral(value)
    if isinstance(value, (int, float)):
        return NumericLiteral(value)
    return StringLiteral(str(value))
