"""
Binding expression compiler

Turns the {{ }} value of one attribute into a BindingDescriptor:

1. Extract the text between the first {{ and the following }}
2. Parse it; it must be exactly one expression statement
3. Reject any node kind outside ALLOWED_NODE_TYPES (assignments, functions,
   sequences, 'this' ...), keeping bindings free of side effects
4. Split off a top-level converter pipe: value | converter | converter(args)
5. Decide two-way eligibility on the unwrapped value
6. Rewrite: identifiers move under the view model root and are recorded as
   dependencies, member accesses and calls become null-safe, $parents keys
   are captured
7. Re-apply converters as runtime calls, and build the reverse (to-model)
   expression for two-way converter bindings

Example:
    >>> item = AttributeItem('text', 'text', None, '{{ a + b }}', is_binding=True)
    >>> descriptor = BindingExpressionCompiler().descriptor_build(item)
    >>> descriptor.properties
    ['a', 'b']
    >>> code_generate(descriptor.expression)
    'viewModel.a + viewModel.b'
"""

import copy
import re
from typing import List, Optional, Tuple

from . import jsast
from .codegen import code_generate
from .errors import (
    AbnormalStateChannel,
    BindingSemanticError,
    BindingSyntaxError,
    CompilerError,
)
from .expression import expression_parse
from .log import LOG
from ..models.binding import AttributeItem, BindingDescriptor


BINDING_PATTERN = re.compile(r'\{\{(.*?)\}\}', re.DOTALL)

VIEW_MODEL_REFERENCE_NAME = 'viewModel'
RUNTIME_REFERENCE_NAME = 'xmlRuntime'

VALUE_REFERENCE_NAME = '$value'
PARENT_REFERENCE_NAME = '$parent'
PARENTS_REFERENCE_NAME = '$parents'

SPECIAL_REFERENCES = (
    VALUE_REFERENCE_NAME,
    PARENT_REFERENCE_NAME,
    PARENTS_REFERENCE_NAME,
)

CONVERTER_OPERATOR = '|'

ALLOWED_NODE_TYPES = (
    jsast.ArrayExpression,
    jsast.BinaryExpression,
    jsast.CallExpression,
    jsast.ConditionalExpression,
    jsast.Identifier,
    jsast.StringLiteral,
    jsast.NumericLiteral,
    jsast.BooleanLiteral,
    jsast.NullLiteral,
    jsast.TemplateLiteral,
    jsast.LogicalExpression,
    jsast.MemberExpression,
    jsast.NewExpression,
    jsast.ObjectExpression,
    jsast.ObjectProperty,
    jsast.SpreadElement,
    jsast.TemplateElement,
    jsast.UnaryExpression,
)


def runtime_member(method: str) -> jsast.MemberExpression:
    """xmlRuntime.<method>"""
    return jsast.member(jsast.ident(RUNTIME_REFERENCE_NAME), method)


class NodeValidator(jsast.NodeVisitor):
    """Raise on the first node whose kind is not allowed in a binding"""

    def __init__(self, source: str) -> None:
        self.source = source

    def visit(self, node: jsast.Node) -> None:
        if not isinstance(node, ALLOWED_NODE_TYPES):
            raise BindingSyntaxError(f'Invalid binding expression: {self.source}')
        self.generic_visit(node)


class BindingRewriter(jsast.NodeTransformer):
    """
    Rewrite a binding expression in place for evaluation against a view model.

    Attributes:
        properties: Tracked identifiers in first-use order, without repeats
        parent_keys: Key expressions captured from $parents accesses
        special_count: Number of $value/$parent/$parents references
    """

    def __init__(self, source: str) -> None:
        self.source = source
        self.properties: List[str] = []
        self.parent_keys: List[jsast.Node] = []
        self.special_count: int = 0

    def visit_Identifier(self, node: jsast.Identifier) -> jsast.Node:
        # only reached in value positions; property names are handled by the parents
        if node.name == PARENTS_REFERENCE_NAME:
            raise BindingSemanticError(
                f"Invalid '{PARENTS_REFERENCE_NAME}' expression reference. "
                f"No element name has been given to search for: {self.source}"
            )
        if node.name in SPECIAL_REFERENCES:
            self.special_count += 1
            return node

        if node.name not in self.properties:
            self.properties.append(node.name)
        return jsast.member(jsast.ident(VIEW_MODEL_REFERENCE_NAME), node.name)

    def visit_MemberExpression(self, node: jsast.MemberExpression) -> jsast.Node:
        if isinstance(node.object, jsast.Identifier) and node.object.name == PARENTS_REFERENCE_NAME:
            self.special_count += 1
            if node.computed:
                node.property = self.visit(node.property)
                self.parent_keys.append(node.property)
            else:
                self.parent_keys.append(jsast.string(node.property.name))
        else:
            node.object = self.visit(node.object)
            if node.computed:
                node.property = self.visit(node.property)

        node.optional = True
        return node

    def visit_CallExpression(self, node: jsast.CallExpression) -> jsast.Node:
        self.generic_visit(node)
        node.optional = True
        return node

    def visit_ObjectProperty(self, node: jsast.ObjectProperty) -> jsast.Node:
        if node.computed:
            node.key = self.visit(node.key)
        node.value = self.visit(node.value)
        # { age } must become { age: viewModel.age }
        node.shorthand = False
        return node


class BindingExpressionCompiler:
    """
    Compile {{ }} attribute values into BindingDescriptors.

    Args:
        channel: Where descriptor_compile() reports failures; a strict
                 channel is created when omitted
    """

    def __init__(self, channel: Optional[AbnormalStateChannel] = None) -> None:
        self.channel = channel if channel is not None else AbnormalStateChannel(strict=True)

    @staticmethod
    def value_isBinding(value: str) -> bool:
        """True if value contains a {{ }} binding"""
        return BINDING_PATTERN.search(value) is not None

    @staticmethod
    def code_extract(value: str) -> str:
        """
        Extract the expression source of the first {{ }} in value.

        Raises:
            BindingSyntaxError: If there is no binding or it is empty
        """
        match = BINDING_PATTERN.search(value)
        if match is None:
            raise BindingSyntaxError(f'Cannot retrieve code content from non-binding value: {value}')
        code = match.group(1).strip()
        if not code:
            raise BindingSyntaxError(f'Empty binding expression: {value}')
        return code

    @staticmethod
    def expression_extract(code: str, value: str) -> jsast.Node:
        """Parse code and return the expression of its only statement"""
        program = expression_parse(code)
        if len(program.body) != 1 or not isinstance(program.body[0], jsast.ExpressionStatement):
            raise BindingSyntaxError(
                f'Invalid binding expression. Binding must be a single expression statement: {value}'
            )
        return program.body[0].expression

    @staticmethod
    def converters_unwrap(expression: jsast.Node, value: str) -> Tuple[jsast.Node, List[jsast.Node]]:
        """
        Split a top-level converter pipe.

        'a | c1 | c2(x)' parses as '(a | c1) | c2(x)'; this returns
        (a, [c1, c2(x)]) with converters in application order.

        Raises:
            BindingSemanticError: If a converter is not an identifier, member
                                  access or call
        """
        converters: List[jsast.Node] = []
        while isinstance(expression, jsast.BinaryExpression) and expression.operator == CONVERTER_OPERATOR:
            converter = expression.right
            if not isinstance(converter, (jsast.Identifier, jsast.MemberExpression, jsast.CallExpression)):
                raise BindingSemanticError(f'Invalid converter expression: {value}')
            converters.insert(0, converter)
            expression = expression.left
        return expression, converters

    @staticmethod
    def reference_isSettable(expression: jsast.Node) -> bool:
        """True for an identifier or a member chain rooted at an identifier"""
        while isinstance(expression, jsast.MemberExpression):
            expression = expression.object
        return isinstance(expression, jsast.Identifier)

    def twoWay_check(self, attribute: AttributeItem, expression: jsast.Node) -> bool:
        if attribute.is_event_listener or attribute.is_sub_property:
            return False
        return self.reference_isSettable(expression)

    @staticmethod
    def converterCall_build(value: jsast.Node, converter: jsast.Node, to_model: bool) -> jsast.Node:
        """
        xmlRuntime.runConverterCallback(converter, [value, ...args], to_model)

        A converter written as a call keeps its arguments; a call without
        arguments gets an explicit undefined so the runtime can tell it apart
        from a bare reference.
        """
        if isinstance(converter, jsast.CallExpression):
            reference = converter.callee
            arguments = list(converter.arguments) or [jsast.ident('undefined')]
        else:
            reference = converter
            arguments = []

        return jsast.call(
            runtime_member('runConverterCallback'),
            reference,
            jsast.ArrayExpression([value, *arguments]),
            jsast.BooleanLiteral(to_model),
        )

    def descriptor_build(self, attribute: AttributeItem) -> BindingDescriptor:
        """
        Compile one binding attribute.

        Args:
            attribute: Classified attribute whose value holds a {{ }} binding

        Returns:
            BindingDescriptor

        Raises:
            BindingSyntaxError: Empty, malformed, multi-statement or disallowed expression
            BindingSemanticError: Invalid $parents target or converter
        """
        value = attribute.value
        code = self.code_extract(value)
        expression = self.expression_extract(code, value)
        NodeValidator(value).visit(expression)

        bound, converters = self.converters_unwrap(expression, value)
        is_two_way = self.twoWay_check(attribute, bound)

        rewriter = BindingRewriter(value)
        bound = rewriter.visit(bound)
        converters = [rewriter.visit(converter) for converter in converters]

        forward = bound
        for converter in converters:
            forward = self.converterCall_build(forward, converter, False)

        if not rewriter.properties:
            is_two_way = False

        to_model = None
        if is_two_way and converters:
            reverse: jsast.Node = jsast.ident('value')
            for converter in reversed(converters):
                reverse = self.converterCall_build(reverse, copy.deepcopy(converter), True)
            to_model = (copy.deepcopy(bound), reverse)

        descriptor = BindingDescriptor(
            property_name=attribute.property_name,
            prefix=attribute.prefix,
            is_event_listener=attribute.is_event_listener,
            is_sub_property=attribute.is_sub_property,
            expression=forward,
            properties=rewriter.properties,
            is_two_way=is_two_way,
            parent_key_expressions=rewriter.parent_keys,
            special_reference_count=rewriter.special_count,
            to_model=to_model,
            source=value,
        )
        LOG(
            f"Binding '{attribute.name}': properties={descriptor.properties} two_way={is_two_way}",
            level=3,
        )
        return descriptor

    def descriptor_compile(self, attribute: AttributeItem) -> Optional[BindingDescriptor]:
        """
        Compile one binding attribute, reporting failures to the channel.

        Returns:
            BindingDescriptor, or None when the binding was rejected in
            lenient mode (strict mode re-raises)
        """
        try:
            return self.descriptor_build(attribute)
        except CompilerError as error:
            self.channel.error_notify(error)
            return None
