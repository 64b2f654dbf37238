"""
JavaScript code printer

Turns a jsast tree into source text. Output style is fixed:
- two-space indentation
- single-quoted strings
- semicolon-terminated statements
- parentheses only where operator precedence requires them

Example:
    >>> from xmlui.lib import jsast
    >>> CodeGenerator().generate(jsast.let('el0', jsast.NewExpression(jsast.ident('Label'))))
    'let el0 = new Label();'
"""

from typing import List, Optional

from . import jsast
from .jsast import Node


INDENT = '  '

# Binding strength, higher binds tighter
PREC_SEQUENCE = 1
PREC_ASSIGNMENT = 2
PREC_CONDITIONAL = 3
PREC_UNARY = 15
PREC_POSTFIX = 16
PREC_CALL = 18
PREC_PRIMARY = 20

BINARY_PRECEDENCE = {
    '??': 4,
    '||': 4,
    '&&': 5,
    '|': 6,
    '^': 7,
    '&': 8,
    '==': 9, '!=': 9, '===': 9, '!==': 9,
    '<': 10, '>': 10, '<=': 10, '>=': 10, 'instanceof': 10, 'in': 10,
    '<<': 11, '>>': 11, '>>>': 11,
    '+': 12, '-': 12,
    '*': 13, '/': 13, '%': 13,
    '**': 14,
}

STRING_ESCAPES = {
    '\\': '\\\\',
    "'": "\\'",
    '\n': '\\n',
    '\r': '\\r',
    '\t': '\\t',
    '\b': '\\b',
    '\f': '\\f',
    '\v': '\\v',
    '\0': '\\0',
    '\u2028': '\\u2028',
    '\u2029': '\\u2029',
}


def string_quote(value: str) -> str:
    """
    Quote a python string as a single-quoted JS string literal.

    Example:
        >>> string_quote("it's")
        "'it\\\\'s'"
    """
    chars = []
    for char in value:
        if char in STRING_ESCAPES:
            chars.append(STRING_ESCAPES[char])
        elif ord(char) < 0x20 or ord(char) == 0x7f:
            chars.append(f'\\x{ord(char):02x}')
        else:
            chars.append(char)
    return "'" + ''.join(chars) + "'"


def number_format(node: jsast.NumericLiteral) -> str:
    if node.raw is not None:
        return node.raw
    value = node.value
    if isinstance(value, float):
        if value.is_integer() and abs(value) < 1e21:
            return str(int(value))
        return repr(value)
    return str(value)


class CodeGenerator:
    """
    Print jsast nodes as JavaScript source.

    Statement printing tracks the current block depth so that arrow function
    bodies nested inside expressions (template factories, binding source
    callbacks) indent relative to the statement that contains them.
    """

    def __init__(self) -> None:
        self.depth: int = 0

    def generate(self, node: Node) -> str:
        """
        Print a program, statement or expression.

        Args:
            node: Any jsast node

        Returns:
            JavaScript source text (programs end with a newline)
        """
        if isinstance(node, jsast.Program):
            return '\n'.join(self.statement_emit(item) for item in node.body) + '\n'
        if self.node_isStatement(node):
            return self.statement_emit(node)
        return self.expression_emit(node)

    @staticmethod
    def node_isStatement(node: Node) -> bool:
        return isinstance(node, (
            jsast.ExpressionStatement, jsast.VariableDeclaration, jsast.BlockStatement,
            jsast.IfStatement, jsast.ReturnStatement, jsast.TryStatement,
            jsast.FunctionDeclaration, jsast.ClassDeclaration,
            jsast.ExportDefaultDeclaration, jsast.EmptyStatement,
        ))

    # ------------------------------------------------------------------
    # Statements

    def indent_get(self) -> str:
        return INDENT * self.depth

    def block_emit(self, statements: List[Node]) -> str:
        """Print a brace-delimited block at the current depth"""
        if not statements:
            return '{}'
        self.depth += 1
        try:
            lines = [self.indent_get() + self.statement_emit(item) for item in statements]
        finally:
            self.depth -= 1
        return '{\n' + '\n'.join(lines) + '\n' + self.indent_get() + '}'

    def statement_emit(self, node: Node) -> str:
        if isinstance(node, jsast.ExpressionStatement):
            text = self.expression_emit(node.expression)
            if text.startswith(('{', 'function', 'class', 'let [')):
                text = f'({text})'
            return text + ';'

        if isinstance(node, jsast.VariableDeclaration):
            declarators = []
            for declarator in node.declarations:
                text = self.pattern_emit(declarator.id)
                if declarator.init is not None:
                    text += ' = ' + self.expression_emit(declarator.init, PREC_ASSIGNMENT)
                declarators.append(text)
            return f"{node.kind} {', '.join(declarators)};"

        if isinstance(node, jsast.BlockStatement):
            return self.block_emit(node.body)

        if isinstance(node, jsast.IfStatement):
            text = f'if ({self.expression_emit(node.test)}) {self.block_emit(node.consequent.body)}'
            if node.alternate is not None:
                if isinstance(node.alternate, jsast.IfStatement):
                    text += ' else ' + self.statement_emit(node.alternate)
                else:
                    text += ' else ' + self.block_emit(node.alternate.body)
            return text

        if isinstance(node, jsast.ReturnStatement):
            if node.argument is None:
                return 'return;'
            return f'return {self.expression_emit(node.argument)};'

        if isinstance(node, jsast.TryStatement):
            return f'try {self.block_emit(node.block.body)} finally {self.block_emit(node.finalizer.body)}'

        if isinstance(node, jsast.FunctionDeclaration):
            return f'function {node.id.name}({self.params_emit(node.params)}) {self.block_emit(node.body.body)}'

        if isinstance(node, jsast.ClassDeclaration):
            self.depth += 1
            try:
                methods = [
                    self.indent_get() + f'{method.key.name}({self.params_emit(method.params)}) '
                    + self.block_emit(method.body.body)
                    for method in node.body
                ]
            finally:
                self.depth -= 1
            if not methods:
                return f'class {node.id.name} {{}}'
            return f'class {node.id.name} {{\n' + '\n'.join(methods) + '\n' + self.indent_get() + '}'

        if isinstance(node, jsast.ExportDefaultDeclaration):
            declaration = node.declaration
            if self.node_isStatement(declaration):
                return 'export default ' + self.statement_emit(declaration)
            return f'export default {self.expression_emit(declaration, PREC_ASSIGNMENT)};'

        if isinstance(node, jsast.EmptyStatement):
            return ';'

        raise TypeError(f'Cannot print statement node {node.type}')

    def params_emit(self, params: List[Node]) -> str:
        return ', '.join(self.pattern_emit(param) for param in params)

    def pattern_emit(self, node: Node) -> str:
        if isinstance(node, jsast.AssignmentPattern):
            return f'{self.pattern_emit(node.left)} = {self.expression_emit(node.right, PREC_ASSIGNMENT)}'
        if isinstance(node, jsast.ObjectPattern):
            if not node.properties:
                return '{}'
            return '{ ' + ', '.join(self.property_emit(prop) for prop in node.properties) + ' }'
        return self.expression_emit(node, PREC_CALL)

    # ------------------------------------------------------------------
    # Expressions

    def precedence_get(self, node: Node) -> int:
        if isinstance(node, jsast.SequenceExpression):
            return PREC_SEQUENCE
        if isinstance(node, (jsast.AssignmentExpression, jsast.ArrowFunctionExpression)):
            return PREC_ASSIGNMENT
        if isinstance(node, jsast.ConditionalExpression):
            return PREC_CONDITIONAL
        if isinstance(node, (jsast.BinaryExpression, jsast.LogicalExpression)):
            return BINARY_PRECEDENCE[node.operator]
        if isinstance(node, jsast.UnaryExpression):
            return PREC_UNARY
        if isinstance(node, jsast.UpdateExpression):
            return PREC_UNARY if node.prefix else PREC_POSTFIX
        if isinstance(node, (jsast.CallExpression, jsast.MemberExpression, jsast.NewExpression)):
            return PREC_CALL
        return PREC_PRIMARY

    def expression_emit(self, node: Node, min_precedence: int = PREC_SEQUENCE) -> str:
        """
        Print an expression, wrapping it in parentheses when it binds more
        loosely than the surrounding context requires.

        Args:
            node: Expression node
            min_precedence: Weakest precedence allowed unparenthesized

        Returns:
            JavaScript expression text
        """
        text = self.expression_format(node)
        if self.precedence_get(node) < min_precedence:
            return f'({text})'
        return text

    def expression_format(self, node: Node) -> str:
        if isinstance(node, jsast.Identifier):
            return node.name
        if isinstance(node, jsast.StringLiteral):
            return string_quote(node.value)
        if isinstance(node, jsast.NumericLiteral):
            return number_format(node)
        if isinstance(node, jsast.BooleanLiteral):
            return 'true' if node.value else 'false'
        if isinstance(node, jsast.NullLiteral):
            return 'null'
        if isinstance(node, jsast.ThisExpression):
            return 'this'

        if isinstance(node, jsast.TemplateLiteral):
            parts = []
            for index, quasi in enumerate(node.quasis):
                parts.append(quasi.raw)
                if index < len(node.expressions):
                    parts.append('${' + self.expression_emit(node.expressions[index]) + '}')
            return '`' + ''.join(parts) + '`'

        if isinstance(node, jsast.ArrayExpression):
            items = [
                '' if element is None else self.expression_emit(element, PREC_ASSIGNMENT)
                for element in node.elements
            ]
            if node.elements and node.elements[-1] is None:
                items.append('')
            return '[' + ', '.join(items) + ']'

        if isinstance(node, jsast.ObjectExpression):
            if not node.properties:
                return '{}'
            return '{ ' + ', '.join(self.property_emit(prop) for prop in node.properties) + ' }'

        if isinstance(node, jsast.SpreadElement):
            return '...' + self.expression_emit(node.argument, PREC_ASSIGNMENT)

        if isinstance(node, jsast.MemberExpression):
            obj = self.expression_emit(node.object, PREC_CALL)
            if isinstance(node.object, jsast.NumericLiteral) and not node.computed and not node.optional:
                obj = f'({obj})'
            if node.computed:
                accessor = f'[{self.expression_emit(node.property)}]'
                return obj + ('?.' if node.optional else '') + accessor
            return obj + ('?.' if node.optional else '.') + node.property.name

        if isinstance(node, jsast.CallExpression):
            callee = self.expression_emit(node.callee, PREC_CALL)
            return callee + ('?.' if node.optional else '') + f'({self.arguments_emit(node.arguments)})'

        if isinstance(node, jsast.NewExpression):
            callee = self.expression_emit(node.callee, PREC_CALL)
            if not self.newCallee_isPlain(node.callee):
                callee = f'({callee})'
            return f'new {callee}({self.arguments_emit(node.arguments)})'

        if isinstance(node, jsast.ConditionalExpression):
            test = self.expression_emit(node.test, PREC_CONDITIONAL + 1)
            consequent = self.expression_emit(node.consequent, PREC_ASSIGNMENT)
            alternate = self.expression_emit(node.alternate, PREC_ASSIGNMENT)
            return f'{test} ? {consequent} : {alternate}'

        if isinstance(node, (jsast.BinaryExpression, jsast.LogicalExpression)):
            return self.binary_format(node)

        if isinstance(node, jsast.UnaryExpression):
            argument = self.expression_emit(node.argument, PREC_UNARY)
            if node.operator.isalpha():
                return f'{node.operator} {argument}'
            # avoid gluing "- -a" into "--a"
            if node.operator in '+-' and argument.startswith(node.operator):
                return f'{node.operator} {argument}'
            return node.operator + argument

        if isinstance(node, jsast.UpdateExpression):
            if node.prefix:
                return node.operator + self.expression_emit(node.argument, PREC_UNARY)
            return self.expression_emit(node.argument, PREC_POSTFIX + 1) + node.operator

        if isinstance(node, jsast.AssignmentExpression):
            left = self.expression_emit(node.left, PREC_POSTFIX + 1)
            right = self.expression_emit(node.right, PREC_ASSIGNMENT)
            return f'{left} {node.operator} {right}'

        if isinstance(node, jsast.SequenceExpression):
            return ', '.join(self.expression_emit(item, PREC_ASSIGNMENT) for item in node.expressions)

        if isinstance(node, jsast.ArrowFunctionExpression):
            if len(node.params) == 1 and isinstance(node.params[0], jsast.Identifier):
                params = node.params[0].name
            else:
                params = f'({self.params_emit(node.params)})'
            if isinstance(node.body, jsast.BlockStatement):
                return f'{params} => {self.block_emit(node.body.body)}'
            body = self.expression_emit(node.body, PREC_ASSIGNMENT)
            if isinstance(node.body, jsast.ObjectExpression):
                body = f'({body})'
            return f'{params} => {body}'

        raise TypeError(f'Cannot print expression node {node.type}')

    def binary_format(self, node: Node) -> str:
        precedence = BINARY_PRECEDENCE[node.operator]
        if node.operator == '**':
            # right associative, and a unary left operand must be wrapped
            left = self.operand_emit(node, node.left, PREC_POSTFIX)
            right = self.operand_emit(node, node.right, precedence)
        else:
            left = self.operand_emit(node, node.left, precedence)
            right = self.operand_emit(node, node.right, precedence + 1)
        return f'{left} {node.operator} {right}'

    def operand_emit(self, parent: Node, child: Node, min_precedence: int) -> str:
        # '??' may not be mixed with '||' or '&&' without parentheses
        if (
            isinstance(parent, jsast.LogicalExpression)
            and isinstance(child, jsast.LogicalExpression)
            and (parent.operator == '??') != (child.operator == '??')
        ):
            return f'({self.expression_format(child)})'
        return self.expression_emit(child, min_precedence)

    @staticmethod
    def newCallee_isPlain(callee: Node) -> bool:
        """A 'new' callee must not contain calls or optional links unless wrapped"""
        while isinstance(callee, jsast.MemberExpression):
            if callee.optional:
                return False
            callee = callee.object
        return isinstance(callee, (jsast.Identifier, jsast.ThisExpression))

    def arguments_emit(self, arguments: List[Optional[Node]]) -> str:
        return ', '.join(self.expression_emit(arg, PREC_ASSIGNMENT) for arg in arguments)

    def property_emit(self, prop: Node) -> str:
        if isinstance(prop, jsast.SpreadElement):
            return self.expression_emit(prop)
        if prop.shorthand and isinstance(prop.value, jsast.Identifier):
            return prop.value.name
        if prop.computed:
            key = f'[{self.expression_emit(prop.key, PREC_ASSIGNMENT)}]'
        elif isinstance(prop.key, jsast.Identifier):
            key = prop.key.name
        else:
            key = self.expression_format(prop.key)
        if isinstance(prop.value, jsast.AssignmentPattern):
            return f'{key}: {self.pattern_emit(prop.value)}'
        return f'{key}: {self.expression_emit(prop.value, PREC_ASSIGNMENT)}'


def code_generate(node: Node) -> str:
    """Convenience wrapper around CodeGenerator().generate()"""
    return CodeGenerator().generate(node)
