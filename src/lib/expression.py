"""
Parser for binding expressions

Recursive descent parser over the BindingLexer token stream, producing jsast
nodes. It understands the expression grammar of ECMAScript (literals,
templates, arrays, objects, member/optional/call chains, new, unary, update,
binary, logical, conditional, assignment, arrow functions and sequences) and
just enough of the statement grammar to tell a single expression statement
apart from anything else.

Operator precedence is handled by precedence climbing over BINARY_PRECEDENCE.
Automatic semicolon insertion is honoured between statements: a line break
ends a statement the same way ';' does.

What the parser accepts is deliberately wider than what a binding may contain;
deciding which node kinds are allowed is the binding compiler's job.

Example:
    >>> program = ExpressionParser('a + b * 2').program_parse()
    >>> program.body[0].expression.operator
    '+'
"""

from dataclasses import dataclass
from typing import List, Optional

from pygments.token import Comment, Error, Keyword, Name, Number, Operator, Punctuation, String, Whitespace

from . import jsast
from .errors import BindingSyntaxError
from .lexer import tokens_scan


BINARY_PRECEDENCE = {
    '??': 1,
    '||': 1,
    '&&': 2,
    '|': 3,
    '^': 4,
    '&': 5,
    '==': 6, '!=': 6, '===': 6, '!==': 6,
    '<': 7, '>': 7, '<=': 7, '>=': 7, 'instanceof': 7, 'in': 7,
    '<<': 8, '>>': 8, '>>>': 8,
    '+': 9, '-': 9,
    '*': 10, '/': 10, '%': 10,
    '**': 11,
}

LOGICAL_OPERATORS = ('||', '&&', '??')

ASSIGNMENT_OPERATORS = (
    '=', '+=', '-=', '*=', '/=', '%=', '**=', '<<=', '>>=', '>>>=',
    '&=', '|=', '^=', '&&=', '||=', '??=',
)

UNARY_OPERATORS = ('!', '~', '+', '-', 'typeof', 'void', 'delete')

STATEMENT_KEYWORDS = (
    'var', 'let', 'const', 'if', 'for', 'while', 'do', 'return', 'function',
    'class', 'switch', 'break', 'continue', 'throw', 'try', 'import', 'export',
    'debugger', 'with',
)

SIMPLE_ESCAPES = {
    'n': '\n', 't': '\t', 'r': '\r', 'b': '\b', 'f': '\f', 'v': '\v', '0': '\0',
}


@dataclass
class Token:
    """
    One significant token.

    Attributes:
        kind: 'name', 'keyword', 'constant', 'number', 'string', 'punct',
              'backtick', 'chunk', 'interp_open', 'interp_close' or 'eof'
        value: Source text of the token
        offset: Character offset in the expression source
        newline_before: A line break separates this token from the previous one
    """
    kind: str
    value: str
    offset: int
    newline_before: bool = False


def tokens_collect(source: str) -> List[Token]:
    """
    Convert the Pygments token stream into parser tokens.

    Whitespace and comments are dropped, but a line break inside them is
    remembered on the next token for semicolon insertion.

    Raises:
        BindingSyntaxError: On a character the lexer does not recognise
    """
    tokens: List[Token] = []
    newline = False

    for offset, tokentype, value in tokens_scan(source):
        if tokentype in Whitespace or tokentype in Comment:
            newline = newline or '\n' in value
            continue
        if tokentype in Error:
            raise BindingSyntaxError(f"Unexpected character '{value}' ({offset + 1})")

        if tokentype in String.Delimiter:
            kind = 'backtick'
        elif tokentype in String.Interpol:
            kind = 'interp_open' if value == '${' else 'interp_close'
        elif tokentype in String.Backtick:
            kind = 'chunk'
        elif tokentype in String:
            kind = 'string'
        elif tokentype in Number:
            kind = 'number'
        elif tokentype in Keyword.Constant:
            kind = 'constant'
        elif tokentype in Keyword:
            kind = 'keyword'
        elif tokentype in Name:
            kind = 'name'
        elif tokentype in Operator or tokentype in Punctuation:
            kind = 'punct'
        else:
            raise BindingSyntaxError(f"Unexpected token '{value}' ({offset + 1})")

        tokens.append(Token(kind, value, offset, newline))
        newline = False

    tokens.append(Token('eof', '', len(source), newline))
    return tokens


def escapes_decode(text: str) -> str:
    r"""
    Decode JS string escapes.

    Handles \n-style escapes, \xHH, \uHHHH, \u{H...} and line continuations;
    any other escaped character stands for itself.

    Example:
        >>> escapes_decode(r"it\'s!")
        "it's!"
    """
    chars = []
    pos = 0
    while pos < len(text):
        char = text[pos]
        if char != '\\':
            chars.append(char)
            pos += 1
            continue

        pos += 1
        if pos >= len(text):
            raise BindingSyntaxError('Unterminated string escape')
        escape = text[pos]

        if escape in SIMPLE_ESCAPES:
            chars.append(SIMPLE_ESCAPES[escape])
            pos += 1
        elif escape == 'x':
            digits = text[pos + 1:pos + 3]
            if len(digits) != 2 or not all(c in '0123456789abcdefABCDEF' for c in digits):
                raise BindingSyntaxError('Invalid hexadecimal escape sequence')
            chars.append(chr(int(digits, 16)))
            pos += 3
        elif escape == 'u':
            if text[pos + 1:pos + 2] == '{':
                end = text.find('}', pos)
                if end < 0:
                    raise BindingSyntaxError('Invalid Unicode escape sequence')
                digits = text[pos + 2:end]
                pos = end + 1
            else:
                digits = text[pos + 1:pos + 5]
                pos += 5
            try:
                chars.append(chr(int(digits, 16)))
            except ValueError:
                raise BindingSyntaxError('Invalid Unicode escape sequence')
        elif escape == '\r':
            pos += 2 if text[pos + 1:pos + 2] == '\n' else 1
        elif escape in '\n\u2028\u2029':
            pos += 1
        else:
            chars.append(escape)
            pos += 1

    return ''.join(chars)


def number_parse(raw: str) -> jsast.NumericLiteral:
    text = raw.rstrip('n').lower()
    if text.startswith('0x'):
        value = int(text[2:], 16)
    elif text.startswith('0o'):
        value = int(text[2:], 8)
    elif text.startswith('0b'):
        value = int(text[2:], 2)
    else:
        number = float(text)
        value = int(number) if number.is_integer() and 'e' not in text and '.' not in text else number
    return jsast.NumericLiteral(value, raw)


class ExpressionParser:
    """
    Parse binding source into a jsast.Program.

    Args:
        source: Expression text, without the surrounding {{ }}

    Attributes:
        tokens: Significant tokens, always terminated by an 'eof' token
        position: Index of the current token
    """

    def __init__(self, source: str) -> None:
        self.source = source
        self.tokens: List[Token] = tokens_collect(source)
        self.position: int = 0
        # ids of nodes written inside parentheses in the source
        self.parenthesized: set = set()

    # ------------------------------------------------------------------
    # Token helpers

    @property
    def current(self) -> Token:
        return self.tokens[self.position]

    def token_peek(self, distance: int = 1) -> Token:
        index = min(self.position + distance, len(self.tokens) - 1)
        return self.tokens[index]

    def token_advance(self) -> Token:
        token = self.current
        if token.kind != 'eof':
            self.position += 1
        return token

    def token_is(self, value: str, kind: str = 'punct') -> bool:
        return self.current.kind == kind and self.current.value == value

    def token_expect(self, value: str, kind: str = 'punct') -> Token:
        if not self.token_is(value, kind):
            self.unexpected_raise(f"expected '{value}'")
        return self.token_advance()

    def unexpected_raise(self, hint: str = '') -> None:
        token = self.current
        if token.kind == 'eof':
            message = 'Unexpected end of expression'
        else:
            message = f"Unexpected token '{token.value}'"
        if hint:
            message += f', {hint}'
        raise BindingSyntaxError(f'{message} ({token.offset + 1})')

    # ------------------------------------------------------------------
    # Statements

    def program_parse(self) -> jsast.Program:
        """
        Parse the whole source as a sequence of statements.

        Only expression statements and empty statements are understood; a
        block or any keyword statement is reported as a syntax error, since a
        binding can never be one.

        Returns:
            Program whose body holds ExpressionStatement/EmptyStatement nodes

        Raises:
            BindingSyntaxError: On malformed input
        """
        body: List[jsast.Node] = []

        while self.current.kind != 'eof':
            if self.token_is(';'):
                self.token_advance()
                body.append(jsast.EmptyStatement())
                continue

            if self.token_is('{'):
                raise BindingSyntaxError(
                    f'Block statements are not supported ({self.current.offset + 1})'
                )
            if self.current.kind == 'keyword' and self.current.value in STATEMENT_KEYWORDS:
                raise BindingSyntaxError(
                    f"Unexpected '{self.current.value}' statement ({self.current.offset + 1})"
                )

            expression = self.expression_parse()
            body.append(jsast.ExpressionStatement(expression))

            if self.token_is(';'):
                self.token_advance()
            elif self.current.kind != 'eof' and not self.current.newline_before:
                self.unexpected_raise('missing semicolon')

        return jsast.Program(body)

    # ------------------------------------------------------------------
    # Expressions

    def expression_parse(self) -> jsast.Node:
        """Expression, including the comma operator"""
        expression = self.assignment_parse()
        if not self.token_is(','):
            return expression

        expressions = [expression]
        while self.token_is(','):
            self.token_advance()
            expressions.append(self.assignment_parse())
        return jsast.SequenceExpression(expressions)

    def assignment_parse(self) -> jsast.Node:
        if self.arrow_isAhead():
            return self.arrow_parse()

        left = self.conditional_parse()

        if self.current.kind == 'punct' and self.current.value in ASSIGNMENT_OPERATORS:
            if not isinstance(left, (jsast.Identifier, jsast.MemberExpression)) or self.optionalChain_contains(left):
                self.unexpected_raise('invalid left-hand side in assignment')
            operator = self.token_advance().value
            return jsast.AssignmentExpression(operator, left, self.assignment_parse())

        return left

    def arrow_isAhead(self) -> bool:
        """True if the tokens at the cursor start an arrow function"""
        token = self.current
        if token.kind == 'name':
            return self.token_peek().kind == 'punct' and self.token_peek().value == '=>'
        if not self.token_is('('):
            return False

        depth = 0
        for index in range(self.position, len(self.tokens)):
            candidate = self.tokens[index]
            if candidate.kind == 'punct' and candidate.value in ('(', '[', '{'):
                depth += 1
            elif candidate.kind == 'punct' and candidate.value in (')', ']', '}'):
                depth -= 1
                if depth == 0:
                    following = self.tokens[min(index + 1, len(self.tokens) - 1)]
                    return following.kind == 'punct' and following.value == '=>'
            elif candidate.kind == 'eof':
                return False
        return False

    def arrow_parse(self) -> jsast.ArrowFunctionExpression:
        params: List[jsast.Node] = []

        if self.current.kind == 'name':
            params.append(jsast.Identifier(self.token_advance().value))
        else:
            self.token_expect('(')
            while not self.token_is(')'):
                if self.current.kind != 'name':
                    self.unexpected_raise('expected parameter name')
                param: jsast.Node = jsast.Identifier(self.token_advance().value)
                if self.token_is('='):
                    self.token_advance()
                    param = jsast.AssignmentPattern(param, self.assignment_parse())
                params.append(param)
                if not self.token_is(')'):
                    self.token_expect(',')
            self.token_expect(')')

        self.token_expect('=>')
        if self.token_is('{'):
            raise BindingSyntaxError(
                f'Arrow function block bodies are not supported ({self.current.offset + 1})'
            )
        return jsast.ArrowFunctionExpression(params, self.assignment_parse())

    def conditional_parse(self) -> jsast.Node:
        test = self.binary_parse(1)
        if not self.token_is('?'):
            return test

        self.token_advance()
        consequent = self.assignment_parse()
        self.token_expect(':')
        alternate = self.assignment_parse()
        return jsast.ConditionalExpression(test, consequent, alternate)

    def binaryOperator_peek(self) -> Optional[str]:
        token = self.current
        if token.kind == 'punct' and token.value in BINARY_PRECEDENCE:
            return token.value
        if token.kind == 'keyword' and token.value in ('in', 'instanceof'):
            return token.value
        return None

    def binary_parse(self, min_precedence: int) -> jsast.Node:
        """
        Precedence climbing over binary and logical operators.

        Args:
            min_precedence: Weakest operator this call may consume

        Returns:
            Expression tree with left-associative grouping, except for the
            right-associative exponent operator
        """
        left = self.unary_parse()

        while True:
            operator = self.binaryOperator_peek()
            if operator is None or BINARY_PRECEDENCE[operator] < min_precedence:
                return left
            precedence = BINARY_PRECEDENCE[operator]
            self.token_advance()

            if operator == '**':
                if isinstance(left, jsast.UnaryExpression) and id(left) not in self.parenthesized:
                    raise BindingSyntaxError(
                        'Unary operator used immediately before exponentiation expression'
                    )
                right = self.binary_parse(precedence)
            else:
                right = self.binary_parse(precedence + 1)

            if operator in LOGICAL_OPERATORS:
                self.coalesceMix_check(operator, left, right)
                left = jsast.LogicalExpression(operator, left, right)
            else:
                left = jsast.BinaryExpression(operator, left, right)

    def coalesceMix_check(self, operator: str, left: jsast.Node, right: jsast.Node) -> None:
        for operand in (left, right):
            if (
                isinstance(operand, jsast.LogicalExpression)
                and id(operand) not in self.parenthesized
                and (operand.operator == '??') != (operator == '??')
            ):
                raise BindingSyntaxError("Nullish coalescing cannot be mixed with '||' or '&&' without parentheses")

    def unary_parse(self) -> jsast.Node:
        token = self.current

        if token.kind in ('punct', 'keyword') and token.value in UNARY_OPERATORS:
            self.token_advance()
            return jsast.UnaryExpression(token.value, self.unary_parse())

        if token.kind == 'punct' and token.value in ('++', '--'):
            self.token_advance()
            argument = self.unary_parse()
            self.updateTarget_check(argument)
            return jsast.UpdateExpression(token.value, argument, prefix=True)

        expression = self.leftHandSide_parse()

        if self.current.kind == 'punct' and self.current.value in ('++', '--') and not self.current.newline_before:
            self.updateTarget_check(expression)
            return jsast.UpdateExpression(self.token_advance().value, expression, prefix=False)

        return expression

    def updateTarget_check(self, argument: jsast.Node) -> None:
        if not isinstance(argument, (jsast.Identifier, jsast.MemberExpression)) or self.optionalChain_contains(argument):
            raise BindingSyntaxError('Invalid left-hand side expression in update operation')

    @staticmethod
    def optionalChain_contains(node: jsast.Node) -> bool:
        while isinstance(node, (jsast.MemberExpression, jsast.CallExpression)):
            if node.optional:
                return True
            node = node.object if isinstance(node, jsast.MemberExpression) else node.callee
        return False

    def leftHandSide_parse(self) -> jsast.Node:
        if self.token_is('new', 'keyword'):
            expression = self.new_parse()
        else:
            expression = self.primary_parse()
        return self.callTail_parse(expression)

    def callTail_parse(self, expression: jsast.Node, allow_calls: bool = True) -> jsast.Node:
        """Consume member accesses, optional links and call arguments"""
        while True:
            if self.token_is('.'):
                self.token_advance()
                expression = jsast.MemberExpression(expression, self.propertyName_parse())
            elif self.token_is('['):
                self.token_advance()
                prop = self.expression_parse()
                self.token_expect(']')
                expression = jsast.MemberExpression(expression, prop, computed=True)
            elif self.token_is('?.'):
                if not allow_calls:
                    self.unexpected_raise('optional chain is not allowed in a new expression')
                self.token_advance()
                if self.token_is('('):
                    expression = jsast.CallExpression(expression, self.arguments_parse(), optional=True)
                elif self.token_is('['):
                    self.token_advance()
                    prop = self.expression_parse()
                    self.token_expect(']')
                    expression = jsast.MemberExpression(expression, prop, computed=True, optional=True)
                else:
                    expression = jsast.MemberExpression(expression, self.propertyName_parse(), optional=True)
            elif self.token_is('(') and allow_calls:
                expression = jsast.CallExpression(expression, self.arguments_parse())
            elif self.current.kind == 'backtick':
                raise BindingSyntaxError(
                    f'Tagged templates are not supported ({self.current.offset + 1})'
                )
            else:
                return expression

    def propertyName_parse(self) -> jsast.Identifier:
        # reserved words are valid property names after a dot
        if self.current.kind not in ('name', 'keyword', 'constant'):
            self.unexpected_raise('expected property name')
        return jsast.Identifier(self.token_advance().value)

    def new_parse(self) -> jsast.Node:
        self.token_expect('new', 'keyword')
        if self.token_is('.'):
            self.unexpected_raise("'new.target' is not supported")

        if self.token_is('new', 'keyword'):
            callee = self.new_parse()
        else:
            callee = self.primary_parse()
        callee = self.callTail_parse(callee, allow_calls=False)

        arguments: List[jsast.Node] = []
        if self.token_is('('):
            arguments = self.arguments_parse()
        return jsast.NewExpression(callee, arguments)

    def arguments_parse(self) -> List[jsast.Node]:
        self.token_expect('(')
        arguments: List[jsast.Node] = []
        while not self.token_is(')'):
            if self.token_is('...'):
                self.token_advance()
                arguments.append(jsast.SpreadElement(self.assignment_parse()))
            else:
                arguments.append(self.assignment_parse())
            if not self.token_is(')'):
                self.token_expect(',')
        self.token_expect(')')
        return arguments

    def primary_parse(self) -> jsast.Node:
        token = self.current

        if token.kind == 'number':
            self.token_advance()
            return number_parse(token.value)

        if token.kind == 'string':
            self.token_advance()
            return jsast.StringLiteral(escapes_decode(token.value[1:-1]))

        if token.kind == 'backtick':
            return self.template_parse()

        if token.kind == 'name':
            self.token_advance()
            return jsast.Identifier(token.value)

        if token.kind == 'constant':
            self.token_advance()
            if token.value == 'null':
                return jsast.NullLiteral()
            return jsast.BooleanLiteral(token.value == 'true')

        if token.kind == 'keyword' and token.value == 'this':
            self.token_advance()
            return jsast.ThisExpression()

        if self.token_is('('):
            self.token_advance()
            if self.token_is(')'):
                self.unexpected_raise()
            expression = self.expression_parse()
            self.token_expect(')')
            self.parenthesized.add(id(expression))
            return expression

        if self.token_is('['):
            return self.array_parse()

        if self.token_is('{'):
            return self.object_parse()

        self.unexpected_raise()

    def array_parse(self) -> jsast.ArrayExpression:
        self.token_expect('[')
        elements: List[Optional[jsast.Node]] = []

        while not self.token_is(']'):
            if self.token_is(','):
                self.token_advance()
                elements.append(None)
                continue
            if self.token_is('...'):
                self.token_advance()
                elements.append(jsast.SpreadElement(self.assignment_parse()))
            else:
                elements.append(self.assignment_parse())
            if not self.token_is(']'):
                self.token_expect(',')

        self.token_expect(']')
        return jsast.ArrayExpression(elements)

    def object_parse(self) -> jsast.ObjectExpression:
        self.token_expect('{')
        properties: List[jsast.Node] = []

        while not self.token_is('}'):
            properties.append(self.property_parse())
            if not self.token_is('}'):
                self.token_expect(',')

        self.token_expect('}')
        return jsast.ObjectExpression(properties)

    def property_parse(self) -> jsast.Node:
        if self.token_is('...'):
            self.token_advance()
            return jsast.SpreadElement(self.assignment_parse())

        token = self.current
        computed = False

        if self.token_is('['):
            self.token_advance()
            key: jsast.Node = self.assignment_parse()
            self.token_expect(']')
            computed = True
        elif token.kind in ('name', 'keyword', 'constant'):
            self.token_advance()
            key = jsast.Identifier(token.value)
        elif token.kind == 'string':
            self.token_advance()
            key = jsast.StringLiteral(escapes_decode(token.value[1:-1]))
        elif token.kind == 'number':
            self.token_advance()
            key = number_parse(token.value)
        else:
            self.unexpected_raise('expected property name')

        if self.token_is(':'):
            self.token_advance()
            return jsast.ObjectProperty(key, self.assignment_parse(), computed=computed)

        if token.kind == 'name' and not computed and (self.token_is(',') or self.token_is('}')):
            return jsast.ObjectProperty(key, jsast.Identifier(token.value), shorthand=True)

        if self.token_is('(') or self.current.kind in ('name', 'keyword'):
            raise BindingSyntaxError(
                f'Object methods and accessors are not supported ({self.current.offset + 1})'
            )
        self.unexpected_raise("expected ':'")

    def template_parse(self) -> jsast.TemplateLiteral:
        if self.current.kind != 'backtick':
            self.unexpected_raise()
        self.token_advance()

        quasis: List[jsast.TemplateElement] = []
        expressions: List[jsast.Node] = []
        raw = ''

        while True:
            token = self.current
            if token.kind == 'chunk':
                raw += self.token_advance().value
            elif token.kind == 'interp_open':
                self.token_advance()
                quasis.append(jsast.TemplateElement(raw, escapes_decode(raw)))
                raw = ''
                expressions.append(self.expression_parse())
                if self.current.kind != 'interp_close':
                    self.unexpected_raise("expected '}'")
                self.token_advance()
            elif token.kind == 'backtick':
                self.token_advance()
                quasis.append(jsast.TemplateElement(raw, escapes_decode(raw), tail=True))
                return jsast.TemplateLiteral(quasis, expressions)
            else:
                raise BindingSyntaxError('Unterminated template literal')


def expression_parse(source: str) -> jsast.Program:
    """Parse binding source; see ExpressionParser.program_parse()"""
    return ExpressionParser(source).program_parse()
