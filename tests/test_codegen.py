"""
Code generator tests - jsast to JavaScript text

Tests the printer's fixed output style:
- Single-quoted strings with escapes
- Two-space indentation of nested blocks
- Parentheses only where precedence requires them
"""

import pytest

from xmlui.lib import jsast
from xmlui.lib.codegen import code_generate, string_quote


class TestStrings:
    """Test string literal quoting"""

    def test_plain(self):
        assert string_quote('hello') == "'hello'"

    def test_quote_and_backslash(self):
        assert string_quote("it's \\ ok") == "'it\\'s \\\\ ok'"

    def test_control_characters(self):
        assert string_quote('a\nb\tc') == "'a\\nb\\tc'"
        assert string_quote('\x01') == "'\\x01'"

    def test_line_separators(self):
        assert string_quote('\u2028') == "'\\u2028'"

    def test_double_quote_untouched(self):
        assert string_quote('say "hi"') == "'say \"hi\"'"


class TestExpressions:
    """Test expression printing"""

    def test_new_without_arguments(self):
        assert code_generate(jsast.NewExpression(jsast.ident('Label'))) == 'new Label()'

    def test_member_with_invalid_identifier_is_computed(self):
        node = jsast.member(jsast.ident('customModules'), 'components/card.xml')

        assert code_generate(node) == "customModules['components/card.xml']"

    def test_optional_member(self):
        node = jsast.member(jsast.ident('a'), 'b', optional=True)

        assert code_generate(node) == 'a?.b'

    def test_new_with_call_in_callee_wrapped(self):
        callee = jsast.member(jsast.call(jsast.ident('factory')), 'View')

        assert code_generate(jsast.NewExpression(callee)) == 'new (factory().View)()'

    def test_and_wraps_or_operand(self):
        node = jsast.LogicalExpression(
            '&&',
            jsast.LogicalExpression('||', jsast.ident('a'), jsast.ident('b')),
            jsast.ident('c'),
        )

        assert code_generate(node) == '(a || b) && c'

    def test_spread_of_logical_unwrapped(self):
        node = jsast.ArrayExpression([
            jsast.SpreadElement(jsast.LogicalExpression('||', jsast.ident('el1'), jsast.ArrayExpression())),
        ])

        assert code_generate(node) == '[...el1 || []]'

    def test_conditional_in_argument(self):
        node = jsast.call(
            jsast.ident('f'),
            jsast.ConditionalExpression(jsast.ident('a'), jsast.ident('b'), jsast.ident('c')),
        )

        assert code_generate(node) == 'f(a ? b : c)'

    def test_nested_conditional_test_wrapped(self):
        inner = jsast.ConditionalExpression(jsast.ident('a'), jsast.ident('b'), jsast.ident('c'))
        node = jsast.ConditionalExpression(inner, jsast.ident('d'), jsast.ident('e'))

        assert code_generate(node) == '(a ? b : c) ? d : e'

    def test_double_negation_not_glued(self):
        node = jsast.UnaryExpression('-', jsast.UnaryExpression('-', jsast.ident('a')))

        assert code_generate(node) == '- -a'

    def test_keyword_unary(self):
        node = jsast.UnaryExpression('typeof', jsast.ident('a'))

        assert code_generate(node) == 'typeof a'

    def test_arrow_returning_object_wrapped(self):
        node = jsast.ArrowFunctionExpression([], jsast.ObjectExpression())

        assert code_generate(node) == '() => ({})'

    def test_empty_object_and_array(self):
        assert code_generate(jsast.ObjectExpression()) == '{}'
        assert code_generate(jsast.ArrayExpression()) == '[]'

    def test_object_with_string_key(self):
        node = jsast.ObjectExpression([
            jsast.ObjectProperty(jsast.string('a-b'), jsast.literal_make(1)),
        ])

        assert code_generate(node) == "{ 'a-b': 1 }"

    @pytest.mark.parametrize('value,expected', [
        (None, 'null'),
        (True, 'true'),
        (3, '3'),
        (2.5, '2.5'),
        ('x', "'x'"),
    ])
    def test_literal_make(self, value, expected):
        assert code_generate(jsast.literal_make(value)) == expected


class TestStatements:
    """Test statement printing"""

    def test_let_without_init(self):
        assert code_generate(jsast.let('el1')) == 'let el1;'

    def test_const(self):
        assert code_generate(jsast.let('X', jsast.string('v'), kind='const')) == "const X = 'v';"

    def test_object_statement_wrapped(self):
        node = jsast.statement(jsast.ObjectExpression())

        assert code_generate(node) == '({});'

    def test_if_else(self):
        node = jsast.IfStatement(
            jsast.ident('a'),
            jsast.BlockStatement([jsast.statement(jsast.call(jsast.ident('f')))]),
            jsast.BlockStatement([jsast.ReturnStatement()]),
        )

        assert code_generate(node) == 'if (a) {\n  f();\n} else {\n  return;\n}'

    def test_function_with_default_parameter(self):
        node = jsast.FunctionDeclaration(
            jsast.ident('f'),
            [jsast.AssignmentPattern(jsast.ident('x'), jsast.NullLiteral())],
            jsast.BlockStatement([]),
        )

        assert code_generate(node) == 'function f(x = null) {}'

    def test_arrow_block_indented_relative_to_statement(self):
        factory = jsast.ArrowFunctionExpression([], jsast.BlockStatement([
            jsast.let('el1', jsast.NewExpression(jsast.ident('Label'))),
            jsast.ReturnStatement(jsast.ident('el1')),
        ]))
        node = jsast.BlockStatement([jsast.assign(jsast.member(jsast.ident('el0'), 'itemTemplate'), factory)])

        assert code_generate(node) == (
            '{\n'
            '  el0.itemTemplate = () => {\n'
            '    let el1 = new Label();\n'
            '    return el1;\n'
            '  };\n'
            '}'
        )

    def test_destructuring_require(self):
        pattern = jsast.ObjectPattern([
            jsast.ObjectProperty(jsast.ident('Label'), jsast.ident('Label'), shorthand=True),
            jsast.ObjectProperty(jsast.ident('Page'), jsast.ident('Page'), shorthand=True),
        ])
        node = jsast.VariableDeclaration('let', [jsast.VariableDeclarator(pattern, jsast.require('ui'))])

        assert code_generate(node) == "let { Label, Page } = require('ui');"

    def test_export_default_class(self):
        method = jsast.ClassMethod(jsast.ident('constructor'), [], jsast.BlockStatement([jsast.ReturnStatement()]))
        node = jsast.ExportDefaultDeclaration(jsast.ClassDeclaration(jsast.ident('MainPage'), [method]))

        assert code_generate(node) == (
            'export default class MainPage {\n'
            '  constructor() {\n'
            '    return;\n'
            '  }\n'
            '}'
        )

    def test_program_ends_with_newline(self):
        program = jsast.Program([jsast.statement(jsast.ident('a')), jsast.statement(jsast.ident('b'))])

        assert code_generate(program) == 'a;\nb;\n'
