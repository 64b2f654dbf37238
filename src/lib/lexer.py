"""
Custom Pygments lexer for binding expressions

Tokenizes the constrained JavaScript expression language found between
``{{`` and ``}}`` in attribute values. The same lexer serves two purposes:
the expression parser consumes its token stream, and it can highlight
binding source in diagnostics.

Token types:
- Whitespace / Comment: skipped by the parser
- Number, String.Single, String.Double: literals
- String.Delimiter: the backticks around a template literal
- String.Backtick: raw text chunk of a template literal
- String.Interpol: the ``${`` and ``}`` around a template substitution
- Keyword, Keyword.Constant: reserved words, true/false/null
- Name: identifiers (``$`` allowed, e.g. $value, $parents)
- Operator, Punctuation: everything else
- Error: a character the language does not know about

Regular expression literals are not part of the language: ``/`` is always
the division operator.
"""

from pygments.lexer import RegexLexer, include, words
from pygments.token import (
    Comment,
    Keyword,
    Name,
    Number,
    Operator,
    Punctuation,
    String,
    Whitespace,
)


IDENTIFIER_END = r'(?![\w$])'

KEYWORDS = (
    'new', 'typeof', 'void', 'delete', 'in', 'instanceof', 'this',
    'var', 'let', 'const', 'if', 'else', 'for', 'while', 'do', 'return',
    'function', 'class', 'switch', 'case', 'default', 'break', 'continue',
    'throw', 'try', 'catch', 'finally', 'import', 'export', 'debugger',
    'with', 'super', 'extends', 'yield',
)

CONSTANTS = ('true', 'false', 'null')


class BindingLexer(RegexLexer):
    """
    Lexer for ``{{ }}`` binding expressions

    Example:
        {{ user.firstName + ' ' + user.lastName | upper }}

    Tokens:
        user → Name
        . → Punctuation
        + → Operator
        ' ' → String.Single
        | → Operator
    """

    name = 'XML UI Binding'
    aliases = ['xmlui-binding']
    filenames = []

    tokens = {
        'root': [
            include('expression'),
        ],

        'expression': [
            (r'\s+', Whitespace),
            (r'//[^\n]*', Comment.Single),
            (r'/\*(.|\n)*?\*/', Comment.Multiline),

            (r'`', String.Delimiter, 'template'),
            (r'"(\\\\|\\[^\\]|[^"\\\n])*"', String.Double),
            (r"'(\\\\|\\[^\\]|[^'\\\n])*'", String.Single),

            (r'0[xX][0-9a-fA-F]+n?', Number.Hex),
            (r'0[oO][0-7]+n?', Number.Oct),
            (r'0[bB][01]+n?', Number.Bin),
            (r'\d+n(?![\w$])', Number.Integer.Long),
            (r'(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?', Number.Float),

            (words(CONSTANTS, suffix=IDENTIFIER_END), Keyword.Constant),
            (words(KEYWORDS, suffix=IDENTIFIER_END), Keyword),
            (r'[A-Za-z_$][\w$]*', Name),

            (r'\.\.\.|\?\.(?!\d)|=>', Punctuation),
            (r'>>>=?|===|!==|\*\*=?|\?\?=?|&&=?|\|\|=?|<<=?|>>=?|'
             r'[-+*/%&|^]=|==|!=|<=|>=|\+\+|--|[-+*/%<>&|^!~?:=]', Operator),
            (r'[{}()\[\],;.]', Punctuation),
        ],

        'template': [
            (r'`', String.Delimiter, '#pop'),
            (r'\$\{', String.Interpol, 'interpolation'),
            (r'(\\(.|\n)|\$(?!\{)|[^`\\$])+', String.Backtick),
        ],

        'interpolation': [
            (r'\}', String.Interpol, '#pop'),
            (r'\{', Punctuation, 'braced'),
            include('expression'),
        ],

        'braced': [
            (r'\}', Punctuation, '#pop'),
            (r'\{', Punctuation, '#push'),
            include('expression'),
        ],
    }


def get_lexer() -> BindingLexer:
    """
    Get a BindingLexer instance

    Returns:
        BindingLexer instance ready for use with Pygments
    """
    return BindingLexer()


def tokens_scan(source: str):
    """
    Tokenize binding source without Pygments' input normalisation.

    Args:
        source: Expression text (without the {{ }} delimiters)

    Returns:
        Iterator of (offset, tokentype, value) triples
    """
    return get_lexer().get_tokens_unprocessed(source)

