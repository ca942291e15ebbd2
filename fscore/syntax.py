"""
Lossless Lua syntax trees.

parse() turns source text into a SyntaxTree: the Lark parse tree plus the text
it came from. Rewrites are recorded as edits against source offsets and
render() splices them into the original text, so every byte outside an edit
is printed exactly as it was read.
"""
from lark import Lark, Token
from lark.exceptions import UnexpectedInput

from fscore.errors import LuaSyntaxError, get_line_context
from fscore.grammar import EXPORTED_TYPE_KEYWORDS, TYPE_KEYWORDS, lua_grammar

_parser = None


def get_parser():
    """Build the LALR parser once; table construction is the slow part."""
    global _parser
    if _parser is None:
        _parser = Lark(
            lua_grammar,
            parser='lalr',
            propagate_positions=True,
            keep_all_tokens=True,
            maybe_placeholders=False,
        )
    return _parser


class SyntaxTree:
    """A parsed file and the pending text edits against it."""

    def __init__(self, source, root):
        self.source = source
        self.root = root
        self._edits = []

    @property
    def edits(self):
        return list(self._edits)

    def replace(self, start, end, text):
        """Schedule source[start:end] to be replaced by text."""
        if not 0 <= start <= end <= len(self.source):
            raise ValueError(f"Edit span {start}:{end} is outside the source")
        for other_start, other_end, _ in self._edits:
            if start < other_end and other_start < end:
                raise ValueError(
                    f"Edit span {start}:{end} overlaps {other_start}:{other_end}"
                )
        self._edits.append((start, end, text))

    def line_of(self, offset):
        return self.source.count("\n", 0, offset) + 1


def parse(text, file_name=None):
    """
    Parse Lua source text.

    Args:
        text: The source code
        file_name: Optional name used in error messages

    Returns:
        A SyntaxTree with no edits

    Raises:
        LuaSyntaxError: If the text is not valid Lua
    """
    try:
        root = get_parser().parse(text)
    except UnexpectedInput as e:
        line_number = getattr(e, 'line', None)
        if line_number is not None and line_number < 1:
            line_number = None
        raise LuaSyntaxError(
            message=_describe(e),
            file_name=file_name,
            line_number=line_number,
            column=getattr(e, 'column', None),
            context=get_line_context(text, line_number),
        ) from e
    _check_type_statements(root, text, file_name)
    return SyntaxTree(text, root)


def render(tree):
    """Print a SyntaxTree back to text, applying its edits."""
    if not tree.edits:
        return tree.source
    parts = []
    cursor = 0
    for start, end, text in sorted(tree.edits):
        parts.append(tree.source[cursor:start])
        parts.append(text)
        cursor = end
    parts.append(tree.source[cursor:])
    return "".join(parts)


def _describe(error):
    token = getattr(error, 'token', None)
    if token is not None:
        if token.type == '$END':
            return "Unexpected end of file"
        return f"Unexpected token {str(token)!r}"
    char = getattr(error, 'char', None)
    if char is not None:
        return f"Unexpected character {char!r}"
    return "Syntax error"


def _check_type_statements(root, text, file_name):
    """`type` and `export` aren't reserved, so `foo T = x` also parses as a type_stat."""
    for node in root.find_data('type_stat'):
        names = [c for c in node.children[:3] if isinstance(c, Token) and c.type == 'NAME']
        keywords = tuple(str(n) for n in names[:-1])
        if keywords not in (TYPE_KEYWORDS, EXPORTED_TYPE_KEYWORDS):
            line_number = node.meta.line
            raise LuaSyntaxError(
                message=f"Unexpected token {str(names[1])!r}",
                file_name=file_name,
                line_number=line_number,
                column=names[1].column,
                context=get_line_context(text, line_number),
            )
