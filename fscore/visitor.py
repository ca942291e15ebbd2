"""
Call site matching and inlining.

A qualifying call looks like NS("child.lua", parent) or NS "child.lua": a
plain name from INSTANCE_ALIASES, exactly one call suffix and a string literal
as first argument. The rewrite swaps that literal for the referenced file's
content as a [==[ literal and leaves everything else untouched.
"""
from enum import Enum
from pathlib import Path

from lark import Tree, Visitor

from fscore.errors import InlineFileError
from fscore.escape import long_bracket
from fscore.log import debug_log

# Functions that instantiate a child script from its source
INSTANCE_ALIASES = frozenset({"NS", "NewScript", "NLS", "NewLocalScript"})
SCRIPT_EXTENSIONS = (".lua", ".luau")


class CallForm(str, Enum):
    """How the arguments of a call are written."""
    PARENTHESES = "parentheses"  # NS("a", b)
    STRING = "string"            # NS "a"


class CallMatch:
    """A qualifying call site."""

    def __init__(self, name, literal, file_name, arguments, form):
        self.name = name
        self.literal = literal  # the `string` node of the first argument
        self.file_name = file_name
        self.arguments = arguments  # remaining argument nodes, in order
        self.form = form

    def __repr__(self):
        return f"CallMatch({self.name}, {self.file_name!r}, {self.form.value})"


def string_value(node):
    """Return the raw text between the delimiters of a `string` node."""
    token = node.children[0]
    if token.type == 'LONG_STRING':
        level = token.index('[', 1) - 1
        return str(token)[level + 2:-(level + 2)]
    return str(token)[1:-1]


def _is_string(node):
    return isinstance(node, Tree) and node.data == 'string'


def match_call(node):
    """
    Decide whether a suffixedexp node is a qualifying call.

    Args:
        node: A `suffixedexp` tree (prefix followed by one or more suffixes)

    Returns:
        A CallMatch, or None when the call must be left alone
    """
    prefix, suffixes = node.children[0], node.children[1:]

    # Indexing like NS("a").Name is not a call at all
    if not suffixes or suffixes[-1].data != 'call':
        return None

    # We want foo(1), not foo(1)() or foo(1):bar()
    if len(suffixes) != 1:
        return None

    # ("NS")(1) calls a computed expression
    if not isinstance(prefix, Tree) or prefix.data != 'name_prefix':
        return None

    name = str(prefix.children[0])
    if name not in INSTANCE_ALIASES:
        return None

    args = suffixes[0].children[0]
    if args.data == 'string_args':
        literal = args.children[0]
        return CallMatch(name, literal, string_value(literal), [], CallForm.STRING)

    if args.data == 'paren_args':
        exprlist = next(
            (c for c in args.children if isinstance(c, Tree) and c.data == 'exprlist'),
            None,
        )
        if exprlist is None:
            return None
        # exprlist children alternate: exp, ",", exp, ...
        first = exprlist.children[0]
        if not _is_string(first):
            return None
        return CallMatch(
            name, first, string_value(first), exprlist.children[2::2], CallForm.PARENTHESES
        )

    # NS{...} takes a table, nothing to inline
    return None


class InlineRewriter:
    """Replaces the first argument of a match with the referenced file's content."""

    def __init__(self, output_root, resolve=None, file_name=None):
        self.output_root = Path(output_root)
        self.resolve = resolve if resolve is not None else self.read_script
        self.file_name = file_name  # file being patched, for error messages

    def read_script(self, file_name):
        """Read output_root/file_name, falling back to file_name.lua and file_name.luau."""
        path = self.output_root / file_name
        if not path.is_file():
            for extension in SCRIPT_EXTENSIONS:
                candidate = self.output_root / (file_name + extension)
                if candidate.is_file():
                    path = candidate
                    break
        with open(path, 'r', encoding='utf-8', newline='') as f:
            return f.read()

    def rewrite(self, tree, match):
        """Record the edit for one match on a SyntaxTree."""
        start = match.literal.meta.start_pos
        end = match.literal.meta.end_pos
        try:
            content = self.resolve(match.file_name)
        except (OSError, UnicodeDecodeError) as e:
            raise InlineFileError(
                self.output_root / match.file_name,
                getattr(e, 'strerror', None) or str(e),
                file_name=self.file_name,
                line_number=tree.line_of(start),
            ) from e
        tree.replace(start, end, long_bracket(content))
        debug_log(f"Inlined {match.file_name} into {match.name} call ({len(content)} chars)")


class PatchVisitor(Visitor):
    """Visits every call expression of a SyntaxTree and rewrites the qualifying ones."""

    def __init__(self, tree, rewriter):
        super().__init__()
        self.tree = tree
        self.rewriter = rewriter
        self.matches = []

    def run(self):
        self.visit(self.tree.root)
        # visit() walks bottom-up
        self.matches.sort(key=lambda m: m.literal.meta.start_pos)
        return self.matches

    def suffixedexp(self, node):
        match = match_call(node)
        if match is None:
            return
        self.rewriter.rewrite(self.tree, match)
        self.matches.append(match)
