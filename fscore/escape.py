"""
Long bracket literals for inlined scripts.

Nothing inside a long bracket is escaped by Lua, so the only way to carry a
closing delimiter is to pick a level whose delimiter never occurs in the text:
"a]==]b" is emitted as [===[a]==]b]===]. The result is always one string
literal token, which keeps NS "x" a single call in its bare-string form.
"""

# Levels below this are never used, so ordinary [[...]] in the content reads fine.
MIN_LEVEL = 2


def bracket_level(text, minimum=MIN_LEVEL):
    """Smallest level >= minimum whose closing bracket can't end the literal early."""
    level = minimum
    while True:
        close = "]" + "=" * level
        # A trailing "]==" would run into the "]" of the closing bracket
        if close + "]" not in text and not text.endswith(close):
            return level
        level += 1


def escape(text):
    """Return the literal body that reads back as exactly text."""
    # Lua skips a line break right after the opening bracket
    if text.startswith("\r"):
        return "\r\n" + text
    if text.startswith("\n"):
        return "\n" + text
    return text


def long_bracket(text):
    """Wrap text as a single long bracket literal, e.g. [==[ ... ]==]."""
    equals = "=" * bracket_level(text)
    return "[" + equals + "[" + escape(text) + "]" + equals + "]"
