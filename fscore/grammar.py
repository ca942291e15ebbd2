"""
Lua Grammar Definition.

This module contains the Lark grammar used to parse darklua output. It covers
Lua 5.1 plus the Luau syntax darklua passes through: compound assignment,
floor division, binary literals, if-else expressions, interpolated strings,
type annotations, casts and type declarations. The grammar is only used to
locate call sites, so it is built for the LALR parser with every token kept
and positions propagated.

`type` and `export` are not reserved words, so a type declaration is parsed
as a run of names and checked by the parser module afterwards.
"""

# Long brackets can't be matched with a backreference inside a Lark terminal,
# so every level up to this one is spelled out.
MAX_LONG_BRACKET_LEVEL = 8


def long_bracket_pattern(max_level=MAX_LONG_BRACKET_LEVEL):
    """Regex matching a long bracket block of level 0 to max_level, e.g. [==[ ... ]==]."""
    alternatives = []
    for level in range(max_level + 1):
        equals = "=" * level
        alternatives.append(r"\[%s\[[\s\S]*?\]%s\]" % (equals, equals))
    return "(?:" + "|".join(alternatives) + ")"


_lua_grammar_template = r"""
    start: block

    block: (stat | ";")* return_stat?

    // --- Statements ---
    ?stat: assignment
         | compound_assignment
         | call_stat
         | do_block
         | while_loop
         | repeat_loop
         | if_stat
         | numeric_for
         | generic_for
         | function_stat
         | local_function
         | local_assign
         | break_stat
         | type_stat

    assignment: varlist "=" exprlist
    varlist: suffixedexp ("," suffixedexp)*
    compound_assignment: suffixedexp COMPOUND_OP exp
    call_stat: suffixedexp

    do_block: "do" block "end"
    while_loop: "while" exp "do" block "end"
    repeat_loop: "repeat" block "until" exp
    if_stat: "if" exp "then" block elseif_clause* else_clause? "end"
    elseif_clause: "elseif" exp "then" block
    else_clause: "else" block
    numeric_for: "for" binding "=" exp "," exp ("," exp)? "do" block "end"
    generic_for: "for" namelist "in" exprlist "do" block "end"
    function_stat: "function" funcname funcbody
    local_function: "local" "function" NAME funcbody
    local_assign: "local" namelist ("=" exprlist)?
    break_stat: "break"
    return_stat: "return" exprlist? ";"?

    // type Name<T> = ...  /  export type Name = ...
    type_stat: NAME NAME type_params? "=" luau_type
             | NAME NAME NAME type_params? "=" luau_type

    funcname: NAME ("." NAME)* (":" NAME)?
    namelist: binding ("," binding)*
    binding: NAME (":" luau_type)?
    exprlist: exp ("," exp)*

    // --- Functions ---
    function_def: "function" funcbody
    funcbody: type_params? "(" parlist? ")" (":" return_type)? block "end"
    parlist: binding ("," binding)* ("," vararg)?
           | vararg
    vararg: "..." (":" luau_type)?

    // --- Expressions ---
    ?exp: or_exp
    ?or_exp: and_exp | or_exp "or" and_exp
    ?and_exp: cmp_exp | and_exp "and" cmp_exp
    ?cmp_exp: concat_exp | cmp_exp ("==" | "~=" | "<=" | ">=" | "<" | ">") concat_exp
    ?concat_exp: add_exp | add_exp ".." concat_exp
    ?add_exp: mul_exp | add_exp ("+" | "-") mul_exp
    ?mul_exp: unary_exp | mul_exp ("*" | "//" | "/" | "%") unary_exp
    ?unary_exp: pow_exp | ("not" | "#" | "-") unary_exp
    ?pow_exp: cast_exp | cast_exp "^" unary_exp
    ?cast_exp: atom | atom "::" luau_type
    ?atom: "nil" | "false" | "true" | "..." | NUMBER | string | interp_string
         | if_exp | function_def | table | suffixedexp

    string: STRING | LONG_STRING
    interp_string: INTERP_STRING

    // The else branch takes the longest expression: if a then 1 else 2 + 3
    if_exp: "if" exp "then" exp elseif_exp* "else" exp
    elseif_exp: "elseif" exp "then" exp

    // A call is a prefix followed by suffixes, the last of which calls.
    // f(1)(2) is one suffixedexp with two call suffixes.
    ?suffixedexp: (name_prefix | paren_prefix) suffix*
    name_prefix: NAME
    paren_prefix: "(" exp ")"
    ?suffix: index | method_call | call
    index: "." NAME | "[" exp "]"
    method_call: ":" NAME call_args
    call: call_args
    ?call_args: paren_args | string_args | table
    paren_args: "(" exprlist? ")"
    string_args: string

    // --- Tables ---
    table: "{" fieldlist? "}"
    fieldlist: field (fieldsep field)* fieldsep?
    fieldsep: "," | ";"
    ?field: keyed_field | named_field | exp
    keyed_field: "[" exp "]" "=" exp
    named_field: NAME "=" exp

    // --- Luau types ---
    luau_type: ("|" | "&")? union_type
    ?union_type: intersection_type | union_type "|" intersection_type
    ?intersection_type: optional_type | intersection_type "&" optional_type
    ?optional_type: simple_type | optional_type "?"
    ?simple_type: "nil" | "true" | "false" | string
                | named_type | typeof_type | table_type | paren_type
    named_type: NAME ("." NAME)? type_args?
    typeof_type: NAME "(" exp ")"
    table_type: "{" (luau_type | prop_list)? "}"
    prop_list: prop (fieldsep prop)* fieldsep?
    prop: NAME ":" luau_type
        | "[" luau_type "]" ":" luau_type
    // (T) groups, (A, B) -> R is a function type, () -> () takes nothing
    paren_type: type_params? "(" type_list? ")" ("->" return_type)?
    type_list: type_item ("," type_item)*
    ?type_item: luau_type | named_param | variadic_type
    named_param: NAME ":" luau_type
    variadic_type: "..." luau_type | NAME "..."
    return_type: luau_type | variadic_type
    type_args: "<" type_list ">"
    type_params: "<" type_param ("," type_param)* ">"
    type_param: NAME "..."? ("=" luau_type)?

    // --- Terminals ---
    COMPOUND_OP: "//=" | "..=" | "+=" | "-=" | "*=" | "/=" | "%=" | "^="
    NAME: /[A-Za-z_][A-Za-z0-9_]*/
    NUMBER: /0[xX][0-9a-fA-F_]+(?:\.[0-9a-fA-F_]*)?(?:[pP][+-]?[0-9]+)?|0[bB][01_]+|(?:[0-9][0-9_]*(?:\.[0-9_]*)?|\.[0-9][0-9_]*)(?:[eE][+-]?[0-9]+)?/
    // \z skips the line break and indentation that follow it
    STRING: /"(?:[^"\\\n]|\\z\s*|\\[\s\S])*"|'(?:[^'\\\n]|\\z\s*|\\[\s\S])*'/
    LONG_STRING: /@LONG_BRACKET@/
    // `text {expr} text`, lexed whole; braces may nest one level inside an expression
    INTERP_STRING: /`(?:[^`\\{]|\\[\s\S]|\{(?:[^{}`"'\\]|\\[\s\S]|"(?:[^"\\\n]|\\[\s\S])*"|'(?:[^'\\\n]|\\[\s\S])*'|\{[^{}]*\})*\})*`/
    COMMENT: /--(?:@LONG_BRACKET@|[^\n]*)/
    WS: /\s+/

    %ignore WS
    %ignore COMMENT
"""

lua_grammar = _lua_grammar_template.replace("@LONG_BRACKET@", long_bracket_pattern())

# Leading names a type_stat may start with
TYPE_KEYWORDS = ("type",)
EXPORTED_TYPE_KEYWORDS = ("export", "type")
