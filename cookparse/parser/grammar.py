"""
The :py:mod:`peggie` grammar for the recipe markup (read from
``grammar.peg``).

.. autodata:: grammar

.. autodata:: grammar_source

"""

import os

from peggie import compile_grammar, ParseError, RuleExpr, RegexExpr

__all__ = [
    "grammar",
    "grammar_source",
    "prettify_parse_error",
]

grammar_source_path = os.path.join(os.path.dirname(__file__), "grammar.peg")

with open(grammar_source_path, encoding="utf-8") as f:
    grammar_source = f.read()
    """
    The recipe markup :py:mod:`peggie` grammar source in a string.
    """

grammar = compile_grammar(grammar_source)
"""
The compiled :py:class:`peggie.Grammar` for the recipe markup. This is never
modified after construction and so may be shared between threads.
"""


def prettify_parse_error(parse_error: ParseError) -> ParseError:
    parse_error.expr_explanations = {
        RuleExpr("recipe"): "<step>",
        RuleExpr("leading_line"): "<metadata>",
        RuleExpr("body_line"): "<step>",
        RuleExpr("step"): "<step>",
        RuleExpr("step_line"): "<step>",
        RuleExpr("step_item"): "<text> or <ingredient> or <cookware> or <timer>",
        RuleExpr("frontmatter"): "<frontmatter>",
        RuleExpr("fence"): "'---'",
        RuleExpr("frontmatter_line"): "<frontmatter>",
        RuleExpr("directive_line"): "<metadata>",
        RuleExpr("section_line"): "<section>",
        RuleExpr("note_line"): "<note>",
        RuleExpr("comment_line"): "<comment>",
        RuleExpr("comment"): "<comment>",
        RuleExpr("ingredient"): "<ingredient>",
        RuleExpr("cookware"): "<cookware>",
        RuleExpr("timer"): "<timer>",
        RuleExpr("component"): "<ingredient> or <cookware> or <timer>",
        RuleExpr("text"): "<text>",
        RuleExpr("word"): "<name>",
        RuleExpr("multi_word_name"): "<name>",
        RuleExpr("component_name"): "<name>",
        RuleExpr("timer_name"): "<name> or '{'",
        RuleExpr("amount"): "'{'",
        RuleExpr("component_note"): "'('",
        RuleExpr("eol"): "<newline>",
        RuleExpr("eof"): "<end of file>",
        # Display literals without escapes
        RegexExpr.literal("{"): "'{'",
        RegexExpr.literal("}"): "'}'",
        RegexExpr.literal("("): "'('",
        RegexExpr.literal(")"): "')'",
        RegexExpr.literal(":"): "':'",
        RegexExpr("[^{}\n\r]*"): "<amount>",
        RegexExpr("[^()\n\r]*"): "<note>",
        # Omit insignificant whitespace
        RuleExpr("blank_line"): None,
    }
    parse_error.last_resort_exprs = {
        RuleExpr("eof"),
        RuleExpr("eol"),
        RuleExpr("comment"),
        RuleExpr("comment_line"),
    }
    return parse_error
