"""
The recipe markup is parsed into an Abstract Syntax Tree (AST) using
:py:func:`cookparse.parser.parse`:

.. autofunction:: cookparse.parser.parse
"""

from typing import cast

from peggie import Parser, ParseError

from cookparse.parser.grammar import grammar, prettify_parse_error

from cookparse.parser import ast


def parse(source: str) -> ast.Recipe:
    """
    Parse a (preprocessed, see :py:mod:`cookparse.preprocess`) recipe into an
    AST (see :py:mod:`cookparse.parser.ast`).

    Raises
    ======
    peggie.ParseError
    """
    parser = Parser(grammar)
    try:
        parse_tree = parser.parse(source)
    except ParseError as e:
        raise prettify_parse_error(e)
    return cast(ast.Recipe, ast.RecipeTransformer(source).transform(parse_tree))
