"""
Recipe metadata handling: YAML frontmatter parsing, validation of the
standard metadata keys and the deprecation of ``>>`` metadata directives.

Frontmatter
===========

.. autofunction:: parse_frontmatter

.. autofunction:: parse_frontmatter_lines

.. autoclass:: FrontmatterLoader

Standard keys
=============

A number of metadata keys (e.g. 'title', 'servings') have a standard meaning
and, sometimes, several accepted spellings (e.g. 'serves' for 'servings').

.. autofunction:: standard_key

.. autofunction:: check_standard_metadata

Directives
==========

.. autofunction:: directive_deprecation_warning
"""

from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple

import re

import logging

import yaml

from cookparse.diagnostics import (
    UNKNOWN_POSITION,
    Diagnostic,
    Severity,
    SourcePosition,
)


__all__ = [
    "STANDARD_KEYS",
    "STANDARD_KEY_ALIASES",
    "standard_key",
    "FrontmatterLoader",
    "parse_frontmatter",
    "parse_frontmatter_lines",
    "check_standard_metadata",
    "directive_deprecation_warning",
]


logger = logging.getLogger(__name__)


STANDARD_KEYS = (
    "title",
    "description",
    "tags",
    "author",
    "source",
    "servings",
    "course",
    "time",
    "prep_time",
    "cook_time",
    "difficulty",
    "cuisine",
    "diet",
    "images",
    "locale",
)

STANDARD_KEY_ALIASES = {
    "introduction": "description",
    "tag": "tags",
    "serves": "servings",
    "yield": "servings",
    "category": "course",
    "time required": "time",
    "duration": "time",
    "prep time": "prep_time",
    "cook time": "cook_time",
    "image": "images",
    "picture": "images",
    "pictures": "images",
}


def standard_key(key: str) -> Optional[str]:
    """
    Return the standard key a metadata key corresponds to (case
    insensitively), or None if it is not a standard key.
    """
    key = key.strip().lower()
    if key in STANDARD_KEY_ALIASES:
        return STANDARD_KEY_ALIASES[key]
    elif key in STANDARD_KEYS:
        return key
    else:
        return None


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_string(value: Any) -> bool:
    return isinstance(value, str)


def _is_sequence(value: Any) -> bool:
    return isinstance(value, list)


def _is_mapping(value: Any) -> bool:
    return isinstance(value, dict)


STANDARD_KEY_SHAPES: Mapping[str, Tuple[Callable[[Any], bool], ...]] = {
    "servings": (_is_number,),
    "title": (_is_string,),
    "description": (_is_string,),
    "time": (_is_string, _is_number, _is_mapping),
    "prep_time": (_is_string, _is_number),
    "cook_time": (_is_string, _is_number),
    "tags": (_is_string, _is_sequence),
    "locale": (_is_string,),
    "author": (_is_string, _is_mapping),
    "source": (_is_string, _is_mapping),
}
"""
For standard keys whose values are validated, the accepted shapes of value.
"""


class FrontmatterLoader(yaml.SafeLoader):
    """
    A :py:class:`yaml.SafeLoader` which resolves plain scalars following the
    YAML 1.2 core schema:

    * Only 'true' and 'false' are booleans ('yes', 'off' etc. are strings).
    * Integers are decimal, '0o' octal or '0x' hexadecimal. A leading zero
      does not make a number octal ('010' is 10) and '1_000' and '1:30' are
      strings.
    * Dates are left as strings.
    """


FrontmatterLoader.yaml_implicit_resolvers = {
    first_char: [
        (tag, regexp)
        for tag, regexp in resolvers
        if tag
        not in (
            "tag:yaml.org,2002:bool",
            "tag:yaml.org,2002:int",
            "tag:yaml.org,2002:float",
            "tag:yaml.org,2002:timestamp",
        )
    ]
    for first_char, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}

FrontmatterLoader.add_implicit_resolver(
    "tag:yaml.org,2002:bool",
    re.compile(r"^(?:true|True|TRUE|false|False|FALSE)$"),
    list("tTfF"),
)

# NB: Must be added before floats which also match plain integers
FrontmatterLoader.add_implicit_resolver(
    "tag:yaml.org,2002:int",
    re.compile(r"^(?:[-+]?[0-9]+|0o[0-7]+|0x[0-9a-fA-F]+)$"),
    list("-+0123456789"),
)

FrontmatterLoader.add_implicit_resolver(
    "tag:yaml.org,2002:float",
    re.compile(
        r"""^(?:
            [-+]?(?:\.[0-9]+|[0-9]+(?:\.[0-9]*)?)(?:[eE][-+]?[0-9]+)?
            |[-+]?\.(?:inf|Inf|INF)
            |\.(?:nan|NaN|NAN)
        )$""",
        re.X,
    ),
    list("-+0123456789."),
)


def _construct_int(loader: yaml.SafeLoader, node: yaml.ScalarNode) -> int:
    value = loader.construct_scalar(node)
    try:
        if value.startswith("0o"):
            return int(value[2:], 8)
        elif value.startswith("0x"):
            return int(value[2:], 16)
        else:
            return int(value, 10)
    except ValueError:
        # e.g. '!!int 1_000'
        raise yaml.constructor.ConstructorError(
            None, None, f"invalid integer {value!r}", node.start_mark
        )


FrontmatterLoader.add_constructor("tag:yaml.org,2002:int", _construct_int)


def parse_frontmatter_lines(text: str) -> Optional[Dict[str, str]]:
    """
    Leniently parse frontmatter as a series of 'key: value' lines. Returns
    None if any non-blank line is not of that form (or there are no such
    lines).
    """
    data = {}
    for line in text.splitlines():
        if not line.strip():
            continue
        key, separator, value = line.partition(":")
        if not separator or not key.strip():
            return None
        data[key.strip()] = value.strip()
    return data or None


def _type_name(value: Any) -> str:
    if isinstance(value, list):
        return "an array"
    elif isinstance(value, bool):
        return "a boolean"
    elif _is_number(value):
        return "a number"
    elif isinstance(value, str):
        return "a string"
    else:
        return f"a {type(value).__name__}"


def parse_frontmatter(
    text: str, offset: int, source: str
) -> Tuple[Dict[str, Any], List[Diagnostic]]:
    """
    Parse the contents of a frontmatter block as YAML.

    Parameters
    ==========
    text : str
        The frontmatter (excluding its fences).
    offset : int
        The offset of the frontmatter contents within ``source``.
    source : str
        The complete (preprocessed) recipe, used for locating errors.

    Returns
    =======
    (metadata, warnings)
        If the YAML cannot be parsed or is not a mapping, the frontmatter is
        re-parsed with :py:func:`parse_frontmatter_lines`. If that also fails
        the metadata is empty. A warning is produced whenever the YAML was
        malformed, and when no metadata could be recovered.
    """
    try:
        data = yaml.load(text, Loader=FrontmatterLoader)
    except yaml.YAMLError as e:
        error_offset = offset
        problem = str(e)
        if isinstance(e, yaml.MarkedYAMLError):
            problem = e.problem or problem
            if e.problem_mark is not None:
                error_offset += e.problem_mark.index
        logger.debug("Frontmatter is not valid YAML, trying 'key: value' lines")
        return (
            parse_frontmatter_lines(text) or {},
            [
                Diagnostic(
                    f"Invalid YAML frontmatter: {problem}",
                    SourcePosition.from_offset(source, error_offset),
                    Severity.warning,
                )
            ],
        )

    if data is None:
        return parse_frontmatter_lines(text) or {}, []
    elif not isinstance(data, dict):
        fallback = parse_frontmatter_lines(text)
        if fallback is not None:
            return fallback, []
        return (
            {},
            [
                Diagnostic(
                    "Invalid YAML frontmatter: expected a key/value mapping, "
                    f"got {_type_name(data)}",
                    SourcePosition.from_offset(source, offset),
                    Severity.warning,
                )
            ],
        )
    else:
        return {str(key): value for key, value in data.items()}, []


def check_standard_metadata(
    metadata: Mapping[str, Any],
    positions: Optional[Mapping[str, SourcePosition]] = None,
) -> Iterable[Diagnostic]:
    """
    Check the values of standard metadata keys have the expected shape (e.g.
    'servings' must be a number), yielding a warning for each which does
    not. The values are left as they are.

    ``positions`` optionally gives the location at which each key was
    defined.
    """
    if positions is None:
        positions = {}
    for key, value in metadata.items():
        std_key = standard_key(key)
        if std_key is None or std_key not in STANDARD_KEY_SHAPES:
            continue
        if not any(is_shape(value) for is_shape in STANDARD_KEY_SHAPES[std_key]):
            yield Diagnostic(
                f"Unsupported value for key: '{key}'",
                positions.get(key, UNKNOWN_POSITION),
                Severity.warning,
                "It will be a regular metadata entry",
            )


def directive_deprecation_warning(
    directives: Mapping[str, str], position: SourcePosition
) -> Diagnostic:
    """
    Produce the warning given when ``>> key: value`` directives are used for
    metadata. The help text gives the equivalent YAML frontmatter.
    """
    frontmatter = yaml.safe_dump(
        dict(directives),
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
    )
    return Diagnostic(
        "The '>>' syntax for metadata is deprecated, use a YAML frontmatter",
        position,
        Severity.warning,
        f"---\n{frontmatter}---",
    )
