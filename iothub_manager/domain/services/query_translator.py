"""
Device query translation.

Clients filter devices with either a clause string such as
``tags.Floor = '10F' and properties.desired.Config.TelemetryInterval >= 3``
or a JSON array of ``{"Key", "Operator", "Value"}`` objects. Both forms are
validated here and rendered as an IoT Hub query, so malformed input never
reaches the registry.
"""

from __future__ import annotations

import json
import math
import re
from typing import Any, List, Mapping, Sequence, Tuple, Union

from iothub_manager.domain.entities.errors import InvalidQuerySyntaxError
from iothub_manager.domain.entities.query import (
    QueryClause,
    QueryOperator,
    QueryValue,
)

MATCH_ALL_QUERY = "SELECT * FROM devices"

QueryInput = Union[None, str, Sequence[Mapping[str, Any]]]

_TOKEN_PATTERN = re.compile(
    r"""
    (?P<space>\s+)
    |(?P<string>'(?:[^'\\]|\\.)*'|"(?:[^"\\]|\\.)*")
    |(?P<number>-?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?)
    |(?P<operator>!=|<=|>=|=|<|>)
    |(?P<word>[A-Za-z_$][A-Za-z0-9_$.]*)
    """,
    re.VERBOSE,
)
_SEGMENT_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_KEY_PREFIXES = (("tags",), ("properties", "desired"), ("properties", "reported"))
_KEYWORD_LITERALS = {"true": True, "false": False, "null": None}
_CLAUSE_FIELDS = ("key", "operator", "value")

Token = Tuple[str, str, int]


def is_allowed_key(key: str) -> bool:
    """Return True when ``key`` addresses a tag or a desired/reported property."""
    segments = key.split(".")
    for prefix in _KEY_PREFIXES:
        if tuple(segments[: len(prefix)]) == prefix:
            path = segments[len(prefix) :]
            return bool(path) and all(_SEGMENT_PATTERN.match(s) for s in path)
    return False


def _tokenize(text: str) -> List[Token]:
    tokens: List[Token] = []
    position = 0
    while position < len(text):
        match = _TOKEN_PATTERN.match(text, position)
        if match is None:
            raise InvalidQuerySyntaxError(
                text, f"unexpected character {text[position]!r} at position {position}"
            )
        kind = match.lastgroup or ""
        if kind != "space":
            tokens.append((kind, match.group(), position))
        position = match.end()
    return tokens


def _parse_number(query: str, literal: str, position: int) -> Union[int, float]:
    try:
        if any(marker in literal for marker in ".eE"):
            return float(literal)
        return int(literal)
    except ValueError as exc:
        raise InvalidQuerySyntaxError(
            query, f"number at position {position} is out of range"
        ) from exc


def _unquote(text: str) -> str:
    return re.sub(r"\\(.)", r"\1", text[1:-1])


def _finite_float(text: str) -> float:
    value = float(text)
    if not math.isfinite(value):
        raise ValueError(f"number out of range: {text}")
    return value


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


def _check_clause(
    query: Any, key: Any, operator: QueryOperator, value: Any, position: str
) -> QueryClause:
    if not isinstance(key, str) or not is_allowed_key(key):
        raise InvalidQuerySyntaxError(
            query,
            f"{position}: key {key!r} must address tags.<name>, "
            "properties.desired.<path> or properties.reported.<path>",
        )
    if isinstance(value, float) and not math.isfinite(value):
        raise InvalidQuerySyntaxError(query, f"{position}: value must be finite")
    if value is not None and not isinstance(value, (str, int, float, bool)):
        raise InvalidQuerySyntaxError(
            query, f"{position}: value must be a string, number, boolean or null"
        )
    if operator.is_ordered and (value is None or isinstance(value, bool)):
        raise InvalidQuerySyntaxError(
            query,
            f"{position}: operator {operator.symbol} needs a number or string value",
        )
    return QueryClause(key=key, operator=operator, value=value)


def parse_clause_string(text: str) -> List[QueryClause]:
    """
    Parse ``path operator literal (and path operator literal)*``.

    Raises:
        InvalidQuerySyntaxError: If the text does not follow the grammar.
    """
    tokens = _tokenize(text)
    if not tokens:
        return []

    clauses: List[QueryClause] = []
    index = 0

    def expect(kinds: Tuple[str, ...], what: str) -> Token:
        nonlocal index
        if index >= len(tokens):
            raise InvalidQuerySyntaxError(text, f"expected {what} at end of query")
        token = tokens[index]
        if token[0] not in kinds:
            raise InvalidQuerySyntaxError(
                text, f"expected {what} at position {token[2]}, found {token[1]!r}"
            )
        index += 1
        return token

    while True:
        _, key, key_position = expect(("word",), "a field path")
        _, symbol, _ = expect(("operator",), "a comparison operator")
        kind, literal, literal_position = expect(
            ("string", "number", "word"), "a literal value"
        )

        value: QueryValue
        if kind == "string":
            value = _unquote(literal)
        elif kind == "number":
            value = _parse_number(text, literal, literal_position)
        elif literal.lower() in _KEYWORD_LITERALS:
            value = _KEYWORD_LITERALS[literal.lower()]
        else:
            raise InvalidQuerySyntaxError(
                text,
                f"expected a literal value at position {literal_position}, "
                f"found {literal!r}",
            )

        operator = QueryOperator.from_symbol(symbol)
        if operator is None:
            raise InvalidQuerySyntaxError(text, f"unknown operator {symbol!r}")
        clauses.append(
            _check_clause(text, key, operator, value, f"position {key_position}")
        )

        if index >= len(tokens):
            return clauses
        _, conjunction, conjunction_position = expect(("word",), "'and'")
        if conjunction.lower() != "and":
            raise InvalidQuerySyntaxError(
                text,
                f"expected 'and' at position {conjunction_position}, "
                f"found {conjunction!r}",
            )


def parse_clause_list(items: Any) -> List[QueryClause]:
    """
    Validate a decoded JSON array of ``{Key, Operator, Value}`` objects.

    Args:
        items: Decoded clause array; an empty array matches every device.

    Raises:
        InvalidQuerySyntaxError: On a non-array input, a clause missing a
            field, an unknown operator or a disallowed key.
    """
    if not isinstance(items, (list, tuple)):
        raise InvalidQuerySyntaxError(items, "clauses must be a JSON array")

    clauses: List[QueryClause] = []
    for number, item in enumerate(items, start=1):
        position = f"clause #{number}"
        if not isinstance(item, Mapping):
            raise InvalidQuerySyntaxError(items, f"{position} must be an object")
        fields = {str(name).lower(): value for name, value in item.items()}
        missing = [name for name in _CLAUSE_FIELDS if name not in fields]
        if missing:
            raise InvalidQuerySyntaxError(
                items, f"{position} must define Key, Operator and Value"
            )

        operator_name = fields["operator"]
        operator = (
            QueryOperator.from_name(operator_name)
            if isinstance(operator_name, str)
            else None
        )
        if operator is None:
            raise InvalidQuerySyntaxError(
                items, f"{position}: unknown operator {operator_name!r}"
            )
        clauses.append(
            _check_clause(items, fields["key"], operator, fields["value"], position)
        )
    return clauses


def render_value(value: QueryValue) -> str:
    """Render a literal in IoT Hub query syntax."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return json.dumps(value)
    escaped = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


def build_query(clauses: Sequence[QueryClause]) -> str:
    """Render validated clauses as a conjunctive IoT Hub device query."""
    if not clauses:
        return MATCH_ALL_QUERY
    conditions = []
    for clause in clauses:
        if not is_allowed_key(clause.key):
            raise InvalidQuerySyntaxError(
                clause.key, f"key {clause.key!r} is not queryable"
            )
        conditions.append(
            f"{clause.key} {clause.operator.symbol} {render_value(clause.value)}"
        )
    return f"{MATCH_ALL_QUERY} WHERE {' AND '.join(conditions)}"


def translate(raw: QueryInput) -> str:
    """
    Translate a client query into the registry's query language.

    Args:
        raw: ``None`` or blank (match all), a clause string, a JSON array
            encoded as a string, or an already decoded clause list.

    Returns:
        str: The native query, e.g. ``SELECT * FROM devices WHERE ...``

    Raises:
        InvalidQuerySyntaxError: If the input cannot be translated.
    """
    if raw is None:
        return MATCH_ALL_QUERY

    if not isinstance(raw, str):
        return build_query(parse_clause_list(raw))

    text = raw.strip()
    if not text:
        return MATCH_ALL_QUERY

    if text.startswith("["):
        try:
            decoded = json.loads(
                text, parse_float=_finite_float, parse_constant=_reject_constant
            )
        except ValueError as exc:
            raise InvalidQuerySyntaxError(raw, "malformed JSON clause array") from exc
        return build_query(parse_clause_list(decoded))

    return build_query(parse_clause_string(text))
