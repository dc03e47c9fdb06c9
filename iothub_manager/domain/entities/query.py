"""Domain entities for device queries."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

QueryValue = Union[str, int, float, bool, None]


class QueryOperator(str, Enum):
    """Comparison operators accepted in device query clauses."""

    EQ = "EQ"
    NE = "NE"
    LT = "LT"
    LE = "LE"
    GT = "GT"
    GE = "GE"

    @property
    def symbol(self) -> str:
        return _SYMBOLS[self]

    @property
    def is_ordered(self) -> bool:
        return self not in (QueryOperator.EQ, QueryOperator.NE)

    @classmethod
    def from_name(cls, name: str) -> Optional["QueryOperator"]:
        """Resolve ``EQ``/``ne``/... to an operator, ``None`` if unknown."""
        try:
            return cls(name.strip().upper())
        except ValueError:
            return None

    @classmethod
    def from_symbol(cls, symbol: str) -> Optional["QueryOperator"]:
        """Resolve ``=``/``!=``/... to an operator, ``None`` if unknown."""
        return _BY_SYMBOL.get(symbol)


_SYMBOLS = {
    QueryOperator.EQ: "=",
    QueryOperator.NE: "!=",
    QueryOperator.LT: "<",
    QueryOperator.LE: "<=",
    QueryOperator.GT: ">",
    QueryOperator.GE: ">=",
}

_BY_SYMBOL = {symbol: operator for operator, symbol in _SYMBOLS.items()}


@dataclass(frozen=True, slots=True)
class QueryClause:
    """A single ``key operator value`` comparison."""

    key: str
    operator: QueryOperator
    value: QueryValue
