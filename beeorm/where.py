"""Fluent builder for SQL WHERE conditions with positional parameters."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class PrevOperator(str, Enum):
    """Logical connector placed before a condition."""

    NONE = ""
    AND = "AND"
    OR = "OR"

    def __str__(self) -> str:
        return self.value


class Operator(str, Enum):
    """SQL operators recognised in condition arguments."""

    EQUAL = "="
    NOT_EQUAL = "!="
    GREATER_THAN = ">"
    LESS_THAN = "<"
    GREATER_THAN_OR_EQUAL = ">="
    LESS_THAN_OR_EQUAL = "<="
    IS_NULL = "IS NULL"
    IS_NOT_NULL = "IS NOT NULL"
    LIKE = "LIKE"
    NOT_LIKE = "NOT LIKE"
    IN = "IN"
    NOT_IN = "NOT IN"
    BETWEEN = "BETWEEN"
    NOT_BETWEEN = "NOT BETWEEN"
    AND = "AND"
    OR = "OR"
    NOT = "NOT"
    ADDITION = "+"
    SUBTRACTION = "-"
    MULTIPLICATION = "*"
    DIVISION = "/"
    MODULO = "%"
    INCREMENT = "++"
    BITWISE_AND = "&"
    BITWISE_OR = "|"
    BITWISE_XOR = "^"
    BITWISE_NOT = "~"
    LEFT_SHIFT = "<<"
    RIGHT_SHIFT = ">>"
    ASSIGN = "="
    ADD_ASSIGN = "+="
    SUBTRACT_ASSIGN = "-="
    MULTIPLY_ASSIGN = "*="
    DIVIDE_ASSIGN = "/="
    MODULO_ASSIGN = "%="
    BITWISE_AND_ASSIGN = "&="
    BITWISE_OR_ASSIGN = "|="
    BITWISE_XOR_ASSIGN = "^="
    LEFT_SHIFT_ASSIGN = "<<="
    RIGHT_SHIFT_ASSIGN = ">>="
    REGEXP = "REGEXP"
    NOT_REGEXP = "NOT REGEXP"
    DIV = "DIV"

    def __str__(self) -> str:
        return self.value


_OPERATOR_VALUES = frozenset(op.value for op in Operator)


def is_op(op: str) -> bool:
    """Return True if the string is a recognised operator."""
    return isinstance(op, str) and op in _OPERATOR_VALUES


def _as_operator(value: Any) -> Operator | None:
    if isinstance(value, PrevOperator):
        return None
    if isinstance(value, Operator):
        return value
    if isinstance(value, str) and is_op(value):
        return Operator(value)
    return None


def _keep_first_operator(args: tuple[Any, ...]) -> list[Any]:
    kept: list[Any] = []
    has_op = False
    for arg in args:
        if not isinstance(arg, PrevOperator) and _as_operator(arg) is not None:
            if has_op:
                continue
            has_op = True
        kept.append(arg)
    return kept


@dataclass
class _Clause:
    prev_operator: PrevOperator
    operator: Operator | None
    column: str
    params: list[Any]


@dataclass
class Query:
    """A WHERE condition built from chained AND/OR calls."""

    _query: str = ""
    _clauses: list[_Clause] = field(default_factory=list)

    def __str__(self) -> str:
        return self._query.strip(" ")

    def parameters(self) -> list[Any]:
        """All bound parameters in the order of their placeholders."""
        return [p for clause in self._clauses for p in clause.params]

    def _add(self, prev: PrevOperator, op: Operator | None, col: str,
             args: tuple[Any, ...] | list[Any]) -> Query:
        connector = prev.value if self._clauses else PrevOperator.NONE.value

        values: list[Any] = []
        for arg in args:
            if isinstance(arg, PrevOperator):
                continue
            found = _as_operator(arg)
            if found is not None:
                op = found
                continue
            values.append(arg)

        params: list[Any] = []
        for value in values:
            if isinstance(value, (list, tuple)):
                marks = ",".join("?" * len(value))
                self._query += f" {connector} `{col}` IN ({marks})"
                params.extend(value)
                continue
            if op is Operator.IN:
                if isinstance(value, str):
                    self._query += f" {connector} `{col}` IN (?)"
            else:
                op_text = op.value if op is not None else ""
                self._query += f" {connector} `{col}` {op_text} ?"
            params.append(value)

        self._clauses.append(_Clause(prev, op, col, params))
        return self

    def _custom(self, prev: PrevOperator, col: str, args: tuple[Any, ...]) -> Query:
        op = None
        for arg in args:
            found = _as_operator(arg)
            if found is not None:
                op = found
        if op is None:
            raise ValueError(f"no operator was provided for {prev.value} clause")
        return self._add(prev, op, col, _keep_first_operator(args))

    def and_custom(self, col: str, *args: Any) -> Query:
        """Add an AND condition whose operator is given among the arguments."""
        return self._custom(PrevOperator.AND, col, args)

    def or_custom(self, col: str, *args: Any) -> Query:
        """Add an OR condition whose operator is given among the arguments."""
        return self._custom(PrevOperator.OR, col, args)

    def and_(self, col: str, *args: Any) -> Query:
        """Add an AND condition, using '=' unless another operator is given."""
        return self.and_custom(col, *args, Operator.EQUAL)

    def or_(self, col: str, *args: Any) -> Query:
        """Add an OR condition, using '=' unless another operator is given."""
        return self.or_custom(col, *args, Operator.EQUAL)

    def and_equal(self, col: str, *args: Any) -> Query:
        return self._add(PrevOperator.AND, Operator.EQUAL, col, args)

    def and_not_equal(self, col: str, *args: Any) -> Query:
        return self._add(PrevOperator.AND, Operator.NOT_EQUAL, col, args)

    def and_greater_than(self, col: str, *args: Any) -> Query:
        return self._add(PrevOperator.AND, Operator.GREATER_THAN, col, args)

    def and_less_than(self, col: str, *args: Any) -> Query:
        return self._add(PrevOperator.AND, Operator.LESS_THAN, col, args)

    def and_greater_than_or_equal(self, col: str, *args: Any) -> Query:
        return self._add(PrevOperator.AND, Operator.GREATER_THAN_OR_EQUAL, col, args)

    def and_less_than_or_equal(self, col: str, *args: Any) -> Query:
        return self._add(PrevOperator.AND, Operator.LESS_THAN_OR_EQUAL, col, args)

    def and_is_null(self, col: str) -> Query:
        return self._add(PrevOperator.AND, Operator.IS_NULL, col, ())

    def and_is_not_null(self, col: str) -> Query:
        return self._add(PrevOperator.AND, Operator.IS_NOT_NULL, col, ())

    def and_like(self, col: str, *args: Any) -> Query:
        return self._add(PrevOperator.AND, Operator.LIKE, col, args)

    def and_not_like(self, col: str, *args: Any) -> Query:
        return self._add(PrevOperator.AND, Operator.NOT_LIKE, col, args)

    def and_in(self, col: str, *args: Any) -> Query:
        return self._add(PrevOperator.AND, Operator.IN, col, args)

    def and_not_in(self, col: str, *args: Any) -> Query:
        return self._add(PrevOperator.AND, Operator.NOT_IN, col, args)

    def and_between(self, col: str, *args: Any) -> Query:
        return self._add(PrevOperator.AND, Operator.BETWEEN, col, args)

    def and_not_between(self, col: str, *args: Any) -> Query:
        return self._add(PrevOperator.AND, Operator.NOT_BETWEEN, col, args)

    def and_regexp(self, col: str, *args: Any) -> Query:
        return self._add(PrevOperator.AND, Operator.REGEXP, col, args)

    def and_not_regexp(self, col: str, *args: Any) -> Query:
        return self._add(PrevOperator.AND, Operator.NOT_REGEXP, col, args)

    def and_div(self, col: str, *args: Any) -> Query:
        return self._add(PrevOperator.AND, Operator.DIV, col, args)

    def or_equal(self, col: str, *args: Any) -> Query:
        return self._add(PrevOperator.OR, Operator.EQUAL, col, args)

    def or_not_equal(self, col: str, *args: Any) -> Query:
        return self._add(PrevOperator.OR, Operator.NOT_EQUAL, col, args)

    def or_greater_than(self, col: str, *args: Any) -> Query:
        return self._add(PrevOperator.OR, Operator.GREATER_THAN, col, args)

    def or_less_than(self, col: str, *args: Any) -> Query:
        return self._add(PrevOperator.OR, Operator.LESS_THAN, col, args)

    def or_greater_than_or_equal(self, col: str, *args: Any) -> Query:
        return self._add(PrevOperator.OR, Operator.GREATER_THAN_OR_EQUAL, col, args)

    def or_less_than_or_equal(self, col: str, *args: Any) -> Query:
        return self._add(PrevOperator.OR, Operator.LESS_THAN_OR_EQUAL, col, args)

    def or_is_null(self, col: str) -> Query:
        return self._add(PrevOperator.OR, Operator.IS_NULL, col, ())

    def or_is_not_null(self, col: str) -> Query:
        return self._add(PrevOperator.OR, Operator.IS_NOT_NULL, col, ())

    def or_like(self, col: str, *args: Any) -> Query:
        return self._add(PrevOperator.OR, Operator.LIKE, col, args)

    def or_not_like(self, col: str, *args: Any) -> Query:
        return self._add(PrevOperator.OR, Operator.NOT_LIKE, col, args)

    def or_in(self, col: str, *args: Any) -> Query:
        return self._add(PrevOperator.OR, Operator.IN, col, args)

    def or_not_in(self, col: str, *args: Any) -> Query:
        return self._add(PrevOperator.OR, Operator.NOT_IN, col, args)

    def or_between(self, col: str, *args: Any) -> Query:
        return self._add(PrevOperator.OR, Operator.BETWEEN, col, args)

    def or_not_between(self, col: str, *args: Any) -> Query:
        return self._add(PrevOperator.OR, Operator.NOT_BETWEEN, col, args)

    def or_regexp(self, col: str, *args: Any) -> Query:
        return self._add(PrevOperator.OR, Operator.REGEXP, col, args)

    def or_not_regexp(self, col: str, *args: Any) -> Query:
        return self._add(PrevOperator.OR, Operator.NOT_REGEXP, col, args)

    def or_div(self, col: str, *args: Any) -> Query:
        return self._add(PrevOperator.OR, Operator.DIV, col, args)