from __future__ import annotations

from dataclasses import dataclass
from fractions import Fraction
from typing import Literal, TypeAlias


Operator: TypeAlias = Literal["+", "-", "*", "/"]
ParenKind: TypeAlias = Literal["open", "close"]
Mode: TypeAlias = Literal["min", "max", "average", "roll"]
Sign: TypeAlias = Literal[1, -1]
Number: TypeAlias = int | float


@dataclass(frozen=True)
class DiceTerm:
    count: int
    sides: int


@dataclass(frozen=True)
class NumberTerm:
    value: Number


@dataclass(frozen=True)
class OperatorTerm:
    op: Operator


@dataclass(frozen=True)
class ParenthesisTerm:
    kind: ParenKind


Term: TypeAlias = DiceTerm | NumberTerm | OperatorTerm | ParenthesisTerm
Operand: TypeAlias = DiceTerm | NumberTerm

# Exact outcome value: dice sums stay int, division and decimal literals give a Fraction.
Value: TypeAlias = int | Fraction

# Unnormalized probability mass function: outcome -> number of ways to reach it.
Distribution: TypeAlias = dict[Value, int]


@dataclass(frozen=True)
class RollDetail:
    value: int
    sides: int
    sign: Sign = 1


@dataclass(frozen=True)
class RollResult:
    total: Number
    details: list[RollDetail]
    modifier: Number


@dataclass(frozen=True)
class Stats:
    min: Number
    max: Number
    average: Number
    average_floored: Number


@dataclass(frozen=True)
class Outcome:
    value: float
    probability: float
