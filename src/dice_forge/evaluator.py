from __future__ import annotations

import secrets
from typing import Callable, Protocol, TypeVar, assert_never

from .errors import EvaluationFailure
from .models import DiceTerm, Mode, Number, NumberTerm, Operand, Operator, OperatorTerm, ParenthesisTerm, Term


T = TypeVar("T")

PRECEDENCE: dict[str, int] = {"+": 1, "-": 1, "*": 2, "/": 2}

_BARRIER = "("


class RandomSource(Protocol):
    def randint(self, a: int, b: int) -> int: ...


def default_rng() -> RandomSource:
    return secrets.SystemRandom()


def fold_terms(
    terms: list[Term],
    resolve: Callable[[Operand], T],
    apply: Callable[[Operator, T, T], T],
) -> T | None:
    """Shunting-yard fold of a flat term sequence.

    ``resolve`` turns a dice or number term into a value, ``apply`` combines two
    values under a binary operator. Operators bind by PRECEDENCE and associate
    to the left. Returns None when there are no terms. If several values are
    left over, the last one wins.

    Raises EvaluationFailure when the parentheses or operands don't line up.
    """

    values: list[T] = []
    ops: list[str] = []

    def reduce_top() -> None:
        op = ops.pop()
        if len(values) < 2:
            raise EvaluationFailure(f"Operator '{op}' is missing an operand.")
        right = values.pop()
        left = values.pop()
        values.append(apply(op, left, right))

    for term in terms:
        if isinstance(term, (DiceTerm, NumberTerm)):
            values.append(resolve(term))
        elif isinstance(term, ParenthesisTerm):
            if term.kind == "open":
                ops.append(_BARRIER)
                continue
            while ops and ops[-1] != _BARRIER:
                reduce_top()
            if not ops:
                raise EvaluationFailure("Mismatched parentheses.")
            ops.pop()
        elif isinstance(term, OperatorTerm):
            while ops and ops[-1] != _BARRIER and PRECEDENCE[ops[-1]] >= PRECEDENCE[term.op]:
                reduce_top()
            ops.append(term.op)
        else:
            assert_never(term)

    while ops:
        if ops[-1] == _BARRIER:
            raise EvaluationFailure("Mismatched parentheses.")
        reduce_top()

    if not values:
        return None
    return values[-1]


def apply_scalar(op: Operator, left: Number, right: Number) -> Number:
    if op == "+":
        return left + right
    if op == "-":
        return left - right
    if op == "*":
        return left * right
    if op == "/":
        # Division by zero yields nan and keeps going; callers check the result.
        return float("nan") if right == 0 else left / right
    assert_never(op)


def roll_dice(term: DiceTerm, rng: RandomSource) -> list[int]:
    return [rng.randint(1, term.sides) for _ in range(term.count)]


def resolve_operand(term: Operand, mode: Mode, rng: RandomSource | None = None) -> Number:
    if isinstance(term, NumberTerm):
        return term.value
    if mode == "min":
        return term.count
    if mode == "max":
        return term.count * term.sides
    if mode == "average":
        return term.count * (term.sides + 1) / 2
    if mode == "roll":
        return sum(roll_dice(term, rng or default_rng()))
    assert_never(mode)


def evaluate(terms: list[Term], mode: Mode, rng: RandomSource | None = None) -> Number:
    """Evaluate a term sequence to a single number.

    min/max/average are deterministic; roll draws from ``rng`` (a
    secrets.SystemRandom by default). An empty sequence evaluates to 0.
    """

    if mode == "roll" and rng is None:
        rng = default_rng()

    result = fold_terms(terms, lambda term: resolve_operand(term, mode, rng), apply_scalar)
    return 0 if result is None else result
