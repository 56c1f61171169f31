from __future__ import annotations

import logging
from collections import defaultdict
from fractions import Fraction
from itertools import accumulate
from typing import assert_never

from . import config
from .evaluator import fold_terms
from .models import DiceTerm, Distribution, NumberTerm, Operand, Operator, Outcome, Term, Value


logger = logging.getLogger(__name__)


def total_dice(terms: list[Term]) -> int:
    return sum(term.count for term in terms if isinstance(term, DiceTerm))


def exact_value(term: NumberTerm) -> Value:
    # Go through the literal's decimal text so 0.1 is 1/10, not its binary approximation.
    if isinstance(term.value, int):
        return term.value
    value = Fraction(str(term.value))
    return value.numerator if value.denominator == 1 else value


def dice_ways(count: int, sides: int) -> list[int]:
    """ways[i] is the number of ways ``count`` dice of ``sides`` faces total ``count + i``.

    Dice are folded in one at a time, starting from "nothing rolled yet". Each
    new bucket is the sum of a window of ``sides`` old buckets, read off a
    running total.
    """

    ways = [1]
    for _ in range(count):
        prefix = [0, *accumulate(ways)]
        last = len(ways) - 1
        ways = [
            prefix[min(i, last) + 1] - prefix[max(i - sides + 1, 0)]
            for i in range(len(ways) + sides - 1)
        ]
    return ways


def term_distribution(term: Operand) -> Distribution:
    if isinstance(term, NumberTerm):
        return {exact_value(term): 1}
    return {term.count + i: w for i, w in enumerate(dice_ways(term.count, term.sides))}


def _apply(op: Operator, left: Value, right: Value) -> Value | None:
    if op == "+":
        return left + right
    if op == "-":
        return left - right
    if op == "*":
        return left * right
    if op == "/":
        return None if right == 0 else Fraction(left) / right
    assert_never(op)


def combine(left: Distribution, right: Distribution, op: Operator) -> Distribution:
    """Convolve two independent distributions under ``op``.

    Pairings that divide by zero are dropped.
    """

    result: Distribution = defaultdict(int)
    for v1, c1 in left.items():
        for v2, c2 in right.items():
            value = _apply(op, v1, v2)
            if value is not None:
                result[value] += c1 * c2
    return dict(result)


def fold_distribution(terms: list[Term]) -> Distribution:
    dist = fold_terms(terms, term_distribution, lambda op, left, right: combine(left, right, op))
    return {0: 1} if dist is None else dist


def normalize(dist: Distribution) -> list[Outcome]:
    total = sum(dist.values())
    if total == 0:
        return []
    return [
        Outcome(
            value=round(float(value), config.BUCKET_PRECISION),
            probability=ways / total,
        )
        for value, ways in sorted(dist.items())
        if ways > 0
    ]


def distribution(terms: list[Term]) -> list[Outcome]:
    """Exact probability distribution of a term sequence, sorted by value.

    Returns an empty list when the formula rolls more than
    config.MAX_DISTRIBUTION_DICE dice in total.
    Raises EvaluationFailure on a malformed term sequence.
    """

    dice = total_dice(terms)
    if dice > config.MAX_DISTRIBUTION_DICE:
        logger.info(
            "Refusing distribution for %d dice (limit %d)", dice, config.MAX_DISTRIBUTION_DICE
        )
        return []

    return normalize(fold_distribution(terms))
