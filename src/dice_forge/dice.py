from __future__ import annotations

import logging
import math
import uuid
from dataclasses import asdict
from datetime import datetime, timezone
from typing import Any

from . import config
from .distribution import distribution, total_dice
from .errors import EvaluationFailure, InvalidFormula, TooManyDice
from .evaluator import RandomSource, default_rng, evaluate, roll_dice
from .models import (
    DiceTerm,
    Number,
    NumberTerm,
    OperatorTerm,
    Outcome,
    ParenthesisTerm,
    RollDetail,
    RollResult,
    Sign,
    Stats,
    Term,
)
from .parser import format_terms, tokenize


__all__ = [
    "analyze_formula",
    "compute_distribution",
    "compute_stats",
    "roll_from_text",
    "simulate_roll",
    "tokenize",
]

logger = logging.getLogger(__name__)

_ZERO_STATS = Stats(min=0, max=0, average=0, average_floored=0)


def _now_utc_iso() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def _floor(value: Number) -> Number:
    return math.floor(value) if math.isfinite(value) else value


def _jsonable(value: Number) -> Number | None:
    # nan (division by zero) has no JSON representation.
    return None if isinstance(value, float) and math.isnan(value) else value


def _sign_folded(terms: list[Term], index: int) -> bool:
    """True when terms[index] is preceded by the ``-1 *`` a leading minus folds into."""
    return (
        index >= 2
        and terms[index - 1] == OperatorTerm(op="*")
        and terms[index - 2] == NumberTerm(value=-1)
    )


def compute_stats(terms: list[Term]) -> Stats:
    if not terms:
        return _ZERO_STATS

    try:
        lo = evaluate(terms, "min")
        hi = evaluate(terms, "max")
        avg = evaluate(terms, "average")
    except EvaluationFailure:
        logger.exception("Stat calculation failed for %s", format_terms(terms))
        return _ZERO_STATS

    return Stats(min=lo, max=hi, average=avg, average_floored=_floor(avg))


def _roll_terms(
    terms: list[Term], rng: RandomSource
) -> tuple[list[Term], list[tuple[DiceTerm, Sign, list[int]]]]:
    """Roll every dice term, replacing each with a number term holding its sum."""

    rolled: list[Term] = []
    groups: list[tuple[DiceTerm, Sign, list[int]]] = []
    for i, term in enumerate(terms):
        if isinstance(term, DiceTerm):
            rolls = roll_dice(term, rng)
            groups.append((term, -1 if _sign_folded(terms, i) else 1, rolls))
            rolled.append(NumberTerm(value=sum(rolls)))
        else:
            rolled.append(term)
    return rolled, groups


def _modifier(terms: list[Term]) -> Number:
    """Sum of the literal number terms, leaving out the -1 of a folded sign."""

    folded = {
        i - 2
        for i, term in enumerate(terms)
        if (isinstance(term, DiceTerm) or term == ParenthesisTerm(kind="open")) and _sign_folded(terms, i)
    }
    return sum(
        term.value for i, term in enumerate(terms) if isinstance(term, NumberTerm) and i not in folded
    )


def simulate_roll(terms: list[Term], rng: RandomSource | None = None) -> RollResult:
    if not terms:
        return RollResult(total=0, details=[], modifier=0)

    rng = rng or default_rng()
    rolled, groups = _roll_terms(terms, rng)
    try:
        total = evaluate(rolled, "roll", rng)
    except EvaluationFailure:
        logger.exception("Roll simulation failed for %s", format_terms(terms))
        return RollResult(total=0, details=[], modifier=0)

    details = [
        RollDetail(value=value, sides=term.sides, sign=sign)
        for term, sign, rolls in groups
        for value in rolls
    ]
    return RollResult(total=total, details=details, modifier=_modifier(terms))


def compute_distribution(terms: list[Term]) -> list[Outcome]:
    if not terms:
        return []

    try:
        return distribution(terms)
    except EvaluationFailure:
        logger.exception("Probability calculation failed for %s", format_terms(terms))
        return []


def analyze_formula(text: str) -> dict[str, Any]:
    """Stats and probability distribution for a formula. Raises InvalidFormula."""

    terms = tokenize(text)
    stats = compute_stats(terms)

    outcomes: list[Outcome] = []
    if not terms:
        status = "empty"
    elif total_dice(terms) > config.MAX_DISTRIBUTION_DICE:
        status = "too_many_dice"
    elif stats.max > config.MAX_CHART_VALUE:
        status = "too_large"
    else:
        outcomes = compute_distribution(terms)
        status = "ok" if outcomes else "empty"

    return {
        "input": text,
        "normalized_expression": format_terms(terms),
        "stats": {key: _jsonable(value) for key, value in asdict(stats).items()},
        "distribution": [asdict(outcome) for outcome in outcomes],
        "distribution_status": status,
    }


def roll_from_text(text: str, rng: RandomSource | None = None) -> dict[str, Any]:
    """Parse, validate, then roll.

    Raises InvalidFormula for invalid input and TooManyDice when the formula
    asks for more than config.MAX_ROLL_DICE dice.
    """

    terms = tokenize(text)
    if not terms:
        raise InvalidFormula("Empty formula, nothing to roll.", "2d6+3")
    dice = total_dice(terms)
    if dice > config.MAX_ROLL_DICE:
        raise TooManyDice(dice, config.MAX_ROLL_DICE)

    rng = rng or default_rng()
    rolled, groups = _roll_terms(terms, rng)
    total = evaluate(rolled, "roll", rng)
    modifier = _modifier(terms)

    evaluated_terms: list[dict[str, Any]] = [
        {
            "type": "dice",
            "count": term.count,
            "sides": term.sides,
            "sign": sign,
            "rolls": rolls,
            "subtotal": sign * sum(rolls),
        }
        for term, sign, rolls in groups
    ]

    explanation_parts = [
        f"{'-' if t['sign'] < 0 else ''}{t['count']}d{t['sides']}: rolls {t['rolls']} => {t['subtotal']}"
        for t in evaluated_terms
    ]
    if modifier:
        explanation_parts.append(f"modifier {modifier:+g}")
    explanation = ("; ".join(explanation_parts) or format_terms(terms)) + f" => {total:g}"

    return {
        "request_id": uuid.uuid4().hex,
        "timestamp": _now_utc_iso(),
        "input": text,
        "normalized_expression": format_terms(terms),
        "rng": {
            "source": f"{type(rng).__module__}.{type(rng).__name__}",
            "nonce": str(uuid.uuid4()),
        },
        "terms": evaluated_terms,
        "modifier": modifier,
        "total": _jsonable(total),
        "explanation": explanation,
    }
