from __future__ import annotations

import logging
import re
from typing import assert_never

from .errors import InvalidFormula
from .models import DiceTerm, Number, NumberTerm, OperatorTerm, ParenthesisTerm, Term


logger = logging.getLogger(__name__)

# fmt: off
_TOKEN_SPEC = [
    ("DICE",     r"\d*d\d+"),          # 2d6, d20
    ("NUMBER",   r"\d+(?:\.\d+)?"),    # Integer or decimal literal
    ("OP",       r"[+\-*/]"),          # Binary operators, or a sign prefix
    ("PAREN",    r"[()]"),             # Grouping
    ("MISMATCH", r"."),                # Any other character
]
_TOKEN_PATTERN = re.compile("|".join(f"(?P<{name}>{pattern})" for name, pattern in _TOKEN_SPEC))
# fmt: on

_DICE_RE = re.compile(r"^(?P<count>\d*)d(?P<sides>\d+)$")

_MULTIPLICATIVE = (OperatorTerm(op="*"), OperatorTerm(op="/"))


def normalize_text(text: str) -> str:
    return re.sub(r"\s+", "", text).lower()


def _lex(text: str) -> list[tuple[str, str]]:
    tokens: list[tuple[str, str]] = []
    for item in _TOKEN_PATTERN.finditer(text):
        kind = item.lastgroup
        value = item.group()
        if kind == "MISMATCH":
            raise InvalidFormula(f"Could not understand '{value}'.")
        tokens.append((kind, value))
    return tokens


def _parse_number(token: str) -> Number:
    return float(token) if "." in token else int(token)


def _parse_dice(token: str) -> DiceTerm:
    m = _DICE_RE.match(token)
    if not m:
        raise InvalidFormula(f"Could not understand '{token}'.")
    count_str = m.group("count")
    count = int(count_str) if count_str else 1
    sides = int(m.group("sides"))
    if count <= 0:
        raise InvalidFormula("Dice count must be a positive integer.", "2d6+3")
    if sides <= 0:
        raise InvalidFormula("Dice must have at least one side.", "1d6")
    return DiceTerm(count=count, sides=sides)


def _make_term(kind: str, value: str) -> Term:
    if kind == "DICE":
        return _parse_dice(value)
    if kind == "NUMBER":
        return NumberTerm(value=_parse_number(value))
    if kind == "OP":
        return OperatorTerm(op=value)
    return ParenthesisTerm(kind="open" if value == "(" else "close")


def _expects_operand(terms: list[Term]) -> bool:
    if not terms:
        return True
    last = terms[-1]
    return isinstance(last, OperatorTerm) or last == ParenthesisTerm("open")


def _ends_operand(term: Term | None) -> bool:
    return isinstance(term, (DiceTerm, NumberTerm)) or term == ParenthesisTerm("close")


def _validate(terms: list[Term]) -> None:
    depth = 0
    prev: Term | None = None

    for term in terms:
        if isinstance(term, (DiceTerm, NumberTerm)):
            if _ends_operand(prev):
                raise InvalidFormula("Two values with no operator between them.", "d6+d6")
        elif isinstance(term, OperatorTerm):
            if not _ends_operand(prev):
                raise InvalidFormula(f"Operator '{term.op}' is missing a value before it.")
        elif isinstance(term, ParenthesisTerm):
            if term.kind == "open":
                if _ends_operand(prev):
                    raise InvalidFormula("Missing operator before '('.", "2*(1d6+1)")
                depth += 1
            else:
                if not _ends_operand(prev):
                    raise InvalidFormula("Missing value before ')'.", "(1d6+4)/2")
                depth -= 1
                if depth < 0:
                    raise InvalidFormula("Mismatched parentheses.", "(1d6+4)/2")
        else:
            assert_never(term)
        prev = term

    if prev is not None and not _ends_operand(prev):
        raise InvalidFormula("Formula ends with an operator.")
    if depth != 0:
        raise InvalidFormula("Unbalanced parentheses.", "(1d6+4)/2")


def tokenize(formula: str) -> list[Term]:
    """Turn a formula string into a flat, validated term sequence.

    A ``+``/``-`` at the start, after ``(`` or after another operator is a sign.
    A negative number absorbs it; dice and groups get a ``-1 *`` prefix instead,
    wrapped in parentheses after ``*`` or ``/`` (``2/-1d6`` is ``2 / (-1 * 1d6)``).
    A ``+`` sign is only accepted at the start or after ``(``, so ``2d6++3`` is
    rejected as a doubled operator.

    Raises InvalidFormula. Whitespace-only input yields an empty list.
    """

    text = normalize_text(formula)
    if not text:
        return []

    terms: list[Term] = []
    sign: int | None = None
    depth = 0
    # Depths at which a "(-1 * ...)" wrapper opened by a folded sign gets its ')'.
    wrappers: list[int] = []

    for kind, value in _lex(text):
        if kind == "OP" and value in "+-" and _expects_operand(terms):
            if sign is not None or (value == "+" and terms and isinstance(terms[-1], OperatorTerm)):
                raise InvalidFormula("Two operators in a row.")
            sign = -1 if value == "-" else 1
            continue

        if sign is not None:
            if kind == "NUMBER":
                terms.append(NumberTerm(value=sign * _parse_number(value)))
                sign = None
                continue
            if kind != "DICE" and value != "(":
                raise InvalidFormula("A sign must be followed by a number, dice or '('.")
            if sign < 0:
                if terms and terms[-1] in _MULTIPLICATIVE:
                    # 2/-1d6 divides by the negated dice, so the fold gets its own group.
                    terms.append(ParenthesisTerm(kind="open"))
                    depth += 1
                    wrappers.append(depth)
                terms.extend([NumberTerm(value=-1), OperatorTerm(op="*")])
            sign = None

        term = _make_term(kind, value)
        terms.append(term)
        if term == ParenthesisTerm(kind="open"):
            depth += 1
        elif term == ParenthesisTerm(kind="close"):
            depth -= 1
        if _ends_operand(term):
            while wrappers and wrappers[-1] == depth:
                terms.append(ParenthesisTerm(kind="close"))
                depth -= 1
                wrappers.pop()

    if sign is not None:
        raise InvalidFormula("Formula ends with an operator.")

    _validate(terms)
    return terms


def parse_formula(formula: str) -> list[Term] | None:
    """Like tokenize(), but returns None for invalid formulas."""

    try:
        return tokenize(formula)
    except InvalidFormula as e:
        logger.debug("Rejected formula %r: %s", formula, e.reason)
        return None


def _render(term: Term) -> str:
    if isinstance(term, DiceTerm):
        return f"{term.count}d{term.sides}"
    if isinstance(term, NumberTerm):
        return str(term.value)
    if isinstance(term, OperatorTerm):
        return term.op
    if isinstance(term, ParenthesisTerm):
        return "(" if term.kind == "open" else ")"
    assert_never(term)


def format_terms(terms: list[Term]) -> str:
    expr = ""
    for term in terms:
        piece = _render(term)
        if expr and not expr.endswith("(") and piece != ")":
            expr += " "
        expr += piece
    return expr
