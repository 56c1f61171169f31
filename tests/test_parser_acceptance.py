import pytest

from dice_forge.models import DiceTerm, NumberTerm, OperatorTerm, ParenthesisTerm
from dice_forge.parser import format_terms, parse_formula, tokenize


OPEN = ParenthesisTerm(kind="open")
CLOSE = ParenthesisTerm(kind="close")
PLUS = OperatorTerm(op="+")
MINUS = OperatorTerm(op="-")
TIMES = OperatorTerm(op="*")
DIVIDE = OperatorTerm(op="/")


@pytest.mark.parametrize(
    ("text", "terms"),
    [
        ("2d6", [DiceTerm(count=2, sides=6)]),
        ("d20", [DiceTerm(count=1, sides=20)]),
        (
            "2D6 + 4 * 1d4 - 2",
            [
                DiceTerm(count=2, sides=6),
                PLUS,
                NumberTerm(value=4),
                TIMES,
                DiceTerm(count=1, sides=4),
                MINUS,
                NumberTerm(value=2),
            ],
        ),
        (
            "(1d6+4)/2",
            [OPEN, DiceTerm(count=1, sides=6), PLUS, NumberTerm(value=4), CLOSE, DIVIDE, NumberTerm(value=2)],
        ),
        ("-3+1d4", [NumberTerm(value=-3), PLUS, DiceTerm(count=1, sides=4)]),
        (
            "-1d6+3",
            [NumberTerm(value=-1), TIMES, DiceTerm(count=1, sides=6), PLUS, NumberTerm(value=3)],
        ),
        ("2d6+-3", [DiceTerm(count=2, sides=6), PLUS, NumberTerm(value=-3)]),
        ("2*(-1.5)", [NumberTerm(value=2), TIMES, OPEN, NumberTerm(value=-1.5), CLOSE]),
        ("-(1d4)", [NumberTerm(value=-1), TIMES, OPEN, DiceTerm(count=1, sides=4), CLOSE]),
        ("+2", [NumberTerm(value=2)]),
        ("(+2)", [OPEN, NumberTerm(value=2), CLOSE]),
        ("", []),
        ("   ", []),
    ],
)
def test_tokenize_acceptance(text, terms):
    assert tokenize(text) == terms


def test_integer_literals_stay_integers():
    (term,) = tokenize("7")
    assert isinstance(term.value, int)
    (term,) = tokenize("7.25")
    assert term.value == 7.25


@pytest.mark.parametrize(
    ("text", "expression"),
    [
        ("2d6+4*(1d4-2)", "2d6 + 4 * (1d4 - 2)"),
        ("d20 + 5", "1d20 + 5"),
        ("-1d6", "-1 * 1d6"),
        ("((2))", "((2))"),
    ],
)
def test_format_terms(text, expression):
    assert format_terms(tokenize(text)) == expression


def test_parse_formula_passes_valid_formulas_through():
    assert parse_formula("1d8+2") == tokenize("1d8+2")


@pytest.mark.parametrize(
    ("text", "terms"),
    [
        (
            "2/-1d6",
            [NumberTerm(value=2), DIVIDE, OPEN, NumberTerm(value=-1), TIMES, DiceTerm(count=1, sides=6), CLOSE],
        ),
        (
            "3*-(1d4+1)",
            [
                NumberTerm(value=3),
                TIMES,
                OPEN,
                NumberTerm(value=-1),
                TIMES,
                OPEN,
                DiceTerm(count=1, sides=4),
                PLUS,
                NumberTerm(value=1),
                CLOSE,
                CLOSE,
            ],
        ),
        ("2/-3", [NumberTerm(value=2), DIVIDE, NumberTerm(value=-3)]),
    ],
)
def test_negation_after_multiplicative_operator_is_grouped(text, terms):
    assert tokenize(text) == terms


@pytest.mark.parametrize(
    ("text", "expression"),
    [
        ("2/-1d6", "2 / (-1 * 1d6)"),
        ("2/-(3/-1d6)", "2 / (-1 * (3 / (-1 * 1d6)))"),
    ],
)
def test_format_grouped_negation(text, expression):
    assert format_terms(tokenize(text)) == expression
