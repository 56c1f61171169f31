import pytest

from dice_forge.errors import DiceError, InvalidFormula
from dice_forge.parser import parse_formula, tokenize


@pytest.mark.parametrize(
    "text",
    [
        "2d6++3",
        "2d6-+3",
        "--3",
        "(1d6+4",
        "1d6+4)",
        "1d6)(",
        "()",
        "1d0",
        "0d6",
        "d6 d6",
        "2(1d6)",
        "(1d6)2",
        "1.5d6",
        "2d6+",
        "*2",
        "-",
        "-*2",
        "2x",
        "roll 1d6",
        "d",
    ],
)
def test_tokenize_rejections(text):
    with pytest.raises(InvalidFormula) as exc:
        tokenize(text)
    assert str(exc.value).startswith("[INVALID_FORMULA]")


def test_invalid_formula_is_a_dice_error():
    with pytest.raises(DiceError):
        tokenize("1d6 ** 2")


@pytest.mark.parametrize("text", ["2d6++3", "(1d6+4", "1d0", "d6 d6"])
def test_parse_formula_returns_none_for_invalid_input(text):
    assert parse_formula(text) is None
