from __future__ import annotations


class DiceError(ValueError):
    """User-facing errors. Messages start with a stable [CODE] prefix."""


class InvalidFormula(DiceError):
    """The formula could not be tokenized."""

    def __init__(self, reason: str, example: str = "2d6+4*1d4-2") -> None:
        super().__init__(f"[INVALID_FORMULA] {reason} Example: '{example}'.")
        self.reason = reason


class EvaluationFailure(DiceError):
    """The operator stack ended up inconsistent while folding a term sequence."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"[EVALUATION_FAILURE] {reason}")
        self.reason = reason


class TooManyDice(DiceError):
    """A roll asks for more dice than the roller will throw at once."""

    def __init__(self, count: int, limit: int) -> None:
        super().__init__(f"[TOO_MANY_DICE] {count} dice requested, the limit is {limit}. Example: '10d6'.")
        self.count = count
        self.limit = limit
