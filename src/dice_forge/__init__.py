from .dice import analyze_formula, compute_distribution, compute_stats, roll_from_text, simulate_roll
from .errors import DiceError, EvaluationFailure, InvalidFormula, TooManyDice
from .parser import parse_formula, tokenize

__all__ = [
    "DiceError",
    "EvaluationFailure",
    "InvalidFormula",
    "TooManyDice",
    "analyze_formula",
    "compute_distribution",
    "compute_stats",
    "parse_formula",
    "roll_from_text",
    "simulate_roll",
    "tokenize",
]
