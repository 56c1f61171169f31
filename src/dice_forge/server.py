from __future__ import annotations

import logging
import sys

from mcp.server.fastmcp import FastMCP

from . import config
from .dice import analyze_formula, roll_from_text
from .errors import DiceError


mcp = FastMCP(config.SERVER_NAME)


@mcp.tool()
def roll_dice(text: str):
    """Roll a dice formula such as '2d6+4*1d4-2' or '(1d6+4)/2'.

    Input: text (string)
    Output: structured JSON with every die rolled, the modifier and the total

    Raises a hard error (exception) on invalid input.
    """

    try:
        return roll_from_text(text)
    except DiceError as e:
        # Fail-fast: surface stable error codes in the message.
        raise ValueError(str(e)) from None


@mcp.tool()
def dice_stats(text: str):
    """Minimum, maximum and average of a dice formula, plus its exact probability distribution.

    The distribution is left empty for formulas with more than 8 dice or
    outcomes above 1000; see distribution_status.
    """

    try:
        return analyze_formula(text)
    except DiceError as e:
        raise ValueError(str(e)) from None


def run() -> None:
    # stdout carries the stdio transport, so logs go to stderr.
    logging.basicConfig(
        stream=sys.stderr,
        level=config.LOG_LEVEL,
        format="[%(asctime)s] [%(levelname)s] [%(name)s] - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    mcp.run()


if __name__ == "__main__":
    run()
