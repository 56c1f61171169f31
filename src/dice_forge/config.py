# Configuration and constants.

# DICE_FORGE_LOG_LEVEL # can be provided in the environment
# DICE_FORGE_MAX_DISTRIBUTION_DICE # can be provided in the environment
# DICE_FORGE_MAX_ROLL_DICE # can be provided in the environment

import os

SERVER_NAME = "dice-forge"
DEFAULT_LOG_LEVEL = "WARNING"
LOG_LEVEL = os.environ.get("DICE_FORGE_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()

# Exact enumeration is refused above this many dice in a single formula.
MAX_DISTRIBUTION_DICE = int(os.environ.get("DICE_FORGE_MAX_DISTRIBUTION_DICE", "8"))
# roll_from_text refuses to throw more dice than this in one request.
MAX_ROLL_DICE = int(os.environ.get("DICE_FORGE_MAX_ROLL_DICE", "1000"))
# Reports skip the distribution when the maximum outcome exceeds this.
MAX_CHART_VALUE = 1000
# Decimal digits kept when outcome values are rendered as floats.
BUCKET_PRECISION = 9
