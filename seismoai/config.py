"""
config.py
---------
Environment-driven settings for the scoring engine and API.
Values come from the process environment, optionally seeded from a `.env` file
next to this package.
"""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

ROOT_DIR = Path(__file__).parent
load_dotenv(ROOT_DIR / '.env')


def _optional_int(name: str) -> Optional[int]:
    raw = os.getenv(name, "").strip()
    if not raw:
        return None
    return int(raw)


LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*").split(",")

# Signal statistics
STA_WINDOW = int(os.getenv("STA_WINDOW", "10"))
LTA_WINDOW = int(os.getenv("LTA_WINDOW", "50"))
CNN_KERNEL_SIZE = int(os.getenv("CNN_KERNEL_SIZE", "3"))

# Models
LSTM_SEQUENCE_LENGTH = int(os.getenv("LSTM_SEQUENCE_LENGTH", "30"))
FOREST_NUM_TREES = int(os.getenv("FOREST_NUM_TREES", "50"))
BOOSTING_ITERATIONS = int(os.getenv("BOOSTING_ITERATIONS", "10"))
BOOSTING_LEARNING_RATE = float(os.getenv("BOOSTING_LEARNING_RATE", "0.1"))
GNN_ITERATIONS = int(os.getenv("GNN_ITERATIONS", "3"))

# Output shaping
CONFIDENCE_CEILING = float(os.getenv("CONFIDENCE_CEILING", "0.95"))

# Unset means a fresh OS-entropy seed per generator
RANDOM_SEED = _optional_int("RANDOM_SEED")
