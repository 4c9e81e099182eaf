"""Configuration constants for songvec."""

import os
from pathlib import Path

DB_PATH = Path(os.getenv("SONGVEC_DB_PATH", str(Path.home() / ".local" / "share" / "songvec")))
LOG_LEVEL = os.getenv("SONGVEC_LOG_LEVEL", "WARNING")

# Ingestion
BATCH_SIZE = 500

# Ranking defaults
DEFAULT_LIMIT = 50
DEFAULT_THRESHOLD = 0.0
DEFAULT_POPULARITY_WEIGHT = 0.2
DEFAULT_GENRE_BOOST = 0.1
DEFAULT_DIVERSITY_WEIGHT = 0.3
OVERSAMPLE_FACTOR = 3
MAX_OVERSAMPLE = 200

# Reference year for release-date normalization
BASE_YEAR = 1950
