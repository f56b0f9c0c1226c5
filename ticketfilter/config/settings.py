# Environment-driven settings for the filter engine.
# Values come from the process environment, optionally seeded from a .env file.

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

FILTER_CONFIG_FILE = Path(os.getenv("FILTER_CONFIG_FILE", "config/filters.yaml"))
FILTER_STRICT_CONFIG = os.getenv("FILTER_STRICT_CONFIG", "false").lower() == "true"
FILTER_RELATION_SEPARATOR = os.getenv("FILTER_RELATION_SEPARATOR", ".")
FILTER_URL_STATE_VALIDATE = os.getenv("FILTER_URL_STATE_VALIDATE", "true").lower() == "true"
