"""
Project-wide constants for the Hashiwokakero engine.
"""

# Puzzle rules
MAX_BRIDGES = 2  # per river
MIN_TARGET = 1
MAX_TARGET = 8

# Logging configuration
LOG_LEVEL = "INFO"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
