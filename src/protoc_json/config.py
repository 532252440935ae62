VERSION = "0.1.0"

# Parsing
DEFAULT_SYNTAX = "proto3"

# Tags and enum numbers are signed 32-bit; anything larger falls back to 0.
INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1
NUMBER_FALLBACK = 0

# JSON output
JSON_INDENT = 2
