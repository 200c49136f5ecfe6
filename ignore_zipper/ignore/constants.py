"""
Central configuration for ignore file processing
"""

# Conventional ignore files, loaded in this order before anything else
DEFAULT_IGNORE_FILES = (
    ".gitignore",
    ".zipignore",
    ".ignore",
)

# Auto-discovery picks up any other root file named ".<something>ignore"
AUTO_IGNORE_PREFIX = "."
AUTO_IGNORE_SUFFIX = "ignore"

# Rule line syntax
COMMENT_PREFIX = "#"
NEGATION_PREFIX = "!"
PATH_SEPARATOR = "/"
LINE_SEPARATOR = "\n"  # Only newline ends a line; a trailing "\r" is stripped with the whitespace

# Limits for security and performance
MAX_IGNORE_FILE_SIZE = 1024 * 1024  # 1MB
MAX_CACHE_SIZE = 10000
