"""Tunable constants for snippet extraction and token accounting."""

# Punctuation that is safe to cut text at (whitespace always is)
BOUNDARY_PUNCTUATION = frozenset(".,;:!?()[]{}'\"/-")

# Maximum distance to search for a word boundary
MAX_WORD_BOUNDARY_SEARCH = 20

# Ranges this close together are treated as adjacent
MERGE_GAP = 10

# 1 token ≈ 4 characters for English text
CHARS_PER_TOKEN = 4

# Metadata/formatting cost per rendered result, not present in the raw text
TOKEN_OVERHEAD_PER_ITEM = 10

DEFAULT_SNIPPET_SIZE = 200
DEFAULT_MAX_CONTENT_LENGTH = 500

ELLIPSIS = "..."
SEPARATOR = " [...] "
