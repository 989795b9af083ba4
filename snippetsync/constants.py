# snippetsync/constants.py
# Share-code contract shared with the web client and the editor extension

from datetime import timedelta

SHARE_CODE_ALPHABET: str = "abcdefghijklmnopqrstuvwxyz0123456789"
SHARE_CODE_LENGTH: int = 6

# Fixed, non-renewable validity window
SHARE_CODE_TTL: timedelta = timedelta(minutes=5)

# Bound for both candidate generation and insert-conflict retries
MAX_CODE_ATTEMPTS: int = 10

SNIPPET_VISIBILITIES: tuple[str, ...] = ("PUBLIC", "PRIVATE")
