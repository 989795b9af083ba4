# snippetsync/services/code_generator.py
"""
Share-code generation.

Codes are six characters over [a-z0-9] (36^6, about 2.18e9 values). They are
not secrets in any strong sense: they are short-lived and only point at code
the owner already chose to share. The candidate source is injectable so tests
can script collisions.
"""

from __future__ import annotations

import logging
import secrets
from datetime import datetime
from typing import Callable, Optional

from snippetsync.constants import MAX_CODE_ATTEMPTS, SHARE_CODE_ALPHABET, SHARE_CODE_LENGTH
from snippetsync.exceptions import GenerationExhaustedError
from snippetsync.repositories.share_code_repository import ShareCodeRepository

logger = logging.getLogger(__name__)


def generate_candidate() -> str:
    """Draw one code, each character uniformly and independently."""
    return "".join(secrets.choice(SHARE_CODE_ALPHABET) for _ in range(SHARE_CODE_LENGTH))


def is_well_formed(code: str) -> bool:
    return len(code) == SHARE_CODE_LENGTH and all(c in SHARE_CODE_ALPHABET for c in code)


class CodeGenerator:
    """Finds a code value that no active share code currently holds."""

    def __init__(
        self,
        candidate_source: Optional[Callable[[], str]] = None,
        max_attempts: int = MAX_CODE_ATTEMPTS,
    ):
        self._next_candidate = candidate_source or generate_candidate
        self.max_attempts = max_attempts

    def candidate(self) -> str:
        return self._next_candidate()

    async def generate_unique(self, store: ShareCodeRepository, now: datetime) -> str:
        """Return the first candidate not held by an active code.

        A candidate still held by an expired row frees that row on the spot,
        so dead codes become reusable without waiting for the sweep.
        """
        for attempt in range(1, self.max_attempts + 1):
            code = self.candidate()
            existing = await store.find_by_code(code)
            if existing is None:
                return code
            if existing.is_expired(now):
                await store.delete_by_id(existing.id)
                return code
            logger.debug(f"share code candidate collided (attempt {attempt}/{self.max_attempts})")

        logger.warning(f"share code generation exhausted after {self.max_attempts} attempts")
        raise GenerationExhaustedError(self.max_attempts)
