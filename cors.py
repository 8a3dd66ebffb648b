import re
from typing import Iterable, Optional

from logging_config import get_logger

logger = get_logger(__name__)


class OriginPolicy:
    """Allow-list of exact origins plus regex patterns matched against the whole origin.

    Requests without an Origin header (curl, native apps) are allowed.
    """

    def __init__(self, origins: Iterable[str], patterns: Iterable[str] = ()):
        self.origins = list(dict.fromkeys(o for o in origins if o))
        self.patterns = [re.compile(p) for p in patterns]

    def is_allowed(self, origin: Optional[str]) -> bool:
        if not origin:
            return True
        allowed = origin in self.origins or any(p.fullmatch(origin) for p in self.patterns)
        logger.debug(f"Origin check: {origin} allowed={allowed}")
        if not allowed:
            logger.warning(f"Blocked origin: {origin}")
        return allowed

    @property
    def origin_regex(self) -> Optional[str]:
        """Single pattern for Starlette's CORSMiddleware ``allow_origin_regex``."""
        if not self.patterns:
            return None
        return "|".join(f"(?:{p.pattern})" for p in self.patterns)
