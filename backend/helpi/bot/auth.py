"""
Sender whitelist.
"""

import logging
from typing import Iterable, Optional

logger = logging.getLogger(__name__)

ACCESS_DENIED_TEXT = "Access denied. You are not authorized to use this bot."


class WhitelistAuth:
    """
    Allows only the configured Telegram user IDs.
    An empty whitelist means development mode: everybody is allowed.
    """

    def __init__(self, allowed_users: Iterable[int]):
        self.allowed_users = frozenset(allowed_users)
        if not self.allowed_users:
            logger.warning("Development mode - no allowed users configured")

    @property
    def dev_mode(self) -> bool:
        return not self.allowed_users

    def is_authorized(self, user_id: Optional[int]) -> bool:
        if self.dev_mode:
            return True

        if not user_id:
            logger.warning("[AUTH] Unauthorized access attempt: missing user information")
            return False

        if user_id in self.allowed_users:
            return True

        logger.warning(f"[AUTH] Unauthorized access attempt from user {user_id}")
        return False
