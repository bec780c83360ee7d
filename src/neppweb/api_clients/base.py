"""Abstract base classes for portal collaborators."""

from abc import ABC, abstractmethod
from typing import List, Optional


class BaseIdentityProvider(ABC):
    """Abstract base class for the signed-in user's identity."""

    @abstractmethod
    def current_user_id(self) -> Optional[str]:
        """Get the signed-in user's ID, or None when signed out."""

    @abstractmethod
    async def current_user_group_ids(self) -> List[str]:
        """Get the IDs of groups the signed-in user belongs to."""

    def is_authenticated(self) -> bool:
        """Check if a user is signed in."""
        return self.current_user_id() is not None


class BaseNotificationClient(ABC):
    """Abstract base class for notification API clients."""

    @abstractmethod
    async def get_unread_count(self, user_id: str) -> int:
        """Get the number of unread notifications for a user."""
