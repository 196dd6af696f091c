"""Interfaces for article publishing targets."""

from abc import ABC, abstractmethod
from typing import Dict, Optional


class ArticlePublisher(ABC):
    """A destination that stores an article and its cover as one change."""

    @property
    @abstractmethod
    def target_name(self) -> str:
        """Human readable destination, e.g. 'octo/blog@main'."""
        pass

    @abstractmethod
    async def publish(
        self, files: Dict[str, bytes], base_ref: Optional[str] = None
    ) -> str:
        """
        Store all files atomically.

        Args:
            files: Mapping of repository path to file content
            base_ref: Reference the change builds on; None means the current tip

        Returns:
            Reference of the new change, used as base_ref by the next round

        Raises:
            PublishFailed: If the files could not be stored
        """
        pass
