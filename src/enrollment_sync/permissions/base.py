"""Permission store contract."""

from abc import ABC, abstractmethod
from typing import Any, Optional, Set


class PermissionStoreError(Exception):
    """Base error for document permission stores."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class AuthError(PermissionStoreError):
    """Raised when the store cannot authenticate."""


class ListError(PermissionStoreError):
    """Raised when current grantees cannot be listed."""


class GrantError(PermissionStoreError):
    """Raised when a permission cannot be granted."""


class PermissionStoreBase(ABC):
    """
    Document-scoped permission store. ``authenticate`` must complete before
    any other call; credentials are held for the lifetime of the instance only.
    """

    @abstractmethod
    async def authenticate(self) -> Any:
        """Acquire a fresh credential.

        Returns:
            The provider credential.

        Raises:
            AuthError: If authentication fails.
        """
        raise NotImplementedError

    @abstractmethod
    async def list_grantees(self, document_id: str) -> Set[str]:
        """List identity tokens that currently hold access to a document.

        Raises:
            ListError: If the listing fails.
        """
        raise NotImplementedError

    @abstractmethod
    async def grant(self, document_id: str, identity_token: str, role: str) -> None:
        """Grant ``role`` on a document to an identity token.

        Raises:
            GrantError: If the grant fails.
        """
        raise NotImplementedError

    async def aclose(self) -> None:
        """Release network resources held by the store."""
        return None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()
