"""Document permission stores."""

from .base import (
    PermissionStoreBase,
    PermissionStoreError,
    AuthError,
    ListError,
    GrantError,
)
from .google_drive import GoogleDrivePermissionStore, DRIVE_SCOPES

__all__ = [
    "PermissionStoreBase",
    "PermissionStoreError",
    "AuthError",
    "ListError",
    "GrantError",
    "GoogleDrivePermissionStore",
    "DRIVE_SCOPES",
]
