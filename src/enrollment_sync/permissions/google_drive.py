"""Google Drive permission store.

Authenticates with a service account through google-auth and talks to the
Drive v3 REST API with httpx. The token is refreshed on every
``authenticate()`` call and lives only as long as the store instance.
"""

import asyncio
import logging
import os
from typing import Any, Callable, Dict, Optional, Set

import httpx
from google.auth import exceptions as google_exceptions
from google.auth.transport.requests import Request as GoogleAuthRequest
from google.oauth2 import service_account

from .base import AuthError, GrantError, ListError, PermissionStoreBase

logger = logging.getLogger(__name__)

DRIVE_API_URL = "https://www.googleapis.com/drive/v3"
DRIVE_SCOPES = ["https://www.googleapis.com/auth/drive"]

CredentialsFactory = Callable[[], Any]


def service_account_credentials(service_account_file: str) -> CredentialsFactory:
    """Return a factory loading service account credentials from a key file."""

    def _factory() -> Any:
        return service_account.Credentials.from_service_account_file(
            service_account_file, scopes=DRIVE_SCOPES
        )

    return _factory


class GoogleDrivePermissionStore(PermissionStoreBase):
    """Lists and grants Drive file permissions for individual users."""

    def __init__(
        self,
        service_account_file: Optional[str] = None,
        credentials_factory: Optional[CredentialsFactory] = None,
        client: Optional[httpx.AsyncClient] = None,
        api_url: str = DRIVE_API_URL,
        send_notification_email: bool = True,
    ):
        """Initialize the store.

        Args:
            service_account_file: Path to a service account key file. Falls
                back to GOOGLE_SERVICE_ACCOUNT_FILE, then
                GOOGLE_APPLICATION_CREDENTIALS.
            credentials_factory: Callable returning google-auth credentials.
                Takes precedence over the key file.
            client: Optional HTTP client; one is created and owned otherwise.
            api_url: Drive API base URL.
            send_notification_email: Whether Drive emails new grantees.

        Raises:
            ValueError: If neither a factory nor a key file is available.
        """
        if credentials_factory is None:
            key_file = (
                service_account_file
                or os.getenv("GOOGLE_SERVICE_ACCOUNT_FILE")
                or os.getenv("GOOGLE_APPLICATION_CREDENTIALS")
            )
            if not key_file:
                raise ValueError(
                    "GOOGLE_SERVICE_ACCOUNT_FILE must be provided either as "
                    "argument or environment variable"
                )
            credentials_factory = service_account_credentials(key_file)
        self._credentials_factory = credentials_factory
        self._api_url = api_url.rstrip("/")
        self._send_notification_email = send_notification_email
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=30.0)
        self._credentials: Optional[Any] = None

    def _refresh_credentials(self) -> Any:
        credentials = self._credentials_factory()
        credentials.refresh(GoogleAuthRequest())
        return credentials

    async def authenticate(self) -> Any:
        """Load the service account and obtain an access token.

        Returns:
            The refreshed google-auth credentials.

        Raises:
            AuthError: If the key file is unreadable or the token exchange fails.
        """
        try:
            credentials = await asyncio.to_thread(self._refresh_credentials)
        except (google_exceptions.GoogleAuthError, OSError, ValueError) as e:
            logger.error(f"Google authentication failed: {type(e).__name__}")
            raise AuthError(f"Google authentication failed: {e}") from e
        self._credentials = credentials
        logger.debug("Authenticated with Google Drive")
        return credentials

    def _auth_headers(self) -> Dict[str, str]:
        if self._credentials is None or not getattr(self._credentials, "token", None):
            raise AuthError("authenticate() must be called before accessing Drive")
        return {"Authorization": f"Bearer {self._credentials.token}"}

    def _permissions_url(self, document_id: str) -> str:
        return f"{self._api_url}/files/{document_id}/permissions"

    async def list_grantees(self, document_id: str) -> Set[str]:
        """List email addresses holding a permission on the file.

        Follows ``nextPageToken`` until the listing is exhausted. Permissions
        without an email address (domain or anyone-with-link) are skipped.

        Raises:
            AuthError: If called before authenticate().
            ListError: If the Drive API call fails.
        """
        headers = self._auth_headers()
        grantees: Set[str] = set()
        params: Dict[str, Any] = {
            "fields": "nextPageToken,permissions(emailAddress)",
            "pageSize": 100,
        }

        while True:
            try:
                response = await self._client.get(
                    self._permissions_url(document_id), headers=headers, params=params
                )
                response.raise_for_status()
                payload = response.json()
            except httpx.HTTPStatusError as e:
                logger.error(
                    f"Listing permissions for {document_id} returned HTTP {e.response.status_code}"
                )
                raise ListError(
                    f"Failed to list permissions for {document_id}",
                    status_code=e.response.status_code,
                ) from e
            except httpx.HTTPError as e:
                logger.error("Failed to connect to Google Drive API")
                raise ListError("Failed to connect to Google Drive API") from e
            except ValueError as e:
                raise ListError("Google Drive API returned a malformed response") from e

            if not isinstance(payload, dict):
                raise ListError("Google Drive API returned a malformed response")

            for permission in payload.get("permissions") or []:
                if not isinstance(permission, dict):
                    continue
                email = permission.get("emailAddress")
                if email:
                    grantees.add(email)

            page_token = payload.get("nextPageToken")
            if not page_token:
                break
            params["pageToken"] = page_token

        logger.info(f"Document {document_id} has {len(grantees)} grantees")
        return grantees

    async def grant(self, document_id: str, identity_token: str, role: str) -> None:
        """Create a user permission on the file.

        Raises:
            AuthError: If called before authenticate().
            GrantError: If the Drive API call fails.
        """
        headers = self._auth_headers()
        body = {"type": "user", "role": role, "emailAddress": identity_token}
        params = {"sendNotificationEmail": str(self._send_notification_email).lower()}

        try:
            response = await self._client.post(
                self._permissions_url(document_id), headers=headers, params=params, json=body
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(
                f"Granting {role} on {document_id} returned HTTP {e.response.status_code}"
            )
            raise GrantError(
                f"Failed to grant {role} access on {document_id}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            logger.error("Failed to connect to Google Drive API")
            raise GrantError("Failed to connect to Google Drive API") from e

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
