"""
Google Drive Sync Gateway

DESIGN DECISION: The whole data set travels as one JSON file with a
fixed name in the user's Drive. The OAuth scope is drive.file, so the
app only ever sees files it created itself.

Sync policy is last-writer-wins with no merge:
- push() always replaces the remote content with the full local snapshot
- pull() returns the remote snapshot, which callers apply wholesale
- lastSynced inside a snapshot is informational and never compared

TRADEOFFS:
- If several files share the snapshot name, locate() takes the first one
  Drive returns. Which one that is depends on Drive's ordering and is
  left undefined on purpose.
- No retries. Every failure is reported once and retried by the user.

The Google client libraries are blocking, so every call runs in a
worker thread via asyncio.to_thread.
"""

import asyncio
import io
from pathlib import Path
from typing import Any, Callable, Optional

import google.auth.exceptions
import google.auth.transport.requests
import google.oauth2.credentials
import google_auth_oauthlib.flow
import requests
import structlog
from googleapiclient.discovery import build
from googleapiclient.http import MediaIoBaseUpload
from pydantic import ValidationError

from fintrack.config import GoogleDriveSettings, get_settings
from fintrack.models.finance import AppData
from fintrack.services.sync.session import (
    AuthError,
    SessionState,
    SyncError,
    SyncSession,
)


REVOKE_URI = "https://oauth2.googleapis.com/revoke"
SNAPSHOT_MIME_TYPE = "application/json"

logger = structlog.get_logger(__name__)


def _default_flow_factory(client_config: dict, scopes: list[str]):
    return google_auth_oauthlib.flow.InstalledAppFlow.from_client_config(
        client_config, scopes=scopes
    )


def _default_service_factory(credentials: Any) -> Any:
    return build("drive", "v3", credentials=credentials, cache_discovery=False)


class GoogleDriveGateway:
    """
    Authenticates against Google and moves snapshots to and from Drive.
    
    The gateway does not own sign-in state: it reads and updates the
    SyncSession it is given.
    """
    
    def __init__(
        self,
        session: SyncSession,
        settings: Optional[GoogleDriveSettings] = None,
        flow_factory: Callable[[dict, list[str]], Any] = _default_flow_factory,
        service_factory: Callable[[Any], Any] = _default_service_factory,
    ):
        self._session = session
        self._settings = settings or get_settings().google_drive
        self._flow_factory = flow_factory
        self._service_factory = service_factory
        self._service: Optional[Any] = None
    
    @property
    def session(self) -> SyncSession:
        return self._session
    
    @property
    def is_configured(self) -> bool:
        return self._settings.is_configured
    
    @property
    def snapshot_filename(self) -> str:
        return self._settings.snapshot_filename
    
    def initialize(self) -> bool:
        """
        Move the session to READY if a Google client is configured.
        
        Returns False (and leaves the session uninitialized) otherwise;
        the app then runs in local mode.
        """
        if not self._settings.is_configured:
            logger.warning("drive_sync_disabled", reason="Google client ID/secret not set")
            return False
        self._session.mark_ready()
        return True
    
    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------
    
    async def login(self) -> Any:
        """
        Obtain credentials and mark the session authenticated.
        
        Reuses cached credentials when still valid, refreshes them
        silently when expired, and otherwise runs the browser consent
        flow.
        
        Raises:
            AuthError: If sync is not configured, the provider is
                unreachable, or the user denies consent
        """
        if self._session.state == SessionState.UNINITIALIZED:
            raise AuthError("Google Drive sync is not configured")
        
        try:
            credentials = await asyncio.to_thread(self._obtain_credentials)
        except AuthError:
            raise
        except Exception as ex:
            raise AuthError(f"Google sign-in failed: {ex}") from ex
        
        self._session.authenticate(credentials)
        self._service = None
        logger.info("drive_login_succeeded")
        return credentials
    
    async def logout(self) -> None:
        """
        Forget and revoke the held credentials. Safe to call repeatedly.
        """
        credentials = self._session.credentials
        self._session.clear()
        self._service = None
        
        token = getattr(credentials, "token", None) if credentials else None
        if token:
            try:
                await asyncio.to_thread(self._revoke, token)
            except Exception as ex:
                # Local sign-out still stands; the token expires on its own.
                logger.warning("token_revoke_failed", error=str(ex))
        
        try:
            Path(self._settings.token_path).unlink(missing_ok=True)
        except OSError as ex:
            logger.warning("token_cache_delete_failed", error=str(ex))
    
    def _obtain_credentials(self) -> google.oauth2.credentials.Credentials:
        scopes = list(self._settings.scopes)
        creds = self._session.credentials or self._load_cached_credentials(scopes)
        
        if creds and creds.valid:
            return creds
        
        if creds and creds.expired and creds.refresh_token:
            try:
                creds.refresh(google.auth.transport.requests.Request())
                self._save_credentials(creds)
                logger.info("drive_credentials_refreshed")
                return creds
            except google.auth.exceptions.RefreshError as ex:
                logger.warning("drive_refresh_failed", error=str(ex))
        
        flow = self._flow_factory(self._settings.client_config(), scopes)
        run_kwargs = {"port": 0}
        if creds is None:
            run_kwargs["prompt"] = "consent"
        creds = flow.run_local_server(**run_kwargs)
        if not creds or not creds.token:
            raise AuthError("Authentication did not complete successfully.")
        
        self._save_credentials(creds)
        return creds
    
    def _load_cached_credentials(
        self,
        scopes: list[str],
    ) -> Optional[google.oauth2.credentials.Credentials]:
        path = Path(self._settings.token_path)
        if not path.exists():
            return None
        try:
            creds = google.oauth2.credentials.Credentials.from_authorized_user_file(
                str(path), scopes
            )
        except (ValueError, OSError) as ex:
            logger.warning("drive_token_cache_invalid", path=str(path), error=str(ex))
            path.unlink(missing_ok=True)
            return None
        if not set(scopes).issubset(set(creds.scopes or [])):
            logger.info("drive_token_scope_mismatch")
            return None
        return creds
    
    def _save_credentials(self, creds: google.oauth2.credentials.Credentials) -> None:
        path = Path(self._settings.token_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(creds.to_json(), encoding="utf-8")
    
    @staticmethod
    def _revoke(token: str) -> None:
        response = requests.post(
            REVOKE_URI,
            params={"token": token},
            headers={"content-type": "application/x-www-form-urlencoded"},
        )
        if response.status_code != 200:
            logger.warning("token_revoke_rejected", status=response.status_code)
    
    # ------------------------------------------------------------------
    # Drive operations
    # ------------------------------------------------------------------
    
    def _drive(self) -> Any:
        if not self._session.is_authenticated:
            raise AuthError("Not signed in to Google Drive")
        if self._service is None:
            try:
                self._service = self._service_factory(self._session.credentials)
            except Exception as ex:
                raise SyncError(f"Google Drive is unavailable: {ex}") from ex
        return self._service
    
    def _snapshot_query(self) -> str:
        name = self.snapshot_filename.replace("\\", "\\\\").replace("'", "\\'")
        return f"name = '{name}' and trashed = false"
    
    async def locate(self) -> Optional[str]:
        """
        Find the snapshot file.
        
        Returns:
            The Drive file id of the first match, or None
            
        Raises:
            SyncError: If Drive cannot be queried
        """
        service = self._drive()
        try:
            response = await asyncio.to_thread(
                lambda: service.files().list(
                    q=self._snapshot_query(),
                    fields="files(id, name)",
                    spaces="drive",
                ).execute()
            )
        except Exception as ex:
            raise SyncError(f"Failed to look up snapshot file: {ex}") from ex
        
        files = response.get("files", [])
        if len(files) > 1:
            logger.warning("drive_duplicate_snapshots", count=len(files))
        return files[0]["id"] if files else None
    
    async def push(self, snapshot: AppData) -> str:
        """
        Replace the remote snapshot with the given one, creating the
        file if it does not exist yet.
        
        Returns:
            The Drive file id written
            
        Raises:
            SyncError: On transport or provider failure
        """
        file_id = await self.locate()
        service = self._drive()
        content = snapshot.to_json().encode("utf-8")
        media = MediaIoBaseUpload(
            io.BytesIO(content),
            mimetype=SNAPSHOT_MIME_TYPE,
            resumable=False,
        )
        
        try:
            if file_id:
                await asyncio.to_thread(
                    lambda: service.files().update(
                        fileId=file_id,
                        media_body=media,
                    ).execute()
                )
            else:
                created = await asyncio.to_thread(
                    lambda: service.files().create(
                        body={
                            "name": self.snapshot_filename,
                            "mimeType": SNAPSHOT_MIME_TYPE,
                        },
                        media_body=media,
                        fields="id",
                    ).execute()
                )
                file_id = created["id"]
        except Exception as ex:
            raise SyncError(f"Failed to upload snapshot: {ex}") from ex
        
        logger.info("drive_snapshot_pushed", file_id=file_id, size=len(content))
        return file_id
    
    async def pull(self) -> Optional[AppData]:
        """
        Download the remote snapshot.
        
        Returns:
            The snapshot, or None when no remote file exists yet (the
            caller should push local data to create it)
            
        Raises:
            SyncError: On transport failure or unreadable content
        """
        file_id = await self.locate()
        if not file_id:
            return None
        
        service = self._drive()
        try:
            raw = await asyncio.to_thread(
                lambda: service.files().get_media(fileId=file_id).execute()
            )
        except Exception as ex:
            raise SyncError(f"Failed to download snapshot: {ex}") from ex
        
        try:
            snapshot = AppData.model_validate_json(raw)
        except ValidationError as ex:
            raise SyncError(f"Remote snapshot is not valid: {ex}") from ex
        
        logger.info("drive_snapshot_pulled", file_id=file_id)
        return snapshot
