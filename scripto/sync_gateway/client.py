# @TASK P3-T3.3 - 노트 동기화 API 클라이언트
# @TEST tests/test_sync_client.py

"""Async client for the ScriptO notes backend.

This module provides the authenticated request layer on top of
``httpx.AsyncClient``.  It handles:

- ``Authorization: Bearer <token>`` injection from a
  :class:`~scripto.services.token_store.TokenStore`
- Create-vs-update routing for note saves (``POST /notes`` for unsaved
  notes, ``PUT /notes/{id}`` for saved ones)
- Translation of httpx failures and HTTP statuses into the
  :mod:`~scripto.sync_gateway.errors` taxonomy
- Local token invalidation when the backend answers ``401``

A ``401`` is never retried here; re-authentication belongs to the caller
(see :meth:`scripto.session.Session.save_note`).  ``307`` redirects are
logged but not followed.

Usage::

    async with SyncClient(url, token_store) as client:
        saved = await client.create_or_update(note)
"""

from __future__ import annotations

import errno
import logging
from typing import Any
from urllib.parse import quote

import httpx

from scripto.constants import STROKE_THINNING_THRESHOLD
from scripto.models import Note
from scripto.services.token_store import TokenStore
from scripto.sync_gateway.errors import (
    ConnectionRefused,
    InvalidRequest,
    MalformedResponse,
    ScriptOError,
    ServerError,
    TransportError,
    Unauthorized,
)
from scripto.sync_gateway.schemas import Envelope, ErrorResponse
from scripto.sync_gateway.wire import decode_note, encode_note

logger = logging.getLogger(__name__)


def _is_connection_refused(exc: BaseException) -> bool:
    """Return True if *exc* (or anything it was raised from) is ECONNREFUSED."""
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        if isinstance(current, ConnectionRefusedError):
            return True
        if isinstance(current, OSError) and current.errno == errno.ECONNREFUSED:
            return True
        current = current.__cause__ or current.__context__
    return "connection refused" in str(exc).lower()


def decode_error(response: httpx.Response) -> ScriptOError:
    """Build the error for a non-success reply from its body.

    Returns:
        :class:`ServerError` with the backend's message when the body is a
        ``{success, message}`` error envelope, else :class:`MalformedResponse`.
    """
    status = response.status_code
    try:
        body = ErrorResponse.model_validate_json(response.content)
    except ValueError:
        return MalformedResponse(f"Unexpected response from server (HTTP {status})", status_code=status)
    return ServerError(body.message, status_code=status)


class SyncClient:
    """Async client for the notes backend.

    Args:
        base_url: API root including the version prefix
            (e.g. ``http://localhost:8000/api/v1``); a trailing slash is stripped.
        token_store: Source of the bearer token; cleared on ``401``.
        timeout: Request timeout in seconds, ``None`` for no deadline.
        health_path: Path probed by :meth:`check_health`.
        thinning_threshold: Stroke thinning distance applied on save.
        transport: Optional httpx transport (tests use ``httpx.MockTransport``).
    """

    def __init__(
        self,
        base_url: str,
        token_store: TokenStore,
        *,
        timeout: float | None = 30.0,
        health_path: str = "/health",
        thinning_threshold: float = STROKE_THINNING_THRESHOLD,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url: str = base_url.rstrip("/")
        self._token_store = token_store
        self._health_path = health_path
        self._threshold = thinning_threshold
        self._client: httpx.AsyncClient = httpx.AsyncClient(
            timeout=timeout,
            transport=transport,
            follow_redirects=False,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def is_authenticated(self) -> bool:
        return self._token_store.get() is not None

    # ------------------------------------------------------------------
    # Notes
    # ------------------------------------------------------------------

    async def create_or_update(self, note: Note) -> Note:
        """Store *note* on the backend and return the server's version.

        Unsaved notes are created with ``POST /notes``; saved notes are
        updated with ``PUT /notes/{server_id}``.  Stroke points are thinned
        and quantized in the request body only.

        Returns:
            The note rebuilt from the reply, identity ``Saved``.

        Raises:
            Unauthorized: No token is held (no request is sent), or the
                backend answered ``401`` (the token is cleared).
            ServerError: The backend returned a structured failure.
            MalformedResponse: The reply body could not be decoded.
            TransportError: The backend could not be reached.
            InvalidRequest: The request URL could not be built.
        """
        headers = self._auth_headers()
        body = encode_note(note, self._threshold)

        server_id = note.server_id
        if server_id is None:
            response = await self.send("POST", "/notes", json=body, headers=headers)
        else:
            response = await self.send("PUT", f"/notes/{quote(server_id, safe='')}", json=body, headers=headers)

        if not response.is_success:
            raise self._error_for(response)

        try:
            envelope = Envelope.from_json(response.content)
        except (ValueError, TypeError) as exc:
            raise MalformedResponse(
                f"Unexpected response from server (HTTP {response.status_code})",
                status_code=response.status_code,
            ) from exc

        if not envelope.success:
            raise ServerError(envelope.message or "Save failed", status_code=response.status_code)

        saved = decode_note(envelope.data, note)
        logger.info("Note %s saved as %s", note.id, saved.server_id)
        return saved

    # ------------------------------------------------------------------
    # Health
    # ------------------------------------------------------------------

    async def check_health(self) -> bool:
        """Probe the backend; any failure of any kind returns ``False``."""
        try:
            response = await self.send("GET", self._health_path)
        except Exception as exc:
            logger.debug("Health check failed: %s", exc)
            return False
        return response.is_success

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    def url_for(self, path: str) -> str:
        return f"{self._base_url}/{path.lstrip('/')}"

    async def send(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        data: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Send one request and return the raw reply, whatever its status.

        Raises:
            InvalidRequest: The URL is malformed or the method unsupported.
            ConnectionRefused: The backend refused the connection.
            TransportError: Any other failure before a reply arrived.
        """
        url = self.url_for(path)
        method = method.upper()
        try:
            if method == "GET":
                response = await self._client.get(url, headers=headers)
            elif method == "POST":
                response = await self._client.post(url, json=json, data=data, headers=headers)
            elif method == "PUT":
                response = await self._client.put(url, json=json, data=data, headers=headers)
            else:
                raise InvalidRequest(f"Unsupported HTTP method: {method}")
        except (httpx.InvalidURL, httpx.UnsupportedProtocol) as exc:
            raise InvalidRequest(f"Invalid URL: {url}") from exc
        except httpx.ConnectError as exc:
            if _is_connection_refused(exc):
                logger.error("Connection refused: %s %s", method, url)
                raise ConnectionRefused(str(exc)) from exc
            logger.error("Connection failed: %s %s (%s)", method, url, exc)
            raise TransportError(str(exc) or "connection failed") from exc
        except httpx.TimeoutException as exc:
            logger.error("Request timed out: %s %s", method, url)
            raise TransportError("request timed out") from exc
        except httpx.RequestError as exc:
            logger.error("Request failed: %s %s (%s)", method, url, exc)
            raise TransportError(str(exc) or type(exc).__name__) from exc

        logger.debug("%s %s -> %d", method, url, response.status_code)
        if response.status_code == 307:
            logger.warning(
                "Redirect not followed: %s %s -> %s",
                method,
                url,
                response.headers.get("location"),
            )
        return response

    def _auth_headers(self) -> dict[str, str]:
        token = self._token_store.get()
        if token is None:
            raise Unauthorized("Not logged in")
        return {"Authorization": f"Bearer {token}"}

    def _error_for(self, response: httpx.Response) -> ScriptOError:
        if response.status_code == 401:
            logger.warning("Backend rejected the token (401), clearing it")
            self._token_store.clear()
            return Unauthorized()
        return decode_error(response)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def close(self) -> None:
        """Dispose the underlying ``httpx.AsyncClient``."""
        await self._client.aclose()

    async def __aenter__(self) -> SyncClient:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()
