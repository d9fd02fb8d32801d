# @TASK P4-T4.1 - 세션 조립 (토큰 저장소 + 클라이언트 + 인증)
# @TEST tests/test_session.py

"""Explicitly constructed client session.

A :class:`Session` owns exactly one token store, one sync client and one
auth flow, and is passed by reference to whatever needs them.  It is the
single "active session" of the application without any module-level
mutable state.

Usage::

    async with Session.from_settings() as session:
        await session.login("me@example.com", "secret")
        saved = await session.save_note(note)
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

import httpx

from scripto.config import Settings, get_settings
from scripto.constants import SessionState
from scripto.editor import NoteEditor
from scripto.models import Note, StrokeProperties
from scripto.services.auth_session import AuthSession
from scripto.services.token_store import TokenStore
from scripto.sync_gateway.client import SyncClient
from scripto.sync_gateway.errors import Unauthorized

logger = logging.getLogger(__name__)

Reauthenticate = Callable[[], Awaitable[object]]


class Session:
    """One authenticated (or not yet authenticated) user session.

    Args:
        client: Client for the notes backend.
        token_store: The store ``client`` reads its token from.
        stroke_properties: Style given to strokes drawn in editors opened
            with :meth:`new_editor`.
    """

    def __init__(
        self,
        client: SyncClient,
        token_store: TokenStore,
        stroke_properties: StrokeProperties | None = None,
    ) -> None:
        self.token_store = token_store
        self.client = client
        self.auth = AuthSession(client, token_store)
        self.stroke_properties = stroke_properties or StrokeProperties()

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        *,
        token_store: TokenStore | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> Session:
        """Build a session from :class:`~scripto.config.Settings`.

        Args:
            settings: Optional settings override (useful for testing).
            token_store: Optional store override; otherwise one backed by
                ``TOKEN_STORE_PATH``.
            transport: Optional httpx transport for the client.
        """
        if settings is None:
            settings = get_settings()
        if token_store is None:
            token_store = TokenStore(settings.TOKEN_STORE_PATH or None)
        client = SyncClient(
            settings.API_BASE_URL,
            token_store,
            timeout=settings.request_timeout,
            health_path=settings.HEALTH_PATH,
            thinning_threshold=settings.STROKE_THINNING_THRESHOLD,
            transport=transport,
        )
        stroke_properties = StrokeProperties(
            color=settings.DEFAULT_STROKE_COLOR,
            width=settings.DEFAULT_STROKE_WIDTH,
        )
        return cls(client, token_store, stroke_properties)

    @property
    def state(self) -> SessionState:
        if self.token_store.get() is None:
            return SessionState.UNAUTHENTICATED
        return SessionState.AUTHENTICATED

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    async def login(self, username: str, password: str) -> str:
        return await self.auth.login(username, password)

    async def register(self, email: str, full_name: str, password: str) -> str:
        return await self.auth.register(email, full_name, password)

    def logout(self) -> None:
        self.auth.logout()

    # ------------------------------------------------------------------
    # Notes
    # ------------------------------------------------------------------

    async def save_note(self, note: Note, reauthenticate: Reauthenticate | None = None) -> Note:
        """Save *note*, optionally re-authenticating once on ``Unauthorized``.

        Without *reauthenticate* an ``Unauthorized`` propagates immediately
        (the session is already back to unauthenticated).  With it, the
        callback is awaited once and the save retried once; a second
        failure of any kind propagates.

        Args:
            note: Note to create or update.
            reauthenticate: Coroutine function that logs in again, e.g. by
                prompting the user and calling :meth:`login`.
        """
        try:
            return await self.client.create_or_update(note)
        except Unauthorized:
            if reauthenticate is None:
                raise
            logger.info("Save rejected as unauthorized, re-authenticating once")

        await reauthenticate()
        return await self.client.create_or_update(note)

    async def check_health(self) -> bool:
        return await self.client.check_health()

    def new_editor(self, note: Note | None = None) -> NoteEditor:
        """Open an editor on *note* that draws in this session's stroke style."""
        return NoteEditor(note, self.stroke_properties)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def close(self) -> None:
        await self.client.close()

    async def __aenter__(self) -> Session:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()
