# @TASK P0-T0.2 - Test configuration
import os

import httpx
import pytest

# Set test environment variables before importing package modules
os.environ.setdefault("API_BASE_URL", "http://localhost:8000/api/v1")
os.environ.setdefault("TOKEN_STORE_PATH", "")
os.environ.setdefault("REQUEST_TIMEOUT", "5")


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest.fixture
def token_store(tmp_path):
    """Provide a file-backed TokenStore in a per-test temporary directory."""
    from scripto.services.token_store import TokenStore

    return TokenStore(tmp_path / "token.json")


@pytest.fixture
def sync_client(token_store):
    """Provide a SyncClient pointed at the test base URL.

    It is NOT connected to a real backend -- tests should mock httpx calls.
    """
    from scripto.sync_gateway.client import SyncClient

    return SyncClient(os.environ["API_BASE_URL"], token_store, timeout=5.0)


@pytest.fixture
def auth_session(sync_client, token_store):
    from scripto.services.auth_session import AuthSession

    return AuthSession(sync_client, token_store)


def make_response(
    json_data: object = None,
    status_code: int = 200,
    *,
    content: bytes | None = None,
    headers: dict[str, str] | None = None,
    method: str = "POST",
) -> httpx.Response:
    """Build a fake httpx.Response with the given JSON (or raw) body."""
    request = httpx.Request(method, "http://fake")
    if content is not None:
        return httpx.Response(status_code=status_code, content=content, headers=headers, request=request)
    return httpx.Response(status_code=status_code, json=json_data, headers=headers, request=request)
