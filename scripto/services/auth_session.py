# @TASK P2-T2.2 - 로그인/회원가입 플로우
# @TEST tests/test_auth_session.py

"""Login and registration against the notes backend.

- **login**: ``POST /auth/login`` with a form-encoded ``username`` /
  ``password`` body.  The ``data.access_token`` of the reply is installed
  into the :class:`~scripto.services.token_store.TokenStore`.
- **register**: ``POST /users/register`` with a JSON body.  ``200`` and
  ``201`` both count as success, after which the same credentials are
  used to log in, so registration yields a usable session in one step.

Neither operation retries on failure.
"""

from __future__ import annotations

import logging

from scripto.services.token_store import TokenStore
from scripto.sync_gateway.client import SyncClient, decode_error
from scripto.sync_gateway.errors import MalformedResponse, ServerError, Unauthorized
from scripto.sync_gateway.schemas import ErrorResponse, LoginResponse, RegisterRequest

logger = logging.getLogger(__name__)

_REGISTER_SUCCESS_CODES: frozenset[int] = frozenset({200, 201})


def _refusal_message(content: bytes) -> str | None:
    """Message of a ``{success: false, message}`` body, else ``None``."""
    try:
        body = ErrorResponse.model_validate_json(content)
    except ValueError:
        return None
    return None if body.success else body.message


class AuthSession:
    """Credential flows that produce a bearer token.

    Args:
        client: Client used to reach the backend (its token is not required).
        token_store: Store that receives the token on success.
    """

    LOGIN_PATH = "/auth/login"
    REGISTER_PATH = "/users/register"

    def __init__(self, client: SyncClient, token_store: TokenStore) -> None:
        self._client = client
        self._token_store = token_store

    async def login(self, username: str, password: str) -> str:
        """Log in and install the returned token.

        Returns:
            The access token.

        Raises:
            ServerError: The backend rejected the login with a message.
            Unauthorized: The backend rejected the login without a usable message.
            MalformedResponse: A ``200`` reply did not carry a token and
                was not a ``success: false`` envelope either.
            TransportError: The backend could not be reached.
        """
        response = await self._client.send(
            "POST",
            self.LOGIN_PATH,
            data={"username": username, "password": password},
        )
        logger.debug("Login response status: %d", response.status_code)

        if response.status_code != 200:
            logger.warning("Login failed for user=%s (HTTP %d)", username, response.status_code)
            error = decode_error(response)
            if isinstance(error, ServerError):
                raise error
            self._token_store.clear()
            raise Unauthorized("Invalid credentials")

        try:
            body = LoginResponse.model_validate_json(response.content)
        except ValueError as exc:
            refusal = _refusal_message(response.content)
            if refusal is not None:
                logger.warning("Login refused for user=%s: %s", username, refusal)
                raise ServerError(refusal, status_code=200) from exc
            raise MalformedResponse("Login response did not contain a token", status_code=200) from exc

        token = body.data.access_token
        self._token_store.save(token)
        logger.info("Login successful for user=%s", username)
        return token

    async def register(self, email: str, full_name: str, password: str) -> str:
        """Create an account, then log in with the same credentials.

        Returns:
            The access token obtained by the follow-up login.

        Raises:
            ServerError: Registration failed with a backend message.
            MalformedResponse: Registration failed with an undecodable body.
            TransportError: The backend could not be reached.
            Plus anything :meth:`login` raises.
        """
        payload = RegisterRequest(email=email, full_name=full_name, password=password)
        response = await self._client.send(
            "POST",
            self.REGISTER_PATH,
            json=payload.model_dump(),
        )
        logger.debug("Registration response status: %d", response.status_code)

        if response.status_code not in _REGISTER_SUCCESS_CODES:
            logger.warning("Registration failed for %s (HTTP %d)", email, response.status_code)
            raise decode_error(response)

        logger.info("Registered %s, logging in", email)
        return await self.login(email, password)

    def logout(self) -> None:
        """Forget the current token."""
        self._token_store.clear()
        logger.info("Logged out")
