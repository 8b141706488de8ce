"""
Session lifecycle: register, login, logout

States:
    LoggedOut --login success--> LoggedIn
    LoggedIn  --logout (any outcome)--> LoggedOut
    LoggedIn  --401 on any authenticated call--> LoggedOut (ErrorTranslator)

Whether a session exists is decided by the credential store alone (see
SessionContext.is_active), so a session started by an earlier process is
picked up by the next one.

A successful login starts a detached refresh of the media cache. login()
returns without waiting for it; the refreshed list reaches observers through
the change broadcaster, and `refresh_task` lets a caller await it explicitly.
"""

import asyncio
from typing import Any, Awaitable, Callable

from gogomedia.api import requests as api
from gogomedia.api.transport import RequestTransport
from gogomedia.core.exceptions import CredentialStoreError, TransportError
from gogomedia.core.logger import get_logger
from gogomedia.models import SUCCESS, Outcome, OutcomeKind
from gogomedia.session.context import SessionContext
from gogomedia.sync.errors import ErrorTranslator

Refresh = Callable[[], Awaitable[Outcome[Any]]]


class SessionManager:
    """
    Register, log in and log out against the media service

    Attributes:
        context: Shared session state
        refresh_task: The detached cache refresh started by the last login
    """

    def __init__(
        self,
        context: SessionContext,
        transport: RequestTransport,
        translator: ErrorTranslator,
        refresh: Refresh | None = None,
        auth_scheme: str = "JWT",
    ):
        """
        Args:
            context: Shared session state
            transport: Executes requests
            translator: Converts failures to Outcomes
            refresh: Coroutine function started after every successful login,
                     normally MediaCache.fetch
            auth_scheme: Authorization header scheme
        """
        self.context = context
        self.transport = transport
        self.translator = translator
        self.refresh = refresh
        self.auth_scheme = auth_scheme
        self.logger = get_logger(__name__)
        self.refresh_task: asyncio.Task | None = None
        self._background: set[asyncio.Task] = set()

    @property
    def username(self) -> str:
        return self.context.username

    def logged_in(self) -> bool:
        """True iff a token and a username are in the credential store."""
        return self.context.is_active

    async def register(self, username: str, password: str) -> Outcome[str]:
        """
        Create an account; does not log in

        Returns:
            Outcome with the "success" marker, or the server's error message
        """
        try:
            await self.transport.send(api.register_request(username, password))
        except TransportError as e:
            return self.translator.translate("register", e)

        self.logger.info(f"user: {username} was successfully registered")
        return Outcome.success(SUCCESS)

    async def login(self, username: str, password: str) -> Outcome[str]:
        """
        Log in and persist the session

        On success the username and token are stored and a cache refresh is
        started in the background. On any failure, including a credential
        file that cannot be written, partial session state is cleared.
        """
        try:
            payload = await self.transport.send(api.login_request(username, password))
            token = payload['auth_token']
        except TransportError as e:
            return self.translator.translate("login", e, on_error=self.context.reset)
        except (KeyError, TypeError):
            return self.translator.translate(
                "login",
                TransportError(0, "Malformed response: missing auth_token"),
                on_error=self.context.reset
            )

        try:
            self.context.establish(username, str(token))
        except CredentialStoreError as e:
            return self.translator.translate("login", e, on_error=self.context.reset)

        self.logger.info(f"user: {username} was successfully logged in")
        self._start_refresh()
        return Outcome.success(SUCCESS)

    def _start_refresh(self) -> None:
        if self.refresh is None:
            return
        task = asyncio.create_task(self.refresh())
        self.refresh_task = task
        # Keep a strong reference until the task finishes
        self._background.add(task)
        task.add_done_callback(self._refresh_done)

    def _refresh_done(self, task: asyncio.Task) -> None:
        self._background.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            self.logger.error(f"Background media refresh crashed: {error}", exc_info=error)
            return
        outcome = task.result()
        if outcome.kind is OutcomeKind.ERROR:
            self.logger.warning(f"Background media refresh failed: {outcome.error}")

    async def logout(self) -> Outcome[str]:
        """
        Log out remotely and always locally

        Returns:
            A NOT_LOGGED_IN outcome without contacting the server when no
            session exists; otherwise "success" or the server's error
            message. The local session is cleared in both cases.
        """
        if not self.logged_in():
            self.logger.debug("logout requested while not logged in")
            return Outcome.not_logged_in()

        username = self.context.username
        try:
            await self.transport.send(api.logout_request(self.context.auth_token, self.auth_scheme))
        except TransportError as e:
            return self.translator.translate("logout", e, on_error=self.context.reset)

        try:
            self.context.reset()
        except CredentialStoreError as e:
            return self.translator.translate("logout", e)

        self.logger.info(f"user: {username} was successfully logged out")
        return Outcome.success(SUCCESS)

    async def close(self) -> None:
        """Cancel a refresh still running in the background."""
        for task in list(self._background):
            task.cancel()
        if self._background:
            await asyncio.gather(*self._background, return_exceptions=True)
