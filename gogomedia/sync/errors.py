"""
Conversion of failures into error Outcomes

Every session and cache operation routes a TransportError or a
CredentialStoreError through ErrorTranslator.translate(), so no caller ever
sees a raw exception. An authorization failure (HTTP 401) on any operation
also tears the session down: the server no longer accepts the token, so
keeping it would only make every following call fail the same way.
"""

from typing import Any, Callable

from gogomedia.core.exceptions import CredentialStoreError, GoGoMediaError, TransportError
from gogomedia.core.logger import get_logger
from gogomedia.models import Outcome
from gogomedia.session.context import SessionContext


class ErrorTranslator:
    """Turns failures into error Outcomes, forcing logout on 401."""

    def __init__(self, context: SessionContext):
        self.context = context
        self.logger = get_logger(__name__)

    def translate(
        self,
        operation: str,
        failure: GoGoMediaError,
        on_error: Callable[[], None] | None = None,
    ) -> Outcome[Any]:
        """
        Log a failed operation and convert it to an error Outcome

        Args:
            operation: Name of the failing operation, used in the log line
            failure: The transport or credential store failure
            on_error: Optional cleanup run after the authorization check,
                      whatever the status (login/logout use it to drop
                      partial session state)

        Returns:
            Error Outcome carrying the failure's message. A store failure
            during the cleanup is logged; the Outcome still reports the
            original failure.
        """
        self.logger.error(f"{operation} failed with error: {failure.message}")

        if isinstance(failure, TransportError) and failure.is_unauthorized:
            self.logger.warning(
                f"Credentials rejected during {operation}, logging out user: {self.context.username}"
            )
            self._cleanup(operation, self.context.reset)

        if on_error is not None:
            self._cleanup(operation, on_error)

        return Outcome.failure(failure.message)

    def _cleanup(self, operation: str, action: Callable[[], None]) -> None:
        try:
            action()
        except CredentialStoreError as e:
            self.logger.error(f"Could not clear stored session after {operation}: {e}")
