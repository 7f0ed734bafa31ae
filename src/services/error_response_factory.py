"""
Error Response Factory for MetaPoker

Provides standardized error payload creation and emission.
"""

import logging
import secrets
import string
import traceback
from typing import Dict, Optional, Tuple

from flask_socketio import emit

from src.core.errors import ErrorCode, GameError
from src.core.events import ServerEvents
from src.utils.timestamps import utc_timestamp

logger = logging.getLogger(__name__)

ERROR_ID_ALPHABET = string.ascii_uppercase + string.digits
ERROR_ID_LENGTH = 9


def generate_error_id() -> str:
    """Return a correlation id of the form ``ERR_XXXXXXXXX``."""
    return 'ERR_' + ''.join(secrets.choice(ERROR_ID_ALPHABET) for _ in range(ERROR_ID_LENGTH))


class ErrorResponseFactory:
    """Factory responsible for creating standardized error responses."""

    def create_error_response(self, code: ErrorCode, message: str, details: Optional[Dict] = None,
                              error_id: Optional[str] = None) -> Dict:
        """
        Create standardized error response.

        Args:
            code: Error code enum
            message: Human-readable error message
            details: Optional additional error details
            error_id: Correlation id; a fresh one is generated when omitted

        Returns:
            Standardized error response
        """
        return {
            "success": False,
            "errorId": error_id or generate_error_id(),
            "code": code.value,
            "message": message,
            "details": details or {},
            "timestamp": utc_timestamp()
        }

    def emit_error(self, code: ErrorCode, message: str, details: Optional[Dict] = None,
                   error_id: Optional[str] = None) -> Dict:
        """
        Emit standardized error response to the client of the current event.

        Returns:
            The emitted payload
        """
        error_response = self.create_error_response(code, message, details, error_id)

        logger.warning(f"Emitting error {error_response['errorId']}: {code.value} - {message}")
        emit(ServerEvents.ERROR, error_response)
        return error_response

    def emit_validation_error(self, error: GameError, error_id: Optional[str] = None) -> Dict:
        """
        Emit a GameError (validation or room rejection) to the client.

        Args:
            error: GameError instance
            error_id: Correlation id already used when logging the error
        """
        return self.emit_error(error.code, error.message, error.details, error_id)

    def handle_exception(self, e: Exception, context: str = "Unknown") -> Tuple[ErrorCode, str, str]:
        """
        Log an exception and map it to an error code and client-facing message.

        Args:
            e: Exception instance
            context: Context where the exception occurred

        Returns:
            Tuple of (error_code, error_message, error_id)
        """
        error_id = generate_error_id()

        if isinstance(e, GameError):
            logger.warning(f"[{error_id}] {context} rejected: {e.code.value} - {e.message}")
            return e.code, e.message, error_id

        logger.error(f"[{error_id}] Unexpected exception in {context}: {str(e)}")
        logger.error(f"Exception traceback: {traceback.format_exc()}")

        return ErrorCode.INTERNAL_ERROR, "An internal error occurred", error_id
