"""Errors raised outside the HTTP layer (crypto, queue, providers)"""

from typing import Any, Optional


class ShiftlyError(Exception):
    """Base class for Shiftly errors"""


class ChatCryptoError(ShiftlyError):
    """Chat message could not be encrypted or decrypted"""


class QueueError(ShiftlyError):
    """Chat queue operation failed"""


class ContentSafetyError(ShiftlyError):
    """Content Safety analysis failed"""

    def __init__(self, message: str, status_code: Optional[int] = None, details: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.details = details


class GeocodingError(ShiftlyError):
    """Address lookup failed"""


class EmailDeliveryError(ShiftlyError):
    """Transactional email provider rejected or failed a send"""

    def __init__(self, message: str, status_code: Optional[int] = None, details: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.details = details
