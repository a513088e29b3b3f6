"""
Discount domain errors
"""
from typing import Optional


class DiscountError(Exception):
    """Base class for discount engine errors"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class DiscountValidationError(DiscountError):
    """Raised before any remote call when a discount cannot be submitted"""


class RemoteServiceError(DiscountError):
    """The remote catalog backend rejected a call or could not be reached"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class RemoteAuthenticationError(RemoteServiceError):
    """The remote backend refused the bearer token (HTTP 401)"""

    def __init__(self, message: str = "Authentication failed. Please login again."):
        super().__init__(message, status_code=401)


class BatchInProgressError(DiscountError):
    """A bulk discount batch is already running for this caller"""


class BulkJobNotFoundError(DiscountError):
    """No bulk discount job with the requested id"""
