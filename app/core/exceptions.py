from typing import Optional, Any


class StorefrontError(Exception):
    """
    Base exception for the storefront application.
    """
    def __init__(self, message: str, code: str = "INTERNAL_ERROR", status_code: int = 500, details: Optional[Any] = None):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)


class ResourceNotFoundError(StorefrontError):
    """
    Raised when a requested resource is not found.
    """
    def __init__(self, message: str = "Resource not found", details: Optional[Any] = None):
        super().__init__(message, code="NOT_FOUND", status_code=404, details=details)


class AuthenticationError(StorefrontError):
    """
    Raised when authentication fails or a signed-in user is required.
    """
    def __init__(self, message: str = "Authentication failed", details: Optional[Any] = None):
        super().__init__(message, code="AUTHENTICATION_FAILED", status_code=401, details=details)


class PermissionDeniedError(StorefrontError):
    """
    Raised when a non-operator calls an operator action.
    """
    def __init__(self, message: str = "Operator access required", details: Optional[Any] = None):
        super().__init__(message, code="PERMISSION_DENIED", status_code=403, details=details)


class AccountBannedError(StorefrontError):
    """
    Raised for any request made from a banned session.
    """
    def __init__(self, message: str = "This account has been banned", details: Optional[Any] = None):
        super().__init__(message, code="ACCOUNT_BANNED", status_code=403, details=details)


class ValidationError(StorefrontError):
    """
    Raised when input validation fails. Never charges a strike.
    """
    def __init__(self, message: str = "Validation error", details: Optional[Any] = None):
        super().__init__(message, code="VALIDATION_ERROR", status_code=422, details=details)


class InvalidTransitionError(StorefrontError):
    """
    Raised when a navigation event is not allowed from the current view.
    """
    def __init__(self, message: str = "Invalid navigation", details: Optional[Any] = None):
        super().__init__(message, code="INVALID_TRANSITION", status_code=409, details=details)


class LocationMismatchError(StorefrontError):
    """
    Declared location does not match the observed one. A strike has been charged.
    """
    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message, code="LOCATION_MISMATCH", status_code=409, details=details)


class OtpMismatchError(StorefrontError):
    """
    Entered verification code does not match the generated one.
    """
    def __init__(self, message: str = "Invalid verification code", details: Optional[Any] = None):
        super().__init__(message, code="OTP_MISMATCH", status_code=409, details=details)


class GeolocationError(StorefrontError):
    """
    Device could not provide coordinates (unsupported, denied, timeout). Retryable.
    """
    def __init__(self, message: str = "GPS access denied. You must allow location to proceed.", details: Optional[Any] = None):
        super().__init__(message, code="GEOLOCATION_UNAVAILABLE", status_code=400, details=details)


class ExternalServiceError(StorefrontError):
    """
    Raised when an external service (store, Telegram, geocoder) fails. Retryable.
    """
    def __init__(self, message: str = "External service error", code: str = "EXTERNAL_SERVICE_ERROR", details: Optional[Any] = None):
        super().__init__(message, code=code, status_code=502, details=details)


class StoreError(ExternalServiceError):
    """
    Raised when a document store read or write fails.
    """
    def __init__(self, message: str = "Database error", details: Optional[Any] = None):
        super().__init__(message, code="STORE_ERROR", details=details)


class GeocodingError(ExternalServiceError):
    """
    Raised when reverse geocoding fails. Never charges a strike.
    """
    def __init__(self, message: str = "Network/GPS error. Please try again.", details: Optional[Any] = None):
        super().__init__(message, code="GEOCODING_FAILED", details=details)


class TelegramDeliveryError(ExternalServiceError):
    """
    Raised when a verification code could not be delivered.

    ``reason`` is ``bot_not_started``, ``network_error`` or the Bot API description.
    """
    def __init__(self, message: str, reason: str, details: Optional[Any] = None):
        self.reason = reason
        code = {
            "bot_not_started": "TELEGRAM_BOT_NOT_STARTED",
            "network_error": "TELEGRAM_NETWORK_ERROR",
        }.get(reason, "TELEGRAM_DELIVERY_FAILED")
        super().__init__(message, code=code, details=details)
