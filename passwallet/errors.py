import logging

from flask import jsonify
from werkzeug.exceptions import HTTPException

log = logging.getLogger(__name__)

class AppError(Exception):
    """Base exception class for application-specific errors."""
    
    def __init__(self, message=None, details=None, status_code=None):
        super().__init__(message)
        self.message = message or "An unexpected error occurred"
        self.details = details
        self.status_code = status_code or 500

class ValidationError(AppError):
    """Missing or malformed request fields."""
    
    def __init__(self, message=None, details=None):
        super().__init__(
            message=message or "Validation error",
            details=details,
            status_code=400
        )

class NotFoundError(AppError):
    """Exception for requests to non-existent resources."""
    
    def __init__(self, message=None, details=None):
        super().__init__(
            message=message or "Resource not found",
            details=details,
            status_code=404
        )

class UserNotFoundError(NotFoundError):
    def __init__(self, message=None, details=None):
        super().__init__(message=message or "User not found", details=details)

class CredentialNotFoundError(NotFoundError):
    def __init__(self, message=None, details=None):
        super().__init__(message=message or "Credential not found", details=details)

class CardNotFoundError(NotFoundError):
    def __init__(self, message=None, details=None):
        super().__init__(message=message or "Card not found", details=details)

class ChallengeNotFoundError(AppError):
    """The stored challenge was never issued, already consumed or overwritten."""
    
    def __init__(self, message=None, details=None):
        super().__init__(
            message=message or "Challenge not found or expired",
            details=details,
            status_code=400
        )

class InvalidOrExpiredCodeError(AppError):
    """The one-time code is missing, consumed or does not match."""
    
    def __init__(self, message=None, details=None):
        super().__init__(
            message=message or "Invalid or expired OTP",
            details=details,
            status_code=401
        )

class VerificationFailedError(AppError):
    """A ceremony response failed cryptographic verification."""
    
    def __init__(self, message=None, details=None):
        super().__init__(
            message=message or "Verification failed",
            details=details,
            status_code=400
        )

def register_error_handlers(app):
    """Register JSON error handlers for the API."""
    
    @app.errorhandler(AppError)
    def handle_app_error(e):
        """Handle application specific errors."""
        if e.details:
            log.info(f"{type(e).__name__}: {e.message} ({e.details})")
        body = {'error': e.message}
        if isinstance(e, VerificationFailedError):
            body['verified'] = False
        return jsonify(body), e.status_code
    
    @app.errorhandler(HTTPException)
    def handle_http_exception(e):
        """Handle Werkzeug HTTP exceptions."""
        return jsonify({'error': e.description or e.name}), e.code
    
    @app.errorhandler(Exception)
    def handle_unexpected_error(e):
        """Convert anything unexpected into a generic 500."""
        log.exception(f"Unhandled error: {e}")
        return jsonify({'error': 'Internal server error'}), 500
