import httpx
from supabase import AuthError, PostgrestAPIError

# What the supabase client raises from auth calls and table calls. The SDK only
# wraps HTTP status errors; transport failures surface as raw httpx errors.
AUTH_ERRORS = (AuthError, httpx.HTTPError)
REST_ERRORS = (PostgrestAPIError, httpx.HTTPError)


class BackendError(Exception):
    """A failed call to the hosted backend, reduced to a user-facing message."""

    def __init__(self, message: str, status_code: int = 0):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    @classmethod
    def from_exc(cls, exc: Exception) -> "BackendError":
        if isinstance(exc, AuthError):
            return cls(exc.message, getattr(exc, "status", 0) or 0)
        if isinstance(exc, PostgrestAPIError):
            return cls(exc.message or "Request failed")
        if isinstance(exc, httpx.HTTPStatusError):
            return cls(f"The quiz service returned an error ({exc.response.status_code})", exc.response.status_code)
        if isinstance(exc, httpx.TransportError):
            return cls("Could not reach the quiz service. Please try again.", 503)
        return cls(str(exc) or exc.__class__.__name__)
