"""Exceptions raised by the API layer and shown by the widget."""

from googleapiclient.errors import HttpError

RATE_LIMIT_REASONS = {'rateLimitExceeded', 'userRateLimitExceeded'}


class WidgetError(Exception):
    """Base class for errors the widget reports to the user."""


class AuthError(WidgetError):
    """Credentials are missing or could not be obtained."""


class ApiError(WidgetError):
    """A Google API call failed."""

    def __init__(self, message, status=None):
        super().__init__(message)
        self.status = status


class RateLimitError(ApiError):
    """The API kept rate limiting after the retries ran out."""


class NetworkError(ApiError):
    """Google could not be reached at all."""


def _error_reasons(error):
    reasons = set()
    for detail in getattr(error, 'error_details', None) or []:
        if isinstance(detail, dict) and detail.get('reason'):
            reasons.add(detail['reason'])
    return reasons


def map_http_error(error: HttpError) -> WidgetError:
    """Translate a googleapiclient HttpError into a widget error."""
    status = error.resp.status if error.resp is not None else None
    reason = getattr(error, 'reason', None) or str(error)

    if status == 401:
        return AuthError(f"Google rejected the credentials: {reason}")
    if status == 429 or (status == 403 and _error_reasons(error) & RATE_LIMIT_REASONS):
        return RateLimitError(f"Rate limited by Google: {reason}", status=status)
    return ApiError(f"Google API error {status}: {reason}", status=status)
