import logging
import httplib2
from google.auth.exceptions import RefreshError, TransportError
from googleapiclient.errors import HttpError
from weekwidget.core.config import API_NUM_RETRIES
from weekwidget.core.errors import AuthError, NetworkError, map_http_error

logger = logging.getLogger(__name__)


class GoogleApiManager:
    """Shared request handling for the Calendar and Tasks managers.

    Rate limits (429, 403 rateLimitExceeded) and 5xx answers are retried with
    exponential backoff by googleapiclient itself. A 401 makes the auth
    manager refresh the token and the request is replayed once. A refresh
    token Google no longer accepts ends in AuthError, so the next attempt
    signs in again.
    """

    service_name = None
    service_version = None

    def __init__(self, auth_manager, num_retries=API_NUM_RETRIES):
        self.auth_service = auth_manager
        self.num_retries = num_retries

    def _service(self):
        return self.auth_service.get_service(self.service_name, self.service_version)

    def _execute(self, build_request):
        """Run `build_request(service).execute()` and map failures to widget errors."""
        for attempt in (1, 2):
            service = self._service()
            try:
                return build_request(service).execute(num_retries=self.num_retries)
            except HttpError as e:
                error = map_http_error(e)
                if isinstance(error, AuthError) and attempt == 1:
                    logger.info("Token rejected by %s API, refreshing and retrying", self.service_name)
                    self.auth_service.invalidate()
                    continue
                raise error from e
            except RefreshError as e:
                self.auth_service.invalidate()
                raise AuthError(f"Google refused to refresh the token: {e}") from e
            except (httplib2.HttpLib2Error, TransportError, OSError) as e:
                raise NetworkError(f"Network error talking to Google {self.service_name}: {e}") from e

    def _list_all(self, build_request, page_size):
        """Collect 'items' across all pages of a list call."""
        items = []
        page_token = None
        while True:
            result = self._execute(
                lambda service: build_request(service, pageToken=page_token, maxResults=page_size))
            items.extend(result.get('items', []))
            page_token = result.get('nextPageToken')
            if not page_token:
                return items
