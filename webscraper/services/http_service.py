import requests
from typing import Callable

from webscraper.domain.http_response import HttpResponse
from webscraper.exceptions import FetchErrorKind, HttpFetchError

RATE_LIMIT_STATUS = 429


class HttpService:
    """
    HTTP client wrapper for fetching web pages.

    Requires http_client callable for dependency injection so tests can swap
    the network out. Transport failures and non-2xx answers are raised as
    HttpFetchError tagged with a FetchErrorKind.
    """

    def __init__(self, user_agent: str, http_client: Callable, timeout: int = 10):
        self.user_agent = user_agent
        self.timeout = timeout
        self.http_client = http_client

    def fetch(self, url: str) -> HttpResponse:
        """Fetch URL and return response with status code, body text, and Content-Type."""
        headers = {"User-Agent": self.user_agent}
        try:
            resp = self.http_client(url, headers=headers, timeout=self.timeout)
        except requests.exceptions.Timeout as e:
            raise HttpFetchError(url, FetchErrorKind.TIMEOUT, str(e), e) from e
        except requests.exceptions.ConnectionError as e:
            raise HttpFetchError(url, FetchErrorKind.CONNECTION_FAILED, str(e), e) from e
        except requests.exceptions.RequestException as e:
            raise HttpFetchError(url, FetchErrorKind.OTHER, str(e), e) from e

        status = int(resp.status_code)
        if status == RATE_LIMIT_STATUS:
            raise HttpFetchError(url, FetchErrorKind.RATE_LIMITED, f"HTTP {status} Too Many Requests")
        if status < 200 or status >= 300:
            raise HttpFetchError(url, FetchErrorKind.OTHER, f"HTTP {status}")

        # Extract Content-Type if response has headers; let real exceptions bubble up.
        ct = None
        if hasattr(resp, 'headers'):
            ct = resp.headers.get('Content-Type')

        return HttpResponse(status, resp.text, ct)
