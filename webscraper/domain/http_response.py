from typing import NamedTuple, Optional


class HttpResponse(NamedTuple):
    """Status, body and Content-Type returned by the transport for one URL."""
    status_code: int
    text: str
    content_type: Optional[str] = None


class FetchedPage(NamedTuple):
    """A page body together with the link that actually produced it.

    The fetcher may fall back to other frontier candidates when a link fails,
    so `url` is not necessarily the link the caller asked for.
    """
    url: str
    body: str
