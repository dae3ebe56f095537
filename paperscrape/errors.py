# paperscrape/errors.py
"""Error types raised by the scraping pipeline."""


class ScrapeError(Exception):
    """Base class for scraping errors."""


class ConfigurationError(ScrapeError):
    """A preference entry is missing or malformed."""


class TransportError(ScrapeError):
    """A request failed at the transport level or returned a non-2xx status."""

    def __init__(self, message: str, url: str | None = None, status_code: int | None = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class RateLimitError(TransportError):
    """The provider refused the request (HTTP 429/403 or a robot check)."""


class FetchTimeoutError(TransportError):
    """The fetch stage did not finish within the scraper's timeout."""


class ParseError(ScrapeError):
    """The provider returned a payload that could not be parsed."""


class ScraperError(ScrapeError):
    """Failure of one provider for one draft.

    Wraps the underlying error so that the caller can tell which
    provider/draft pair it belongs to.
    """

    def __init__(self, provider: str, index: int, cause: BaseException):
        super().__init__(f"{provider} failed for draft #{index}: {cause}")
        self.provider = provider
        self.index = index
        self.cause = cause
