"""Custom exception hierarchy for the club reporting client.

Exception tree:
    ClubLedgerError
    +-- RateLimited            (HTTP 429, retriable)
    +-- TransientFetchError    (HTTP 5xx or connection failure, retriable)
    +-- FetchError             (non-retriable fetch error)
    |   +-- AuthorizationError (HTTP 401 / 403)
    |   |   +-- InvalidShareCode (403 on a share-code endpoint)
    |   +-- ResourceNotFound   (HTTP 404)
    +-- MalformedRecordError   (report row failed validation in strict mode)
"""

from typing import Optional


class ClubLedgerError(Exception):
    """Base exception for all club reporting errors."""

    def __init__(
        self,
        message: str,
        *,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        self.url = url
        self.status_code = status_code
        super().__init__(message)


class RateLimited(ClubLedgerError):
    """Server returned HTTP 429 Too Many Requests.

    This is a retriable error -- the client backs off and retries.
    """

    pass


class TransientFetchError(ClubLedgerError):
    """Server error (5xx) or the connection dropped before a response.

    Retriable at the transport level. Report views still treat an
    exhausted retry as a terminal error.
    """

    pass


class FetchError(ClubLedgerError):
    """Non-retriable fetch error (unexpected status code, undecodable body).

    Do NOT retry these -- the request will not succeed by repeating it.
    """

    pass


class AuthorizationError(FetchError):
    """HTTP 401/403 -- missing, expired or insufficient credentials."""

    pass


class InvalidShareCode(AuthorizationError):
    """The share code on a public report link is unknown or revoked.

    Views surface this as a terminal "invalid link" state.
    """

    pass


class ResourceNotFound(FetchError):
    """HTTP 404 -- the requested resource does not exist."""

    pass


class MalformedRecordError(ClubLedgerError):
    """A report row failed validation while strict record handling is on."""

    def __init__(self, message: str, *, raw_data: Optional[dict] = None):
        self.raw_data = raw_data
        super().__init__(message)
