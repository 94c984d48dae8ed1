"""HTTP client for the club reporting API.

Thin wrapper around a ``requests.Session`` that joins endpoint paths onto
the configured base URL, attaches the bearer token, maps HTTP status codes
onto the ``clubledger.exceptions`` tree and retries transient failures
(429, 5xx, dropped connections) with tenacity.

Report endpoints return JSON arrays of rows; the client hands them back
decoded but unvalidated. ``clubledger.validation`` turns them into models.

Usage::

    with ReportClient(ClientConfig(api_token=token)) as client:
        rows = client.get_unpaid_report()
"""

import logging
from dataclasses import replace
from typing import Any

import requests
from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from clubledger.config import ClientConfig
from clubledger.exceptions import (
    AuthorizationError,
    FetchError,
    InvalidShareCode,
    RateLimited,
    ResourceNotFound,
    TransientFetchError,
)

logger = logging.getLogger(__name__)

OUTSTANDING_PAYMENTS_PATH = "api/v1/reports/outstanding-payments"
ANONYMOUS_OUTSTANDING_PATH = "api/v1/anonymous/reports/outstanding-payments"
UNPAID_REPORT_PATH = "api/v2/reports/unpaid"
PUBLIC_UNPAID_REPORT_PATH = "api/v2/public/reports/unpaid"


class ReportClient:
    """Synchronous client for the report, registration and share-code endpoints.

    Only 429, 5xx and connection errors are retried. Authorization
    failures, 404s and other client errors surface immediately so that a
    report view can switch to its error state.
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        session: requests.Session | None = None,
    ):
        if config is None:
            config = ClientConfig()

        self._config = config
        self._owns_session = session is None
        self._session = session if session is not None else requests.Session()
        self._session.headers.update({"Accept": "application/json"})

        self._retrying = Retrying(
            retry=retry_if_exception_type((RateLimited, TransientFetchError)),
            wait=wait_exponential_jitter(
                initial=config.retry_initial_wait,
                max=15,
                jitter=config.retry_initial_wait,
            ),
            stop=stop_after_attempt(config.max_retries),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )

        # Request counters (every attempt, including retries)
        self._request_count = 0
        self._success_count = 0
        self._failure_count = 0

    @property
    def config(self) -> ClientConfig:
        return self._config

    def with_token(self, token: str | None) -> "ReportClient":
        """Return a client that authenticates as ``token`` over the same session.

        The returned client does not own the session; closing it leaves
        this client usable.
        """
        if token == self._config.api_token:
            return self
        return ReportClient(replace(self._config, api_token=token), session=self._session)

    def url_for(self, path: str) -> str:
        return f"{self._config.base_url.rstrip('/')}/{path.lstrip('/')}"

    def _headers(self) -> dict[str, str]:
        if self._config.api_token:
            return {"Authorization": f"Bearer {self._config.api_token}"}
        return {}

    def _send(
        self,
        method: str,
        path: str,
        params: dict | None = None,
        json: Any = None,
        share_code: bool = False,
    ) -> requests.Response:
        """Perform one HTTP attempt and classify the response."""
        url = self.url_for(path)
        self._request_count += 1

        try:
            response = self._session.request(
                method,
                url,
                params=params,
                json=json,
                headers=self._headers(),
                timeout=self._config.request_timeout,
            )
        except (requests.ConnectionError, requests.Timeout) as e:
            self._failure_count += 1
            raise TransientFetchError(f"{method} {url} failed: {e}", url=url) from e
        except requests.RequestException as e:
            self._failure_count += 1
            raise FetchError(f"{method} {url} failed: {e}", url=url) from e

        status = response.status_code
        if 200 <= status < 300:
            self._success_count += 1
            logger.debug("%s %s -> %d", method, url, status)
            return response

        self._failure_count += 1
        message = f"{method} {url} returned HTTP {status}"
        if status == 429:
            raise RateLimited(message, url=url, status_code=status)
        if status >= 500:
            raise TransientFetchError(message, url=url, status_code=status)
        if status == 403 and share_code:
            raise InvalidShareCode(
                "Share code is invalid or has been revoked",
                url=url,
                status_code=status,
            )
        if status in (401, 403):
            raise AuthorizationError(message, url=url, status_code=status)
        if status == 404:
            raise ResourceNotFound(message, url=url, status_code=status)
        raise FetchError(message, url=url, status_code=status)

    def request(
        self,
        method: str,
        path: str,
        *,
        params: dict | None = None,
        json: Any = None,
        share_code: bool = False,
    ) -> Any:
        """Send a request with retries and return the decoded JSON body.

        Args:
            method: HTTP verb.
            path: Endpoint path relative to ``base_url``.
            params: Query string parameters.
            json: Request body.
            share_code: The endpoint is gated by a share code; a 403 raises
                InvalidShareCode instead of AuthorizationError.

        Returns:
            Decoded JSON, or None for an empty body.

        Raises:
            ClubLedgerError: Any subclass, after retries are exhausted for
                the retriable ones.
        """
        response = self._retrying(
            self._send, method, path, params=params, json=json, share_code=share_code
        )
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise FetchError(
                f"{method} {response.url} returned a non-JSON body",
                url=response.url,
                status_code=response.status_code,
            ) from e

    def get_json(self, path: str, params: dict | None = None, **kwargs) -> Any:
        return self.request("GET", path, params=params, **kwargs)

    # -- Reports ---------------------------------------------------------

    def get_outstanding_payments(self) -> list[dict]:
        """Admin report: one pre-aggregated row per player who owes money."""
        return self.get_json(OUTSTANDING_PAYMENTS_PATH)

    def get_unpaid_report(self) -> list[dict]:
        """Per-match cost rows for every registration (authenticated)."""
        return self.get_json(UNPAID_REPORT_PATH)

    def get_public_unpaid_report(self, share_code: str) -> list[dict]:
        """Per-match cost rows behind a share link."""
        return self.get_json(
            PUBLIC_UNPAID_REPORT_PATH,
            params={"shareCode": share_code},
            share_code=True,
        )

    def get_anonymous_outstanding_payments(self, share_code: str) -> list[dict]:
        """Unpaid per-match rows, including guests paid for, behind a share link."""
        return self.get_json(
            ANONYMOUS_OUTSTANDING_PATH,
            params={"shareCode": share_code},
            share_code=True,
        )

    # -- Registrations ---------------------------------------------------

    def get_match(self, match_id: int) -> dict:
        return self.get_json(f"api/v1/matches/{match_id}")

    def get_registrations_by_match(self, match_id: int) -> list[dict]:
        return self.get_json(f"api/v1/matches/{match_id}/registrations")

    def get_message_template(self) -> str | None:
        return self.get_json("api/v1/settings/message-template")

    def mark_registration_paid(self, registration_id: int, paid: bool = True) -> Any:
        action = "paid" if paid else "unpaid"
        return self.request("PUT", f"api/v1/registrations/{registration_id}/{action}", json={})

    def mark_player_paid(self, player_id: int) -> Any:
        """Settle every outstanding registration of a player."""
        return self.request("PUT", f"api/v1/players/{player_id}/outstanding-payments/paid")

    def create_share_url(self, url: str) -> dict:
        """Create a share code for ``url``; the response carries ``fullUrl``."""
        return self.request("POST", "api/v1/share-codes/urls", json={"url": url})

    # -- Lifecycle -------------------------------------------------------

    def close(self) -> None:
        if self._owns_session:
            self._session.close()

    def __enter__(self) -> "ReportClient":
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    @property
    def stats(self) -> dict:
        """Return current client statistics."""
        total = self._request_count
        return {
            "requests": total,
            "successes": self._success_count,
            "failures": self._failure_count,
            "success_rate": (self._success_count / total) if total > 0 else 0.0,
        }
