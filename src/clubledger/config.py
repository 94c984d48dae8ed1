"""Client configuration with sensible defaults for the club reporting API."""

import os
from dataclasses import dataclass

DEFAULT_BASE_URL = "http://localhost:8080"


@dataclass
class ClientConfig:
    """Configuration for the report client, views and CLI.

    Timing values are in seconds, money values in the club's currency.
    """

    # API root; endpoint paths are joined onto this
    base_url: str = DEFAULT_BASE_URL

    # Bearer token from the identity provider. None = anonymous requests
    # (only the share-code endpoints accept those).
    api_token: str | None = None

    # Per-request timeout passed to requests
    request_timeout: float = 20.0

    # tenacity stop_after_attempt for 429 / 5xx / connection errors
    max_retries: int = 3

    # First backoff step (and jitter range) between those retries
    retry_initial_wait: float = 1.0

    # Display formatting
    currency_symbol: str = "£"
    date_format: str = "%d/%m/%Y"
    summary_date_format: str = "%d.%b.%Y"  # 01.Mar.2024 in registration summaries

    # Players owing more than this are flagged on the admin report
    high_debt_threshold: float = 20.0

    # Log directory root
    data_dir: str = "data"

    # Malformed report rows: False = skip and log, True = fail the whole report
    strict_records: bool = False

    @classmethod
    def from_env(cls, **overrides) -> "ClientConfig":
        """Build a config from ``CLUBLEDGER_*`` environment variables.

        Explicit keyword overrides win over the environment.
        """
        values: dict = {}
        if os.environ.get("CLUBLEDGER_BASE_URL"):
            values["base_url"] = os.environ["CLUBLEDGER_BASE_URL"]
        if os.environ.get("CLUBLEDGER_API_TOKEN"):
            values["api_token"] = os.environ["CLUBLEDGER_API_TOKEN"]
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
