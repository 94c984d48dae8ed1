"""Report views: fetch, validate and aggregate one report.

Each view runs the state machine::

    IDLE -> LOADING -> SUCCESS(groups)
                    -> ERROR

A fetch either fully succeeds or fully fails; no partial result is ever
exposed and the aggregator is never run on error data. Views do not retry
by themselves: ``refresh()`` is the explicit user retry.

Every ``begin()`` hands out a new generation number. A result that
arrives for an older generation, or after ``close()``, belongs to a
superseded request and is dropped.
"""

import abc
import enum
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from functools import partial

from clubledger.aggregation import aggregate_outstanding, filter_by_player_name
from clubledger.config import ClientConfig
from clubledger.exceptions import AuthorizationError, ClubLedgerError
from clubledger.http_client import ReportClient
from clubledger.models import AdminOutstandingRow, MatchCostRecord
from clubledger.text import name_sort_key
from clubledger.validation import QuarantinedRecord, validate_records

logger = logging.getLogger(__name__)

ADMIN_PERMISSION = "admin"


class ViewState(enum.Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class RequestContext:
    """Who is asking: the bearer token and the role claims decoded from it."""

    token: str | None = None
    permissions: frozenset[str] = field(default_factory=frozenset)

    @property
    def is_admin(self) -> bool:
        return ADMIN_PERMISSION in self.permissions

    @classmethod
    def from_claims(cls, claims: Mapping, token: str | None = None) -> "RequestContext":
        """Build a context from decoded token claims (``permissions`` list)."""
        return cls(token=token, permissions=frozenset(claims.get("permissions") or ()))


class ReportView(abc.ABC):
    """Abstract base: owns one fetch result and what is derived from it.

    Subclasses implement ``_derive(rows)``, turning the validated rows into
    the items the view displays.
    """

    model_cls: type = MatchCostRecord

    def __init__(
        self,
        fetch: Callable[[], list],
        *,
        config: ClientConfig | None = None,
        name: str = "report",
    ):
        self._fetch = fetch
        self._config = config or ClientConfig()
        self.name = name

        self.state = ViewState.IDLE
        self.error: ClubLedgerError | None = None
        self.quarantined: list[QuarantinedRecord] = []
        self._items: list = []
        self._query = ""
        self._generation = 0
        self._closed = False

    # -- State machine ---------------------------------------------------

    def begin(self) -> int:
        """Enter LOADING for a new request and return its generation."""
        if self._closed:
            raise RuntimeError(f"View {self.name!r} is closed")
        self._generation += 1
        self.state = ViewState.LOADING
        self.error = None
        self.quarantined = []
        self._items = []
        logger.debug("View %s loading (generation %d)", self.name, self._generation)
        return self._generation

    def is_current(self, generation: int) -> bool:
        return not self._closed and generation == self._generation

    def resolve(self, generation: int, rows: list) -> bool:
        """Deliver a successful fetch. Returns False if it was superseded."""
        if not self.is_current(generation):
            logger.debug(
                "Dropping superseded %s result (generation %d)", self.name, generation
            )
            return False

        try:
            records, quarantined = validate_records(
                rows,
                self.model_cls,
                {"endpoint": self.name},
                strict=self._config.strict_records,
            )
        except ClubLedgerError as e:
            return self.reject(generation, e)

        self.quarantined = quarantined
        self._items = self._derive(records)
        self.state = ViewState.SUCCESS
        logger.info("View %s loaded %d entries", self.name, len(self._items))
        return True

    def reject(self, generation: int, error: ClubLedgerError) -> bool:
        """Deliver a failed fetch. Returns False if it was superseded."""
        if not self.is_current(generation):
            logger.debug(
                "Dropping superseded %s error (generation %d): %s",
                self.name,
                generation,
                error,
            )
            return False

        self.error = error
        self._items = []
        self.state = ViewState.ERROR
        logger.error("View %s failed: %s", self.name, error)
        return True

    def load(self) -> ViewState:
        """Fetch and derive synchronously; returns the resulting state."""
        generation = self.begin()
        try:
            rows = self._fetch()
        except ClubLedgerError as e:
            self.reject(generation, e)
            return self.state
        self.resolve(generation, rows)
        return self.state

    def refresh(self) -> ViewState:
        """Explicit user retry: a fresh fetch from any state."""
        return self.load()

    def close(self) -> None:
        """Unmount: any result still in flight is ignored."""
        self._closed = True

    # -- Display ---------------------------------------------------------

    def search(self, query: str | None) -> list:
        """Apply the player-name filter without fetching again."""
        self._query = query or ""
        return self.items

    @property
    def query(self) -> str:
        return self._query

    @property
    def all_items(self) -> list:
        return list(self._items)

    @property
    def items(self) -> list:
        """Items to display: empty unless the view is in SUCCESS."""
        if self.state is not ViewState.SUCCESS:
            return []
        return filter_by_player_name(self._items, self._query)

    @abc.abstractmethod
    def _derive(self, records: list) -> list:
        """Turn validated records into display items."""


class OutstandingReportView(ReportView):
    """Per-player grouping of match cost rows."""

    model_cls = MatchCostRecord

    def __init__(
        self,
        fetch: Callable[[], list],
        *,
        unpaid_only: bool = False,
        mask_emails: bool = False,
        config: ClientConfig | None = None,
        name: str = "outstanding-report",
    ):
        super().__init__(fetch, config=config, name=name)
        self.unpaid_only = unpaid_only
        self.mask_emails = mask_emails

    def _derive(self, records: list) -> list:
        return aggregate_outstanding(
            records, unpaid_only=self.unpaid_only, mask_emails=self.mask_emails
        )


class AdminOutstandingView(ReportView):
    """The admin report: one server-aggregated row per indebted player."""

    model_cls = AdminOutstandingRow

    def _derive(self, records: list) -> list:
        return sorted(records, key=lambda r: name_sort_key(r.player_name))


def _client_for(client: ReportClient, context: RequestContext) -> ReportClient:
    """Fetch as the caller: the context token, when set, replaces the client's."""
    if context.token:
        return client.with_token(context.token)
    return client


def build_report_view(
    client: ReportClient,
    context: RequestContext,
    share_code: str | None = None,
    *,
    legacy: bool = False,
) -> OutstandingReportView:
    """Pick the grouped report for the caller.

    * share code given: the public unpaid report, emails masked;
    * admin: the wallet view with paid and unpaid matches;
    * anyone else: their unpaid matches only.

    ``legacy`` selects the v1 anonymous endpoint, whose rows carry guest
    counts, for share-code access.
    """
    client = _client_for(client, context)
    config = client.config
    if share_code:
        if legacy:
            fetch = partial(client.get_anonymous_outstanding_payments, share_code)
        else:
            fetch = partial(client.get_public_unpaid_report, share_code)
        return OutstandingReportView(
            fetch,
            unpaid_only=True,
            mask_emails=True,
            config=config,
            name="public-unpaid-report",
        )

    if context.is_admin:
        return OutstandingReportView(
            client.get_unpaid_report,
            unpaid_only=False,
            config=config,
            name="wallet-report",
        )

    return OutstandingReportView(
        client.get_unpaid_report,
        unpaid_only=True,
        config=config,
        name="unpaid-report",
    )


def build_admin_view(client: ReportClient, context: RequestContext) -> AdminOutstandingView:
    """The admin outstanding-payment report; admins only."""
    if not context.is_admin:
        raise AuthorizationError("The outstanding-payment report requires the admin role")
    client = _client_for(client, context)
    return AdminOutstandingView(
        client.get_outstanding_payments,
        config=client.config,
        name="admin-outstanding-report",
    )
