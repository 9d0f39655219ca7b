"""Client directory: the read-only roster operations used by the API and CLI."""

import threading
from datetime import datetime, timedelta
from typing import Any, Optional

from banestes.core.config import get_settings
from banestes.core.exceptions import FeedError
from banestes.core.logging import get_logger
from banestes.core.session_store import SessionStateStore, get_session_store
from banestes.domain.entities.roster import (
    AccountType,
    ClientDetail,
    RosterSummary,
)
from banestes.domain.services.entity_joiner import accounts_of, agency_of, find_client
from banestes.domain.services.listing import ListingEngine, ListingPage, ListingState
from banestes.domain.services.row_decoder import EntityKind, RowDecoder
from banestes.infrastructure.external_apis.feed_client import FeedClient

logger = get_logger(__name__)


class FetchCycle:
    """Liveness token for one fetch-render cycle.

    The owner cancels it when its view goes away; results that resolve
    after that are discarded instead of being applied.
    """

    def __init__(self) -> None:
        self._cancelled = threading.Event()

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def alive(self) -> bool:
        return not self._cancelled.is_set()


class ClientDirectory:
    """Roster listing and client detail over the three spreadsheet feeds.

    Every call fetches fresh collections unless the transient feed cache is
    enabled (``feed_cache_ttl_seconds`` > 0).
    """

    def __init__(
        self,
        feed_client: Optional[FeedClient] = None,
        session_store: Optional[SessionStateStore] = None,
        feed_urls: Optional[dict[str, str]] = None,
        page_size: Optional[int] = None,
        cache_ttl_seconds: Optional[int] = None,
    ) -> None:
        """Initialize client directory.

        Args:
            feed_client: Feed client (creates new if None)
            session_store: Listing state store (process-wide store if None)
            feed_urls: Feed name to URL mapping (from settings if not provided)
            page_size: Clients per page (from settings if not provided)
            cache_ttl_seconds: Feed cache TTL, 0 disables (from settings if not provided)
        """
        settings = get_settings()
        self.feed_client = feed_client or FeedClient()
        self.session_store = session_store if session_store is not None else get_session_store()
        self.feed_urls = feed_urls or settings.feed_urls
        self.page_size = page_size or settings.page_size
        ttl = settings.feed_cache_ttl_seconds if cache_ttl_seconds is None else cache_ttl_seconds
        self.cache_ttl = timedelta(seconds=ttl)
        self.decoder = RowDecoder()

        # Cache: {feed: (entities, fetched_at)}
        self._cache: dict[EntityKind, tuple[list[Any], datetime]] = {}
        self._cache_lock = threading.Lock()

    # ============================================
    # Feed loading
    # ============================================

    def _cached(self, kind: EntityKind) -> Optional[list[Any]]:
        if not self.cache_ttl:
            return None
        with self._cache_lock:
            entry = self._cache.get(kind)
        if entry and datetime.now() - entry[1] < self.cache_ttl:
            return list(entry[0])
        return None

    def _store(self, kind: EntityKind, entities: list[Any]) -> None:
        if not self.cache_ttl:
            return
        with self._cache_lock:
            self._cache[kind] = (entities, datetime.now())

    def clear_cache(self) -> None:
        """Drop cached feeds."""
        with self._cache_lock:
            self._cache.clear()

    def load(self, kinds: list[EntityKind]) -> dict[EntityKind, Any]:
        """Fetch and decode several feeds concurrently.

        Returns:
            Mapping of feed kind to its decoded entity list, or to the
            FeedError that feed failed with
        """
        results: dict[EntityKind, Any] = {}
        pending: dict[str, str] = {}

        for kind in kinds:
            cached = self._cached(kind)
            if cached is not None:
                results[kind] = cached
            else:
                pending[kind.value] = self.feed_urls[kind.value]

        if pending:
            batch = self.feed_client.load_many(pending)
            for name in pending:
                kind = EntityKind(name)
                try:
                    entities = self.decoder.decode_rows(kind, batch.get(name))
                except FeedError as e:
                    if e.url is None:
                        e.url = pending[name]
                    results[kind] = e
                    continue
                self._store(kind, entities)
                results[kind] = entities

        return results

    def load_required(self, kinds: list[EntityKind]) -> dict[EntityKind, list[Any]]:
        """Fetch and decode feeds, failing if any of them fails.

        Raises:
            FeedError: The first failed feed, in the order requested
        """
        results = self.load(kinds)
        for kind in kinds:
            if isinstance(results[kind], FeedError):
                raise results[kind]
        return results

    # ============================================
    # Operations
    # ============================================

    def list_clients(
        self,
        search_text: Optional[str] = None,
        page: Optional[int] = None,
        session_id: Optional[str] = None,
    ) -> ListingPage:
        """List clients, applying search and page to the session's listing state.

        A search text different from the stored one restarts at page 1; an
        explicit page is applied after that. Omitted arguments keep the
        stored values. Only the clients feed is needed.

        Raises:
            FeedError: If the clients feed fails
        """
        clients = self.load_required([EntityKind.CLIENTS])[EntityKind.CLIENTS]

        state = self.session_store.load(session_id) if session_id else ListingState()
        engine = ListingEngine(clients, state=state, page_size=self.page_size)

        if search_text is not None and search_text != engine.state.search_text:
            engine.set_search_text(search_text)
        if page is not None:
            engine.set_page(page)

        if session_id:
            self.session_store.save(session_id, engine.state)

        result = engine.page()
        logger.debug(
            "Clients listed",
            search=result.search_text,
            page=result.current_page,
            pages=result.total_pages,
            matches=result.filtered_count,
        )
        return result

    def get_client_detail(
        self,
        client_id: str,
        cycle: Optional[FetchCycle] = None,
    ) -> Optional[ClientDetail]:
        """Client joined with its accounts and agency.

        All three feeds are fetched concurrently and all are required.

        Args:
            client_id: Client ID
            cycle: Liveness token; a cancelled cycle discards the result

        Returns:
            ClientDetail, or None when the client does not exist or the
            cycle was cancelled while fetching

        Raises:
            FeedError: If any of the three feeds fails
        """
        results = self.load_required(
            [EntityKind.CLIENTS, EntityKind.ACCOUNTS, EntityKind.AGENCIES]
        )

        if cycle is not None and not cycle.alive:
            logger.info("Discarding detail for cancelled fetch cycle", client_id=client_id)
            return None

        client = find_client(results[EntityKind.CLIENTS], client_id)
        if client is None:
            logger.info("Client not found", client_id=client_id)
            return None

        return ClientDetail(
            client=client,
            accounts=accounts_of(results[EntityKind.ACCOUNTS], client),
            agency=agency_of(results[EntityKind.AGENCIES], client),
        )

    def summary(self) -> RosterSummary:
        """Client and account counts.

        The clients feed is required; a failed accounts feed leaves the
        account counts as None.

        Raises:
            FeedError: If the clients feed fails
        """
        results = self.load([EntityKind.CLIENTS, EntityKind.ACCOUNTS])

        clients = results[EntityKind.CLIENTS]
        if isinstance(clients, FeedError):
            raise clients

        accounts = results[EntityKind.ACCOUNTS]
        if isinstance(accounts, FeedError):
            logger.warning("Accounts feed unavailable for summary", error=str(accounts))
            return RosterSummary(total_clients=len(clients))

        return RosterSummary(
            total_clients=len(clients),
            checking_accounts=sum(1 for a in accounts if a.account_type == AccountType.CORRENTE.value),
            savings_accounts=sum(1 for a in accounts if a.account_type == AccountType.POUPANCA.value),
        )
