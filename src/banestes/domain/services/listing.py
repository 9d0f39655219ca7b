"""Searchable, paginated client listing with persisted state."""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

from banestes.domain.entities.roster import Client

DEFAULT_PAGE_SIZE = 10


class EmptyState(str, Enum):
    """Why a listing page has no items."""

    NO_DATA = "no_data"  # The clients feed itself is empty
    NO_RESULTS = "no_results"  # The search matched nothing


@dataclass
class ListingState:
    """Search text and page number kept across navigation."""

    search_text: str = ""
    current_page: int = 1


@dataclass(frozen=True)
class ListingPage:
    """One page of the filtered, sorted listing."""

    items: list[Client]
    total_pages: int
    current_page: int
    filtered_count: int
    total_count: int
    page_size: int
    search_text: str = ""
    empty_state: Optional[EmptyState] = None


def _sort_key(client: Client) -> str:
    return client.name.lower()


def matches(client: Client, search_text: str) -> bool:
    """Case-insensitive substring match on name or CPF/CNPJ."""
    needle = search_text.lower()
    if needle in client.name.lower():
        return True
    return client.tax_id is not None and needle in client.tax_id.lower()


class ListingEngine:
    """State machine over search text and current page.

    Clients are ordered alphabetically (case-insensitive, ties kept in feed
    order) and split into fixed-size pages. Any change to the search text
    restarts pagination; page requests are clamped, never rejected.
    """

    def __init__(
        self,
        clients: Iterable[Client],
        state: Optional[ListingState] = None,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> None:
        self.page_size = page_size
        # sorted() is stable, so equal names keep feed order
        self._clients = sorted(clients, key=_sort_key)
        self.state = state if state is not None else ListingState()
        self._filtered: list[Client] = []
        self._recompute()

    @property
    def total_count(self) -> int:
        return len(self._clients)

    @property
    def filtered_count(self) -> int:
        return len(self._filtered)

    @property
    def total_pages(self) -> int:
        return math.ceil(self.filtered_count / self.page_size)

    def _max_page(self) -> int:
        return max(1, self.total_pages)

    def _recompute(self) -> None:
        search_text = self.state.search_text
        if search_text:
            self._filtered = [c for c in self._clients if matches(c, search_text)]
        else:
            self._filtered = list(self._clients)

        # A shrinking result set pulls the page down, never up
        if self.state.current_page > self._max_page():
            self.state.current_page = self._max_page()
        if self.state.current_page < 1:
            self.state.current_page = 1

    def set_search_text(self, search_text: str) -> None:
        """Update the search text and restart at page 1."""
        self.state.search_text = search_text
        self.state.current_page = 1
        self._recompute()

    def set_page(self, page: int) -> None:
        """Move to ``page``, clamped to ``[1, max(1, total_pages)]``."""
        self.state.current_page = max(1, min(page, self._max_page()))
        self._recompute()

    def page(self) -> ListingPage:
        """The current page."""
        start = (self.state.current_page - 1) * self.page_size
        items = self._filtered[start:start + self.page_size]

        empty_state = None
        if not self._clients:
            empty_state = EmptyState.NO_DATA
        elif not self._filtered:
            empty_state = EmptyState.NO_RESULTS

        return ListingPage(
            items=items,
            total_pages=self.total_pages,
            current_page=self.state.current_page,
            filtered_count=self.filtered_count,
            total_count=self.total_count,
            page_size=self.page_size,
            search_text=self.state.search_text,
            empty_state=empty_state,
        )
