"""Domain entities and DTOs."""

from banestes.domain.entities.roster import (
    Account,
    AccountType,
    Agency,
    Client,
    ClientDetail,
    RosterSummary,
)

__all__ = [
    "Account",
    "AccountType",
    "Agency",
    "Client",
    "ClientDetail",
    "RosterSummary",
]
