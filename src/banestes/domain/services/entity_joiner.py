"""Resolve clients, their accounts and their branch agency by natural keys."""

from typing import Iterable, Optional

from banestes.domain.entities.roster import Account, Agency, Client


def find_client(clients: Iterable[Client], key: str) -> Optional[Client]:
    """Client whose ID equals ``key``, else the one whose CPF/CNPJ does.

    IDs are matched across the whole collection before any CPF/CNPJ, and
    the first match in feed order wins. A miss returns None; it is an
    expected outcome, not an error.
    """
    clients = list(clients)
    by_id = next((client for client in clients if client.id == key), None)
    if by_id is not None:
        return by_id
    return next((client for client in clients if client.tax_id == key), None)


def accounts_of(accounts: Iterable[Account], client: Client) -> list[Account]:
    """Accounts owned by ``client``, in feed order.

    Ownership is exact string equality of the CPF/CNPJ as decoded:
    ``"123.456.789-00"`` and ``"12345678900"`` are different owners.
    A client without CPF/CNPJ owns no accounts.
    """
    if not client.tax_id:
        return []
    return [account for account in accounts if account.owner_tax_id == client.tax_id]


def agency_of(agencies: Iterable[Agency], client: Client) -> Optional[Agency]:
    """Branch agency of ``client``; the first match in feed order wins."""
    return next(
        (agency for agency in agencies if agency.code == client.agency_code),
        None,
    )
