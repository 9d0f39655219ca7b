"""Display text for roster entities.

The data layer keeps optional values as None; the sentinels shown to users
are chosen here.
"""

from typing import Any, Optional

from banestes.core.locale import UNAVAILABLE, format_date, format_money
from banestes.domain.entities.roster import Account, Agency, Client, ClientDetail
from banestes.domain.services.listing import EmptyState, ListingPage

NOT_INFORMED = "Não informado"

CLIENT_NOT_FOUND = "Cliente não encontrado."
NO_ACCOUNTS = "Este cliente não possui contas cadastradas."
NO_AGENCY = "Agência não identificada ou não vinculada."
NO_CLIENTS = "Nenhum cliente cadastrado ainda."


def text_or(value: Optional[str], missing: str = NOT_INFORMED) -> str:
    """Value, or ``missing`` when blank."""
    return value if value else missing


def document_line(client: Client) -> str:
    """CPF/CNPJ, falling back to RG."""
    if client.tax_id:
        return f"CPF/CNPJ: {client.tax_id}"
    if client.national_id:
        return f"RG: {client.national_id}"
    return "CPF/CNPJ ou RG Não informado"


def empty_message(page: ListingPage) -> Optional[str]:
    """Message for an empty listing; "no data" and "no results" differ."""
    if page.empty_state == EmptyState.NO_DATA:
        return NO_CLIENTS
    if page.empty_state == EmptyState.NO_RESULTS:
        return f'Nenhum cliente encontrado para "{page.search_text}".'
    return None


def client_row(client: Client) -> dict[str, str]:
    """Listing row: name and document."""
    return {
        "id": client.id,
        "name": text_or(client.name, "Nome não informado"),
        "document": text_or(client.tax_id, "CPF/CNPJ não informado"),
    }


def client_fields(client: Client) -> dict[str, str]:
    """Detail view fields of a client."""
    return {
        "name": text_or(client.display_name, "Nome não informado"),
        "email": text_or(client.email, "Email não informado"),
        "document": document_line(client),
        "birth_date": format_date(client.birth_date),
        "annual_income": format_money(client.annual_income),
        "net_worth": format_money(client.net_worth),
        "marital_status": text_or(client.marital_status),
        "address": text_or(client.address, UNAVAILABLE),
    }


def account_fields(account: Account) -> dict[str, str]:
    return {
        "type": text_or(account.account_type, "Tipo não informado"),
        "balance": format_money(account.balance),
        "credit_limit": format_money(account.credit_limit),
        "available_credit": format_money(account.available_credit),
    }


def agency_fields(agency: Agency) -> dict[str, str]:
    return {
        "name": text_or(agency.name),
        "address": text_or(agency.address),
    }


def detail_fields(detail: ClientDetail) -> dict[str, Any]:
    """All display fields of a client detail."""
    return {
        "client": client_fields(detail.client),
        "accounts": [account_fields(a) for a in detail.accounts],
        "agency": agency_fields(detail.agency) if detail.agency else None,
    }
