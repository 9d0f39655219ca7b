"""Pydantic schemas for clients."""

from datetime import date
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from banestes.core.locale import UNKNOWN_DATE
from banestes.domain.entities.roster import Account, Agency, Client


class ClientListItem(BaseModel):
    """Client as shown in the listing."""

    id: str
    name: str = Field(..., description="Nome do cliente")
    cpf_cnpj: Optional[str] = Field(None, description="CPF ou CNPJ")

    @classmethod
    def from_entity(cls, client: Client) -> "ClientListItem":
        return cls(id=client.id, name=client.name, cpf_cnpj=client.tax_id)


class ClientListResponse(BaseModel):
    """Schema for paginated list response."""

    items: list[ClientListItem]
    total: int = Field(..., description="Clientes que atendem à busca")
    total_clients: int = Field(..., description="Clientes no cadastro")
    page: int
    per_page: int
    pages: int
    search: str = ""
    empty_state: Optional[str] = Field(None, description="no_data ou no_results")
    message: Optional[str] = None


class ClientResponse(BaseModel):
    """Schema for client response."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    social_name: Optional[str] = None
    display_name: str
    cpf_cnpj: Optional[str] = Field(None, description="CPF ou CNPJ")
    rg: Optional[str] = None
    email: Optional[str] = None
    birth_date: Optional[date] = Field(None, description="Null quando não informada")
    marital_status: Optional[str] = None
    annual_income: Decimal
    net_worth: Decimal
    agency_code: int
    address: Optional[str] = None

    @classmethod
    def from_entity(cls, client: Client) -> "ClientResponse":
        return cls(
            id=client.id,
            name=client.name,
            social_name=client.social_name,
            display_name=client.display_name,
            cpf_cnpj=client.tax_id,
            rg=client.national_id,
            email=client.email,
            birth_date=None if client.birth_date == UNKNOWN_DATE else client.birth_date,
            marital_status=client.marital_status,
            annual_income=client.annual_income,
            net_worth=client.net_worth,
            agency_code=client.agency_code,
            address=client.address,
        )


class AccountResponse(BaseModel):
    """Schema for account response."""

    id: str
    account_type: str = Field(..., description="Tipo: corrente, poupanca, ...")
    balance: Decimal
    credit_limit: Decimal
    available_credit: Decimal

    @classmethod
    def from_entity(cls, account: Account) -> "AccountResponse":
        return cls(
            id=account.id,
            account_type=account.account_type,
            balance=account.balance,
            credit_limit=account.credit_limit,
            available_credit=account.available_credit,
        )


class AgencyResponse(BaseModel):
    """Schema for agency response."""

    id: str
    code: int
    name: Optional[str] = None
    address: Optional[str] = None

    @classmethod
    def from_entity(cls, agency: Agency) -> "AgencyResponse":
        return cls(id=agency.id, code=agency.code, name=agency.name, address=agency.address)


class ClientDetailResponse(BaseModel):
    """Client with its accounts, agency and pt-BR display text."""

    client: ClientResponse
    accounts: list[AccountResponse]
    agency: Optional[AgencyResponse] = None
    map_url: Optional[str] = None
    display: dict[str, Any] = Field(default_factory=dict)
