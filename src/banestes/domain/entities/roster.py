"""Roster domain entities: clients, accounts and agencies."""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from banestes.core.locale import UNKNOWN_DATE


class AccountType(str, Enum):
    """Account types seen in the accounts feed.

    The feed stores the type as free text, so ``Account.account_type`` is a
    plain string; these values are only used for summaries.
    """

    CORRENTE = "corrente"  # Checking
    POUPANCA = "poupanca"  # Savings


class Client(BaseModel):
    """Bank client decoded from the clients feed."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Client ID")
    name: str = Field(default="", description="Legal name (nome)")
    social_name: Optional[str] = Field(None, description="Preferred name (nomeSocial)")
    tax_id: Optional[str] = Field(None, description="CPF/CNPJ as written in the feed")
    national_id: Optional[str] = Field(None, description="RG, fallback document")
    email: Optional[str] = Field(None, description="Email")
    birth_date: date = Field(default=UNKNOWN_DATE, description="Birth date (dataNascimento)")
    marital_status: Optional[str] = Field(None, description="Marital status (estadoCivil)")
    annual_income: Decimal = Field(default=Decimal("0"), description="Annual income (rendaAnual)")
    net_worth: Decimal = Field(default=Decimal("0"), description="Net worth (patrimonio)")
    agency_code: int = Field(default=0, description="Owning agency code (codigoAgencia)")
    address: Optional[str] = Field(None, description="Address (endereco)")

    @property
    def display_name(self) -> str:
        """Social name when present, legal name otherwise."""
        return self.social_name or self.name


class Account(BaseModel):
    """Bank account decoded from the accounts feed."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Account ID")
    owner_tax_id: str = Field(..., description="Owner CPF/CNPJ (cpfCnpjCliente)")
    account_type: str = Field(default="", description="Account type (tipo), free text")
    balance: Decimal = Field(default=Decimal("0"), description="Balance (saldo)")
    credit_limit: Decimal = Field(default=Decimal("0"), description="Credit limit (limiteCredito)")
    available_credit: Decimal = Field(
        default=Decimal("0"), description="Available credit (creditoDisponivel)"
    )


class Agency(BaseModel):
    """Branch decoded from the agencies feed."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Agency ID")
    code: int = Field(..., description="Agency code (codigo)")
    name: Optional[str] = Field(None, description="Agency name")
    address: Optional[str] = Field(None, description="Agency address")


class ClientDetail(BaseModel):
    """A client joined with its accounts and branch agency."""

    model_config = ConfigDict(frozen=True)

    client: Client
    accounts: list[Account] = Field(default_factory=list)
    agency: Optional[Agency] = None


class RosterSummary(BaseModel):
    """Headline counts over the roster.

    Account counts are None when the accounts feed could not be loaded.
    """

    total_clients: int = 0
    checking_accounts: Optional[int] = None
    savings_accounts: Optional[int] = None
