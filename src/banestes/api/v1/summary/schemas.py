"""Pydantic schemas for the roster summary."""

from typing import Optional

from pydantic import BaseModel, Field


class SummaryResponse(BaseModel):
    """Headline roster counts."""

    total_clients: int = Field(..., description="Total de clientes")
    checking_accounts: Optional[int] = Field(None, description="Contas corrente")
    savings_accounts: Optional[int] = Field(None, description="Contas poupança")
