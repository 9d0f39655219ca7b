"""Decode raw feed rows into roster entities."""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Iterable, Optional, Union

from banestes.core.exceptions import FeedSchemaError
from banestes.core.locale import parse_currency, parse_date, parse_int
from banestes.core.logging import get_logger
from banestes.domain.entities.roster import Account, Agency, Client

logger = get_logger(__name__)

RawRow = dict[str, str]
Entity = Union[Client, Account, Agency]

ZERO = Decimal("0")


class FeedRows(list):
    """Raw rows of one feed, with the header they were read under.

    The header is kept so an empty feed can still be checked for its
    required columns.
    """

    def __init__(self, rows: Iterable[RawRow] = (), header: Optional[list[str]] = None):
        super().__init__(rows)
        self.header: list[str] = list(header) if header is not None else []


class EntityKind(str, Enum):
    """Feed entity kinds."""

    CLIENTS = "clients"
    ACCOUNTS = "accounts"
    AGENCIES = "agencies"


@dataclass(frozen=True)
class EntitySchema:
    """Columns an entity kind needs.

    Each entry of ``required`` is a group of alternative column names; at
    least one column of every group must be present.
    """

    kind: EntityKind
    required: tuple[tuple[str, ...], ...]

    def missing_columns(self, columns: Iterable[str]) -> list[str]:
        """Required groups not satisfied by ``columns``, as ``a|b`` labels."""
        present = set(columns)
        return [
            "|".join(group)
            for group in self.required
            if not any(name in present for name in group)
        ]


SCHEMAS: dict[EntityKind, EntitySchema] = {
    EntityKind.CLIENTS: EntitySchema(EntityKind.CLIENTS, (("id",), ("cpfCnpj", "rg"))),
    EntityKind.ACCOUNTS: EntitySchema(EntityKind.ACCOUNTS, (("id",), ("cpfCnpjCliente",))),
    EntityKind.AGENCIES: EntitySchema(EntityKind.AGENCIES, (("id",), ("codigo",))),
}


def dedupe_headers(header: list[str]) -> list[str]:
    """Rename repeated column names to ``name``, ``name_1``, ``name_2``...

    Column order is preserved and a generated name never collides with a
    column that already exists in the header.
    """
    taken = set(header)
    seen: set[str] = set()
    result: list[str] = []

    for name in header:
        if name not in seen:
            seen.add(name)
            result.append(name)
            continue

        suffix = 1
        candidate = f"{name}_{suffix}"
        while candidate in taken or candidate in seen:
            suffix += 1
            candidate = f"{name}_{suffix}"
        seen.add(candidate)
        result.append(candidate)

    return result


def _text(row: RawRow, column: str) -> Optional[str]:
    """Stripped cell text, None when absent or blank."""
    value = row.get(column)
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _money(row: RawRow, column: str) -> Decimal:
    """Currency cell, defaulting to zero when missing or unparseable."""
    value = parse_currency(row.get(column))
    return ZERO if value is None else value


class RowDecoder:
    """Decode raw rows of the clients, accounts and agencies feeds."""

    def validate_header(self, kind: EntityKind, columns: Iterable[str]) -> None:
        """Check a feed header against the entity schema.

        Raises:
            FeedSchemaError: If a required column is missing
        """
        missing = SCHEMAS[kind].missing_columns(columns)
        if missing:
            raise FeedSchemaError(
                f"Feed '{kind.value}' is missing required columns: {', '.join(missing)}",
                missing=missing,
                feed=kind.value,
            )

    # ============================================
    # Entities
    # ============================================

    def decode_client(self, row: RawRow) -> Client:
        """Decode one clients feed row."""
        return Client(
            id=_text(row, "id") or "",
            name=_text(row, "nome") or "",
            social_name=_text(row, "nomeSocial"),
            tax_id=_text(row, "cpfCnpj"),
            national_id=_text(row, "rg"),
            email=_text(row, "email"),
            birth_date=parse_date(row.get("dataNascimento")),
            marital_status=_text(row, "estadoCivil"),
            annual_income=_money(row, "rendaAnual"),
            net_worth=_money(row, "patrimonio"),
            agency_code=parse_int(row.get("codigoAgencia")),
            address=_text(row, "endereco"),
        )

    def decode_account(self, row: RawRow) -> Account:
        """Decode one accounts feed row."""
        return Account(
            id=_text(row, "id") or "",
            owner_tax_id=_text(row, "cpfCnpjCliente") or "",
            account_type=_text(row, "tipo") or "",
            balance=_money(row, "saldo"),
            credit_limit=_money(row, "limiteCredito"),
            available_credit=_money(row, "creditoDisponivel"),
        )

    def decode_agency(self, row: RawRow) -> Agency:
        """Decode one agencies feed row."""
        return Agency(
            id=_text(row, "id") or "",
            code=parse_int(row.get("codigo")),
            name=_text(row, "nome"),
            address=_text(row, "endereco"),
        )

    def decode(self, kind: EntityKind, row: RawRow) -> Entity:
        """Decode one row of the given kind."""
        if kind == EntityKind.CLIENTS:
            return self.decode_client(row)
        if kind == EntityKind.ACCOUNTS:
            return self.decode_account(row)
        return self.decode_agency(row)

    def decode_rows(
        self,
        kind: EntityKind,
        rows: list[RawRow],
        header: Optional[list[str]] = None,
    ) -> list[Any]:
        """Validate the header and decode every row of a feed.

        The header is taken from ``header``, then ``rows.header``, then the
        keys of the first row. Decoding is all-or-nothing: a schema failure
        rejects the whole feed and no partial collection is returned.

        Raises:
            FeedSchemaError: If a required column is missing
        """
        if header is None:
            header = getattr(rows, "header", None) or (list(rows[0]) if rows else None)

        if header is not None:
            self.validate_header(kind, header)

        entities = [self.decode(kind, row) for row in rows]

        logger.debug("Feed decoded", feed=kind.value, entities=len(entities))
        return entities
