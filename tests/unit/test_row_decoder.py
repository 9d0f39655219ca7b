"""Tests for feed row decoding."""

from datetime import date
from decimal import Decimal

import pytest

from banestes.core.exceptions import FeedError, FeedSchemaError
from banestes.core.locale import UNKNOWN_DATE
from banestes.domain.entities.roster import Account, Agency, Client
from banestes.domain.services.row_decoder import (
    SCHEMAS,
    EntityKind,
    FeedRows,
    RowDecoder,
    dedupe_headers,
)


@pytest.fixture
def decoder() -> RowDecoder:
    return RowDecoder()


class TestDedupeHeaders:
    """Tests for duplicate column renaming."""

    def test_unique_headers_unchanged(self):
        """Test that a header without repeats is returned as is."""
        assert dedupe_headers(["id", "nome", "cpfCnpj"]) == ["id", "nome", "cpfCnpj"]

    def test_repeats_get_suffixes(self):
        """Test that repeated names get numeric suffixes in order."""
        assert dedupe_headers(["id", "nome", "nome", "nome"]) == ["id", "nome", "nome_1", "nome_2"]

    def test_suffix_skips_existing_column(self):
        """Test that a generated name never shadows a real column."""
        assert dedupe_headers(["a", "a", "a_1"]) == ["a", "a_2", "a_1"]


class TestEntitySchema:
    """Tests for required column groups."""

    def test_alternative_columns(self):
        """Test that either cpfCnpj or rg satisfies the clients schema."""
        schema = SCHEMAS[EntityKind.CLIENTS]
        assert schema.missing_columns(["id", "cpfCnpj"]) == []
        assert schema.missing_columns(["id", "rg"]) == []
        assert schema.missing_columns(["id", "nome"]) == ["cpfCnpj|rg"]

    def test_all_missing(self):
        """Test that every unsatisfied group is reported."""
        assert SCHEMAS[EntityKind.ACCOUNTS].missing_columns([]) == ["id", "cpfCnpjCliente"]


class TestValidateHeader:
    """Tests for RowDecoder.validate_header."""

    def test_valid_header(self, decoder):
        """Test that a complete header passes."""
        decoder.validate_header(EntityKind.AGENCIES, ["id", "codigo", "nome", "endereco"])

    def test_missing_column_raises(self, decoder):
        """Test that a missing column raises FeedSchemaError."""
        with pytest.raises(FeedSchemaError) as exc_info:
            decoder.validate_header(EntityKind.AGENCIES, ["id", "nome"])

        error = exc_info.value
        assert error.feed == "agencies"
        assert error.missing == ["codigo"]
        assert "codigo" in str(error)

    def test_schema_error_is_feed_error(self, decoder):
        """Test that schema failures are handled like any feed failure."""
        with pytest.raises(FeedError):
            decoder.validate_header(EntityKind.CLIENTS, ["nome"])


class TestDecodeClient:
    """Tests for RowDecoder.decode_client."""

    def test_full_row(self, decoder):
        """Test that every column is mapped and parsed."""
        client = decoder.decode_client({
            "id": "1",
            "nome": "Ana Lima",
            "nomeSocial": "Aninha",
            "cpfCnpj": "987.654.321-00",
            "rg": "MG-1",
            "dataNascimento": "1990-07-01",
            "estadoCivil": "Casada",
            "rendaAnual": "R$ 120.000,50",
            "patrimonio": "300000",
            "codigoAgencia": "20",
            "email": "ana@email.com",
            "endereco": "Rua C, 3",
        })

        assert isinstance(client, Client)
        assert client.id == "1"
        assert client.name == "Ana Lima"
        assert client.social_name == "Aninha"
        assert client.display_name == "Aninha"
        assert client.tax_id == "987.654.321-00"
        assert client.national_id == "MG-1"
        assert client.birth_date == date(1990, 7, 1)
        assert client.marital_status == "Casada"
        assert client.annual_income == Decimal("120000.50")
        assert client.net_worth == Decimal("300000")
        assert client.agency_code == 20
        assert client.email == "ana@email.com"
        assert client.address == "Rua C, 3"

    def test_blank_and_missing_cells(self, decoder):
        """Test that blank cells become None or the field default."""
        client = decoder.decode_client({"id": " 7 ", "nome": "", "cpfCnpj": "   "})

        assert client.id == "7"
        assert client.name == ""
        assert client.tax_id is None
        assert client.social_name is None
        assert client.birth_date == UNKNOWN_DATE
        assert client.annual_income == Decimal("0")
        assert client.net_worth == Decimal("0")
        assert client.agency_code == 0

    def test_invalid_values_use_defaults(self, decoder):
        """Test that unparseable money, dates and codes never fail the row."""
        client = decoder.decode_client({
            "id": "3",
            "rg": "MG-12.345",
            "patrimonio": "abc",
            "dataNascimento": "não sei",
            "codigoAgencia": "dez",
        })

        assert client.national_id == "MG-12.345"
        assert client.net_worth == Decimal("0")
        assert client.birth_date == UNKNOWN_DATE
        assert client.agency_code == 0


class TestDecodeAccountAndAgency:
    """Tests for account and agency rows."""

    def test_account(self, decoder):
        """Test account column mapping."""
        account = decoder.decode_account({
            "id": "a1",
            "cpfCnpjCliente": "123.456.789-00",
            "tipo": "corrente",
            "saldo": "R$ 1.234,56",
            "limiteCredito": "invalido",
            "creditoDisponivel": "",
        })

        assert isinstance(account, Account)
        assert account.owner_tax_id == "123.456.789-00"
        assert account.account_type == "corrente"
        assert account.balance == Decimal("1234.56")
        assert account.credit_limit == Decimal("0")
        assert account.available_credit == Decimal("0")

    def test_agency(self, decoder):
        """Test agency column mapping."""
        agency = decoder.decode_agency({"id": "ag1", "codigo": "10", "nome": "Centro", "endereco": ""})

        assert isinstance(agency, Agency)
        assert agency.code == 10
        assert agency.name == "Centro"
        assert agency.address is None

    def test_decode_dispatches_by_kind(self, decoder):
        """Test that decode picks the decoder for the kind."""
        row = {"id": "x", "codigo": "1", "cpfCnpjCliente": "1"}
        assert isinstance(decoder.decode(EntityKind.AGENCIES, row), Agency)
        assert isinstance(decoder.decode(EntityKind.ACCOUNTS, row), Account)
        assert isinstance(decoder.decode(EntityKind.CLIENTS, row), Client)


class TestDecodeRows:
    """Tests for RowDecoder.decode_rows."""

    def test_decodes_in_feed_order(self, decoder):
        """Test that entities keep row order."""
        rows = FeedRows(
            [{"id": "2", "codigo": "20"}, {"id": "1", "codigo": "10"}],
            header=["id", "codigo"],
        )

        agencies = decoder.decode_rows(EntityKind.AGENCIES, rows)

        assert [a.id for a in agencies] == ["2", "1"]

    def test_empty_feed_with_header_is_validated(self, decoder):
        """Test that a header-only feed still needs its required columns."""
        assert decoder.decode_rows(EntityKind.CLIENTS, FeedRows([], header=["id", "rg"])) == []

        with pytest.raises(FeedSchemaError):
            decoder.decode_rows(EntityKind.CLIENTS, FeedRows([], header=["id", "nome"]))

    def test_header_from_first_row(self, decoder):
        """Test that plain row lists are validated by their keys."""
        with pytest.raises(FeedSchemaError):
            decoder.decode_rows(EntityKind.ACCOUNTS, [{"id": "a1", "tipo": "corrente"}])

    def test_explicit_header_wins(self, decoder):
        """Test that an explicit header overrides the rows."""
        rows = [{"id": "a1", "cpfCnpjCliente": "1"}]

        with pytest.raises(FeedSchemaError):
            decoder.decode_rows(EntityKind.ACCOUNTS, rows, header=["id"])

    def test_no_header_information(self, decoder):
        """Test that an empty list without header decodes to nothing."""
        assert decoder.decode_rows(EntityKind.AGENCIES, []) == []
