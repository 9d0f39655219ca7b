"""Pytest configuration and fixtures."""

from typing import Any, Generator

import httpx
import pytest
from fastapi.testclient import TestClient

from banestes.api.dependencies import get_directory, get_maps
from banestes.api.main import app
from banestes.core.session_store import InMemorySessionStore
from banestes.domain.entities.roster import Client
from banestes.domain.services.client_directory import ClientDirectory
from banestes.infrastructure.external_apis.feed_client import FeedClient
from banestes.infrastructure.external_apis.maps import MapsEmbed


# =============================================================================
# Feed Data
# =============================================================================

FEED_URLS = {
    "clients": "https://feeds.test/clientes.csv",
    "accounts": "https://feeds.test/contas.csv",
    "agencies": "https://feeds.test/agencias.csv",
}

CLIENTS_CSV = """id,nome,nomeSocial,cpfCnpj,rg,dataNascimento,estadoCivil,rendaAnual,patrimonio,codigoAgencia,email,endereco
1,bruno Souza,,123.456.789-00,,1985-03-12,Solteiro,"R$ 85.000,00","R$ 250.000,50",10,bruno@email.com,"Rua A, 1"

2,Ana Lima,Aninha,987.654.321-00,,1990-07-01,Casada,"R$ 120.000,50",300000,20,ana@email.com,
3,Carla Dias,,,MG-12.345,,,,abc,30,,
"""

ACCOUNTS_CSV = """id,cpfCnpjCliente,tipo,saldo,limiteCredito,creditoDisponivel
a1,123.456.789-00,corrente,"R$ 1.234,56","R$ 5.000,00","R$ 3.765,44"
a2,999,poupanca,"R$ 10,00",0,0
a3,123.456.789-00,poupanca,,invalido,
a4,12345678900,corrente,1,1,1
"""

AGENCIES_CSV = """id,codigo,nome,endereco
ag1,10,Centro,"Av. Princesa Isabel, 574"
ag2,10,Duplicada,"Rua B, 2"
ag3,20,Praia do Canto,"Rua C, 3"
"""


def make_transport(responses: dict[str, Any]) -> httpx.MockTransport:
    """Mock transport serving CSV text per URL.

    A value may also be an httpx.Response, or an httpx.TransportError subclass
    to raise for that URL.
    """

    def handler(request: httpx.Request) -> httpx.Response:
        body = responses.get(str(request.url))
        if body is None:
            return httpx.Response(404, text="not found")
        if isinstance(body, type) and issubclass(body, httpx.TransportError):
            raise body("Connection refused", request=request)
        if isinstance(body, httpx.Response):
            return body
        return httpx.Response(200, content=body.encode("utf-8"))

    return httpx.MockTransport(handler)


def make_clients(names: list[str]) -> list[Client]:
    """Clients with sequential IDs and tax IDs."""
    return [
        Client(id=str(i), name=name, tax_id=f"{i:011d}")
        for i, name in enumerate(names, start=1)
    ]


# =============================================================================
# Feed Fixtures
# =============================================================================

@pytest.fixture
def feed_responses() -> dict[str, Any]:
    """URL to response body mapping; tests may replace entries."""
    return {
        FEED_URLS["clients"]: CLIENTS_CSV,
        FEED_URLS["accounts"]: ACCOUNTS_CSV,
        FEED_URLS["agencies"]: AGENCIES_CSV,
    }


@pytest.fixture
def feed_client(feed_responses: dict[str, Any]) -> Generator[FeedClient, None, None]:
    """FeedClient backed by the mock transport."""
    with FeedClient(timeout=5.0, max_workers=3, transport=make_transport(feed_responses)) as fc:
        yield fc


@pytest.fixture
def session_store() -> InMemorySessionStore:
    return InMemorySessionStore()


@pytest.fixture
def directory(feed_client: FeedClient, session_store: InMemorySessionStore) -> ClientDirectory:
    """ClientDirectory over the mock feeds, cache disabled."""
    return ClientDirectory(
        feed_client=feed_client,
        session_store=session_store,
        feed_urls=FEED_URLS,
        page_size=10,
        cache_ttl_seconds=0,
    )


# =============================================================================
# API Fixtures
# =============================================================================

@pytest.fixture
def client(directory: ClientDirectory) -> Generator[TestClient, None, None]:
    """FastAPI TestClient with directory and maps overrides."""
    app.dependency_overrides[get_directory] = lambda: directory
    app.dependency_overrides[get_maps] = lambda: MapsEmbed(api_key="test-key")

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
