"""CLI application entry point."""

from pathlib import Path
from typing import Optional

import click
from dotenv import load_dotenv

from banestes import __version__
from banestes.core.exceptions import FeedError
from banestes.core.logging import configure_logging, get_logger
from banestes.core.session_store import InMemorySessionStore
from banestes.domain.services.client_directory import ClientDirectory
from banestes.infrastructure.external_apis.maps import MapsEmbed
from banestes.presentation.formatters import (
    CLIENT_NOT_FOUND,
    NO_ACCOUNTS,
    NO_AGENCY,
    client_row,
    detail_fields,
    empty_message,
)

# Load environment variables from .env file
dotenv_path = Path(__file__).parent.parent.parent / ".env"
load_dotenv(dotenv_path)

logger = get_logger(__name__)


def _directory() -> ClientDirectory:
    # One-shot commands have no session to resume
    return ClientDirectory(session_store=InMemorySessionStore())


@click.group()
@click.version_option(version=__version__)
@click.option("--log-level", default=None, help="Nível de log (DEBUG, INFO, WARNING...)")
def app(log_level: Optional[str]) -> None:
    """Banestes - Lista de clientes, contas e agências."""
    configure_logging(level=log_level)


@app.command(name="list")
@click.option("--search", default="", help="Buscar por nome ou CPF/CNPJ")
@click.option("--page", default=1, type=int, help="Página (10 clientes por página)")
def list_clients(search: str, page: int) -> None:
    """Lista os clientes em ordem alfabética."""
    directory = _directory()
    try:
        result = directory.list_clients(search_text=search, page=page)
    except FeedError as e:
        logger.error("Listing failed", feed=e.feed, error=str(e))
        click.echo(f"❌ Erro ao carregar clientes: {e}", err=True)
        raise click.Abort()
    finally:
        directory.feed_client.close()

    message = empty_message(result)
    if message:
        click.echo(message)
        return

    for client in result.items:
        row = client_row(client)
        click.echo(f"{row['id']:>6}  {row['name']:<40}  {row['document']}")

    click.echo(
        f"\nPágina {result.current_page} de {result.total_pages} "
        f"({result.filtered_count} de {result.total_count} clientes)"
    )


@app.command()
@click.argument("client_id")
def show(client_id: str) -> None:
    """Mostra os detalhes de um cliente, suas contas e agência."""
    directory = _directory()
    try:
        detail = directory.get_client_detail(client_id)
    except FeedError as e:
        logger.error("Detail failed", feed=e.feed, error=str(e))
        click.echo(f"❌ Erro ao carregar dados: {e}", err=True)
        raise click.Abort()
    finally:
        directory.feed_client.close()

    if detail is None:
        click.echo(CLIENT_NOT_FOUND, err=True)
        raise click.Abort()

    fields = detail_fields(detail)
    client = fields["client"]
    click.echo(client["name"])
    click.echo(client["email"])
    click.echo(client["document"])
    click.echo(f"Data de nascimento: {client['birth_date']}")
    click.echo(f"Renda anual: {client['annual_income']}")
    click.echo(f"Patrimônio: {client['net_worth']}")
    click.echo(f"Estado civil: {client['marital_status']}")

    click.echo("\nContas bancárias")
    if not fields["accounts"]:
        click.echo(f"   {NO_ACCOUNTS}")
    for account in fields["accounts"]:
        click.echo(f"   • Tipo: {account['type']}")
        click.echo(f"     Saldo: {account['balance']}")
        click.echo(f"     Limite de crédito: {account['credit_limit']}")
        click.echo(f"     Crédito disponível: {account['available_credit']}")

    click.echo("\nAgência")
    agency = fields["agency"]
    if agency is None:
        click.echo(f"   {NO_AGENCY}")
        return
    click.echo(f"   Nome: {agency['name']}")
    click.echo(f"   Endereço: {agency['address']}")

    map_url = MapsEmbed().url_for(detail.agency)
    if map_url:
        click.echo(f"   Mapa: {map_url}")


@app.command()
def summary() -> None:
    """Mostra o total de clientes e de contas corrente/poupança."""
    directory = _directory()
    try:
        result = directory.summary()
    except FeedError as e:
        logger.error("Summary failed", feed=e.feed, error=str(e))
        click.echo(f"❌ Erro ao carregar clientes: {e}", err=True)
        raise click.Abort()
    finally:
        directory.feed_client.close()

    def count(value: Optional[int]) -> str:
        return "indisponível" if value is None else str(value)

    click.echo(f"Total de Clientes: {result.total_clients}")
    click.echo(f"Contas Corrente: {count(result.checking_accounts)}")
    click.echo(f"Contas Poupança: {count(result.savings_accounts)}")


@app.command()
@click.option("--host", default="0.0.0.0", help="Host")
@click.option("--port", default=8000, type=int, help="Porta")
@click.option("--reload", is_flag=True, help="Recarrega ao alterar o código")
def serve(host: str, port: int, reload: bool) -> None:
    """Inicia a API HTTP."""
    import uvicorn

    click.echo(f"🚀 Iniciando API em http://{host}:{port}")
    uvicorn.run("banestes.api.main:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    app()
