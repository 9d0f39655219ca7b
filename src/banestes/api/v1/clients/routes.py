"""Client routes."""

import asyncio
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response

from banestes.api.dependencies import get_directory, get_maps, get_session_id
from banestes.core.exceptions import FeedError
from banestes.core.logging import get_logger
from banestes.domain.services.client_directory import ClientDirectory, FetchCycle
from banestes.infrastructure.external_apis.maps import MapsEmbed
from banestes.presentation.formatters import CLIENT_NOT_FOUND, detail_fields, empty_message

from .schemas import (
    AccountResponse,
    AgencyResponse,
    ClientDetailResponse,
    ClientListItem,
    ClientListResponse,
    ClientResponse,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/clients", tags=["Clients"])

# Non-standard status used when the client went away before the response
CLIENT_CLOSED_REQUEST = 499


def feed_unavailable(error: FeedError) -> HTTPException:
    """502 for a feed that could not be loaded or decoded."""
    logger.error("Feed unavailable", feed=error.feed, url=error.url, error=str(error))
    return HTTPException(
        status_code=502,
        detail=f"Não foi possível carregar os dados ({error.feed or 'feed'})",
    )


async def cancel_on_disconnect(request: Request, cycle: FetchCycle, interval: float = 0.1) -> None:
    """Cancel ``cycle`` as soon as the client behind ``request`` disconnects."""
    while cycle.alive:
        if await request.is_disconnected():
            cycle.cancel()
            return
        await asyncio.sleep(interval)


@router.get("", response_model=ClientListResponse)
def list_clients(
    search: Optional[str] = Query(None, description="Buscar por nome ou CPF/CNPJ"),
    page: Optional[int] = Query(None, description="Página"),
    directory: ClientDirectory = Depends(get_directory),
    session_id: str = Depends(get_session_id),
):
    """List clients sorted by name, with search and pagination.

    Search text and page are kept per session; omitted parameters reuse the
    last values of the session.
    """
    try:
        result = directory.list_clients(search_text=search, page=page, session_id=session_id)
    except FeedError as e:
        raise feed_unavailable(e)

    return ClientListResponse(
        items=[ClientListItem.from_entity(c) for c in result.items],
        total=result.filtered_count,
        total_clients=result.total_count,
        page=result.current_page,
        per_page=result.page_size,
        pages=result.total_pages,
        search=result.search_text,
        empty_state=result.empty_state.value if result.empty_state else None,
        message=empty_message(result),
    )


@router.get("/{client_id}", response_model=ClientDetailResponse)
async def get_client(
    client_id: str,
    request: Request,
    directory: ClientDirectory = Depends(get_directory),
    maps: MapsEmbed = Depends(get_maps),
):
    """Get client by ID with accounts and agency.

    The feeds are fetched off the event loop; if the caller disconnects
    meanwhile, the result is discarded.
    """
    cycle = FetchCycle()
    watcher = asyncio.create_task(cancel_on_disconnect(request, cycle))
    try:
        detail = await asyncio.to_thread(directory.get_client_detail, client_id, cycle)
    except FeedError as e:
        raise feed_unavailable(e)
    finally:
        watcher.cancel()

    if not cycle.alive:
        logger.info("Client disconnected before detail was ready", client_id=client_id)
        return Response(status_code=CLIENT_CLOSED_REQUEST)

    if detail is None:
        raise HTTPException(status_code=404, detail=CLIENT_NOT_FOUND)

    return ClientDetailResponse(
        client=ClientResponse.from_entity(detail.client),
        accounts=[AccountResponse.from_entity(a) for a in detail.accounts],
        agency=AgencyResponse.from_entity(detail.agency) if detail.agency else None,
        map_url=await asyncio.to_thread(maps.url_for, detail.agency),
        display=detail_fields(detail),
    )
