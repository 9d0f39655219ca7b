"""API dependencies."""

from typing import Optional
from uuid import uuid4

from fastapi import Request, Response

from banestes.core.config import get_settings
from banestes.domain.services.client_directory import ClientDirectory
from banestes.infrastructure.external_apis.maps import MapsEmbed

# ---------------------------------------------------------------------------
# Process-wide singletons (created on first use, replaced in tests via
# app.dependency_overrides)
# ---------------------------------------------------------------------------
_directory: Optional[ClientDirectory] = None
_maps: Optional[MapsEmbed] = None


def get_directory() -> ClientDirectory:
    global _directory
    if _directory is None:
        _directory = ClientDirectory()
    return _directory


def get_maps() -> MapsEmbed:
    global _maps
    if _maps is None:
        settings = get_settings()
        _maps = MapsEmbed(verify=settings.maps_verify)
    return _maps


def close_dependencies() -> None:
    """Release the HTTP clients held by the singletons."""
    global _directory, _maps
    if _directory is not None:
        _directory.feed_client.close()
    _directory = None
    _maps = None


def get_session_id(request: Request, response: Response) -> str:
    """Session ID from the session cookie, issuing a new one if absent."""
    settings = get_settings()
    session_id = request.cookies.get(settings.session_cookie_name)
    if not session_id:
        session_id = uuid4().hex
        response.set_cookie(
            settings.session_cookie_name,
            session_id,
            httponly=True,
            samesite="lax",
        )
    return session_id


__all__ = ["get_directory", "get_maps", "get_session_id", "close_dependencies"]
