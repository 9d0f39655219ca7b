"""Tests for the map provider loader and embed URLs."""

from unittest.mock import MagicMock
from urllib.parse import quote

import httpx

from banestes.core.exceptions import ResourceLoadError
from banestes.domain.entities.roster import Agency
from banestes.infrastructure.external_apis.maps import (
    MAPS_SCRIPT_URL,
    MapsEmbed,
    ResourceLoader,
    ResourceState,
)

EMBED_URL = "https://maps.test/embed"
AGENCY = Agency(id="ag1", code=10, name="Centro", address="Av. Princesa Isabel, 574")


def provider_client(status_code: int) -> httpx.Client:
    def handler(request: httpx.Request) -> httpx.Response:
        assert str(request.url).startswith(MAPS_SCRIPT_URL)
        return httpx.Response(status_code, text="")

    return httpx.Client(transport=httpx.MockTransport(handler))


class TestResourceLoader:
    """Tests for ResourceLoader state transitions."""

    def test_starts_unloaded(self):
        """Test the initial state."""
        loader = ResourceLoader(MagicMock())

        assert loader.state == ResourceState.UNLOADED
        assert not loader.is_ready

    def test_loads_once(self):
        """Test that a ready loader does not load again."""
        load_fn = MagicMock()
        loader = ResourceLoader(load_fn)

        assert loader.load() == ResourceState.READY
        assert loader.load() == ResourceState.READY
        assert loader.is_ready
        load_fn.assert_called_once()

    def test_failure_is_sticky(self):
        """Test that a failed load stays failed."""
        load_fn = MagicMock(side_effect=ResourceLoadError("sem chave"))
        loader = ResourceLoader(load_fn)

        assert loader.load() == ResourceState.FAILED
        assert loader.load() == ResourceState.FAILED
        assert isinstance(loader.error, ResourceLoadError)
        load_fn.assert_called_once()


class TestMapsEmbed:
    """Tests for MapsEmbed.url_for."""

    def test_embed_url(self):
        """Test the URL built for an agency."""
        maps = MapsEmbed(api_key="test-key", embed_url=EMBED_URL)

        url = maps.url_for(AGENCY)

        expected_q = quote("Banestes Centro, Av. Princesa Isabel, 574", safe="")
        assert url == f"{EMBED_URL}?key=test-key&q={expected_q}"
        assert maps.loader.is_ready

    def test_no_agency_or_address(self):
        """Test that nothing is built without an address."""
        maps = MapsEmbed(api_key="test-key", embed_url=EMBED_URL)

        assert maps.url_for(None) is None
        assert maps.url_for(Agency(id="ag2", code=20, name="Sem endereço")) is None
        assert maps.loader.state == ResourceState.UNLOADED

    def test_missing_key_fails(self):
        """Test that an unconfigured key degrades to no map."""
        maps = MapsEmbed(api_key="", embed_url=EMBED_URL)

        assert maps.url_for(AGENCY) is None
        assert maps.loader.state == ResourceState.FAILED

    def test_verified_provider(self):
        """Test that a reachable provider script makes the loader ready."""
        maps = MapsEmbed(api_key="test-key", embed_url=EMBED_URL, verify=True, http_client=provider_client(200))

        assert maps.url_for(AGENCY) is not None

    def test_unreachable_provider(self):
        """Test that an unreachable provider script degrades to no map."""
        maps = MapsEmbed(api_key="test-key", embed_url=EMBED_URL, verify=True, http_client=provider_client(403))

        assert maps.url_for(AGENCY) is None
        assert isinstance(maps.loader.error, ResourceLoadError)
