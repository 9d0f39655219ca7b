"""Map provider access for agency locations."""

import threading
from enum import Enum
from typing import Callable, Optional
from urllib.parse import quote

import httpx

from banestes.core.config import get_settings
from banestes.core.exceptions import ResourceLoadError
from banestes.core.logging import get_logger
from banestes.domain.entities.roster import Agency

logger = get_logger(__name__)

MAPS_SCRIPT_URL = "https://maps.googleapis.com/maps/api/js"


class ResourceState(str, Enum):
    """Load state of an external resource."""

    UNLOADED = "unloaded"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


class ResourceLoader:
    """One-time loader for an external resource.

    Transitions: ``unloaded -> loading -> ready | failed``. The loader is
    owned by whoever needs the resource and a failure is final for that
    loader.
    """

    def __init__(self, load_fn: Callable[[], None], name: str = "resource") -> None:
        self.name = name
        self._load_fn = load_fn
        self._state = ResourceState.UNLOADED
        self._error: Optional[Exception] = None
        self._lock = threading.Lock()

    @property
    def state(self) -> ResourceState:
        return self._state

    @property
    def error(self) -> Optional[Exception]:
        return self._error

    @property
    def is_ready(self) -> bool:
        return self._state == ResourceState.READY

    def load(self) -> ResourceState:
        """Load the resource once; later calls return the settled state."""
        with self._lock:
            if self._state != ResourceState.UNLOADED:
                return self._state
            self._state = ResourceState.LOADING

        try:
            self._load_fn()
        except Exception as e:
            logger.warning("Resource failed to load", resource=self.name, error=str(e))
            with self._lock:
                self._state = ResourceState.FAILED
                self._error = e
            return ResourceState.FAILED

        with self._lock:
            self._state = ResourceState.READY
        logger.info("Resource loaded", resource=self.name)
        return ResourceState.READY


class MapsEmbed:
    """Builds map embed URLs for agencies once the provider is ready."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        embed_url: Optional[str] = None,
        verify: bool = False,
        http_client: Optional[httpx.Client] = None,
    ) -> None:
        """Initialize maps embed.

        Args:
            api_key: Provider key (from settings if not provided)
            embed_url: Embed endpoint (from settings if not provided)
            verify: Check the provider script URL while loading
            http_client: Client used for the check
        """
        settings = get_settings()
        self.api_key = api_key if api_key is not None else settings.maps_api_key
        self.embed_url = embed_url or settings.maps_embed_url
        self.verify = verify
        self.http_client = http_client
        self.loader = ResourceLoader(self._load, name="maps")

    def _load(self) -> None:
        if not self.api_key:
            raise ResourceLoadError("Maps API key not configured")
        if not self.verify:
            return

        client = self.http_client or httpx.Client(timeout=10.0)
        try:
            response = client.get(MAPS_SCRIPT_URL, params={"key": self.api_key})
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise ResourceLoadError(f"Falha ao carregar a API do Google Maps: {e}") from e
        finally:
            if self.http_client is None:
                client.close()

    def url_for(self, agency: Optional[Agency]) -> Optional[str]:
        """Embed URL for the agency, or None when no map can be shown."""
        if agency is None or not agency.address:
            return None
        if self.loader.load() != ResourceState.READY:
            return None

        place = quote(f"Banestes {agency.name or ''}, {agency.address}", safe="")
        return f"{self.embed_url}?key={quote(self.api_key, safe='')}&q={place}"
