import functools
import httpx
import logging

from podmanager.errors import PodNotFound, RegistryError

logger = logging.getLogger(__name__)


async def async_request(method: str, url: str, timeout: float = 5.0, **kwargs):
    async with httpx.AsyncClient(timeout=timeout) as client:
        response = await client.request(method, url, **kwargs)
        response.raise_for_status()
        return response.json()


def registry_error_wrapper(func):
    """Decorator turning HTTP failures of a registry call into RegistryError."""
    @functools.wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except httpx.HTTPStatusError as e:
            logger.error(f"Registry replied {e.response.status_code} in callable {func.__name__}: {e}")
            raise RegistryError(f"Registry replied {e.response.status_code} for {e.request.url}") from e
        except httpx.HTTPError as e:
            logger.error(f"HTTP error during request in callable {func.__name__}: {e}", exc_info=True)
            raise RegistryError(f"Registry request failed: {e}") from e
        except ValueError as e:
            logger.error(f"Registry sent an unreadable reply in callable {func.__name__}: {e}")
            raise RegistryError(f"Registry reply is not valid JSON: {e}") from e
    return wrapper


def pod_lookup_wrapper(func):
    """Decorator mapping a 404 on a single-pod lookup to PodNotFound."""
    @functools.wraps(func)
    async def wrapper(self, name: str, *args, **kwargs):
        try:
            return await func(self, name, *args, **kwargs)
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                raise PodNotFound(name) from e
            raise
    return wrapper


def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level.upper(), format='%(asctime)s - %(levelname)s - %(message)s')
