import logging
from fastapi import HTTPException, status

from podmanager.errors import (
    AuthCheckError,
    PodManagerError,
    PodNotFound,
    PreconditionError,
    QuorumError,
    RegistryError,
    RotationRolledBack,
)
from podmanager.models.api import AuthCheckResponse, QuorumResponse

logger = logging.getLogger(__name__)


def quorum_response(pod: str, result, message: str) -> QuorumResponse:
    return QuorumResponse(
        pod=pod,
        operation=result.operation,
        succeeded=result.succeeded,
        successes=result.successes,
        total=result.total,
        failures=result.failures,
        message=message,
    )


def http_error(e: PodManagerError, pod: str = "") -> HTTPException:
    """Maps a podmanager error to the HTTP error returned to the caller."""
    if isinstance(e, PodNotFound):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    if isinstance(e, PreconditionError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    if isinstance(e, QuorumError):
        body = quorum_response(pod, e.result, str(e))
        return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=body.model_dump())
    if isinstance(e, AuthCheckError):
        body = AuthCheckResponse(pod=pod, valid=False, results=e.results)
        return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=body.model_dump())
    if isinstance(e, RotationRolledBack):
        logger.error(f"Rotation rolled back for pod '{pod}': {e}")
        return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
    if isinstance(e, RegistryError):
        return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
