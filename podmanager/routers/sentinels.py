import logging
from fastapi import APIRouter, Depends, status
from podmanager.errors import PodManagerError
from podmanager.models.api import QuorumResponse
from podmanager.services.pod_service import PodManager
from podmanager.core.dependencies import get_pod_manager
from podmanager.routers.errors import http_error, quorum_response

router = APIRouter(prefix="/pods/{name}", tags=["Sentinels"])
logger = logging.getLogger(__name__)


async def _run(pod_manager: PodManager, operation: str, name: str, message: str) -> QuorumResponse:
    try:
        result = await pod_manager.run_operation(operation, name)
    except PodManagerError as e:
        raise http_error(e, pod=name)
    logger.info(f"{message} for pod '{name}' ({result.tally()})")
    return quorum_response(name, result, message)


@router.post("/failover", response_model=QuorumResponse, status_code=status.HTTP_200_OK)
async def failover(name: str, pod_manager: PodManager = Depends(get_pod_manager)):
    return await _run(pod_manager, "failover", name, "Failover initiated")


@router.post("/reset", response_model=QuorumResponse, status_code=status.HTTP_200_OK)
async def reset(name: str, pod_manager: PodManager = Depends(get_pod_manager)):
    return await _run(pod_manager, "reset", name, "Reset initiated")


@router.get("/sentinels/validate", response_model=QuorumResponse, status_code=status.HTTP_200_OK)
async def validate_sentinels(name: str, pod_manager: PodManager = Depends(get_pod_manager)):
    return await _run(pod_manager, "validate-sentinels", name, "Sentinels validated")
