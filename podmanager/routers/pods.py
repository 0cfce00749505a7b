import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from podmanager.errors import PodManagerError
from podmanager.models.api import (
    AuthCheckResponse,
    CredentialRotationRequest,
    CredentialRotationResponse,
    QuorumResponse,
    TopologyResponse,
)
from podmanager.models.domain import PodConfig
from podmanager.services.pod_service import PodManager
from podmanager.core.dependencies import get_pod_manager
from podmanager.routers.errors import http_error, quorum_response

router = APIRouter(prefix="/pods/{name}", tags=["Pods"])
logger = logging.getLogger(__name__)


@router.get("", response_model=PodConfig, status_code=status.HTTP_200_OK)
async def pod_info(name: str, pod_manager: PodManager = Depends(get_pod_manager)):
    try:
        return await pod_manager.get_pod(name)
    except PodManagerError as e:
        raise http_error(e, pod=name)


@router.delete("", response_model=QuorumResponse, status_code=status.HTTP_200_OK)
async def remove_pod(name: str, pod_manager: PodManager = Depends(get_pod_manager)):
    try:
        result = await pod_manager.remove(name)
    except PodManagerError as e:
        raise http_error(e, pod=name)
    logger.info(f"Pod '{name}' removed from {result.tally()}")
    return quorum_response(name, result, "Pod removed from all sentinels")


@router.get("/auth", response_model=AuthCheckResponse, status_code=status.HTTP_200_OK)
async def check_auth(name: str, pod_manager: PodManager = Depends(get_pod_manager)):
    try:
        results = await pod_manager.check_auth(name)
    except PodManagerError as e:
        raise http_error(e, pod=name)
    return AuthCheckResponse(pod=name, valid=True, results=results)


@router.get("/topology", response_model=TopologyResponse, status_code=status.HTTP_200_OK)
async def topology(
    name: str,
    depth: Optional[int] = Query(None, ge=1, description="Expansion depth, defaults to the configured one"),
    full: bool = Query(False, description="Walk the full transitive closure"),
    pod_manager: PodManager = Depends(get_pod_manager),
):
    try:
        entangled = await pod_manager.walk_topology(name, depth=depth, full=full)
    except PodManagerError as e:
        raise http_error(e, pod=name)
    return TopologyResponse(
        pod=name,
        isolated=not entangled,
        depth=pod_manager.topology_depth(depth, full),
        entangled=[pod.name for pod in entangled],
    )


@router.post("/credential", response_model=CredentialRotationResponse, status_code=status.HTTP_200_OK)
async def rotate_credential(
    name: str,
    payload: CredentialRotationRequest,
    pod_manager: PodManager = Depends(get_pod_manager),
):
    try:
        report = await pod_manager.rotate_credential(name, payload.old_password, payload.new_password)
    except PodManagerError as e:
        raise http_error(e, pod=name)
    return CredentialRotationResponse(
        pod=name,
        complete=report.complete,
        replicas_updated=report.replicas_updated,
        replicas_total=report.replicas_total,
        sentinels_updated=report.sentinels_updated,
        sentinels_total=report.sentinels_total,
        stale_replicas=report.stale_replicas,
        stale_sentinels=report.stale_sentinels,
        message=report.summary(),
    )
