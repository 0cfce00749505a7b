from fastapi import APIRouter, Depends
from podmanager.models.api import HealthResponse, PodSummary, PodsResponse
from podmanager.services.pod_service import PodManager
from podmanager.core.dependencies import get_pod_manager
from podmanager.routers.errors import http_error
from podmanager.errors import PodManagerError

router = APIRouter()


@router.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check():
    return HealthResponse(status="ok", message="Service is healthy")


@router.get("/pods", response_model=PodsResponse, tags=["Pods"])
async def list_pods(pod_manager: PodManager = Depends(get_pod_manager)):
    try:
        pods = await pod_manager.list_pods()
    except PodManagerError as e:
        raise http_error(e)
    return PodsResponse(
        total_pods=len(pods),
        pods=[
            PodSummary(
                name=pod.name,
                master=str(pod.master_address),
                replicas=len(pod.known_slaves),
                sentinels=len(pod.known_sentinels),
            )
            for pod in sorted(pods.values(), key=lambda p: p.name)
        ],
    )
