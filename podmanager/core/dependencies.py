from fastapi import Request
from podmanager.services.pod_service import PodManager


def get_pod_manager(request: Request) -> PodManager:
    return request.app.state.pod_manager