"""System endpoints exposing service status."""

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, HTTPException, Request, status

from iothub_manager.application.dtos.health_dto import ApplicationStatusDTO
from iothub_manager.application.use_cases.health_use_cases import (
    GetApplicationStatusUseCase,
)
from iothub_manager.shared import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["System"])


@router.get("/status", response_model=ApplicationStatusDTO)
@inject
async def get_status(
    request: Request,
    get_application_status_use_case: GetApplicationStatusUseCase = Depends(
        Provide["get_application_status_use_case"]
    ),
) -> ApplicationStatusDTO:
    """
    Return service metadata and the IoT Hub dependency status.

    Answers 200 while the registry is unreachable; the outage is reported
    in ``status`` and ``dependencies``.
    """
    started_at = getattr(request.app.state, "started_at", None)
    try:
        status_response = await get_application_status_use_case.execute(started_at)
        logger.debug("status.retrieved", status=status_response.status.value)
        return status_response
    except Exception as exc:
        logger.error("status.fetch.failure", error=str(exc), exc_info=exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Unable to retrieve service status",
        ) from exc
