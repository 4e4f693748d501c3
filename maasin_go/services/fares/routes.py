from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from maasin_go.services.dependencies import get_fare_service
from maasin_go.services.fares.service import FareService
from maasin_go.shared.models.fare_dto import FaresResponse

router = APIRouter(tags=["fares"])


@router.get("/fares", response_model=FaresResponse)
async def get_fares(
    service: Annotated[FareService, Depends(get_fare_service)],
) -> FaresResponse:
    return FaresResponse(fares=await service.get_fares())
