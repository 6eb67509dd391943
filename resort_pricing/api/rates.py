"""Rate catalog routes."""
import logging
from datetime import date
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from prometheus_client import Counter, Histogram

from resort_pricing.domain.models import (
    AddModifierRequest,
    CreateRateRequest,
    PriceBreakdown,
    Rate,
    RateFilters,
    RateModifier,
    RateStats,
    RateType,
    UpdateRateRequest,
)
from resort_pricing.services.rate_service import RateService

from .dependencies import get_rate_service
from .errors import handle_errors

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/rates", tags=["rates"])

# Prometheus metrics
rate_requests_counter = Counter(
    "rate_requests_total", "Total number of rate catalog requests", ["operation", "status"]
)
price_calculation_duration = Histogram(
    "rate_price_calculation_duration_seconds", "Time spent calculating rate prices"
)


@router.get("", response_model=List[Rate])
async def list_rates(
    item_type: Optional[str] = None,
    item_id: Optional[UUID] = None,
    rate_type: Optional[RateType] = None,
    is_active: Optional[bool] = None,
    service: RateService = Depends(get_rate_service),
) -> List[Rate]:
    """List rates, highest priority first."""
    with handle_errors(rate_requests_counter, "list"):
        filters = RateFilters(
            item_type=item_type, item_id=item_id, rate_type=rate_type, is_active=is_active
        )
        return await service.list_rates(filters)


@router.post("", response_model=Rate, status_code=status.HTTP_201_CREATED)
async def create_rate(
    request: CreateRateRequest,
    service: RateService = Depends(get_rate_service),
) -> Rate:
    with handle_errors(rate_requests_counter, "create"):
        return await service.create_rate(request)


@router.get("/stats", response_model=RateStats)
async def get_stats(service: RateService = Depends(get_rate_service)) -> RateStats:
    with handle_errors(rate_requests_counter, "stats"):
        return await service.get_stats()


@router.get("/types", response_model=List[str])
async def get_rate_types(service: RateService = Depends(get_rate_service)) -> List[str]:
    return service.get_rate_types()


@router.get("/days-of-week", response_model=List[str])
async def get_days_of_week(service: RateService = Depends(get_rate_service)) -> List[str]:
    return service.get_days_of_week()


@router.get("/currencies", response_model=List[str])
async def get_currencies(service: RateService = Depends(get_rate_service)) -> List[str]:
    return service.get_currencies()


@router.get("/best", response_model=Optional[Rate])
async def get_best_rate(
    item_type: str,
    target_date: date = Query(..., alias="date"),
    item_id: Optional[str] = None,
    nights: Optional[int] = Query(None, ge=1),
    service: RateService = Depends(get_rate_service),
) -> Optional[Rate]:
    """Best matching rate, or null when none applies."""
    with handle_errors(rate_requests_counter, "best"):
        return await service.get_best_rate(item_type, item_id, target_date, nights)


@router.get("/calculate", response_model=PriceBreakdown)
async def calculate_price(
    item_type: str,
    target_date: date = Query(..., alias="date"),
    item_id: Optional[str] = None,
    nights: int = Query(1, ge=1),
    service: RateService = Depends(get_rate_service),
) -> PriceBreakdown:
    """Rate-based price for an item and stay.

    A zero breakdown with ``applied_rate`` null means no rate matched.
    """
    with handle_errors(rate_requests_counter, "calculate"):
        with price_calculation_duration.time():
            return await service.calculate_price(item_type, item_id, target_date, nights)


@router.delete("/modifiers/{modifier_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_modifier(
    modifier_id: str,
    service: RateService = Depends(get_rate_service),
) -> Response:
    with handle_errors(rate_requests_counter, "remove_modifier"):
        await service.remove_modifier(modifier_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{rate_id}", response_model=Rate)
async def get_rate(
    rate_id: str,
    service: RateService = Depends(get_rate_service),
) -> Rate:
    with handle_errors(rate_requests_counter, "get"):
        rate = await service.get_rate(rate_id)
        if rate is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail={"code": "RATE_NOT_FOUND", "message": f"Rate with id {rate_id} not found"},
            )
        return rate


@router.patch("/{rate_id}", response_model=Rate)
async def update_rate(
    rate_id: str,
    request: UpdateRateRequest,
    service: RateService = Depends(get_rate_service),
) -> Rate:
    """Partially update a rate; omitted fields are left unchanged."""
    with handle_errors(rate_requests_counter, "update"):
        return await service.update_rate(rate_id, request)


@router.delete("/{rate_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_rate(
    rate_id: str,
    service: RateService = Depends(get_rate_service),
) -> Response:
    """Soft-delete (deactivate) a rate."""
    with handle_errors(rate_requests_counter, "delete"):
        await service.delete_rate(rate_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{rate_id}/activate", response_model=Rate)
async def activate_rate(
    rate_id: str,
    service: RateService = Depends(get_rate_service),
) -> Rate:
    with handle_errors(rate_requests_counter, "activate"):
        return await service.activate_rate(rate_id)


@router.post("/{rate_id}/deactivate", response_model=Rate)
async def deactivate_rate(
    rate_id: str,
    service: RateService = Depends(get_rate_service),
) -> Rate:
    with handle_errors(rate_requests_counter, "deactivate"):
        return await service.deactivate_rate(rate_id)


@router.get("/{rate_id}/modifiers", response_model=List[RateModifier])
async def get_modifiers(
    rate_id: str,
    service: RateService = Depends(get_rate_service),
) -> List[RateModifier]:
    with handle_errors(rate_requests_counter, "get_modifiers"):
        return await service.get_modifiers(rate_id)


@router.post(
    "/{rate_id}/modifiers", response_model=RateModifier, status_code=status.HTTP_201_CREATED
)
async def add_modifier(
    rate_id: str,
    request: AddModifierRequest,
    service: RateService = Depends(get_rate_service),
) -> RateModifier:
    with handle_errors(rate_requests_counter, "add_modifier"):
        return await service.add_modifier(rate_id, request)
