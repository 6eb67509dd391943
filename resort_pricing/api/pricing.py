"""Seasonal and dynamic pricing routes."""
import logging
from typing import Dict, List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from prometheus_client import Counter, Histogram

from resort_pricing.domain.models import (
    AdjustedPrice,
    AdjustedPriceRequest,
    CreateSeasonalRuleRequest,
    DynamicPricingConfig,
    PricingCalendarRequest,
    SeasonalRule,
    UpdateSeasonalRuleRequest,
    WeekendPricingConfig,
)
from resort_pricing.services.seasonal_pricing_service import SeasonalPricingService

from .dependencies import get_seasonal_pricing_service
from .errors import handle_errors

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/pricing", tags=["pricing"])

# Prometheus metrics
pricing_requests_counter = Counter(
    "pricing_requests_total", "Total number of pricing requests", ["operation", "status"]
)
adjustment_duration = Histogram(
    "pricing_adjustment_duration_seconds", "Time spent computing adjusted prices"
)


@router.get("/seasonal-rules", response_model=List[SeasonalRule])
async def list_seasonal_rules(
    service: SeasonalPricingService = Depends(get_seasonal_pricing_service),
) -> List[SeasonalRule]:
    with handle_errors(pricing_requests_counter, "list_rules"):
        return await service.list_seasonal_rules()


@router.post(
    "/seasonal-rules", response_model=SeasonalRule, status_code=status.HTTP_201_CREATED
)
async def create_seasonal_rule(
    request: CreateSeasonalRuleRequest,
    service: SeasonalPricingService = Depends(get_seasonal_pricing_service),
) -> SeasonalRule:
    with handle_errors(pricing_requests_counter, "create_rule"):
        return await service.create_seasonal_rule(request)


@router.get("/seasonal-rules/{rule_id}", response_model=SeasonalRule)
async def get_seasonal_rule(
    rule_id: UUID,
    service: SeasonalPricingService = Depends(get_seasonal_pricing_service),
) -> SeasonalRule:
    with handle_errors(pricing_requests_counter, "get_rule"):
        return await service.get_seasonal_rule(rule_id)


@router.patch("/seasonal-rules/{rule_id}", response_model=SeasonalRule)
async def update_seasonal_rule(
    rule_id: UUID,
    request: UpdateSeasonalRuleRequest,
    service: SeasonalPricingService = Depends(get_seasonal_pricing_service),
) -> SeasonalRule:
    with handle_errors(pricing_requests_counter, "update_rule"):
        return await service.update_seasonal_rule(rule_id, request)


@router.delete("/seasonal-rules/{rule_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_seasonal_rule(
    rule_id: UUID,
    service: SeasonalPricingService = Depends(get_seasonal_pricing_service),
) -> Response:
    with handle_errors(pricing_requests_counter, "delete_rule"):
        await service.delete_seasonal_rule(rule_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/dynamic-config", response_model=DynamicPricingConfig)
async def get_dynamic_config(
    domain: Optional[str] = None,
    service: SeasonalPricingService = Depends(get_seasonal_pricing_service),
) -> DynamicPricingConfig:
    """Dynamic config for a pricing domain (category), or the default one."""
    with handle_errors(pricing_requests_counter, "get_dynamic_config"):
        return await service.get_dynamic_config(domain)


@router.put("/dynamic-config", response_model=DynamicPricingConfig)
async def replace_dynamic_config(
    config: DynamicPricingConfig,
    domain: Optional[str] = None,
    service: SeasonalPricingService = Depends(get_seasonal_pricing_service),
) -> DynamicPricingConfig:
    with handle_errors(pricing_requests_counter, "replace_dynamic_config"):
        return await service.replace_dynamic_config(domain, config)


@router.get("/weekend-config", response_model=WeekendPricingConfig)
async def get_weekend_config(
    service: SeasonalPricingService = Depends(get_seasonal_pricing_service),
) -> WeekendPricingConfig:
    with handle_errors(pricing_requests_counter, "get_weekend_config"):
        return await service.get_weekend_config()


@router.put("/weekend-config", response_model=WeekendPricingConfig)
async def replace_weekend_config(
    config: WeekendPricingConfig,
    service: SeasonalPricingService = Depends(get_seasonal_pricing_service),
) -> WeekendPricingConfig:
    with handle_errors(pricing_requests_counter, "replace_weekend_config"):
        return await service.replace_weekend_config(config)


@router.post("/calculate", response_model=AdjustedPrice)
async def calculate_adjusted_price(
    request: AdjustedPriceRequest,
    service: SeasonalPricingService = Depends(get_seasonal_pricing_service),
) -> AdjustedPrice:
    """Seasonal, weekend and dynamic adjustments for one date."""
    with handle_errors(pricing_requests_counter, "calculate"):
        with adjustment_duration.time():
            return await service.calculate_adjusted_price(
                request.category,
                request.item_id,
                request.base_price,
                request.target_date,
                occupancy=request.occupancy,
            )


@router.post("/calendar", response_model=Dict[str, AdjustedPrice])
async def get_pricing_calendar(
    request: PricingCalendarRequest,
    service: SeasonalPricingService = Depends(get_seasonal_pricing_service),
) -> Dict[str, AdjustedPrice]:
    """Adjusted prices keyed by ISO date for an inclusive date range."""
    with handle_errors(pricing_requests_counter, "calendar"):
        calendar = await service.get_pricing_calendar(
            request.category,
            request.item_id,
            request.base_price,
            request.start_date,
            request.end_date,
        )
        return {day.isoformat(): price for day, price in calendar.items()}
