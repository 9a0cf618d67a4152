"""Calculator routes."""

from fastapi import APIRouter, Depends

from amcalc.api.deps import get_calculation_cache
from amcalc.api.schemas import (
    AmortizationRequest,
    AmortizationResponse,
    CacheStatsResponse,
    CalculatorSuccessResponse,
)
from amcalc.data.cache import CalculationCache
from amcalc.engine.amortization import calculate_amortization, validate_inputs
from amcalc.models.amortization import ValidationFailed

router = APIRouter(prefix="/api/v1/calculator", tags=["calculator"])


@router.post("/amortization", response_model=CalculatorSuccessResponse)
def amortization(
    req: AmortizationRequest,
    cache: CalculationCache | None = Depends(get_calculation_cache),
):
    """Payment amount, totals and full schedule for a fixed-rate loan.

    Runs in the threadpool; cache calls may block on Redis.

    Out-of-range inputs raise ValidationFailed, which the app turns into a 400
    listing every field error.
    """
    validation = validate_inputs(req.principal, req.interest_rate, req.term_years, req.payment_frequency)
    if not validation.is_valid:
        raise ValidationFailed(validation.errors)

    result = calculate_amortization(validation.inputs, cache=cache)
    return CalculatorSuccessResponse(data=AmortizationResponse.from_result(result))


@router.get("/cache", response_model=CacheStatsResponse)
def cache_stats(cache: CalculationCache | None = Depends(get_calculation_cache)):
    if cache is None:
        return CacheStatsResponse(size=0)
    return CacheStatsResponse(size=cache.stats().size)


@router.delete("/cache", response_model=CacheStatsResponse)
def clear_cache(cache: CalculationCache | None = Depends(get_calculation_cache)):
    if cache is not None:
        cache.clear()
    return CacheStatsResponse(size=0)
