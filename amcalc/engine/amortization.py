"""Amortization schedule computation.

Pure functions: numbers in, frozen dataclasses out. No I/O. Values are
carried as unrounded Decimals; rounding to cents happens only when a row or
total is presented (see PaymentRow.rounded / round_money).
"""

from decimal import Decimal, InvalidOperation

from amcalc.data.cache import CalculationCache, cache_key
from amcalc.models.amortization import (
    AmortizationInputs,
    AmortizationResult,
    AmortizationSummary,
    InvalidFrequency,
    PaymentFrequency,
    PaymentRow,
    ValidationError,
    ValidationFailed,
    ValidationResult,
    YearlySummary,
)

ZERO = Decimal("0")

MIN_PRINCIPAL = Decimal("1000")
MAX_PRINCIPAL = Decimal("10000000")
MIN_RATE = Decimal("0.1")
MAX_RATE = Decimal("25")
MIN_TERM_YEARS = 1
MAX_TERM_YEARS = 50

PERIODS_PER_YEAR: dict[PaymentFrequency, int] = {
    PaymentFrequency.MONTHLY: 12,
    PaymentFrequency.BIWEEKLY: 26,
    PaymentFrequency.WEEKLY: 52,
    PaymentFrequency.SEMIMONTHLY: 24,
    PaymentFrequency.QUARTERLY: 4,
    PaymentFrequency.SEMIANNUALLY: 2,
    PaymentFrequency.ANNUALLY: 1,
}


def parse_frequency(value: PaymentFrequency | str | None) -> PaymentFrequency:
    """Resolve a frequency enum or its string value. None means monthly."""
    if value is None:
        return PaymentFrequency.MONTHLY
    if isinstance(value, PaymentFrequency):
        return value
    try:
        return PaymentFrequency(value)
    except ValueError:
        raise InvalidFrequency(value) from None


def periods_per_year(frequency: PaymentFrequency | str) -> int:
    return PERIODS_PER_YEAR[parse_frequency(frequency)]


def _to_decimal(value: object) -> Decimal | None:
    """Convert a raw numeric input, or None if it is not a finite number."""
    if isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        d = value
    elif isinstance(value, (int, float, str)):
        try:
            d = Decimal(str(value).strip())
        except InvalidOperation:
            return None
    else:
        return None
    return d if d.is_finite() else None


def validate_inputs(
    principal: object,
    interest_rate: object,
    term_years: object,
    payment_frequency: PaymentFrequency | str | None = PaymentFrequency.MONTHLY,
) -> ValidationResult:
    """Check every field and collect all problems at once.

    Ordinary bad input never raises; it comes back in ValidationResult.errors.
    An unknown frequency raises InvalidFrequency since frequencies come from
    a closed set, not free text.
    """
    frequency = parse_frequency(payment_frequency)
    errors: list[ValidationError] = []

    p = _to_decimal(principal)
    if principal is None:
        errors.append(ValidationError("principal", "Principal is required"))
    elif p is None:
        errors.append(ValidationError("principal", "Principal must be a number"))
    elif p < MIN_PRINCIPAL:
        errors.append(ValidationError("principal", "Principal must be at least $1,000"))
    elif p > MAX_PRINCIPAL:
        errors.append(ValidationError("principal", "Principal cannot exceed $10,000,000"))

    r = _to_decimal(interest_rate)
    if interest_rate is None:
        errors.append(ValidationError("interestRate", "Interest rate is required"))
    elif r is None:
        errors.append(ValidationError("interestRate", "Interest rate must be a number"))
    elif r < MIN_RATE:
        errors.append(ValidationError("interestRate", "Interest rate must be at least 0.1%"))
    elif r > MAX_RATE:
        errors.append(ValidationError("interestRate", "Interest rate cannot exceed 25%"))

    t = _to_decimal(term_years)
    if term_years is None:
        errors.append(ValidationError("termYears", "Term is required"))
    elif t is None:
        errors.append(ValidationError("termYears", "Term must be a number"))
    else:
        if t != t.to_integral_value():
            errors.append(ValidationError("termYears", "Term must be a whole number"))
        if t < MIN_TERM_YEARS:
            errors.append(ValidationError("termYears", "Term must be at least 1 year"))
        elif t > MAX_TERM_YEARS:
            errors.append(ValidationError("termYears", "Term cannot exceed 50 years"))

    if errors:
        return ValidationResult(errors=errors)

    return ValidationResult(
        inputs=AmortizationInputs(
            principal=p,
            interest_rate=r,
            term_years=int(t),
            payment_frequency=frequency,
        )
    )


def period_rate(annual_rate: Decimal, frequency: PaymentFrequency | str) -> Decimal:
    """Per-period rate as a fraction, from an annual rate in percent."""
    return annual_rate / 100 / periods_per_year(frequency)


def compute_periodic_payment(
    principal: Decimal,
    annual_rate: Decimal,
    term_years: int,
    frequency: PaymentFrequency | str = PaymentFrequency.MONTHLY,
) -> Decimal:
    """Fixed periodic payment. Not rounded."""
    r = period_rate(annual_rate, frequency)
    n = term_years * periods_per_year(frequency)
    if r == 0:
        # Straight-line: the annuity formula divides by zero here
        return principal / n

    # PMT = P * [r(1+r)^n] / [(1+r)^n - 1]
    factor = (1 + r) ** n
    return principal * (r * factor) / (factor - 1)


def calculate_monthly_payment(
    principal: Decimal, interest_rate: Decimal, term_years: int
) -> Decimal:
    return compute_periodic_payment(principal, interest_rate, term_years, PaymentFrequency.MONTHLY)


def generate_schedule(
    principal: Decimal,
    rate: Decimal,
    n_periods: int,
    payment: Decimal,
) -> list[PaymentRow]:
    """Payment-by-payment breakdown for periods 1..n_periods.

    Args:
        principal: Opening loan balance
        rate: Per-period rate as a fraction (see period_rate)
        n_periods: Total number of payments
        payment: Fixed periodic payment (see compute_periodic_payment)
    """
    rows: list[PaymentRow] = []
    balance = principal

    for number in range(1, n_periods + 1):
        interest = balance * rate
        principal_paid = payment - interest
        actual_payment = payment

        # Final payment retires exactly what is left
        if number == n_periods or principal_paid > balance:
            principal_paid = balance
            actual_payment = principal_paid + interest
            balance = ZERO
        else:
            balance = max(ZERO, balance - principal_paid)

        rows.append(PaymentRow(
            payment_number=number,
            payment_amount=actual_payment,
            principal_payment=principal_paid,
            interest_payment=interest,
            remaining_balance=balance,
        ))

    return rows


def _build_result(inputs: AmortizationInputs) -> AmortizationResult:
    ppy = periods_per_year(inputs.payment_frequency)
    n = inputs.term_years * ppy
    payment = compute_periodic_payment(
        inputs.principal, inputs.interest_rate, inputs.term_years, inputs.payment_frequency
    )
    schedule = generate_schedule(
        inputs.principal, period_rate(inputs.interest_rate, inputs.payment_frequency), n, payment
    )

    total_payments = sum((row.payment_amount for row in schedule), ZERO)

    return AmortizationResult(
        payment_amount=payment,
        total_interest=total_payments - inputs.principal,
        total_payments=total_payments,
        schedule=tuple(schedule),
        summary=AmortizationSummary(
            principal=inputs.principal,
            interest_rate=inputs.interest_rate,
            term_years=inputs.term_years,
            number_of_payments=len(schedule),
            payment_frequency=inputs.payment_frequency,
        ),
    )


def calculate_amortization(
    inputs: AmortizationInputs,
    cache: CalculationCache | None = None,
) -> AmortizationResult:
    """Validate, compute payment and schedule, aggregate totals.

    Raises ValidationFailed with every field error if inputs are out of range.
    The optional cache only skips recomputation; results are identical without it.
    """
    validation = validate_inputs(
        inputs.principal, inputs.interest_rate, inputs.term_years, inputs.payment_frequency
    )
    if not validation.is_valid:
        raise ValidationFailed(validation.errors)

    key = cache_key(validation.inputs)
    if cache is not None:
        hit = cache.get(key)
        if hit is not None:
            return hit

    result = _build_result(validation.inputs)

    if cache is not None:
        cache.set(key, result)
    return result


def yearly_summary(result: AmortizationResult) -> list[YearlySummary]:
    """Aggregate a schedule by loan year."""
    ppy = periods_per_year(result.summary.payment_frequency)
    yearly: list[YearlySummary] = []
    year_principal = ZERO
    year_interest = ZERO
    year_paid = ZERO

    for row in result.schedule:
        year_principal += row.principal_payment
        year_interest += row.interest_payment
        year_paid += row.payment_amount

        if row.payment_number % ppy == 0 or row.payment_number == len(result.schedule):
            yearly.append(YearlySummary(
                year=(row.payment_number - 1) // ppy + 1,
                principal=year_principal,
                interest=year_interest,
                total_paid=year_paid,
                ending_balance=row.remaining_balance,
            ))
            year_principal = ZERO
            year_interest = ZERO
            year_paid = ZERO

    return yearly
