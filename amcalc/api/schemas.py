"""Pydantic schemas for API request/response models.

Wire names are camelCase (interestRate, termYears, ...); Python attributes
stay snake_case.
"""

from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer
from pydantic.alias_generators import to_camel

from amcalc.models.amortization import (
    AmortizationResult,
    PaymentFrequency,
    round_money,
)


# Exact Decimal internally, plain JSON number on the wire
Number = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---- Request schemas ----

class AmortizationRequest(CamelModel):
    # Range and number checks are done by the engine so every problem is
    # reported at once; strings like "abc" reach it instead of failing here
    principal: Decimal | str | None = Field(None, description="Loan amount, e.g. 200000")
    interest_rate: Decimal | str | None = Field(None, description="Annual rate in percent, e.g. 3.5")
    term_years: Decimal | str | None = Field(None, description="Loan term in whole years")
    payment_frequency: PaymentFrequency = PaymentFrequency.MONTHLY


# ---- Response schemas ----

class PaymentRowResponse(CamelModel):
    payment_number: int
    payment_amount: Number
    principal_payment: Number
    interest_payment: Number
    remaining_balance: Number


class SummaryResponse(CamelModel):
    principal: Number
    interest_rate: Number
    term_years: int
    number_of_payments: int
    payment_frequency: PaymentFrequency


class AmortizationResponse(CamelModel):
    payment_amount: Number
    total_interest: Number
    total_payments: Number
    schedule: list[PaymentRowResponse]
    summary: SummaryResponse

    @classmethod
    def from_result(cls, result: AmortizationResult) -> "AmortizationResponse":
        """Round money to cents for presentation."""
        s = result.summary
        return cls(
            payment_amount=round_money(result.payment_amount),
            total_interest=round_money(result.total_interest),
            total_payments=round_money(result.total_payments),
            schedule=[
                PaymentRowResponse(
                    payment_number=r.payment_number,
                    payment_amount=r.payment_amount,
                    principal_payment=r.principal_payment,
                    interest_payment=r.interest_payment,
                    remaining_balance=r.remaining_balance,
                )
                for r in (row.rounded() for row in result.schedule)
            ],
            summary=SummaryResponse(
                principal=s.principal,
                interest_rate=s.interest_rate,
                term_years=s.term_years,
                number_of_payments=s.number_of_payments,
                payment_frequency=s.payment_frequency,
            ),
        )


class CalculatorSuccessResponse(BaseModel):
    success: bool = True
    data: AmortizationResponse


class FieldErrorResponse(BaseModel):
    field: str
    message: str


class CalculatorErrorResponse(BaseModel):
    success: bool = False
    error: str
    errors: list[FieldErrorResponse] = []


class CacheStatsResponse(BaseModel):
    size: int
