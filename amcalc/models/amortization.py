from dataclasses import dataclass, field, replace
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum

TWO_PLACES = Decimal("0.01")


class PaymentFrequency(Enum):
    MONTHLY = "monthly"
    BIWEEKLY = "biweekly"
    WEEKLY = "weekly"
    SEMIMONTHLY = "semimonthly"
    QUARTERLY = "quarterly"
    SEMIANNUALLY = "semiannually"
    ANNUALLY = "annually"


class InvalidFrequency(ValueError):
    """Frequency is not one of the PaymentFrequency values (caller bug, not user input)."""

    def __init__(self, value: object):
        self.value = value
        valid = ", ".join(f.value for f in PaymentFrequency)
        super().__init__(f"Unknown payment frequency {value!r}; expected one of: {valid}")


@dataclass(frozen=True)
class ValidationError:
    field: str  # Wire name, e.g. "principal", "interestRate"
    message: str


class ValidationFailed(Exception):
    """Raised by calculate_amortization when inputs fail validation."""

    def __init__(self, errors: list[ValidationError]):
        self.errors = list(errors)
        super().__init__("Validation failed: " + ", ".join(e.message for e in self.errors))


@dataclass(frozen=True)
class AmortizationInputs:
    principal: Decimal  # Loan amount
    interest_rate: Decimal  # Annual rate in percent, e.g. Decimal("3.5")
    term_years: int
    payment_frequency: PaymentFrequency = PaymentFrequency.MONTHLY


@dataclass(frozen=True)
class ValidationResult:
    inputs: AmortizationInputs | None = None
    errors: list[ValidationError] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


def round_money(amount: Decimal) -> Decimal:
    return amount.quantize(TWO_PLACES, ROUND_HALF_UP)


@dataclass(frozen=True)
class PaymentRow:
    payment_number: int
    payment_amount: Decimal
    principal_payment: Decimal
    interest_payment: Decimal
    remaining_balance: Decimal

    def rounded(self) -> "PaymentRow":
        """Cent-rounded copy for display. The schedule itself is never rounded."""
        return replace(
            self,
            payment_amount=round_money(self.payment_amount),
            principal_payment=round_money(self.principal_payment),
            interest_payment=round_money(self.interest_payment),
            remaining_balance=round_money(self.remaining_balance),
        )


@dataclass(frozen=True)
class AmortizationSummary:
    principal: Decimal
    interest_rate: Decimal
    term_years: int
    number_of_payments: int
    payment_frequency: PaymentFrequency = PaymentFrequency.MONTHLY


@dataclass(frozen=True)
class AmortizationResult:
    payment_amount: Decimal  # Periodic payment
    total_interest: Decimal
    total_payments: Decimal  # Total paid over the life of the loan
    schedule: tuple[PaymentRow, ...]
    summary: AmortizationSummary


@dataclass(frozen=True)
class YearlySummary:
    year: int
    principal: Decimal
    interest: Decimal
    total_paid: Decimal
    ending_balance: Decimal
