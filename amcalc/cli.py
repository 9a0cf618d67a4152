"""CLI for the amortization calculator.

Usage:
    python -m amcalc.cli 200000 3.5 30
    python -m amcalc.cli 200000 3.5 30 --frequency biweekly --yearly
    python -m amcalc.cli 100000 5 10 --schedule
"""

import argparse
import logging
import sys

from amcalc.config import settings
from amcalc.engine.amortization import calculate_amortization, validate_inputs, yearly_summary
from amcalc.models.amortization import (
    AmortizationResult,
    PaymentFrequency,
    round_money,
)


def print_summary(result: AmortizationResult) -> None:
    s = result.summary
    print(f"\n{'=' * 60}")
    print(f"  Loan: ${s.principal:,.2f} at {s.interest_rate}% for {s.term_years} years")
    print(f"{'=' * 60}")
    print(f"  Frequency:          {s.payment_frequency.value}")
    print(f"  Payment:            ${round_money(result.payment_amount):,.2f}")
    print(f"  Number of payments: {s.number_of_payments}")
    print(f"  Total interest:     ${round_money(result.total_interest):,.2f}")
    print(f"  Total paid:         ${round_money(result.total_payments):,.2f}")
    print()


def print_schedule(result: AmortizationResult) -> None:
    print(f"  {'#':>5}  {'Payment':>12}  {'Principal':>12}  {'Interest':>12}  {'Balance':>14}")
    for row in result.schedule:
        r = row.rounded()
        print(
            f"  {r.payment_number:>5}  {r.payment_amount:>12,.2f}  {r.principal_payment:>12,.2f}"
            f"  {r.interest_payment:>12,.2f}  {r.remaining_balance:>14,.2f}"
        )
    print()


def print_yearly(result: AmortizationResult) -> None:
    print(f"  {'Year':>5}  {'Principal':>12}  {'Interest':>12}  {'Paid':>12}  {'Balance':>14}")
    for y in yearly_summary(result):
        print(
            f"  {y.year:>5}  {round_money(y.principal):>12,.2f}  {round_money(y.interest):>12,.2f}"
            f"  {round_money(y.total_paid):>12,.2f}  {round_money(y.ending_balance):>14,.2f}"
        )
    print()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Loan amortization calculator")
    parser.add_argument("principal", help="Loan amount, e.g. 200000")
    parser.add_argument("interest_rate", help="Annual interest rate in percent, e.g. 3.5")
    parser.add_argument("term_years", help="Loan term in years")
    parser.add_argument(
        "--frequency",
        choices=[f.value for f in PaymentFrequency],
        default=PaymentFrequency.MONTHLY.value,
        help="Payment frequency (default: monthly)",
    )
    parser.add_argument("--schedule", action="store_true", help="Print every payment")
    parser.add_argument("--yearly", action="store_true", help="Print a per-year roll-up")
    args = parser.parse_args(argv)

    logging.basicConfig(level=settings.log_level)

    validation = validate_inputs(args.principal, args.interest_rate, args.term_years, args.frequency)
    if not validation.is_valid:
        for err in validation.errors:
            print(f"  {err.field}: {err.message}", file=sys.stderr)
        return 2

    result = calculate_amortization(validation.inputs)

    print_summary(result)
    if args.yearly:
        print_yearly(result)
    if args.schedule:
        print_schedule(result)
    return 0


if __name__ == "__main__":
    sys.exit(main())
