from decimal import Decimal

import pytest

from amcalc.engine.amortization import (
    calculate_amortization,
    calculate_monthly_payment,
    compute_periodic_payment,
    generate_schedule,
    period_rate,
    periods_per_year,
    yearly_summary,
)
from amcalc.models.amortization import (
    AmortizationInputs,
    InvalidFrequency,
    PaymentFrequency,
    ValidationFailed,
    round_money,
)

CENT = Decimal("0.01")
TINY = Decimal("1E-10")

# Range edges plus a typical loan, for properties that must hold for all valid inputs
LOANS = [
    (Decimal("1000"), Decimal("0.1"), 1),
    (Decimal("200000"), Decimal("3.5"), 30),
    (Decimal("10000000"), Decimal("25"), 50),
]


def _all_loans():
    return [
        pytest.param(AmortizationInputs(p, r, t, f), id=f"{p}-{r}-{t}-{f.value}")
        for p, r, t in LOANS
        for f in PaymentFrequency
    ]


class TestPeriodsPerYear:
    @pytest.mark.parametrize("frequency,expected", [
        (PaymentFrequency.MONTHLY, 12),
        (PaymentFrequency.BIWEEKLY, 26),
        (PaymentFrequency.WEEKLY, 52),
        (PaymentFrequency.SEMIMONTHLY, 24),
        (PaymentFrequency.QUARTERLY, 4),
        (PaymentFrequency.SEMIANNUALLY, 2),
        (PaymentFrequency.ANNUALLY, 1),
    ])
    def test_table(self, frequency, expected):
        assert periods_per_year(frequency) == expected

    def test_accepts_string_value(self):
        assert periods_per_year("biweekly") == 26

    def test_unknown_frequency_fails_fast(self):
        with pytest.raises(InvalidFrequency):
            periods_per_year("fortnightly")


class TestPeriodicPayment:
    def test_standard_mortgage(self):
        """$200K at 3.5% for 30 years."""
        pmt = compute_periodic_payment(Decimal("200000"), Decimal("3.5"), 30)
        assert round_money(pmt) == Decimal("898.09")

    def test_high_rate(self):
        pmt = calculate_monthly_payment(Decimal("100000"), Decimal("10"), 15)
        assert round_money(pmt) == Decimal("1074.61")

    def test_short_term(self):
        pmt = calculate_monthly_payment(Decimal("50000"), Decimal("5"), 5)
        assert round_money(pmt) == Decimal("943.56")

    def test_zero_rate_is_straight_line(self):
        pmt = compute_periodic_payment(Decimal("100000"), Decimal("0"), 30)
        assert pmt == Decimal("100000") / 360
        assert round_money(pmt) == Decimal("277.78")

    def test_not_rounded(self):
        pmt = compute_periodic_payment(Decimal("200000"), Decimal("3.5"), 30)
        assert pmt != round_money(pmt)

    def test_fewer_periods_means_larger_payment(self):
        monthly = compute_periodic_payment(Decimal("200000"), Decimal("3.5"), 30, PaymentFrequency.MONTHLY)
        annual = compute_periodic_payment(Decimal("200000"), Decimal("3.5"), 30, PaymentFrequency.ANNUALLY)
        assert annual > monthly * 11


class TestGenerateSchedule:
    def test_zero_rate_rows(self):
        principal = Decimal("100000")
        pmt = compute_periodic_payment(principal, Decimal("0"), 30)
        schedule = generate_schedule(principal, Decimal("0"), 360, pmt)
        assert len(schedule) == 360
        assert all(row.interest_payment == 0 for row in schedule)
        for row in schedule[:-1]:
            assert row.principal_payment == pmt
            assert row.payment_amount == pmt

        # Last row pays the exact remaining balance, which differs from pmt
        # only past the 20th decimal place, so the balance lands on exactly 0
        last = schedule[-1]
        assert last.principal_payment == schedule[-2].remaining_balance
        assert last.payment_amount == last.principal_payment
        assert abs(last.principal_payment - pmt) < Decimal("1E-18")
        assert last.remaining_balance == 0

    def test_first_rows_one_year_loan(self):
        principal = Decimal("100000")
        pmt = compute_periodic_payment(principal, Decimal("5"), 1)
        schedule = generate_schedule(principal, period_rate(Decimal("5"), "monthly"), 12, pmt)
        first = schedule[0].rounded()
        assert first.payment_number == 1
        assert first.payment_amount == Decimal("8560.75")
        assert first.interest_payment == Decimal("416.67")
        assert first.principal_payment == Decimal("8144.08")
        assert first.remaining_balance == Decimal("91855.92")
        assert schedule[-1].payment_number == 12
        assert schedule[-1].remaining_balance == 0

    def test_rows_are_not_rounded(self):
        principal = Decimal("100000")
        pmt = compute_periodic_payment(principal, Decimal("5"), 1)
        schedule = generate_schedule(principal, period_rate(Decimal("5"), "monthly"), 12, pmt)
        assert schedule[0].interest_payment != round_money(schedule[0].interest_payment)

    def test_restartable(self):
        principal = Decimal("250000")
        rate = period_rate(Decimal("6"), "monthly")
        pmt = compute_periodic_payment(principal, Decimal("6"), 15)
        assert generate_schedule(principal, rate, 180, pmt) == generate_schedule(principal, rate, 180, pmt)


class TestCalculateAmortization:
    def test_standard_loan(self, standard_inputs):
        result = calculate_amortization(standard_inputs)
        assert round_money(result.payment_amount) == Decimal("898.09")
        assert len(result.schedule) == 360
        assert result.schedule[-1].remaining_balance == 0

    def test_ten_year_totals(self, ten_year_inputs):
        result = calculate_amortization(ten_year_inputs)
        assert round_money(result.payment_amount) == Decimal("1060.66")
        assert round_money(result.total_interest) == Decimal("27278.62")
        assert round_money(result.total_payments) == Decimal("127278.62")
        assert result.summary.principal == Decimal("100000")
        assert result.summary.interest_rate == Decimal("5")
        assert result.summary.term_years == 10
        assert result.summary.number_of_payments == 120
        assert result.summary.payment_frequency is PaymentFrequency.MONTHLY

    def test_total_paid_is_payment_times_count(self, ten_year_inputs):
        result = calculate_amortization(ten_year_inputs)
        assert abs(result.total_payments - result.payment_amount * 120) < TINY

    @pytest.mark.parametrize("frequency", list(PaymentFrequency))
    def test_schedule_length_per_frequency(self, frequency):
        inputs = AmortizationInputs(Decimal("200000"), Decimal("3.5"), 30, frequency)
        result = calculate_amortization(inputs)
        assert len(result.schedule) == 30 * periods_per_year(frequency)
        assert result.summary.number_of_payments == len(result.schedule)

    @pytest.mark.parametrize("frequency", list(PaymentFrequency))
    def test_final_balance_exactly_zero(self, frequency):
        inputs = AmortizationInputs(Decimal("10000000"), Decimal("25"), 50, frequency)
        result = calculate_amortization(inputs)
        assert result.schedule[-1].remaining_balance == Decimal("0")

    @pytest.mark.parametrize("inputs", _all_loans())
    def test_balance_never_increases(self, inputs):
        result = calculate_amortization(inputs)
        balances = [row.remaining_balance for row in result.schedule]
        assert all(b2 <= b1 for b1, b2 in zip(balances, balances[1:]))
        assert all(b >= 0 for b in balances)

    @pytest.mark.parametrize("inputs", _all_loans())
    def test_principal_is_conserved(self, inputs):
        result = calculate_amortization(inputs)
        paid_down = sum(row.principal_payment for row in result.schedule)
        assert abs(paid_down - inputs.principal) <= CENT * len(result.schedule)

    @pytest.mark.parametrize("inputs", _all_loans())
    def test_principal_plus_interest_equals_total_paid(self, inputs):
        result = calculate_amortization(inputs)
        principal = sum(row.principal_payment for row in result.schedule)
        interest = sum(row.interest_payment for row in result.schedule)
        assert abs(principal + interest - result.total_payments) < TINY

    def test_each_row_splits_its_payment(self, standard_inputs):
        result = calculate_amortization(standard_inputs)
        for row in result.schedule:
            assert abs(row.principal_payment + row.interest_payment - row.payment_amount) < TINY

    def test_interest_share_shrinks(self, standard_inputs):
        result = calculate_amortization(standard_inputs)
        first, last = result.schedule[0], result.schedule[-1]
        assert first.interest_payment > first.principal_payment
        assert last.interest_payment < last.principal_payment

    def test_idempotent(self, standard_inputs):
        assert calculate_amortization(standard_inputs) == calculate_amortization(standard_inputs)

    def test_principal_below_minimum_rejected(self):
        inputs = AmortizationInputs(Decimal("500"), Decimal("3.5"), 30)
        with pytest.raises(ValidationFailed) as exc:
            calculate_amortization(inputs)
        assert [e.field for e in exc.value.errors] == ["principal"]
        assert "Principal must be at least $1,000" in str(exc.value)

    def test_rate_above_maximum_rejected(self):
        inputs = AmortizationInputs(Decimal("200000"), Decimal("30"), 30)
        with pytest.raises(ValidationFailed) as exc:
            calculate_amortization(inputs)
        assert [e.message for e in exc.value.errors] == ["Interest rate cannot exceed 25%"]

    def test_zero_rate_rejected_by_public_range(self):
        inputs = AmortizationInputs(Decimal("100000"), Decimal("0"), 30)
        with pytest.raises(ValidationFailed):
            calculate_amortization(inputs)

    def test_string_frequency_on_inputs(self):
        inputs = AmortizationInputs(Decimal("200000"), Decimal("3.5"), 30, "weekly")
        result = calculate_amortization(inputs)
        assert result.summary.payment_frequency is PaymentFrequency.WEEKLY
        assert len(result.schedule) == 1560


class TestCaching:
    def test_same_result_with_and_without_cache(self, standard_inputs, memory_cache):
        uncached = calculate_amortization(standard_inputs)
        first = calculate_amortization(standard_inputs, cache=memory_cache)
        second = calculate_amortization(standard_inputs, cache=memory_cache)
        assert first == uncached
        assert second == uncached

    def test_repeat_hits_cache(self, standard_inputs, memory_cache):
        first = calculate_amortization(standard_inputs, cache=memory_cache)
        second = calculate_amortization(standard_inputs, cache=memory_cache)
        assert second is first
        assert memory_cache.stats().size == 1

    def test_distinct_inputs_cached_separately(self, standard_inputs, ten_year_inputs, memory_cache):
        calculate_amortization(standard_inputs, cache=memory_cache)
        calculate_amortization(ten_year_inputs, cache=memory_cache)
        assert memory_cache.stats().size == 2

    def test_invalid_inputs_not_cached(self, memory_cache):
        with pytest.raises(ValidationFailed):
            calculate_amortization(AmortizationInputs(Decimal("500"), Decimal("3.5"), 30), cache=memory_cache)
        assert memory_cache.stats().size == 0


class TestYearlySummary:
    def test_ten_year_summary(self, ten_year_inputs):
        yearly = yearly_summary(calculate_amortization(ten_year_inputs))
        assert len(yearly) == 10
        assert [y.year for y in yearly] == list(range(1, 11))
        assert yearly[-1].ending_balance == 0

    def test_yearly_totals_match(self, ten_year_inputs):
        result = calculate_amortization(ten_year_inputs)
        yearly = yearly_summary(result)
        assert abs(sum(y.interest for y in yearly) - sum(r.interest_payment for r in result.schedule)) < TINY
        assert abs(sum(y.total_paid for y in yearly) - result.total_payments) < TINY

    def test_biweekly_years(self):
        inputs = AmortizationInputs(Decimal("50000"), Decimal("4"), 2, PaymentFrequency.BIWEEKLY)
        yearly = yearly_summary(calculate_amortization(inputs))
        assert len(yearly) == 2
        assert yearly[0].ending_balance > yearly[1].ending_balance == 0
