"""Tests for the affordability solver."""

from decimal import Decimal

import pytest

from homeplan_core.config import AffordabilityConfig, EngineConfig, IncomeBasis
from homeplan_core.exceptions import InvalidInputError
from homeplan_core.models import (
    AffordabilityCalculation,
    BindingConstraint,
    DownPaymentStatus,
    ExcessDownPaymentStrategy,
    FinancialInputs,
    Property,
    PropertyAffordability,
)
from homeplan_core.solver import AffordabilitySolver, compute_affordability
from homeplan_core.sources import TablePropertyTaxRateSource

CENT = Decimal("0.01")
DOLLAR = Decimal("1")


def _inputs(base: FinancialInputs, **updates) -> FinancialInputs:
    return base.model_copy(update=updates)


@pytest.fixture
def solver(config: AffordabilityConfig) -> AffordabilitySolver:
    return AffordabilitySolver(config=config)


class TestMaxMonthlyPayment:
    """Test suite for the monthly payment ceiling."""

    def test_reference_scenario(self, solver, scenario_inputs):
        """$100k at 28% gives $8,333.33 gross and about $2,333.33 a month."""
        result = solver.solve_max_price(scenario_inputs)

        assert abs(result.monthly_income - Decimal("8333.33")) < CENT
        assert abs(result.housing_budget - Decimal("2333.33")) < CENT
        assert abs(result.max_monthly_payment - Decimal("2333.33")) < CENT

    def test_dti_headroom_caps_payment(self, solver, scenario_inputs):
        """Heavy debts shrink the payment to the DTI ceiling."""
        inputs = _inputs(scenario_inputs, fixed_debts=Decimal("1500"), monthly_expenses=Decimal("0"))
        result = solver.solve_max_price(inputs)

        # 8333.33 x 43% - 1500
        assert abs(result.max_monthly_payment - Decimal("2083.33")) < CENT
        assert abs(result.dti_ratio - Decimal("43")) < CENT
        assert any("Debt-to-income" in c for c in result.constraints)

    def test_cashflow_caps_payment(self, solver, scenario_inputs):
        """Expenses beyond take-home shrink the payment."""
        inputs = _inputs(scenario_inputs, monthly_expenses=Decimal("4500"))
        result = solver.solve_max_price(inputs)

        # 8333.33 x 0.70 - 4500 - 500
        assert abs(result.max_monthly_payment - Decimal("833.33")) < CENT

    def test_caps_can_be_disabled(self, scenario_inputs):
        config = AffordabilityConfig(_env_file=None, cap_by_cashflow=False, cap_by_dti_headroom=False)
        inputs = _inputs(scenario_inputs, monthly_expenses=Decimal("4500"))
        result = AffordabilitySolver(config=config).solve_max_price(inputs)

        assert abs(result.max_monthly_payment - Decimal("2333.33")) < CENT
        assert result.remaining_budget < 0
        assert result.can_afford is False

    def test_never_negative(self, solver, scenario_inputs):
        inputs = _inputs(scenario_inputs, monthly_expenses=Decimal("9000"))
        result = solver.solve_max_price(inputs)

        assert result.max_monthly_payment == Decimal("0")
        assert result.max_price_from_income == Decimal("0")
        assert result.can_afford is False

    def test_take_home_basis(self, scenario_inputs):
        """Take-home basis measures housing and DTI against take-home income."""
        config = AffordabilityConfig(_env_file=None, income_basis=IncomeBasis.TAKE_HOME)
        inputs = _inputs(scenario_inputs, annual_take_home_income=Decimal("72000"))
        result = AffordabilitySolver(config=config).solve_max_price(inputs)

        # 6000 x 28%
        assert abs(result.housing_budget - Decimal("1680")) < CENT
        assert result.take_home_income == Decimal("6000")
        assert abs(result.dti_ratio - (Decimal("500") + result.max_monthly_payment) / 60) < CENT


class TestMaxPurchasePrice:
    """Test suite for the two price bounds."""

    def test_down_payment_binds(self, solver, scenario_inputs):
        """$50k at 20% caps the price at $250k, below what income supports."""
        result = solver.solve_max_price(scenario_inputs)

        assert result.max_price_from_down_payment == Decimal("250000")
        assert result.max_price_from_income > Decimal("250000")
        assert result.max_purchase_price == Decimal("250000")
        assert result.binding_constraint == BindingConstraint.DOWN_PAYMENT
        assert result.down_payment_status == DownPaymentStatus.SHORTFALL
        assert result.shortfall_amount > 0
        assert result.constraints[0].startswith("Down payment funds limit the price")

    def test_income_binds(self, solver, scenario_inputs):
        inputs = _inputs(scenario_inputs, down_payment_sources=Decimal("200000"))
        result = solver.solve_max_price(inputs)

        assert result.binding_constraint == BindingConstraint.INCOME
        assert result.max_purchase_price == result.max_price_from_income
        assert result.down_payment_status == DownPaymentStatus.EXCESS
        assert result.excess_amount == Decimal("200000") - result.required_down_payment
        assert result.converged is True
        assert result.can_afford is True

    @pytest.mark.parametrize("sources", ["0", "20000", "68000", "70000", "500000"])
    def test_max_price_is_lesser_bound(self, solver, scenario_inputs, sources: str):
        inputs = _inputs(scenario_inputs, down_payment_sources=Decimal(sources))
        result = solver.solve_max_price(inputs)

        assert result.max_purchase_price == min(result.max_price_from_income, result.max_price_from_down_payment)

    def test_payment_fits_budget_at_income_price(self, solver, scenario_inputs):
        inputs = _inputs(scenario_inputs, down_payment_sources=Decimal("200000"))
        result = solver.solve_max_price(inputs)

        assert result.actual_monthly_payment <= result.max_monthly_payment + CENT
        assert abs(result.monthly_margin) < DOLLAR

    def test_zero_interest_rate(self, solver, scenario_inputs):
        """A zero rate uses straight-line repayment and still converges."""
        inputs = _inputs(scenario_inputs, interest_rate=Decimal("0"), down_payment_sources=Decimal("1000000"))
        result = solver.solve_max_price(inputs)

        assert result.converged is True
        assert result.max_price_from_income > 0
        assert abs(result.actual_monthly_payment - result.max_monthly_payment) < DOLLAR

    def test_large_down_payment_at_low_rate(self, solver, scenario_inputs):
        """At 3% with 70% down the payment supports roughly $760k."""
        inputs = _inputs(
            scenario_inputs,
            interest_rate=Decimal("3"),
            down_payment_percentage=Decimal("70"),
            down_payment_sources=Decimal("5000000"),
        )
        result = solver.solve_max_price(inputs)

        assert result.converged is True
        assert Decimal("740000") < result.max_price_from_income < Decimal("780000")
        assert result.actual_monthly_payment <= result.max_monthly_payment

    def test_non_convergence_is_flagged(self, scenario_inputs):
        """Running out of iterations returns the last estimate with a warning."""
        config = AffordabilityConfig(_env_file=None, max_iterations=1)
        inputs = _inputs(scenario_inputs, down_payment_sources=Decimal("200000"))
        result = AffordabilitySolver(config=config).solve_max_price(inputs)

        assert result.converged is False
        assert result.iterations == 1
        assert any("did not converge" in w for w in result.warnings)
        assert result.actual_monthly_payment <= result.max_monthly_payment + CENT

    def test_explicit_tax_rate_lowers_escrow(self, solver, scenario_inputs):
        inputs = _inputs(scenario_inputs, down_payment_sources=Decimal("500000"))
        high_tax = solver.solve_max_price(inputs, property_tax_rate=Decimal("0.025"))
        low_tax = solver.solve_max_price(inputs, property_tax_rate=Decimal("0.005"))

        assert low_tax.max_purchase_price > high_tax.max_purchase_price

    def test_location_tax_lookup(self, solver, scenario_inputs):
        inputs = _inputs(scenario_inputs, down_payment_sources=Decimal("500000"))
        denver = solver.solve_max_price(inputs, location="Denver, CO")
        austin = solver.solve_max_price(inputs, location="Austin, TX")

        assert denver.max_purchase_price > austin.max_purchase_price

    def test_pmi_below_twenty_percent(self, solver, scenario_inputs):
        inputs = _inputs(
            scenario_inputs,
            down_payment_percentage=Decimal("10"),
            down_payment_sources=Decimal("500000"),
        )
        result = solver.solve_max_price(inputs)

        assert result.payment_breakdown.pmi > 0

    def test_full_cash_down_payment(self, solver, scenario_inputs):
        """With 100% down only escrow counts against the budget."""
        inputs = _inputs(
            scenario_inputs,
            down_payment_percentage=Decimal("100"),
            down_payment_sources=Decimal("10000000"),
        )
        result = solver.solve_max_price(inputs)

        assert result.loan_amount == Decimal("0")
        assert abs(result.actual_monthly_payment - result.max_monthly_payment) < CENT


class TestZeroIncome:
    """Zero income is a valid state, never an exception."""

    def test_solve_mode(self, solver):
        inputs = FinancialInputs(annual_income=Decimal("0"), interest_rate=Decimal("6.5"))
        result = solver.solve_max_price(inputs)

        assert result.dti_ratio is None
        assert result.take_home_income == Decimal("0")
        assert result.max_purchase_price == Decimal("0")
        assert result.can_afford is False
        assert any("No income" in c for c in result.constraints)

    def test_property_mode(self, solver):
        inputs = FinancialInputs(
            annual_income=Decimal("0"),
            interest_rate=Decimal("6.5"),
            down_payment_sources=Decimal("100000"),
        )
        result = solver.score_property(inputs, Property(price=Decimal("300000")))

        assert result.dti_ratio is None
        assert result.can_afford is False
        assert 0 <= result.affordability_score <= 100


class TestDownPaymentStrategies:
    """Test suite for excess down payment handling."""

    @pytest.fixture
    def rich_inputs(self, scenario_inputs) -> FinancialInputs:
        return _inputs(scenario_inputs, down_payment_sources=Decimal("200000"))

    def test_save_keeps_excess(self, solver, rich_inputs):
        result = solver.solve_max_price(rich_inputs)

        assert result.strategy_purchase_price == result.max_purchase_price
        assert abs(result.down_payment_used - result.max_purchase_price * Decimal("0.2")) < CENT
        assert any("kept as savings" in o for o in result.opportunities)

    def test_reduce_payment(self, solver, rich_inputs):
        inputs = _inputs(rich_inputs, excess_down_payment_strategy=ExcessDownPaymentStrategy.REDUCE_PAYMENT)
        result = solver.solve_max_price(inputs)

        assert result.down_payment_used == Decimal("200000")
        assert result.strategy_purchase_price == result.max_purchase_price
        assert result.actual_monthly_payment < result.max_monthly_payment
        assert result.loan_amount == result.max_purchase_price - Decimal("200000")

    def test_increase_price(self, solver, rich_inputs):
        saved = solver.solve_max_price(rich_inputs)
        inputs = _inputs(rich_inputs, excess_down_payment_strategy=ExcessDownPaymentStrategy.INCREASE_PRICE)
        result = solver.solve_max_price(inputs)

        assert result.max_purchase_price == saved.max_purchase_price
        assert result.strategy_purchase_price > result.max_purchase_price
        assert result.strategy_purchase_price <= result.max_price_from_income + result.excess_amount
        assert result.down_payment_used == Decimal("200000")
        assert result.loan_amount < saved.loan_amount

    @pytest.mark.parametrize("strategy", list(ExcessDownPaymentStrategy))
    def test_strategy_payment_fits_ceiling(self, solver, scenario_inputs, strategy):
        """Escrow on a larger purchase never pushes the payment past the ceiling."""
        inputs = _inputs(
            scenario_inputs,
            monthly_expenses=Decimal("1000"),
            down_payment_sources=Decimal("400000"),
            excess_down_payment_strategy=strategy,
        )
        result = solver.solve_max_price(inputs)

        assert result.actual_monthly_payment <= result.max_monthly_payment + CENT
        assert result.monthly_margin >= -CENT
        assert result.can_afford is True

    def test_on_target_within_tolerance(self, solver, scenario_inputs):
        """Funds up to 5% above the requirement count as on target."""
        baseline = solver.solve_max_price(_inputs(scenario_inputs, down_payment_sources=Decimal("1000000")))
        near = baseline.required_down_payment * Decimal("1.03")
        result = solver.solve_max_price(_inputs(scenario_inputs, down_payment_sources=near))

        assert result.down_payment_status == DownPaymentStatus.ON_TARGET
        assert result.excess_amount is None
        assert result.shortfall_amount is None

    def test_any_gap_below_requirement_is_shortfall(self, solver, scenario_inputs):
        """$76k against $80k is short even though it is within 5%."""
        inputs = _inputs(scenario_inputs, down_payment_sources=Decimal("76000"))
        result = solver.score_property(inputs, Property(price=Decimal("400000")))

        assert result.down_payment_status == DownPaymentStatus.SHORTFALL
        assert result.shortfall_amount == Decimal("4000")
        assert result.can_afford is False
        assert any("$4,000 more for down payment" in c for c in result.constraints)


class TestCashToClose:
    def test_includes_closing_costs_and_one_time(self, solver, scenario_inputs):
        inputs = _inputs(scenario_inputs, one_time_expenses=Decimal("6500"))
        result = solver.solve_max_price(inputs)

        expected = result.down_payment_used + result.strategy_purchase_price * Decimal("0.03") + Decimal("6500")
        assert result.cash_to_close == expected


class TestScoreProperty:
    """Test suite for property mode."""

    def test_reference_property(self, solver, scenario_inputs):
        """$400k at 20% needs $80k down on a $320k loan; $50k is $30k short."""
        result = solver.score_property(scenario_inputs, Property(price=Decimal("400000")))

        assert result.down_payment_needed == Decimal("80000")
        assert result.loan_amount == Decimal("320000")
        assert result.down_payment_status == DownPaymentStatus.SHORTFALL
        assert result.shortfall_amount == Decimal("30000")
        assert result.can_afford is False
        assert any("$30,000 more for down payment" in c for c in result.constraints)

    @pytest.mark.parametrize(
        "rate,down_payment_pct",
        [("0", "40"), ("0", "60"), ("2", "60"), ("3", "70"), ("6.5", "20"), ("6.5", "5")],
    )
    def test_round_trip_margin(self, solver, scenario_inputs, rate: str, down_payment_pct: str):
        """Scoring the solved max price leaves no payment headroom."""
        inputs = _inputs(
            scenario_inputs,
            interest_rate=Decimal(rate),
            down_payment_percentage=Decimal(down_payment_pct),
            down_payment_sources=Decimal("5000000"),
        )
        solved = solver.solve_max_price(inputs)
        scored = solver.score_property(inputs, Property(price=solved.max_purchase_price))

        assert solved.converged is True
        assert solved.warnings == []
        assert solved.binding_constraint == BindingConstraint.INCOME
        assert 0 <= scored.monthly_margin < DOLLAR
        assert scored.can_afford is True

    def test_affordable_property(self, solver, scenario_inputs):
        inputs = _inputs(scenario_inputs, down_payment_sources=Decimal("100000"), monthly_expenses=Decimal("1000"))
        result = solver.score_property(inputs, Property(price=Decimal("250000")))

        assert result.can_afford is True
        assert result.monthly_margin > 0
        assert result.down_payment_status == DownPaymentStatus.EXCESS
        assert 0 < result.affordability_score <= 100
        assert result.constraints == []

    def test_expensive_property_flags_payment(self, solver, scenario_inputs):
        inputs = _inputs(scenario_inputs, down_payment_sources=Decimal("500000"))
        result = solver.score_property(inputs, Property(price=Decimal("900000")))

        assert result.can_afford is False
        assert result.monthly_margin < 0
        assert any("exceeds recommended" in c for c in result.constraints)

    def test_property_figures_used(self, solver, scenario_inputs):
        prop = Property(
            price=Decimal("300000"),
            property_tax_rate=Decimal("0.01"),
            hoa_fees=Decimal("250"),
            estimated_insurance=Decimal("2400"),
        )
        result = solver.score_property(scenario_inputs, prop)

        assert result.payment_breakdown.property_tax == Decimal("250")
        assert result.payment_breakdown.insurance == Decimal("200")
        assert result.payment_breakdown.hoa == Decimal("250")

    def test_city_and_state_used_for_tax_lookup(self, solver, scenario_inputs):
        prop = Property(price=Decimal("300000"), city="Denver", state="CO")
        result = solver.score_property(scenario_inputs, prop)

        assert result.payment_breakdown.property_tax == Decimal("300000") * Decimal("0.0051") / 12

    def test_score_is_mean_of_subscores(self, solver):
        """With no debts, no expenses and ample funds the score is high."""
        inputs = FinancialInputs(
            annual_income=Decimal("300000"),
            down_payment_sources=Decimal("200000"),
            interest_rate=Decimal("6"),
        )
        result = solver.score_property(inputs, Property(price=Decimal("200000")))

        assert result.affordability_score > Decimal("60")
        assert any("Excellent DTI" in r for r in result.recommendations)


class TestAuditTrail:
    def test_steps_recorded(self, solver, scenario_inputs):
        result = solver.solve_max_price(scenario_inputs)
        steps = [entry.step for entry in result.audit_log]

        for step in (
            "monthly_income",
            "max_monthly_payment",
            "dti_ratio",
            "property_tax_rate",
            "max_price_from_income",
            "max_price_from_down_payment",
            "max_purchase_price",
            "down_payment_status",
            "actual_payment",
        ):
            assert step in steps

    def test_audit_log_reset_between_runs(self, solver, scenario_inputs):
        first = solver.solve_max_price(scenario_inputs)
        second = solver.solve_max_price(scenario_inputs)
        assert len(first.audit_log) == len(second.audit_log)

    def test_rate_check_warns_on_optimistic_rate(self, solver, scenario_inputs):
        inputs = _inputs(
            scenario_inputs,
            interest_rate=Decimal("5"),
            credit_score=640,
            market_reference_rate=Decimal("6.85"),
        )
        result = solver.solve_max_price(inputs)
        assert any("estimated for a 640 credit score" in w for w in result.warnings)


class TestComputeAffordability:
    """Test suite for the validating entry point."""

    def test_returns_calculation_without_property(self, scenario_inputs):
        result = compute_affordability(scenario_inputs, config=AffordabilityConfig(_env_file=None))
        assert isinstance(result, AffordabilityCalculation)

    def test_returns_property_result(self, scenario_inputs):
        result = compute_affordability(scenario_inputs, Property(price=Decimal("250000")))
        assert isinstance(result, PropertyAffordability)

    def test_accepts_engine_config(self, scenario_inputs):
        config = EngineConfig(
            _env_file=None,
            affordability=AffordabilityConfig(_env_file=None, housing_percentage=Decimal("25")),
        )
        result = compute_affordability(scenario_inputs, config=config)
        assert result.housing_percentage == Decimal("28")
        inputs = _inputs(scenario_inputs, housing_percentage=None)
        assert compute_affordability(inputs, config=config).housing_percentage == Decimal("25")

    def test_custom_tax_source(self, scenario_inputs):
        source = TablePropertyTaxRateSource(table={}, default_rate=Decimal("0"))
        result = compute_affordability(scenario_inputs, tax_rate_source=source)
        assert result.payment_breakdown.property_tax == Decimal("0")

    def test_invalid_rate_rejected(self, scenario_inputs):
        with pytest.raises(InvalidInputError) as exc_info:
            compute_affordability(_inputs(scenario_inputs, interest_rate=Decimal("25")))
        assert exc_info.value.field == "interest_rate"

    def test_invalid_property_rejected(self, scenario_inputs):
        with pytest.raises(InvalidInputError):
            compute_affordability(scenario_inputs, Property(price=Decimal("0")))
