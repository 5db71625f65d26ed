"""Affordability solver.

Turns normalized household figures into either a maximum purchase price
(solve mode) or a verdict on one specific property (property mode).

The maximum price is the lesser of two bounds:
1. Income: the price whose full monthly payment (principal and interest,
   tax, insurance, PMI) fits the monthly payment ceiling, found by
   bisection because escrow depends on the price itself.
2. Down payment: available funds divided by the down payment percentage.

Every stage is recorded in the result's audit log and emitted as an
``affordability_step`` log event.
"""

from decimal import Decimal
from typing import Callable, Optional, Union

import structlog

from .amortization import MONTHS_PER_YEAR, housing_payment
from .config import AffordabilityConfig, EngineConfig, IncomeBasis
from .formatting import format_currency, format_percentage
from .models.affordability import (
    AffordabilityCalculation,
    BindingConstraint,
    CalculationStep,
    DownPaymentStatus,
    ExcessDownPaymentStrategy,
    FinancialInputs,
    PaymentBreakdown,
    Property,
    PropertyAffordability,
)
from .mortgage_terms import estimate_interest_rate
from .sources import PropertyTaxRateSource, TablePropertyTaxRateSource
from .tax_rates import estimate_annual_insurance
from .validation import validate_financial_inputs, validate_property

logger = structlog.get_logger()

ZERO = Decimal("0")
HUNDRED = Decimal("100")
CENTS = Decimal("0.01")

# Upper bound on bracket growth for the price search
MAX_BRACKET_DOUBLINGS = 64


def _cents(value: Decimal) -> Decimal:
    return value.quantize(CENTS)


def _clamp_score(value: Decimal) -> Decimal:
    return max(ZERO, min(HUNDRED, value))


class AffordabilitySolver:
    """
    Solve for the maximum affordable price or score a specific property.

    Policy numbers (housing share, DTI ceiling, PMI, insurance, iteration
    limits) come from AffordabilityConfig. Tax rates come from a
    PropertyTaxRateSource unless the property carries its own rate.

    A solver keeps the audit log of its latest calculation; use one
    instance per thread.
    """

    def __init__(
        self,
        config: Optional[AffordabilityConfig] = None,
        tax_rate_source: Optional[PropertyTaxRateSource] = None,
    ):
        self.config = config or AffordabilityConfig()
        self.tax_rate_source = tax_rate_source or TablePropertyTaxRateSource(
            default_rate=self.config.default_property_tax_rate,
        )
        self._audit_log: list[CalculationStep] = []

    def _log_step(
        self,
        step: str,
        input_value: str,
        output_value: str,
        source: str,
        notes: Optional[str] = None,
    ) -> None:
        """Add an entry to the audit log."""
        entry = CalculationStep(
            step=step,
            input_value=input_value,
            output_value=output_value,
            source=source,
            notes=notes,
        )
        self._audit_log.append(entry)
        logger.info(
            "affordability_step",
            step=step,
            input=input_value,
            output=output_value,
            source=source,
        )

    # ------------------------------------------------------------------
    # Shared stages
    # ------------------------------------------------------------------

    def _policy(self, inputs: FinancialInputs) -> tuple[Decimal, Decimal]:
        """Housing and down payment percentages, falling back to config."""
        housing_pct = inputs.housing_percentage
        if housing_pct is None:
            housing_pct = self.config.housing_percentage
        dp_pct = inputs.down_payment_percentage
        if dp_pct is None:
            dp_pct = self.config.down_payment_percentage
        self._log_step(
            step="policy",
            input_value=f"housing={inputs.housing_percentage}, down_payment={inputs.down_payment_percentage}",
            output_value=f"housing={housing_pct}%, down_payment={dp_pct}%",
            source="FinancialInputs with AffordabilityConfig defaults",
        )
        return housing_pct, dp_pct

    def _monthly_incomes(self, inputs: FinancialInputs) -> tuple[Decimal, Decimal, Decimal]:
        """Return (gross, take-home, basis) monthly income.

        The basis is the figure both the housing ratio and DTI are measured
        against.
        """
        gross = inputs.gross_monthly_income
        if inputs.annual_take_home_income is not None:
            take_home = inputs.annual_take_home_income / MONTHS_PER_YEAR + inputs.future_income_monthly
            take_home_source = "Take-home income calculator"
        else:
            take_home = (
                inputs.annual_income / MONTHS_PER_YEAR * self.config.fallback_take_home_ratio
                + inputs.future_income_monthly
            )
            take_home_source = f"Gross x fallback ratio {self.config.fallback_take_home_ratio}"

        basis = gross if self.config.income_basis == IncomeBasis.GROSS else take_home

        self._log_step(
            step="monthly_income",
            input_value=f"annual={inputs.annual_income}, future_monthly={inputs.future_income_monthly}",
            output_value=f"gross={_cents(gross)}, take_home={_cents(take_home)}",
            source=take_home_source,
            notes=f"Income basis: {self.config.income_basis.value}",
        )
        return gross, take_home, basis

    def _max_monthly_payment(
        self,
        inputs: FinancialInputs,
        basis: Decimal,
        take_home: Decimal,
        housing_pct: Decimal,
    ) -> tuple[Decimal, Decimal]:
        """Return (housing budget, max monthly payment).

        The housing budget is the pure housing-percentage ceiling. The max
        payment is that budget capped by DTI headroom and by cashflow when
        those caps are enabled, never below zero.
        """
        cfg = self.config
        housing_budget = basis * housing_pct / HUNDRED
        max_payment = housing_budget
        caps = [f"housing={_cents(housing_budget)}"]

        if cfg.cap_by_dti_headroom:
            dti_headroom = basis * cfg.max_dti_ratio / HUNDRED - inputs.fixed_debts
            max_payment = min(max_payment, dti_headroom)
            caps.append(f"dti_headroom={_cents(dti_headroom)}")

        if cfg.cap_by_cashflow:
            cashflow = (
                take_home
                - inputs.monthly_expenses
                - inputs.fixed_debts
                - inputs.future_expenses_monthly
            )
            max_payment = min(max_payment, cashflow)
            caps.append(f"cashflow={_cents(cashflow)}")

        max_payment = max(ZERO, max_payment)
        self._log_step(
            step="max_monthly_payment",
            input_value=", ".join(caps),
            output_value=str(_cents(max_payment)),
            source=f"{housing_pct}% of {cfg.income_basis.value} income, max DTI {cfg.max_dti_ratio}%",
        )
        return max(ZERO, housing_budget), max_payment

    def _dti(self, monthly_obligations: Decimal, basis: Decimal) -> Optional[Decimal]:
        """DTI in percent, or None when there is no income to measure against."""
        if basis <= 0:
            return None
        return monthly_obligations / basis * HUNDRED

    def _tax_rate(self, explicit_rate: Optional[Decimal], location: Optional[str]) -> Decimal:
        if explicit_rate is not None:
            rate = explicit_rate
            source = "Property"
        else:
            rate = self.tax_rate_source.tax_rate_for(location)
            source = type(self.tax_rate_source).__name__
        self._log_step(
            step="property_tax_rate",
            input_value=f"location={location}",
            output_value=str(rate),
            source=source,
        )
        return rate

    def _check_rate(self, inputs: FinancialInputs, dp_pct: Decimal, warnings: list[str]) -> None:
        """Warn when the chosen rate is better than the credit profile supports."""
        if inputs.market_reference_rate is None:
            return
        estimated = estimate_interest_rate(
            credit_score=inputs.credit_score,
            loan_term=inputs.loan_term,
            down_payment_pct=dp_pct,
            reference_rate=inputs.market_reference_rate,
        )
        self._log_step(
            step="rate_check",
            input_value=f"credit={inputs.credit_score}, reference={inputs.market_reference_rate}",
            output_value=str(estimated),
            source="Credit, term and down payment adjustments",
        )
        if inputs.interest_rate < estimated:
            warnings.append(
                f"Selected rate {format_percentage(inputs.interest_rate, 2)} is below the "
                f"{format_percentage(estimated, 3)} estimated for a {inputs.credit_score} credit score"
            )

    def _down_payment_status(
        self,
        available: Decimal,
        required: Decimal,
    ) -> tuple[DownPaymentStatus, Optional[Decimal], Optional[Decimal]]:
        """Classify available funds against the required down payment.

        Any gap below the requirement is a shortfall; funds up to the
        tolerance band above it are on target.
        """
        band = required * self.config.down_payment_tolerance_pct / HUNDRED
        if available < required:
            status, excess, shortfall = DownPaymentStatus.SHORTFALL, None, required - available
        elif available - required <= band:
            status, excess, shortfall = DownPaymentStatus.ON_TARGET, None, None
        else:
            status, excess, shortfall = DownPaymentStatus.EXCESS, available - required, None

        self._log_step(
            step="down_payment_status",
            input_value=f"available={_cents(available)}, required={_cents(required)}",
            output_value=status.value,
            source=f"+{self.config.down_payment_tolerance_pct}% tolerance above the requirement",
        )
        return status, excess, shortfall

    def _payment(
        self,
        price: Decimal,
        down_payment: Decimal,
        inputs: FinancialInputs,
        tax_rate: Decimal,
        annual_insurance: Optional[Decimal] = None,
        monthly_hoa: Decimal = ZERO,
    ) -> tuple[PaymentBreakdown, Decimal]:
        if annual_insurance is None:
            annual_insurance = estimate_annual_insurance(price, self.config.insurance_rate)
        return housing_payment(
            price,
            down_payment,
            inputs.interest_rate,
            inputs.loan_term,
            property_tax_rate=tax_rate,
            annual_insurance=annual_insurance,
            pmi_annual_rate=self.config.pmi_annual_rate,
            pmi_threshold_percentage=self.config.pmi_threshold_percentage,
            monthly_hoa=monthly_hoa,
        )

    # ------------------------------------------------------------------
    # Solve mode
    # ------------------------------------------------------------------

    def _bisect_price(
        self,
        payment_at: Callable[[Decimal], Decimal],
        budget: Decimal,
        low: Decimal,
        high: Decimal,
    ) -> tuple[Decimal, bool, int]:
        """Narrow ``[low, high]`` around the budget boundary.

        ``payment_at(low)`` must fit the budget and the payment must grow
        with price. Stops when the bracket is narrower than
        ``price_tolerance`` or after ``max_iterations`` halvings, and
        returns the lower end so the payment never exceeds the budget.
        """
        cfg = self.config
        converged = high - low < cfg.price_tolerance
        iterations = 0
        while not converged and iterations < cfg.max_iterations:
            iterations += 1
            mid = (low + high) / 2
            if payment_at(mid) > budget:
                high = mid
            else:
                low = mid
            converged = high - low < cfg.price_tolerance
        return low, converged, iterations

    def _solve_price_from_income(
        self,
        budget: Decimal,
        inputs: FinancialInputs,
        dp_pct: Decimal,
        tax_rate: Decimal,
    ) -> tuple[Optional[Decimal], bool, int]:
        """Find the highest price whose full payment fits ``budget``.

        The answer is bracketed by doubling from ``initial_price_estimate``
        and then bisected.

        Returns:
            Tuple of (price, converged, iterations). Price is None when
            income places no bound on the price (all-cash purchase with no
            escrow costs).
        """
        cfg = self.config
        if budget <= 0:
            return ZERO, True, 0

        dp_fraction = dp_pct / HUNDRED
        if dp_fraction >= 1:
            # No loan; only escrow counts against the budget
            escrow_per_dollar = (tax_rate + cfg.insurance_rate) / MONTHS_PER_YEAR
            if escrow_per_dollar <= 0:
                return None, True, 0
            return budget / escrow_per_dollar, True, 0

        def payment_at(price: Decimal) -> Decimal:
            breakdown, _ = self._payment(price, price * dp_fraction, inputs, tax_rate)
            return breakdown.total

        low, high = ZERO, cfg.initial_price_estimate
        for _ in range(MAX_BRACKET_DOUBLINGS):
            if payment_at(high) > budget:
                return self._bisect_price(payment_at, budget, low, high)
            low, high = high, high * 2
        return low, False, 0

    def _apply_strategy(
        self,
        strategy: ExcessDownPaymentStrategy,
        status: DownPaymentStatus,
        max_price: Decimal,
        income_price: Decimal,
        dp_pct: Decimal,
        available: Decimal,
        excess: Optional[Decimal],
        budget: Decimal,
        inputs: FinancialInputs,
        tax_rate: Decimal,
    ) -> tuple[Decimal, Decimal]:
        """Return (purchase price, down payment used) for the strategy."""
        target_down_payment = max_price * dp_pct / HUNDRED
        if status != DownPaymentStatus.EXCESS or excess is None or income_price <= 0:
            return max_price, min(available, target_down_payment)

        if strategy == ExcessDownPaymentStrategy.REDUCE_PAYMENT:
            price, used = max_price, min(available, max_price)
        elif strategy == ExcessDownPaymentStrategy.INCREASE_PRICE:
            # All funds go down; the price rises until escrow on the extra
            # house uses up the payment saved by the smaller loan, and never
            # past the income price plus the excess.
            def payment_at(candidate: Decimal) -> Decimal:
                breakdown, _ = self._payment(candidate, min(available, candidate), inputs, tax_rate)
                return breakdown.total

            ceiling = income_price + excess
            if payment_at(ceiling) <= budget:
                price = ceiling
            else:
                price, _, _ = self._bisect_price(payment_at, budget, income_price, ceiling)
            used = min(available, price)
        else:
            price, used = max_price, target_down_payment

        self._log_step(
            step="excess_strategy",
            input_value=f"strategy={strategy.value}, excess={_cents(excess)}",
            output_value=f"price={_cents(price)}, down_payment_used={_cents(used)}",
            source="Excess down payment strategy",
        )
        return price, used

    def solve_max_price(
        self,
        inputs: FinancialInputs,
        property_tax_rate: Optional[Decimal] = None,
        location: Optional[str] = None,
    ) -> AffordabilityCalculation:
        """
        Solve for the maximum affordable purchase price.

        Args:
            inputs: Normalized household figures (validated by the caller)
            property_tax_rate: Annual tax fraction; looked up by location when absent
            location: Location key for the tax-rate source

        Returns:
            AffordabilityCalculation with full audit trail
        """
        self._audit_log = []
        cfg = self.config
        warnings: list[str] = []
        constraints: list[str] = []
        opportunities: list[str] = []

        housing_pct, dp_pct = self._policy(inputs)
        gross, take_home, basis = self._monthly_incomes(inputs)
        housing_budget, max_payment = self._max_monthly_payment(inputs, basis, take_home, housing_pct)

        dti = self._dti(inputs.fixed_debts + max_payment, basis)
        self._log_step(
            step="dti_ratio",
            input_value=f"debts={inputs.fixed_debts}, max_payment={_cents(max_payment)}, income={_cents(basis)}",
            output_value="unavailable" if dti is None else format_percentage(dti, 2),
            source="(fixed debts + max payment) / income",
        )

        tax_rate = self._tax_rate(property_tax_rate, location)
        self._check_rate(inputs, dp_pct, warnings)

        # Bound 1: income
        dp_fraction = dp_pct / HUNDRED
        max_price_from_down_payment = inputs.down_payment_sources / dp_fraction
        income_price, converged, iterations = self._solve_price_from_income(max_payment, inputs, dp_pct, tax_rate)
        if income_price is None:
            income_price = max_price_from_down_payment
        self._log_step(
            step="max_price_from_income",
            input_value=f"max_payment={_cents(max_payment)}, rate={inputs.interest_rate}%, term={inputs.loan_term}y",
            output_value=str(_cents(income_price)),
            source="Bisection on monthly payment",
            notes=f"iterations={iterations}, converged={converged}",
        )
        if not converged:
            logger.warning(
                "price_solve_not_converged",
                iterations=iterations,
                last_estimate=str(_cents(income_price)),
            )
            warnings.append(
                f"Price estimate did not converge after {iterations} iterations; "
                f"{format_currency(income_price)} is an approximation"
            )

        # Bound 2: down payment funds
        self._log_step(
            step="max_price_from_down_payment",
            input_value=f"sources={inputs.down_payment_sources}, down_payment={dp_pct}%",
            output_value=str(_cents(max_price_from_down_payment)),
            source="sources / down payment percentage",
        )

        max_price = min(income_price, max_price_from_down_payment)
        binding = (
            BindingConstraint.INCOME
            if income_price <= max_price_from_down_payment
            else BindingConstraint.DOWN_PAYMENT
        )
        self._log_step(
            step="max_purchase_price",
            input_value=f"income={_cents(income_price)}, down_payment={_cents(max_price_from_down_payment)}",
            output_value=str(_cents(max_price)),
            source="min(income bound, down payment bound)",
            notes=f"binding={binding.value}",
        )

        available = inputs.down_payment_sources
        required = income_price * dp_fraction
        status, excess, shortfall = self._down_payment_status(available, required)

        strategy_price, down_payment_used = self._apply_strategy(
            inputs.excess_down_payment_strategy,
            status,
            max_price,
            income_price,
            dp_pct,
            available,
            excess,
            max_payment,
            inputs,
            tax_rate,
        )

        breakdown, loan = self._payment(strategy_price, down_payment_used, inputs, tax_rate)
        actual_payment = breakdown.total
        actual_dti = self._dti(inputs.fixed_debts + actual_payment, basis)
        monthly_margin = max_payment - actual_payment
        remaining = (
            take_home
            - actual_payment
            - inputs.monthly_expenses
            - inputs.fixed_debts
            - inputs.future_expenses_monthly
        )
        cash_to_close = (
            down_payment_used
            + strategy_price * cfg.closing_cost_rate
            + inputs.one_time_expenses
        )
        self._log_step(
            step="actual_payment",
            input_value=f"price={_cents(strategy_price)}, down_payment={_cents(down_payment_used)}",
            output_value=str(_cents(actual_payment)),
            source="Amortization with tax, insurance and PMI",
            notes=f"remaining_budget={_cents(remaining)}, cash_to_close={_cents(cash_to_close)}",
        )

        can_afford = (
            basis > 0
            and max_price > 0
            and _cents(actual_payment) <= _cents(max_payment)
            and _cents(remaining) >= 0
            and (actual_dti is None or _cents(actual_dti) <= cfg.max_dti_ratio)
        )

        # Constraints and opportunities
        if basis <= 0:
            constraints.append("No income entered; add income to calculate affordability")
        elif binding == BindingConstraint.DOWN_PAYMENT:
            constraints.append(
                f"Down payment funds limit the price to {format_currency(max_price_from_down_payment)}"
            )
            opportunities.append(
                f"Income supports up to {format_currency(income_price)} with more down payment funds"
            )
        else:
            constraints.append(f"Income limits the price to {format_currency(income_price)}")
            opportunities.append(
                f"Down payment funds would support up to {format_currency(max_price_from_down_payment)}"
            )

        if dti is not None and dti > cfg.dti_warning_threshold:
            constraints.append(
                f"Debt-to-income ratio of {format_percentage(dti)} is above "
                f"{format_percentage(cfg.dti_warning_threshold)}"
            )

        if shortfall is not None:
            constraints.append(f"Down payment is short by {format_currency(shortfall)}")

        if basis > 0:
            if remaining < 0:
                constraints.append(f"Monthly budget is short by {format_currency(abs(remaining))}")
            elif remaining < cfg.tight_margin_threshold:
                constraints.append(f"Remaining monthly budget of {format_currency(remaining)} is tight")
            elif remaining > cfg.strong_margin_threshold:
                opportunities.append(
                    f"Remaining monthly budget of {format_currency(remaining)} could support about "
                    f"{format_currency(remaining * cfg.margin_to_price_multiplier)} more in price"
                )

        if excess is not None and income_price > 0:
            strategy = inputs.excess_down_payment_strategy
            if strategy == ExcessDownPaymentStrategy.REDUCE_PAYMENT:
                opportunities.append(
                    f"Putting the extra {format_currency(excess)} toward the down payment "
                    f"lowers the payment to {format_currency(actual_payment)}"
                )
            elif strategy == ExcessDownPaymentStrategy.INCREASE_PRICE:
                opportunities.append(
                    f"Applying the extra {format_currency(excess)} raises the purchase price "
                    f"to {format_currency(strategy_price)}"
                )
            else:
                opportunities.append(f"{format_currency(excess)} of down payment funds kept as savings")

        logger.info(
            "affordability_solved",
            max_purchase_price=str(_cents(max_price)),
            binding_constraint=binding.value,
            can_afford=can_afford,
            converged=converged,
        )

        return AffordabilityCalculation(
            max_purchase_price=max_price,
            max_price_from_income=income_price,
            max_price_from_down_payment=max_price_from_down_payment,
            binding_constraint=binding,
            strategy_purchase_price=strategy_price,
            housing_budget=housing_budget,
            max_monthly_payment=max_payment,
            actual_monthly_payment=actual_payment,
            payment_breakdown=breakdown,
            loan_amount=loan,
            available_down_payment=available,
            required_down_payment=required,
            down_payment_used=down_payment_used,
            down_payment_status=status,
            excess_amount=excess,
            shortfall_amount=shortfall,
            cash_to_close=cash_to_close,
            dti_ratio=dti,
            actual_dti_ratio=actual_dti,
            monthly_income=gross,
            take_home_income=take_home,
            monthly_margin=monthly_margin,
            remaining_budget=remaining,
            housing_percentage=housing_pct,
            down_payment_percentage=dp_pct,
            interest_rate=inputs.interest_rate,
            loan_term=inputs.loan_term,
            can_afford=can_afford,
            converged=converged,
            iterations=iterations,
            constraints=constraints,
            opportunities=opportunities,
            warnings=warnings,
            audit_log=self._audit_log.copy(),
        )

    # ------------------------------------------------------------------
    # Property mode
    # ------------------------------------------------------------------

    @staticmethod
    def _property_location(property: Property) -> Optional[str]:
        if property.location:
            return property.location
        if property.city and property.state:
            return f"{property.city}, {property.state}"
        return property.state

    def score_property(self, inputs: FinancialInputs, property: Property) -> PropertyAffordability:
        """
        Score one property against the household's finances.

        The property is affordable when its payment fits the max monthly
        payment, DTI stays under the ceiling, funds cover the down payment
        and the monthly budget stays non-negative. The score is the mean
        of payment, DTI, down payment and margin sub-scores.
        """
        self._audit_log = []
        cfg = self.config
        warnings: list[str] = []
        constraints: list[str] = []
        recommendations: list[str] = []

        housing_pct, dp_pct = self._policy(inputs)
        gross, take_home, basis = self._monthly_incomes(inputs)
        _, max_payment = self._max_monthly_payment(inputs, basis, take_home, housing_pct)
        tax_rate = self._tax_rate(property.property_tax_rate, self._property_location(property))
        self._check_rate(inputs, dp_pct, warnings)

        price = property.price
        down_payment_needed = price * dp_pct / HUNDRED
        breakdown, loan = self._payment(
            price,
            down_payment_needed,
            inputs,
            tax_rate,
            annual_insurance=property.estimated_insurance,
            monthly_hoa=property.hoa_fees,
        )
        payment = breakdown.total
        self._log_step(
            step="property_payment",
            input_value=f"price={price}, down_payment={_cents(down_payment_needed)}",
            output_value=str(_cents(payment)),
            source="Amortization with tax, insurance, PMI and HOA",
        )

        available = inputs.down_payment_sources
        status, excess, shortfall = self._down_payment_status(available, down_payment_needed)

        dti = self._dti(inputs.fixed_debts + payment, basis)
        monthly_margin = max_payment - payment
        remaining = (
            take_home
            - payment
            - inputs.monthly_expenses
            - inputs.fixed_debts
            - inputs.future_expenses_monthly
        )

        payment_fits = basis > 0 and _cents(payment) <= _cents(max_payment)
        dti_fits = dti is not None and _cents(dti) <= cfg.max_dti_ratio
        funds_cover = available >= down_payment_needed
        budget_holds = _cents(remaining) >= 0
        can_afford = payment_fits and dti_fits and funds_cover and budget_holds

        # Sub-scores, each clamped to 0-100
        payment_score = _clamp_score(HUNDRED - payment / max_payment * HUNDRED) if max_payment > 0 else ZERO
        dti_score = _clamp_score(HUNDRED - dti / cfg.max_dti_ratio * HUNDRED) if dti is not None else ZERO
        down_payment_score = (
            _clamp_score(available / down_payment_needed * HUNDRED) if down_payment_needed > 0 else HUNDRED
        )
        if cfg.strong_margin_threshold > 0:
            margin_score = _clamp_score(remaining / cfg.strong_margin_threshold * HUNDRED)
        else:
            margin_score = HUNDRED if remaining > 0 else ZERO
        score = _cents((payment_score + dti_score + down_payment_score + margin_score) / 4)
        self._log_step(
            step="affordability_score",
            input_value=(
                f"payment={_cents(payment_score)}, dti={_cents(dti_score)}, "
                f"down_payment={_cents(down_payment_score)}, margin={_cents(margin_score)}"
            ),
            output_value=str(score),
            source="Mean of sub-scores",
        )

        if basis <= 0:
            constraints.append("No income entered; add income to calculate affordability")
        if not can_afford:
            if basis > 0 and not payment_fits:
                constraints.append(
                    f"Monthly payment {format_currency(payment)} exceeds recommended "
                    f"{format_currency(max_payment)}"
                )
            if dti is not None and not dti_fits:
                constraints.append(
                    f"DTI ratio {format_percentage(dti)} exceeds "
                    f"{format_percentage(cfg.max_dti_ratio, 0)} limit"
                )
            if not funds_cover:
                constraints.append(
                    f"Need {format_currency(down_payment_needed - available)} more for down payment"
                )
            if not budget_holds:
                constraints.append(
                    f"Monthly shortfall of {format_currency(abs(remaining))} after all obligations"
                )
        else:
            if remaining > cfg.strong_margin_threshold:
                recommendations.append(
                    f"Strong monthly margin of {format_currency(remaining)} leaves a cushion each month"
                )
            if dti is not None and dti < cfg.excellent_dti_threshold:
                recommendations.append(f"Excellent DTI ratio of {format_percentage(dti)}")
            if excess is not None:
                recommendations.append(
                    f"{format_currency(excess)} beyond the down payment could cover closing costs "
                    f"or lower the loan"
                )

        logger.info(
            "property_scored",
            property_id=property.id,
            price=str(price),
            can_afford=can_afford,
            affordability_score=str(score),
        )

        return PropertyAffordability(
            can_afford=can_afford,
            affordability_score=score,
            monthly_payment=payment,
            payment_breakdown=breakdown,
            down_payment_needed=down_payment_needed,
            loan_amount=loan,
            down_payment_status=status,
            excess_amount=excess,
            shortfall_amount=shortfall,
            max_monthly_payment=max_payment,
            monthly_margin=monthly_margin,
            remaining_budget=remaining,
            dti_ratio=dti,
            recommendations=recommendations,
            constraints=constraints,
            warnings=warnings,
            audit_log=self._audit_log.copy(),
        )


def compute_affordability(
    inputs: FinancialInputs,
    property: Optional[Property] = None,
    *,
    config: Optional[Union[AffordabilityConfig, EngineConfig]] = None,
    tax_rate_source: Optional[PropertyTaxRateSource] = None,
) -> Union[AffordabilityCalculation, PropertyAffordability]:
    """
    Validate inputs and run the solver.

    Args:
        inputs: Normalized household figures
        property: Candidate home; when omitted the max price is solved instead
        config: Affordability policy (an EngineConfig is accepted too)
        tax_rate_source: Location-keyed tax rates

    Returns:
        AffordabilityCalculation without a property, PropertyAffordability with one

    Raises:
        InvalidInputError: any input outside its accepted range
    """
    if isinstance(config, EngineConfig):
        config = config.affordability

    validate_financial_inputs(inputs)
    solver = AffordabilitySolver(config=config, tax_rate_source=tax_rate_source)
    if property is None:
        return solver.solve_max_price(inputs)

    validate_property(property)
    return solver.score_property(inputs, property)
