"""
Tests for step-up contribution projections.
"""

from decimal import Decimal

from moneymath.calculations.annuity import annuity_future_value
from moneymath.calculations.stepup import StepUpRequest, project_stepup


class TestStepUpProjection:
    """Test the year-by-year step-up plan."""

    def test_total_invested_with_stepup(self):
        """10,000 a month stepped up 10% a year for 3 years."""
        projection = project_stepup(
            StepUpRequest(
                monthly_contribution=Decimal("10000"),
                annual_return_percent=Decimal("12"),
                years=3,
                annual_stepup_percent=Decimal("10"),
            )
        )
        # 120,000 + 132,000 + 145,200
        assert projection.total_invested == Decimal("397200.00")
        assert projection.first_year_monthly_contribution == Decimal("10000.00")
        assert projection.last_year_monthly_contribution == Decimal("12100.00")
        assert projection.maturity_value > projection.total_invested
        assert (
            projection.wealth_gained
            == projection.maturity_value - projection.total_invested
        )

    def test_zero_stepup_invests_flat_amount(self):
        projection = project_stepup(
            StepUpRequest(
                monthly_contribution=Decimal("5000"),
                annual_return_percent=Decimal("10"),
                years=5,
            )
        )
        assert projection.total_invested == Decimal("5000") * 12 * 5
        assert all(
            record.monthly_contribution == Decimal("5000.00")
            for record in projection.yearly_breakdown
        )

    def test_last_year_is_not_grown(self):
        """The final year's deposits are valued at year end only."""
        projection = project_stepup(
            StepUpRequest(
                monthly_contribution=Decimal("10000"),
                annual_return_percent=Decimal("12"),
                years=3,
            )
        )
        last = projection.yearly_breakdown[-1]
        assert last.value_at_horizon == last.value_at_year_end
        assert abs(last.value_at_year_end - annuity_future_value(10000, 12, 12)) < Decimal("0.01")
        assert projection.yearly_breakdown[0].value_at_horizon > last.value_at_horizon

    def test_maturity_curve_is_cumulative(self):
        projection = project_stepup(
            StepUpRequest(
                monthly_contribution=Decimal("10000"),
                annual_return_percent=Decimal("12"),
                years=4,
                annual_stepup_percent=Decimal("5"),
            )
        )
        values = [point.value for point in projection.maturity_curve]
        assert [point.label for point in projection.maturity_curve] == [
            "Year 1",
            "Year 2",
            "Year 3",
            "Year 4",
        ]
        assert values == sorted(values)
        assert values[-1] == projection.maturity_value

    def test_invalid_inputs_return_zero_projection(self):
        for request in (
            StepUpRequest(Decimal("10000"), Decimal("12"), 0),
            StepUpRequest(Decimal("0"), Decimal("12"), 10),
        ):
            projection = project_stepup(request)
            assert projection.total_invested == 0
            assert projection.maturity_value == 0
            assert projection.yearly_breakdown == []
