import pytest

from intrinsic.domain.errors import ConfigurationError
from intrinsic.domain.types import Assumptions
from intrinsic.engine.dcf import compute_intrinsic_value
from intrinsic.engine.reverse import solve_implied_growth


class TestSolveImpliedGrowth:
  """Tests for solve_implied_growth function."""

  def test_round_trip(self, sample_fundamentals, gordon_assumptions):
    """Price produced at 15% growth solves back to ~15%."""
    target = compute_intrinsic_value(
        sample_fundamentals,
        gordon_assumptions.with_rates(growth_rate_percent=15.0))

    result = solve_implied_growth(sample_fundamentals, gordon_assumptions,
                                  target)

    assert result.converged
    assert result.error < 0.1
    assert result.growth_rate_percent == pytest.approx(15.0, abs=0.1)
    solved = compute_intrinsic_value(
        sample_fundamentals,
        gordon_assumptions.with_rates(
            growth_rate_percent=result.growth_rate_percent))
    assert solved == pytest.approx(target, abs=0.1)

  def test_negative_implied_growth(self, sample_fundamentals,
                                   multiple_assumptions):
    """A low price implies shrinking FCF."""
    target = compute_intrinsic_value(
        sample_fundamentals,
        multiple_assumptions.with_rates(growth_rate_percent=-20.0))

    result = solve_implied_growth(sample_fundamentals, multiple_assumptions,
                                  target)

    assert result.converged
    assert result.growth_rate_percent == pytest.approx(-20.0, abs=0.1)

  def test_unreachable_high_price(self, sample_fundamentals,
                                  gordon_assumptions):
    """Above the 100% bound: best effort at the upper edge, not converged."""
    result = solve_implied_growth(sample_fundamentals, gordon_assumptions,
                                  1e7)

    assert not result.converged
    assert result.iterations == 100
    assert result.growth_rate_percent == pytest.approx(100.0, abs=1e-6)
    assert result.error > 0.1

  def test_unreachable_low_price(self, sample_fundamentals,
                                 gordon_assumptions):
    """Below the -50% bound the lower edge is returned."""
    result = solve_implied_growth(sample_fundamentals, gordon_assumptions,
                                  0.01)

    assert not result.converged
    assert result.growth_rate_percent == pytest.approx(-50.0, abs=1e-6)

  def test_other_assumptions_held_fixed(self, sample_fundamentals,
                                        gordon_assumptions):
    """Only the growth rate is varied by the solver."""
    solve_implied_growth(sample_fundamentals, gordon_assumptions, 150.0)

    assert gordon_assumptions.growth_rate_percent == 10.0
    assert gordon_assumptions.discount_rate_percent == 9.0

  def test_invalid_assumptions_raise(self, sample_fundamentals):
    """Gordon with r <= tg is rejected before solving."""
    assumptions = Assumptions(discount_rate_percent=2.0,
                              terminal_growth_percent=5.0)

    with pytest.raises(ConfigurationError):
      solve_implied_growth(sample_fundamentals, assumptions, 100.0)
