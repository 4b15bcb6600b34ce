import pytest

from intrinsic.domain.types import Assumptions
from intrinsic.domain.types import Fundamentals
from intrinsic.domain.types import RawFundamentals
from intrinsic.domain.types import TerminalMethod


@pytest.fixture
def sample_fundamentals() -> Fundamentals:
  """$6 FCF/share, 1B shares, no cash or debt."""
  return Fundamentals(
      fcf_per_share=6.0,
      shares_outstanding_b=1.0,
      cash_b=0.0,
      debt_b=0.0,
      current_pe=25.0,
      historical_pe=22.0,
      year_high=130.0,
      beta=1.2,
      fcf_cagr_percent=8.0,
  )


@pytest.fixture
def gordon_assumptions() -> Assumptions:
  """10% growth, 9% discount, 2% terminal growth."""
  return Assumptions(
      growth_rate_percent=10.0,
      discount_rate_percent=9.0,
      terminal_growth_percent=2.0,
      exit_multiple=15.0,
      method=TerminalMethod.GORDON_GROWTH,
      margin_of_safety_percent=10.0,
  )


@pytest.fixture
def multiple_assumptions(gordon_assumptions) -> Assumptions:
  """Same rates with a 15x exit multiple."""
  return Assumptions(
      growth_rate_percent=gordon_assumptions.growth_rate_percent,
      discount_rate_percent=gordon_assumptions.discount_rate_percent,
      terminal_growth_percent=gordon_assumptions.terminal_growth_percent,
      exit_multiple=15.0,
      method=TerminalMethod.MARKET_MULTIPLE,
      margin_of_safety_percent=10.0,
  )


@pytest.fixture
def usd_raw() -> RawFundamentals:
  """Fully populated USD provider data."""
  return RawFundamentals(
      price_usd=100.0,
      currency='USD',
      total_fcf_b=12.0,
      price_to_fcf=25.0,
      total_cash_b=30.0,
      total_debt_b=10.0,
      shares_outstanding_b=2.0,
      year_high=120.0,
      trailing_pe=28.0,
      beta=1.1,
      pe_series={'2021-12-31': 20.0, '2022-12-31': 24.0, '2023-12-31': 28.0},
      fcf_series={'2021-12-31': 8.0, '2022-12-31': 10.0, '2023-12-31': 12.5},
  )
