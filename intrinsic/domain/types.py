'''
Domain types for the valuation engine.

These dataclasses are the value objects passed between the normalizer,
the DCF engine, the solvers and the ratio calculators. All monetary
fields are USD; absolutes (shares, cash, debt, total FCF) are in billions.
Growth and discount inputs are percentages (10.0 means 10%).
'''

from dataclasses import dataclass, field, replace
import enum
from typing import Any, Dict, Generic, List, Mapping, Optional, TypeVar

from intrinsic.domain.errors import ConfigurationError

T = TypeVar('T')

MAX_MARGIN_OF_SAFETY = 60.0


@dataclass
class PolicyOutput(Generic[T]):
  '''
  Standard output from any policy or derivation.

  Attributes:
    value: The computed value (type depends on policy)
    diag: Dictionary of diagnostic information
  '''
  value: T
  diag: Dict[str, Any] = field(default_factory=dict)


class TerminalMethod(str, enum.Enum):
  '''Terminal value policy applied after the explicit horizon.'''
  GORDON_GROWTH = 'gordon'
  MARKET_MULTIPLE = 'multiple'


@dataclass(frozen=True)
class Fundamentals:
  '''
  Normalized per-ticker fundamentals, USD basis.

  Attributes:
    fcf_per_share: Free cash flow per share
    shares_outstanding_b: Shares outstanding, billions
    cash_b: Total cash, billions
    debt_b: Total debt, billions
    current_pe: Trailing P/E (0 means unknown)
    historical_pe: Multi-year average P/E (0 means unknown)
    year_high: 52-week high, never below the live price after normalization
    beta: Market beta, None when unavailable
    fcf_cagr_percent: Trailing FCF CAGR in percent, None when undefined
  '''
  fcf_per_share: float = 0.0
  shares_outstanding_b: float = 0.0
  cash_b: float = 0.0
  debt_b: float = 0.0
  current_pe: float = 0.0
  historical_pe: float = 0.0
  year_high: float = 0.0
  beta: Optional[float] = None
  fcf_cagr_percent: Optional[float] = None

  @property
  def net_cash_per_share(self) -> float:
    '''(cash - debt) / shares, or 0 when shares are unknown.'''
    if self.shares_outstanding_b > 0:
      return (self.cash_b - self.debt_b) / self.shares_outstanding_b
    return 0.0


@dataclass(frozen=True)
class Assumptions:
  '''
  User-controlled valuation assumptions.

  Attributes:
    growth_rate_percent: Annual FCF growth over the 5-year horizon
    discount_rate_percent: Required return
    terminal_growth_percent: Perpetual growth (Gordon method only)
    exit_multiple: Terminal FCF multiple (market-multiple method only)
    method: Terminal value method
    margin_of_safety_percent: Discount applied for the buy target, [0, 60]
  '''
  growth_rate_percent: float = 10.0
  discount_rate_percent: float = 9.0
  terminal_growth_percent: float = 2.5
  exit_multiple: float = 15.0
  method: TerminalMethod = TerminalMethod.GORDON_GROWTH
  margin_of_safety_percent: float = 10.0

  def validate(self) -> 'Assumptions':
    '''
    Check the ranges that do not depend on the terminal computation.

    Raises:
      ConfigurationError: If the margin of safety is outside [0, 60]
    '''
    mos = self.margin_of_safety_percent
    if not 0.0 <= mos <= MAX_MARGIN_OF_SAFETY:
      raise ConfigurationError(
          f'margin_of_safety_percent must be in [0, {MAX_MARGIN_OF_SAFETY:g}],'
          f' got {mos}')
    return self

  def with_rates(
      self,
      growth_rate_percent: Optional[float] = None,
      discount_rate_percent: Optional[float] = None,
  ) -> 'Assumptions':
    '''Copy with growth and/or discount rate substituted.'''
    changes: Dict[str, float] = {}
    if growth_rate_percent is not None:
      changes['growth_rate_percent'] = growth_rate_percent
    if discount_rate_percent is not None:
      changes['discount_rate_percent'] = discount_rate_percent
    return replace(self, **changes)


@dataclass(frozen=True)
class RawFundamentals:
  '''
  Partially populated fundamentals as delivered by a data provider.

  Every field is optional; absent upstream values must be None, never 0.
  Absolutes are in billions of the reporting currency. `price_usd` is the
  live price already converted to USD.

  Attributes:
    price_usd: Live price in USD (mandatory for normalization)
    currency: Reporting currency code, defaults to USD
    total_fcf_b: Total free cash flow
    price_to_fcf: Price / FCF-per-share ratio
    total_cash_b: Total cash
    cash_per_share: Cash per share
    total_debt_b: Total debt
    debt_to_equity: Total debt / total equity ratio
    book_value_per_share: Book value per share
    shares_outstanding_b: Shares outstanding
    year_high: 52-week high in the reporting currency
    trailing_pe: Trailing P/E
    beta: Market beta
    pe_series: Annual P/E observations keyed by period (ISO date)
    fcf_series: Annual FCF observations keyed by period (ISO date)
  '''
  price_usd: Optional[float] = None
  currency: Optional[str] = None
  total_fcf_b: Optional[float] = None
  price_to_fcf: Optional[float] = None
  total_cash_b: Optional[float] = None
  cash_per_share: Optional[float] = None
  total_debt_b: Optional[float] = None
  debt_to_equity: Optional[float] = None
  book_value_per_share: Optional[float] = None
  shares_outstanding_b: Optional[float] = None
  year_high: Optional[float] = None
  trailing_pe: Optional[float] = None
  beta: Optional[float] = None
  pe_series: Optional[Mapping[str, float]] = None
  fcf_series: Optional[Mapping[str, float]] = None

  @classmethod
  def from_fundamentals(cls, fundamentals: Fundamentals,
                        price_usd: float) -> 'RawFundamentals':
    '''
    Express already-normalized USD fundamentals as raw provider input.

    Used when a user edits fundamentals by hand and the record has to be
    pushed back through the normalizer.
    '''
    f = fundamentals
    fcf_series = None
    if f.fcf_cagr_percent is not None:
      fcf_series = {
          '0': 1.0,
          '1': 1.0 + f.fcf_cagr_percent / 100.0,
      }
    return cls(
        price_usd=price_usd,
        currency='USD',
        total_fcf_b=f.fcf_per_share * f.shares_outstanding_b
        if f.shares_outstanding_b > 0 else None,
        price_to_fcf=price_usd / f.fcf_per_share
        if f.fcf_per_share > 0 else None,
        total_cash_b=f.cash_b,
        total_debt_b=f.debt_b,
        shares_outstanding_b=f.shares_outstanding_b,
        year_high=f.year_high if f.year_high > 0 else None,
        trailing_pe=f.current_pe if f.current_pe != 0 else None,
        beta=f.beta,
        pe_series={'avg': f.historical_pe} if f.historical_pe > 0 else None,
        fcf_series=fcf_series,
    )


@dataclass(frozen=True)
class ProjectionPoint:
  '''Projected intrinsic value at `year` (0 is today's estimate).'''
  year: int
  value: float


@dataclass(frozen=True)
class SensitivityCell:
  '''
  One cell of the sensitivity grid.

  `value` is None when the cell's assumptions are invalid (Gordon growth
  with discount rate <= terminal growth).
  '''
  growth_rate: float
  discount_rate: float
  value: Optional[float]

  def is_favorable(self, current_price: float) -> bool:
    '''Strictly above a known market price.'''
    if self.value is None or current_price <= 0:
      return False
    return self.value > current_price


@dataclass(frozen=True)
class DCFResult:
  '''
  Intrinsic value per share with its components.

  Attributes:
    iv_per_share: Total intrinsic value per share
    pv_explicit: Present value of the explicit horizon
    tv_component: Discounted terminal value
    net_cash_per_share: Undiscounted (cash - debt) / shares
    final_fcf: FCF per share in the last explicit year
  '''
  iv_per_share: float
  pv_explicit: float
  tv_component: float
  net_cash_per_share: float
  final_fcf: float


@dataclass(frozen=True)
class ReverseDCFResult:
  '''
  Growth rate implied by a market price.

  Attributes:
    growth_rate_percent: Solved growth rate, percent
    target_price: Price the solver aimed at
    achieved_value: DCF value at the solved growth rate
    error: |achieved_value - target_price|
    iterations: Bisection steps taken
    converged: Whether the tolerance was met before the budget ran out
  '''
  growth_rate_percent: float
  target_price: float
  achieved_value: float
  error: float
  iterations: int
  converged: bool


@dataclass
class ValuationReport:
  '''
  Complete valuation output for one ticker.

  Price-relative fields are None when the market price is unknown.
  '''
  ticker: str
  fundamentals: Fundamentals
  assumptions: Assumptions
  dcf: DCFResult
  projection: List[ProjectionPoint]
  grid: List[List[SensitivityCell]]
  market_price: Optional[float] = None
  implied_growth: Optional[ReverseDCFResult] = None
  peg_ratio: float = 0.0
  peg_signal: Optional[str] = None
  fcf_yield_percent: Optional[float] = None
  fcf_yield_signal: Optional[str] = None
  capm_discount_rate: Optional[float] = None
  buy_target: float = 0.0
  buyable: bool = False
  diag: Dict[str, Any] = field(default_factory=dict)

  @property
  def intrinsic_value(self) -> float:
    return self.dcf.iv_per_share

  def to_dict(self) -> Dict[str, Any]:
    '''Convert to a flat dictionary for DataFrame creation.'''
    result: Dict[str, Any] = {
        'ticker': self.ticker,
        'iv_per_share': self.dcf.iv_per_share,
        'pv_explicit': self.dcf.pv_explicit,
        'tv_component': self.dcf.tv_component,
        'net_cash_per_share': self.dcf.net_cash_per_share,
        'market_price': self.market_price,
        'implied_growth_percent': (self.implied_growth.growth_rate_percent
                                   if self.implied_growth else None),
        'peg_ratio': self.peg_ratio,
        'peg_signal': self.peg_signal,
        'fcf_yield_percent': self.fcf_yield_percent,
        'fcf_yield_signal': self.fcf_yield_signal,
        'capm_discount_rate': self.capm_discount_rate,
        'buy_target': self.buy_target,
        'buyable': self.buyable,
        'growth_rate_percent': self.assumptions.growth_rate_percent,
        'discount_rate_percent': self.assumptions.discount_rate_percent,
        'terminal_method': self.assumptions.method.value,
    }
    result.update(self.diag)
    return result
