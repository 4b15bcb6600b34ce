'''
Single-company valuation entrypoint.

This module provides the main entry point for running valuations. It:
1. Fetches a market snapshot (quote, metrics, FX) for the ticker
2. Normalizes the raw fundamentals into USD
3. Runs the DCF engine, reverse DCF and sensitivity grid
4. Returns a ValuationReport with ratios and diagnostics

Usage:
  from intrinsic.run import run_valuation
  from intrinsic.scenarios.config import ScenarioConfig

  report = run_valuation(ticker='AAPL', config=ScenarioConfig.default())
  print(f"IV: ${report.intrinsic_value:.2f}")
'''

import argparse
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from intrinsic.analysis import ratios
from intrinsic.analysis.sensitivity import favorable_cells
from intrinsic.analysis.sensitivity import SensitivityGridBuilder
from intrinsic.analysis.sensitivity import to_frame
from intrinsic.domain.types import Assumptions
from intrinsic.domain.types import Fundamentals
from intrinsic.domain.types import TerminalMethod
from intrinsic.domain.types import ValuationReport
from intrinsic.engine.dcf import compute_dcf
from intrinsic.engine.dcf import project_values
from intrinsic.engine.reverse import solve_implied_growth
from intrinsic.fetch.fx import ExchangeRateClient
from intrinsic.fetch.metrics import FinnhubClient
from intrinsic.fetch.quotes import YahooQuoteClient
from intrinsic.fetch.service import MarketDataService
from intrinsic.normalize.normalizer import FundamentalsNormalizer
from intrinsic.scenarios.config import ScenarioConfig
from intrinsic.scenarios.registry import create_scenario
from intrinsic.scenarios.registry import list_scenarios
from intrinsic.settings import Settings

logger = logging.getLogger(__name__)


def build_service(settings: Settings) -> MarketDataService:
  '''Market data service wired with the user's API keys.'''
  return MarketDataService(
      quotes=YahooQuoteClient(),
      metrics=FinnhubClient(settings.finnhub_api_key),
      fx=ExchangeRateClient(settings.exchange_rate_api_key),
  )


def value_fundamentals(
    ticker: str,
    fundamentals: Fundamentals,
    assumptions: Assumptions,
    market_price: Optional[float] = None,
    settings: Optional[Settings] = None,
    max_workers: Optional[int] = None,
) -> ValuationReport:
  '''
  Value already-normalized fundamentals.

  A missing or non-positive market price is treated as unknown: reverse
  DCF, FCF yield and the buyable flag are disabled.

  Args:
    ticker: Company ticker symbol
    fundamentals: Normalized USD fundamentals
    assumptions: User assumptions
    market_price: Live USD price, if known
    settings: Supplies CAPM parameters (default: Settings())
    max_workers: Thread pool size for the sensitivity grid

  Returns:
    ValuationReport

  Raises:
    ConfigurationError: If the assumptions are invalid
  '''
  settings = settings or Settings()
  assumptions.validate()

  dcf = compute_dcf(fundamentals, assumptions)
  projection = project_values(dcf.iv_per_share,
                              assumptions.growth_rate_percent)
  grid = SensitivityGridBuilder(fundamentals,
                                assumptions).build(max_workers=max_workers)

  price_known = market_price is not None and market_price > 0
  price = market_price if price_known else 0.0

  implied_growth = None
  fcf_yield = None
  fcf_yield_signal = None
  if price_known:
    implied_growth = solve_implied_growth(fundamentals, assumptions, price)
    fcf_yield = ratios.fcf_yield(fundamentals.fcf_per_share, price)
    fcf_yield_signal = ratios.classify_fcf_yield(fcf_yield)

  peg = ratios.peg_ratio(fundamentals.current_pe,
                         assumptions.growth_rate_percent)
  target = ratios.buy_target(dcf.iv_per_share,
                             assumptions.margin_of_safety_percent)

  diag: Dict[str, Any] = {
      'favorable_cells': len(favorable_cells(grid, price)),
      'historical_pe': fundamentals.historical_pe,
      'fcf_cagr_percent': fundamentals.fcf_cagr_percent,
  }
  if implied_growth is not None:
    diag['reverse_dcf_error'] = implied_growth.error
    diag['reverse_dcf_converged'] = implied_growth.converged

  return ValuationReport(
      ticker=ticker,
      fundamentals=fundamentals,
      assumptions=assumptions,
      dcf=dcf,
      projection=projection,
      grid=grid,
      market_price=market_price if price_known else None,
      implied_growth=implied_growth,
      peg_ratio=peg,
      peg_signal=ratios.classify_peg(peg),
      fcf_yield_percent=fcf_yield,
      fcf_yield_signal=fcf_yield_signal,
      capm_discount_rate=ratios.capm_discount_rate(
          fundamentals.beta, settings.risk_free_rate,
          settings.equity_risk_premium),
      buy_target=target,
      buyable=ratios.is_buyable(price, target),
      diag=diag,
  )


def run_valuation(
    ticker: str,
    config: Optional[ScenarioConfig] = None,
    settings: Optional[Settings] = None,
    service: Optional[MarketDataService] = None,
    apply_capm: bool = False,
    max_workers: Optional[int] = None,
) -> ValuationReport:
  '''
  Fetch, normalize and value a single ticker.

  Args:
    ticker: Company ticker symbol (e.g., 'AAPL')
    config: ScenarioConfig (default: ScenarioConfig.default())
    settings: API keys and defaults (default: Settings.load())
    service: Market data service (default: built from settings)
    apply_capm: Replace the discount rate with the CAPM suggestion when
      a beta is available
    max_workers: Thread pool size for the sensitivity grid

  Returns:
    ValuationReport with diagnostics from normalization

  Raises:
    FetchError: If the quote or metrics cannot be retrieved
    MissingPriceError: If no usable live price was obtained
    ConfigurationError: If the assumptions are invalid
  '''
  config = config or ScenarioConfig.default()
  settings = settings or Settings.load()
  service = service or build_service(settings)

  snapshot = service.fetch_snapshot(ticker)
  normalized = FundamentalsNormalizer(service.fx.get_rate).normalize(
      snapshot.raw)
  fundamentals = normalized.value

  assumptions = config.to_assumptions()
  capm_applied = False
  if apply_capm:
    capm = ratios.capm_discount_rate(fundamentals.beta,
                                     settings.risk_free_rate,
                                     settings.equity_risk_premium)
    if capm is not None:
      assumptions = assumptions.with_rates(discount_rate_percent=capm)
      capm_applied = True
    else:
      logger.warning('%s: no beta available, keeping %.2f%% discount rate',
                     snapshot.ticker, assumptions.discount_rate_percent)

  report = value_fundamentals(
      ticker=snapshot.ticker,
      fundamentals=fundamentals,
      assumptions=assumptions,
      market_price=snapshot.price_usd,
      settings=settings,
      max_workers=max_workers,
  )
  report.diag.update({
      'scenario': config.name,
      'capm_applied': capm_applied,
      'quote_currency': snapshot.quote.currency,
      'quote_change_percent': snapshot.quote.change_percent,
  })
  report.diag.update({f'normalize_{k}': v for k, v in normalized.diag.items()})
  return report


def _apply_overrides(config: ScenarioConfig, args: argparse.Namespace,
                     settings: Settings) -> ScenarioConfig:
  '''Command-line values take precedence over the preset.'''
  overrides = {
      'growth_rate': args.growth,
      'discount_rate': args.discount,
      'terminal_growth': args.terminal_growth,
      'exit_multiple': args.exit_multiple,
      'method': args.method,
      'margin_of_safety': args.margin,
  }
  data = config.to_dict()
  if args.margin is None and args.scenario == 'default':
    data['margin_of_safety'] = settings.default_margin_of_safety
  data.update({k: v for k, v in overrides.items() if v is not None})
  return ScenarioConfig.from_dict(data)


def _print_report(report: ValuationReport) -> None:
  separator = '=' * 70
  a = report.assumptions
  f = report.fundamentals

  print('\n' + separator)
  print(f'DCF Valuation - {report.ticker}')
  print(separator)
  print(f'FCF/share: ${f.fcf_per_share:.2f}   Shares: {f.shares_outstanding_b:.3f}B'
        f'   Net cash/share: ${report.dcf.net_cash_per_share:.2f}')
  print(f'Growth: {a.growth_rate_percent:.2f}%   '
        f'Discount: {a.discount_rate_percent:.2f}%   '
        f'Terminal: {a.method.value}')

  print(f'\nIntrinsic Value: ${report.intrinsic_value:.2f}')
  print(f'  PV Explicit: ${report.dcf.pv_explicit:.2f}')
  print(f'  TV Component: ${report.dcf.tv_component:.2f}')
  print(f'Buy Target ({a.margin_of_safety_percent:.0f}% MoS): '
        f'${report.buy_target:.2f}')

  if report.market_price is not None:
    print(f'\nMarket Price: ${report.market_price:.2f}'
          f'   Buyable: {"yes" if report.buyable else "no"}')
  if report.implied_growth is not None:
    print(f'Implied Growth: {report.implied_growth.growth_rate_percent:.2f}%')
  print(f'PEG: {report.peg_ratio:.2f} ({report.peg_signal or "n/a"})')
  if report.fcf_yield_percent is not None:
    print(f'FCF Yield: {report.fcf_yield_percent:.2f}% '
          f'({report.fcf_yield_signal})')
  if report.capm_discount_rate is not None:
    print(f'CAPM Discount Rate: {report.capm_discount_rate:.2f}%')

  print('\nProjection:')
  for point in report.projection:
    print(f'  Year {point.year}: ${point.value:.2f}')

  print('\n' + separator)
  print('Intrinsic Value per Share ($)')
  print(separator)
  print(to_frame(report.grid).to_string(float_format=lambda x: f'${x:.2f}'))
  print(separator + '\n')


def main() -> None:
  '''CLI entrypoint.'''
  parser = argparse.ArgumentParser(description='Run DCF valuation')
  parser.add_argument('--ticker',
                      type=str,
                      required=True,
                      help='Company ticker')
  parser.add_argument('--scenario',
                      type=str,
                      default='default',
                      choices=list_scenarios(),
                      help='Scenario preset')
  parser.add_argument('--growth', type=float, help='Growth rate (%%)')
  parser.add_argument('--discount', type=float, help='Discount rate (%%)')
  parser.add_argument('--terminal-growth',
                      type=float,
                      help='Terminal growth rate (%%)')
  parser.add_argument('--exit-multiple', type=float, help='Exit FCF multiple')
  parser.add_argument('--method',
                      choices=[m.value for m in TerminalMethod],
                      help='Terminal value method')
  parser.add_argument('--margin', type=float, help='Margin of safety (%%)')
  parser.add_argument('--apply-capm',
                      action='store_true',
                      help='Use the CAPM discount rate when beta is known')
  parser.add_argument('--settings',
                      type=Path,
                      help='Path to settings JSON')
  parser.add_argument('--workers',
                      type=int,
                      help='Threads for the sensitivity grid')
  parser.add_argument('--output',
                      type=Path,
                      help='Output CSV path for the sensitivity table')
  parser.add_argument('--verbose',
                      '-v',
                      action='store_true',
                      help='Verbose output')
  args = parser.parse_args()

  logging.basicConfig(
      level=logging.DEBUG if args.verbose else logging.INFO,
      format='%(asctime)s [%(levelname)s] %(message)s',
      datefmt='%Y-%m-%d %H:%M:%S',
  )

  settings = Settings.load(args.settings)
  config = _apply_overrides(create_scenario(args.scenario), args, settings)
  logger.info('Using scenario: %s', config.name)

  report = run_valuation(
      ticker=args.ticker,
      config=config,
      settings=settings,
      apply_capm=args.apply_capm,
      max_workers=args.workers,
  )
  _print_report(report)

  if args.output:
    to_frame(report.grid).to_csv(args.output)
    logger.info('Saved to: %s', args.output)


if __name__ == '__main__':
  main()
