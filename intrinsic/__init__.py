'''
Intrinsic value estimation from free-cash-flow fundamentals.

The package normalizes sparse provider data into USD fundamentals, values
them with a 5-year DCF (Gordon growth or exit multiple terminal value),
solves the growth rate implied by the market price, builds a sensitivity
grid and derives PEG, FCF yield, CAPM and buy-target signals.

Usage:
  from intrinsic.domain.types import Assumptions, Fundamentals
  from intrinsic.run import value_fundamentals

  report = value_fundamentals('ACME', Fundamentals(fcf_per_share=6.0,
                                                   shares_outstanding_b=1.0),
                              Assumptions(), market_price=100.0)
'''
