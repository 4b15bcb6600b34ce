"""Exceptions raised by the valuation engine."""


class ConfigurationError(ValueError):
  """Assumptions that make the valuation model undefined."""


class MissingPriceError(ValueError):
  """The live USD price needed to normalize fundamentals is unavailable."""
