'''Normalization of provider data into USD fundamentals.'''

from intrinsic.normalize.normalizer import average_historical_pe
from intrinsic.normalize.normalizer import compute_fcf_cagr
from intrinsic.normalize.normalizer import FundamentalsNormalizer
from intrinsic.normalize.normalizer import normalize_fundamentals

__all__ = [
    'FundamentalsNormalizer',
    'average_historical_pe',
    'compute_fcf_cagr',
    'normalize_fundamentals',
]
