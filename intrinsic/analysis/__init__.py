'''
Valuation analysis utilities: sensitivity grid and derived ratios.
'''

from intrinsic.analysis.ratios import buy_target
from intrinsic.analysis.ratios import capm_discount_rate
from intrinsic.analysis.ratios import classify_fcf_yield
from intrinsic.analysis.ratios import classify_peg
from intrinsic.analysis.ratios import fcf_yield
from intrinsic.analysis.ratios import is_buyable
from intrinsic.analysis.ratios import peg_ratio
from intrinsic.analysis.sensitivity import SensitivityGridBuilder

__all__ = [
    'SensitivityGridBuilder',
    'buy_target',
    'capm_discount_rate',
    'classify_fcf_yield',
    'classify_peg',
    'fcf_yield',
    'is_buyable',
    'peg_ratio',
]
