#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Performance statistics over monthly return series.

All inputs are fractional monthly returns (0.05 = +5%). Percent-valued
outputs (returns, volatility) are scaled by 100.

Degenerate inputs are not clamped: an empty series gives NaN everywhere and
a zero-volatility series gives an infinite or NaN Sharpe ratio.
"""
import numpy as np

PERIODS_PER_YEAR = 12

##### Descriptive statistics ####

def _as_array(x):
    return np.asarray(x, dtype=float)

def average(x):
    '''Arithmetic mean'''
    x = _as_array(x)
    if x.size == 0:
        return np.nan
    return float(x.mean())

def variance(x):
    '''Population variance (divides by N)'''
    x = _as_array(x)
    if x.size == 0:
        return np.nan
    return float(np.var(x))

def std_dev(x):
    '''Population standard deviation'''
    return float(np.sqrt(variance(x)))

def minimum(x):
    x = _as_array(x)
    if x.size == 0:
        return np.nan
    return float(x.min())

def maximum(x):
    x = _as_array(x)
    if x.size == 0:
        return np.nan
    return float(x.max())

def last(x):
    '''Most recent value, NaN for an empty series'''
    x = _as_array(x)
    if x.size == 0:
        return np.nan
    return float(x[-1])

##### Annualized performance ####

def annualized_return(x):
    '''Compute Annualized Return: 100 * (prod(1 + r) ** (12 / N) - 1)'''
    x = _as_array(x)
    if x.size == 0:
        return np.nan

    gross_return = np.prod(1 + x)
    years = x.size / PERIODS_PER_YEAR
    with np.errstate(invalid='ignore', divide='ignore', over='ignore'):
        ann_return = np.float64(gross_return) ** (1 / years) - 1
    return float(100 * ann_return)

def annualized_volatility(x):
    '''Compute Annualized Volatility: 100 * stddev(monthly returns) * sqrt(12)'''
    x = _as_array(x)
    if x.size == 0:
        return np.nan
    return float(100 * np.std(x) * np.sqrt(PERIODS_PER_YEAR))

def sharpe_ratio(x):
    '''
    Annualized Return / Annualized Volatility.

    Unlike the textbook ratio no risk-free rate is subtracted; the value is
    only used to rank allocations against each other.
    '''
    ret = np.float64(annualized_return(x))
    vol = np.float64(annualized_volatility(x))
    with np.errstate(invalid='ignore', divide='ignore'):
        return float(ret / vol)

def summary(x):
    '''Returns, Volatility and Sharpe Ratio as a dict'''
    return {
        'Returns': annualized_return(x),
        'Volatility': annualized_volatility(x),
        'Sharpe Ratio': sharpe_ratio(x),
    }
