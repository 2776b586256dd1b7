#!/usr/bin/env python3
"""
History CSV loading tests.
"""

import io

import pandas as pd
import pytest

from portfolio_mcmc.data import load_returns_csv


GO_FORMAT = '''Date,FONDS 0,FONDS 1
1999-01-29,"5,648","4,161"
1999-02-26,"0,686","2,190"
'''


def test_comma_decimal_percent_values():
    collection = load_returns_csv(io.StringIO(GO_FORMAT))

    assert sorted(collection) == ['FONDS 0', 'FONDS 1']
    fonds0 = collection['FONDS 0']
    assert fonds0.name == 'FONDS 0'
    assert list(fonds0.dates) == [pd.Timestamp('1999-01-29'), pd.Timestamp('1999-02-26')]
    assert fonds0.values == pytest.approx([0.05648, 0.00686], abs=1e-5)
    assert collection['FONDS 1'].values == pytest.approx([0.04161, 0.02190], abs=1e-5)


def test_fraction_values():
    text = "Date,A\n2000-01-31,0.01\n2000-02-29,-0.02\n"
    collection = load_returns_csv(io.StringIO(text), kind='fraction')
    assert collection['A'].values == pytest.approx([0.01, -0.02])


def test_level_values_become_returns():
    text = "Date,A\n2000-01-31,100\n2000-02-29,110\n2000-03-31,99\n"
    collection = load_returns_csv(io.StringIO(text), kind='level')

    series = collection['A']
    assert len(series) == 2
    assert series.dates[0] == pd.Timestamp('2000-02-29')
    assert series.values == pytest.approx([0.10, -0.10])


def test_file_path(history_csv):
    collection = load_returns_csv(str(history_csv))
    assert len(collection['A']) == 24
    assert collection['A'].values[:4] == pytest.approx([0.02, -0.01, 0.03, 0.00])


def test_unknown_kind():
    with pytest.raises(ValueError, match="kind must be one of"):
        load_returns_csv(io.StringIO(GO_FORMAT), kind='basis points')


def test_needs_asset_column():
    with pytest.raises(ValueError, match="at least one asset column"):
        load_returns_csv(io.StringIO("Date\n2000-01-31\n"))


def test_bad_dates():
    with pytest.raises(ValueError, match="YYYY-MM-DD"):
        load_returns_csv(io.StringIO("Date,A\n31/01/2000,1\n"))


def test_bad_values():
    with pytest.raises(ValueError, match="Could not parse"):
        load_returns_csv(io.StringIO("Date,A\n2000-01-31,abc\n"))
