from datetime import date, datetime

import pandas as pd
import pytest

from household_budget import periods


def test_pay_cycle_before_the_25th_starts_last_month():
    cycle = periods.pay_cycle(date(2024, 3, 10))

    assert cycle.start_date == date(2024, 2, 25)
    assert cycle.end_date == date(2024, 3, 24)


def test_pay_cycle_from_the_25th_starts_this_month():
    cycle = periods.pay_cycle(date(2024, 12, 25))

    assert cycle.start_date == date(2024, 12, 25)
    assert cycle.end_date == date(2025, 1, 24)


def test_last_pay_cycle_is_the_previous_cycle():
    last = periods.preset_range(periods.LAST_PAY_CYCLE, date(2024, 3, 10))

    assert last.start_date == date(2024, 1, 25)
    assert last.end_date == date(2024, 2, 24)
    assert last.label == periods.LAST_PAY_CYCLE


def test_default_range_is_this_pay_cycle():
    today = date(2024, 5, 30)

    assert periods.default_range(today) == periods.preset_range(periods.THIS_PAY_CYCLE, today)


@pytest.mark.parametrize(
    'label, start, end',
    [
        (periods.THIS_MONTH, date(2024, 2, 1), date(2024, 2, 29)),
        (periods.LAST_MONTH, date(2024, 1, 1), date(2024, 1, 31)),
        (periods.LAST_3_MONTHS, date(2023, 12, 1), date(2024, 2, 29)),
        (periods.LAST_6_MONTHS, date(2023, 9, 1), date(2024, 2, 29)),
        (periods.THIS_YEAR, date(2024, 1, 1), date(2024, 12, 31)),
    ],
)
def test_calendar_presets(label, start, end):
    resolved = periods.preset_range(label, date(2024, 2, 15))

    assert (resolved.start_date, resolved.end_date) == (start, end)


def test_unknown_preset_raises():
    with pytest.raises(ValueError):
        periods.preset_range('Next Decade', date(2024, 1, 1))


def test_custom_range_swaps_reversed_bounds():
    custom = periods.custom_range('2024-03-31', '2024-03-01')

    assert custom.start_date == date(2024, 3, 1)
    assert custom.end_date == date(2024, 3, 31)
    assert custom.label == 'Mar 01 - Mar 31, 2024'


def test_contains_includes_the_whole_last_day():
    cycle = periods.pay_cycle(date(2024, 3, 10))

    assert cycle.contains(date(2024, 3, 24))
    assert cycle.contains(datetime(2024, 3, 24, 23, 59))
    assert not cycle.contains(datetime(2024, 3, 25, 0, 0))
    assert not cycle.contains(date(2024, 2, 24))


def test_trailing_months_excludes_current_month_oldest_first():
    window = periods.trailing_months(date(2024, 7, 15))

    assert window[0] == pd.Period('2024-01', freq='M')
    assert window[-1] == pd.Period('2024-06', freq='M')
    assert len(window) == 6
