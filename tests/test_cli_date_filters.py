"""Tests for CLI date range resolution."""

from datetime import date

import click
import pytest

from contarec.cli.date_filters import period_flags, resolve_cli_date_range
from contarec.utils.date_parser import get_date_range

NO_PERIOD = period_flags(False, False, False, False)


def _ctx() -> click.Context:
    return click.Context(click.Command("calculate"))


def _resolve(start_date=None, end_date=None, flags=NO_PERIOD, default_range=None):
    return resolve_cli_date_range(
        _ctx(),
        start_date=start_date,
        end_date=end_date,
        period_flags=flags,
        default_range=default_range,
    )


@pytest.mark.parametrize(
    "flags, period",
    [
        (period_flags(True, False, False, False), "this-month"),
        (period_flags(False, True, False, False), "this-year"),
        (period_flags(False, False, True, False), "last-month"),
        (period_flags(False, False, False, True), "last-year"),
    ],
)
def test_period_flag_gives_its_range(flags, period):
    assert _resolve(flags=flags) == get_date_range(period)


def test_display_dates():
    assert _resolve("01/02/2024", "29/02/2024") == (date(2024, 2, 1), date(2024, 2, 29))


def test_open_end():
    assert _resolve(start_date="01/02/2024") == (date(2024, 2, 1), None)


def test_nothing_given():
    assert _resolve() == (None, None)


def test_default_range_when_nothing_given():
    default_range = (date(2023, 1, 1), date(2023, 12, 31))
    assert _resolve(default_range=default_range) == default_range
    assert _resolve(end_date="30/06/2024", default_range=default_range) == (
        None,
        date(2024, 6, 30),
    )


@pytest.mark.parametrize(
    "kwargs, message",
    [
        ({"flags": period_flags(True, False, False, True)}, "Only one period option"),
        (
            {"start_date": "01/01/2024", "flags": period_flags(False, True, False, False)},
            "cannot be combined",
        ),
        ({"start_date": "sometime"}, "Invalid start date"),
        ({"end_date": "sometime"}, "Invalid end date"),
        ({"start_date": "31/12/2024", "end_date": "01/01/2024"}, "must not be after"),
    ],
)
def test_invalid_ranges_exit(capsys, kwargs, message):
    with pytest.raises(click.exceptions.Exit) as excinfo:
        _resolve(**kwargs)

    assert excinfo.value.exit_code == 1
    assert message in capsys.readouterr().err
