"""Tests for sum aggregation."""

import pytest
from datetime import date
from contarec.domain.aggregator import (
    aggregate,
    aggregate_external,
    aggregate_ledger,
    external_row_date,
    select_external_files,
)
from contarec.domain.defaults import default_external_config
from contarec.domain.entities import (
    AccountFilterConfig,
    DateInterval,
    ExternalColumn,
    LedgerColumn,
    NormalizedRow,
    RawFile,
)
from contarec.domain.errors import ValidationError
from contarec.domain.normalizer import normalize_external_file, normalize_ledger_file

CREDIT_RULE = AccountFilterConfig(filter_column=LedgerColumn.ACCOUNT, sum_column=LedgerColumn.CREDIT)


def _row(day, account, credit, debit=0.0, description="Plata"):
    return NormalizedRow(day, "1", description, account, "C", debit, credit, 0.0)


@pytest.fixture
def rows():
    return [
        _row("15/01/2024", "4423", 100.00),
        _row("20/01/2024", "4423", 50.00),
        _row("18/01/2024", "4424", 70.00),
    ]


def test_aggregate_sums_one_account(rows):
    """Two 4423 rows of 100 and 50 sum to 150; the 4424 row is ignored."""
    total = aggregate(rows, "4423", CREDIT_RULE, DateInterval.unbounded())
    assert total == pytest.approx(150.00)


def test_aggregate_without_interval(rows):
    """No interval means every date."""
    assert aggregate(rows, "4424", CREDIT_RULE) == pytest.approx(70.0)


def test_aggregate_is_idempotent(rows):
    """Repeated calls give the same total and leave the rows untouched."""
    before = list(rows)
    first = aggregate(rows, "4423", CREDIT_RULE)
    second = aggregate(rows, "4423", CREDIT_RULE)
    assert first == second
    assert rows == before


def test_aggregate_date_interval(rows):
    """Rows outside the interval are skipped; bounds are inclusive."""
    interval = DateInterval(date(2024, 1, 16), date(2024, 1, 20))
    assert aggregate(rows, "4423", CREDIT_RULE, interval) == pytest.approx(50.0)


def test_aggregate_undated_rows_pass_date_filter():
    """Rows whose date cannot be read are still summed."""
    rows = [_row("Sold initial", "4423", 10.0), _row("15/03/2024", "4423", 5.0)]
    interval = DateInterval(date(2024, 1, 1), date(2024, 1, 31))
    assert aggregate(rows, "4423", CREDIT_RULE, interval) == pytest.approx(10.0)


def test_aggregate_non_numeric_cells_count_as_zero():
    """Missing and text amounts add nothing."""
    rows = [_row("15/01/2024", "4423", None), _row("16/01/2024", "4423", "n/a"), _row("17/01/2024", "4423", "12,50")]
    assert aggregate(rows, "4423", CREDIT_RULE) == pytest.approx(12.5)


def test_aggregate_other_sum_column(rows):
    """The sum column is configurable."""
    rule = AccountFilterConfig(filter_column=LedgerColumn.ACCOUNT, sum_column=LedgerColumn.DEBIT)
    rows = rows + [_row("21/01/2024", "4423", 0.0, debit=30.0)]
    assert aggregate(rows, "4423", rule) == pytest.approx(30.0)


def test_subtract_with_empty_filter_value_changes_nothing(rows):
    """An empty subtract filter value leaves the total as it was."""
    rule = AccountFilterConfig(
        filter_column=LedgerColumn.ACCOUNT,
        sum_column=LedgerColumn.CREDIT,
        subtract_config=AccountFilterConfig(LedgerColumn.DESCRIPTION, LedgerColumn.CREDIT),
    )
    assert aggregate(rows, "4423", rule) == aggregate(rows, "4423", CREDIT_RULE)


def test_subtract_pass(rows):
    """The subtract pass total is taken off the main total."""
    rows = rows + [_row("22/01/2024", "4423", 20.0, description="Storno plata")]
    rule = AccountFilterConfig(
        filter_column=LedgerColumn.ACCOUNT,
        sum_column=LedgerColumn.CREDIT,
        subtract_config=AccountFilterConfig(
            LedgerColumn.DESCRIPTION, LedgerColumn.CREDIT, filter_value="Storno"
        ),
    )
    # 170 over every 4423 row, minus the 20 storno row
    assert aggregate(rows, "4423", rule) == pytest.approx(150.0)


def test_aggregate_rejects_external_config(rows):
    """Ledger rows need a ledger rule."""
    with pytest.raises(ValidationError):
        aggregate(rows, "4423", default_external_config("2"))


def test_aggregate_ledger_across_files(multi_account_matrix, single_account_matrix):
    """Ledger sums cover every loaded file."""
    files = [
        normalize_ledger_file(RawFile("conta.xlsx", "conta.xlsx", multi_account_matrix)),
        normalize_ledger_file(RawFile("fisa_446.xlsx", "fisa_446.xlsx", single_account_matrix)),
    ]
    assert aggregate_ledger(files, "4423", CREDIT_RULE) == pytest.approx(150.0)
    # 30 from the multi-account export plus the whole 446 statement
    assert aggregate_ledger(files, "446.DIV", CREDIT_RULE) == pytest.approx(270.5)


def test_external_row_date_falls_back_to_payment_term(make_anaf_row):
    """The due date wins; the payment term fills in when it is missing."""
    assert external_row_date(make_anaf_row("25/02/2024", "D")) == date(2024, 2, 25)
    assert external_row_date(make_anaf_row(None, "D", term="26/02/2024")) == date(2024, 2, 26)
    assert external_row_date(make_anaf_row(None, "D")) is None


def test_aggregate_external_default_rule(anaf_matrix):
    """Debts are summed, DIM receipts taken off, undated rows skipped."""
    files = [normalize_external_file(RawFile("fise_2.xlsx", "fise_2.xlsx", anaf_matrix))]
    config = default_external_config("2")

    assert aggregate_external(files, "2", config) == pytest.approx(225.0)
    february = DateInterval(date(2024, 2, 1), date(2024, 2, 29))
    assert aggregate_external(files, "2", config, february) == pytest.approx(165.0)


def test_aggregate_external_only_reads_matching_files(anaf_matrix):
    """Files named for another account are ignored."""
    files = [normalize_external_file(RawFile("fise_9.xlsx", "fise_9.xlsx", anaf_matrix))]
    assert aggregate_external(files, "2", default_external_config("2")) == 0.0


def test_aggregate_external_split_account(make_anaf_row):
    """1/4423 reads its own category from the file for account 1."""
    matrix = [
        ["Firma"],
        ["Coloane"],
        make_anaf_row("25/02/2024", "1/4423", payment=300.0),
        make_anaf_row("25/02/2024", "1/4424", payment=80.0),
        make_anaf_row("25/02/2024", "D", payment=5.0, attribute="DIM", receipts=5.0),
    ]
    files = [normalize_external_file(RawFile("fise_1.xlsx", "fise_1.xlsx", matrix))]

    assert aggregate_external(files, "1/4423", default_external_config("1/4423")) == pytest.approx(300.0)
    assert aggregate_external(files, "1/4424", default_external_config("1/4424")) == pytest.approx(80.0)


def test_aggregate_external_assigned_files(anaf_matrix):
    """Explicitly assigned files replace name matching."""
    files = [normalize_external_file(RawFile("obligatii.xlsx", "/data/obligatii.xlsx", anaf_matrix))]
    config = default_external_config("2")

    assert aggregate_external(files, "2", config) == 0.0
    assert aggregate_external(files, "2", config, assigned=["/data/obligatii.xlsx"]) == pytest.approx(225.0)
    assert select_external_files(files, "2", assigned=["obligatii.xlsx"]) == files


def test_aggregate_external_rejects_ledger_config(anaf_matrix):
    """ANAF rows need an ANAF rule."""
    files = [normalize_external_file(RawFile("fise_2.xlsx", "fise_2.xlsx", anaf_matrix))]
    with pytest.raises(ValidationError):
        aggregate_external(files, "2", CREDIT_RULE)


def test_aggregate_external_other_columns(anaf_matrix):
    """Any ANAF filter and sum column can be configured."""
    files = [normalize_external_file(RawFile("fise_2.xlsx", "fise_2.xlsx", anaf_matrix))]
    receipts = AccountFilterConfig(
        filter_column=ExternalColumn.ATRIBUT_PL,
        filter_value="DIM",
        sum_column=ExternalColumn.INCASARI,
    )
    assert aggregate_external(files, "2", receipts) == pytest.approx(5.0)


def test_assigned_path_matches_file_loaded_by_relative_path(
    anaf_matrix, tmp_path, monkeypatch
):
    """A relative load path and its absolute assignment name the same file."""
    monkeypatch.chdir(tmp_path)
    files = [normalize_external_file(RawFile("obligatii.xlsx", "obligatii.xlsx", anaf_matrix))]
    absolute = str(tmp_path / "obligatii.xlsx")

    assert select_external_files(files, "2", assigned=[absolute]) == files
    assert aggregate_external(
        files, "2", default_external_config("2"), assigned=[absolute]
    ) == pytest.approx(225.0)


def test_assigned_path_in_other_directory_does_not_match(anaf_matrix, tmp_path):
    """Same file name in another directory is a different file."""
    files = [normalize_external_file(RawFile("obligatii.xlsx", "/data/obligatii.xlsx", anaf_matrix))]
    assert select_external_files(files, "2", assigned=[str(tmp_path / "obligatii.xlsx")]) == []


def test_account_33_reads_social_contribution_files(make_anaf_row):
    """ANAF account 33 also sums the files of accounts 411 to 423."""
    matrix = [
        ["Firma"],
        ["Coloane"],
        make_anaf_row("25/02/2024", "D", payment=100.0),
    ]
    files = [normalize_external_file(RawFile("imp_412.xlsx", "imp_412.xlsx", matrix))]

    assert aggregate_external(files, "33", default_external_config("33")) == pytest.approx(100.0)
    assert aggregate_external(files, "2", default_external_config("2")) == 0.0
