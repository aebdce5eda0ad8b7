"""Tests for the command line interface."""

import pytest
from openpyxl import load_workbook

from contarec.cli.main import cli


@pytest.fixture
def run(cli_runner, temp_store):
    """Invoke the CLI against the temporary settings database."""

    def invoke(*args):
        return cli_runner.invoke(cli, ["--db-path", temp_store.database_path, *args])

    return invoke


@pytest.fixture
def files(tmp_path, make_xlsx, multi_account_matrix, anaf_matrix):
    """One ledger export and one ANAF statement on disk."""
    return {
        "conta": make_xlsx(tmp_path / "conta.xlsx", multi_account_matrix),
        "anaf": make_xlsx(tmp_path / "fise_2.xlsx", anaf_matrix),
    }


def test_help_does_not_need_settings(cli_runner):
    result = cli_runner.invoke(cli, ["--help"])
    assert result.exit_code == 0
    assert "calculate" in result.output


class TestAccountCommands:
    def test_list_default_accounts(self, run):
        result = run("account", "list")
        assert result.exit_code == 0
        assert "4423" in result.output
        assert "cont=* sum suma_c" in result.output

    def test_list_anaf_accounts(self, run):
        result = run("account", "list", "--anaf")
        assert result.exit_code == 0
        assert "CTG_SUME=D sum SUMA_PLATA minus ATRIBUT_PL=DIM sum INCASARI" in result.output

    def test_add_account_is_saved(self, run, temp_store):
        result = run("account", "add", "4427")
        assert result.exit_code == 0
        assert "Added account '4427'" in result.output
        assert "4427" in temp_store.load()["ledger_accounts"]

    def test_add_existing_account(self, run):
        result = run("account", "add", "2", "--anaf")
        assert result.exit_code == 1
        assert "already tracked" in result.output

    def test_remove_account(self, run, temp_store):
        result = run("account", "remove", "436")
        assert result.exit_code == 0
        assert "Removed account '436'" in result.output
        assert "436" not in temp_store.load()["account_mappings"]

    def test_remove_unknown_account(self, run):
        result = run("account", "remove", "9999")
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_configure_account(self, run):
        result = run("account", "configure", "4423", "--sum-column", "suma_d")
        assert result.exit_code == 0
        assert "4423: cont=* sum suma_d" in result.output

        listed = run("account", "list")
        assert "cont=* sum suma_d" in listed.output

    def test_configure_subtract_rule(self, run):
        result = run(
            "account", "configure", "4315",
            "--subtract-column", "explicatie",
            "--subtract-value", "Storno",
        )
        assert result.exit_code == 0
        assert "minus explicatie=Storno sum suma_c" in result.output

    def test_configure_unknown_column(self, run):
        result = run("account", "configure", "4423", "--sum-column", "SUMA_PLATA")
        assert result.exit_code == 1
        assert "Unknown conta column" in result.output

    def test_configure_reset(self, run):
        run("account", "configure", "2", "--anaf", "--filter-value", "C")
        result = run("account", "configure", "2", "--anaf", "--reset")
        assert result.exit_code == 0
        assert "2: CTG_SUME=D" in result.output

    def test_select_accounts(self, run, temp_store):
        result = run("account", "select", "436", "4423")
        assert result.exit_code == 0
        assert "Selected: 4423, 436" in result.output
        assert temp_store.load()["selected_ledger_accounts"] == ["4423", "436"]

        cleared = run("account", "select")
        assert "Selection cleared" in cleared.output

    def test_assign_files(self, run, temp_store, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        result = run("account", "assign", "1/4423", "fise_1.xlsx")
        assert result.exit_code == 0
        assert "Assigned 1 file(s) to '1/4423'" in result.output
        assert temp_store.load()["external_account_files"] == {
            "1/4423": [str(tmp_path.resolve() / "fise_1.xlsx")]
        }


class TestMappingCommands:
    def test_list(self, run):
        result = run("mapping", "list")
        assert result.exit_code == 0
        assert "444          -> 2, 9" in result.output

    def test_add(self, run):
        result = run("mapping", "add", "4315", "2")
        assert result.exit_code == 0
        assert "4315 -> 412, 451, 458, 483, 2" in result.output

    def test_add_unknown_anaf_account(self, run):
        result = run("mapping", "add", "4315", "9999")
        assert result.exit_code == 1

    def test_remove_and_reset(self, run):
        result = run("mapping", "remove", "436")
        assert result.exit_code == 0
        assert "Removed the mapping of 436" in result.output
        assert "436 " not in run("mapping", "list").output

        run("mapping", "reset")
        assert "436          -> 480" in run("mapping", "list").output

    def test_check(self, run):
        result = run("mapping", "check")
        assert result.exit_code == 0
        assert "All mappings are valid" in result.output


class TestDateCommands:
    def test_show_without_interval(self, run):
        result = run("dates", "show")
        assert "No date interval set" in result.output

    def test_set_and_show(self, run, temp_store):
        result = run("dates", "set", "--start-date", "01/01/2024", "--end-date", "31/12/2024")
        assert result.exit_code == 0
        assert temp_store.load()["start_date"] == "01/01/2024"

        shown = run("dates", "show")
        assert "Start date: 01/01/2024" in shown.output
        assert "End date:   31/12/2024" in shown.output

    def test_clear(self, run):
        run("dates", "set", "--start-date", "01/01/2024")
        result = run("dates", "set", "--clear")
        assert "No date interval set" in result.output

    def test_set_needs_an_option(self, run):
        result = run("dates", "set")
        assert result.exit_code == 1

    def test_set_end_of_year(self, run, temp_store):
        result = run("dates", "set", "--end-of-year")
        assert result.exit_code == 0
        assert temp_store.load()["include_end_of_year"] is True
        assert "Year end:" in run("dates", "show").output

        run("dates", "set", "--no-end-of-year")
        assert temp_store.load()["include_end_of_year"] is False


class TestInspect:
    def test_ledger_file(self, run, files):
        result = run("inspect", files["conta"])
        assert result.exit_code == 0
        assert "Layout:       multi-account" in result.output
        assert "Rows kept:    5" in result.output

    def test_anaf_file(self, run, files):
        result = run("inspect", "--anaf", files["anaf"])
        assert result.exit_code == 0
        assert "Account:      2" in result.output
        assert "Data rows:    5" in result.output
        assert "Date columns: 4" in result.output

    def test_unsupported_file(self, run, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("hello")
        result = run("inspect", str(path))
        assert result.exit_code == 1
        assert "Unsupported file type" in result.output


class TestCalculate:
    def test_without_files(self, run):
        result = run("calculate")
        assert result.exit_code == 1
        assert "No files loaded" in result.output

    def test_mapped_account(self, run, files):
        run("mapping", "add", "4423", "2")
        result = run(
            "calculate", "--conta", files["conta"], "--anaf", files["anaf"], "--account", "4423"
        )

        assert result.exit_code == 0
        assert "Conta account sums:" in result.output
        assert "150.00" in result.output
        assert "165.00" in result.output
        assert "-15.00" in result.output
        assert "unbalanced" in result.output

    def test_all_accounts_by_default(self, run, files):
        result = run("calculate", "--conta", files["conta"], "--anaf", files["anaf"])
        assert result.exit_code == 0
        assert "446.DIV" in result.output
        assert "500.00" in result.output

    def test_monthly_and_output(self, run, files, tmp_path):
        output = tmp_path / "summary.xlsx"
        run("mapping", "add", "4423", "2")
        result = run(
            "calculate",
            "--conta", files["conta"],
            "--anaf", files["anaf"],
            "--account", "4423",
            "--monthly",
            "--output", str(output),
        )

        assert result.exit_code == 0
        assert "Monthly analysis 4423:" in result.output
        assert "Summary written to" in result.output
        sheets = load_workbook(output).sheetnames
        assert sheets == ["Relations Summary", "Accounts Summary", "ANAF Merged Data", "Monthly_4423"]

    def test_monthly_end_of_year(
        self, run, tmp_path, make_xlsx, make_ledger_row, make_anaf_row, multi_account_matrix
    ):
        conta = make_xlsx(
            tmp_path / "conta.xlsx",
            [
                multi_account_matrix[0],
                make_ledger_row("15/12/2023", "1", "Plata TVA", "4423", 100.0),
                make_ledger_row("31/12/2023", "2", "Inchidere an", "4423", 40.0),
            ],
        )
        anaf = make_xlsx(
            tmp_path / "fise_2.xlsx",
            [
                ["Firma"],
                ["Coloane"],
                make_anaf_row("25/01/2024", "D", payment=100.0),
                make_anaf_row("25/06/2024", "D", payment=40.0),
            ],
        )
        run("mapping", "add", "4423", "2")
        args = ("calculate", "--conta", conta, "--anaf", anaf, "--account", "4423", "--monthly")

        result = run(*args, "--end-of-year")
        assert result.exit_code == 0
        assert "01/12/2023 - 30/12/2023" in result.output
        assert "31/12/2023 - 31/12/2023" in result.output
        assert "25/06/2024 - 25/06/2024" in result.output
        assert "(year end)" in result.output

        plain = run(*args)
        assert "(year end)" not in plain.output

    def test_reversed_dates(self, run, files):
        result = run(
            "calculate", "--conta", files["conta"],
            "--start-date", "31/12/2024", "--end-date", "01/01/2024",
        )
        assert result.exit_code == 1


class TestMerge:
    def test_merge(self, run, tmp_path, make_xlsx, anaf_matrix):
        first = make_xlsx(tmp_path / "fise_2.xlsx", anaf_matrix)
        second = make_xlsx(tmp_path / "fise_9.xlsx", anaf_matrix[:3])
        output = tmp_path / "merged.xlsx"

        result = run("merge", first, second, "--output", str(output))

        assert result.exit_code == 0
        assert "Merged 2 file(s): 6 data row(s), 8 row(s) in total" in result.output
        rows = list(load_workbook(output).active.iter_rows(values_only=True))
        assert rows[0][0] == "Source"
        assert rows[-1][0] == "fise_9.xlsx"
