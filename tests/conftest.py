"""Shared pytest fixtures for contarec tests."""

import tempfile
import os
from datetime import date
import pytest
from openpyxl import Workbook

from contarec.database.factories import create_sqlite_store
from contarec.domain.entities import EXTERNAL_ROW_WIDTH, ExternalColumn
from contarec.domain.state import ReconciliationState

LEDGER_HEADER = [
    "Data", "NDP", "Explicatie", "Cont", "Tip", "Suma D", "Suma C", "Sold",
    "Cont corespondent", "Moneda", "Curs", "Observatii",
]

ANAF_HEADER = [
    "IME_COD_IMPOZIT", "DENUMIRE_IMPOZIT", "NR_EVID", "PERIOADA", "SCADENTA",
    "TERM_PLATA", "CTG_SUME", "TIP_SUMA", "SUMA_PLATA", "SUMA_NEACHITATA",
    "DOBANZI", "PENALITATI", "ATRIBUT_PL", "INCASARI", "RAMBURSARI",
]


def ledger_row(day, document, description, account, credit, debit=0.0, balance=0.0):
    """Build a multi-account ledger export row with its four extra cells."""
    return [day, document, description, account, "C", debit, credit, balance, "5121", "RON", 1, None]


def anaf_row(
    due,
    category,
    payment=0.0,
    attribute=None,
    receipts=0.0,
    term=None,
    code="IMP",
):
    """Build an ANAF statement row with the given cells filled."""
    row = [None] * EXTERNAL_ROW_WIDTH
    row[ExternalColumn.IME_COD_IMPOZIT.index] = code
    row[ExternalColumn.DENUMIRE_IMPOZIT.index] = "Impozit"
    row[ExternalColumn.SCADENTA.index] = due
    row[ExternalColumn.TERM_PLATA.index] = term
    row[ExternalColumn.CTG_SUME.index] = category
    row[ExternalColumn.SUMA_PLATA.index] = payment
    row[ExternalColumn.ATRIBUT_PL.index] = attribute
    row[ExternalColumn.INCASARI.index] = receipts
    return row


def write_xlsx(path, rows):
    """Write rows to the first worksheet of a new workbook."""
    workbook = Workbook()
    sheet = workbook.active
    for row in rows:
        sheet.append(row)
    workbook.save(path)
    return str(path)


@pytest.fixture
def temp_store():
    """Create a temporary settings store for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    store = create_sqlite_store(database_path=db_path)
    # Store the path for tests that need it
    store.database_path = db_path
    store.connect()

    yield store

    # Cleanup
    store.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def state():
    """Create a reconciliation state with the default accounts."""
    return ReconciliationState()


@pytest.fixture
def multi_account_matrix():
    """Multi-account ledger export: one header row then transactions."""
    return [
        LEDGER_HEADER,
        ledger_row("15/01/2024", "1", "Plata TVA", "4423", 100.0),
        ledger_row("20/01/2024", "2", "Plata TVA", "4423", 50.0),
        ledger_row("18/01/2024", "3", "TVA de recuperat", "4424", 70.0),
        ledger_row("10/02/2024", "4", "CAS ianuarie", "4315", 500.0),
        ledger_row("05/03/2024", "5", "Dividende", "446.DIV", 30.0),
    ]


@pytest.fixture
def single_account_matrix():
    """Single-account statement with boilerplate, a repeated block and a total."""
    boilerplate = [[None] * 7] + [[f"Antet {i}"] + [None] * 6 for i in range(1, 9)]
    block = [
        [None, None, None, None, None, None, None],
        ["Fisa contului 446", None, None, None, None, None, None],
        ["Perioada", None, None, None, None, None, None],
        ["Data", "NDP", "Explicatie", "Tip", "Debit", "Credit", "Sold"],
        [None] * 7,
        ["Sold initial", None, None, None, None, None, 0],
        ["Rulaj", None, None, None, None, None, None],
    ]
    return (
        boilerplate
        + [
            ["15/01/2024", "10", "Dividende", "C", 0, 120.0, 120.0],
            ["20/02/2024", "11", "Chirie", "C", 0, 80.0, 200.0],
        ]
        + block
        + [
            ["10/03/2024", "12", "Dividende", "C", 0, 40.5, 240.5],
            ["Total", None, None, None, 0, 240.5, None],
        ]
    )


@pytest.fixture
def anaf_matrix():
    """ANAF statement: company line, column names, then obligations."""
    return [
        ["Contribuabil: Exemplu SRL"] + [None] * 14,
        ANAF_HEADER,
        anaf_row("25/02/2024", "D", payment=150.0),
        anaf_row("25/02/2024", "D", payment=20.0, attribute="DIM", receipts=5.0),
        anaf_row("25/03/2024", "D", payment=60.0),
        anaf_row("25/02/2024", "C", payment=999.0),
        anaf_row(None, "D", payment=1000.0),
    ]


@pytest.fixture
def interval_2024():
    """Whole of 2024 as (start, end) dates."""
    return date(2024, 1, 1), date(2024, 12, 31)


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


@pytest.fixture
def make_anaf_row():
    """Return the ANAF row builder."""
    return anaf_row


@pytest.fixture
def make_ledger_row():
    """Return the multi-account ledger row builder."""
    return ledger_row


@pytest.fixture
def make_xlsx():
    """Return the workbook writer."""
    return write_xlsx
