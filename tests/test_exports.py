import csv
import io
import json
from datetime import date, datetime
from types import SimpleNamespace

from openpyxl import load_workbook

from compliancetrack.services.exports import (
    CSV_COLUMNS,
    export_filename,
    render_export,
    sanitize_cell,
    to_csv,
    to_json_records,
)

TODAY = date(2024, 1, 15)


def _ob(**kw):
    base = dict(
        id="abc",
        company_id=1,
        created_by=1,
        title="VAT return",
        description="Quarterly filing",
        category="tax_financial",
        deadline=date(2024, 1, 18),
        recurrence="quarterly",
        status="pending",
        assigned_to="Anna",
        risk_level="high",
        notes=None,
        created_at=datetime(2024, 1, 1, 9, 0),
        updated_at=datetime(2024, 1, 2, 9, 0),
    )
    base.update(kw)
    return SimpleNamespace(**base)


def test_sanitize_cell():
    for s in ("=SUM(A1)", "+1", "-2", "@cmd"):
        assert sanitize_cell(s) == "'" + s
    assert sanitize_cell("plain") == "plain"
    assert sanitize_cell(5) == 5


def test_csv_header_order_and_formula_guard():
    text = to_csv([_ob(title="=HYPERLINK(\"x\")"), _ob(title="Second", status="completed")], TODAY)
    rows = list(csv.reader(io.StringIO(text)))
    assert rows[0] == CSV_COLUMNS
    assert len(rows) == 3
    assert rows[1][0].startswith("'=")
    assert rows[1][7] == "high"
    assert rows[2][7] == "low"


def test_json_records_carry_derived_fields():
    recs = to_json_records([_ob()], TODAY)
    assert recs[0]["deadline"] == "2024-01-18"
    assert recs[0]["days_until_deadline"] == 3
    assert recs[0]["risk_tier"] == "high"
    assert json.loads(render_export("json", [_ob()], today=TODAY))[0]["id"] == "abc"


def test_xlsx_sheet_matches_csv_projection():
    data = render_export("xlsx", [_ob(), _ob(title="@evil")], today=TODAY)
    ws = load_workbook(io.BytesIO(data)).active
    values = list(ws.values)
    assert list(values[0]) == CSV_COLUMNS
    assert values[2][0] == "'@evil"


def test_pdf_reports_render():
    company = SimpleNamespace(name="Acme", registration_number="IT123")
    rows = [_ob(title=f"Obligation {i}") for i in range(60)]
    for report in ("compliance", "risk"):
        pdf = render_export("pdf", rows, company=company, report=report, today=TODAY)
        assert pdf.startswith(b"%PDF")


def test_pdf_with_no_obligations():
    assert render_export("pdf", [], report="risk", today=TODAY).startswith(b"%PDF")


def test_filename_pattern():
    assert export_filename(7, "csv", datetime(2024, 1, 15, 8, 30, 5)) == "obligations_7_20240115-083005.csv"
