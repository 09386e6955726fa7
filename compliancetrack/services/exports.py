# compliancetrack/services/exports.py
from __future__ import annotations

import csv
import io
import json
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Sequence

from openpyxl import Workbook
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from compliancetrack.services.dates import try_days_until_deadline
from compliancetrack.services.labels import category_label, status_label
from compliancetrack.services.risk import RISK_TIERS, obligation_risk, risk_label

EXPORT_FORMATS = ("csv", "json", "xlsx", "pdf")
PDF_REPORTS = ("compliance", "risk")

CSV_COLUMNS = ["title", "description", "category", "deadline", "recurrence", "status", "assignee", "risk"]

MEDIA_TYPES = {
    "csv": "text/csv; charset=utf-8",
    "json": "application/json",
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "pdf": "application/pdf",
}

_STORED_FIELDS = (
    "id", "company_id", "title", "description", "category", "deadline", "recurrence",
    "status", "assigned_to", "risk_level", "notes", "created_by", "created_at", "updated_at",
)


# -----------------------------
# Helpers
# -----------------------------
def _iso(v: Any) -> Optional[str]:
    if v is None:
        return None
    if isinstance(v, (datetime, date)):
        return v.isoformat()
    return str(v)


def sanitize_cell(v: Any) -> Any:
    """Neutralise spreadsheet formulas: cells starting with = + - @ get a leading quote."""
    if isinstance(v, str) and v and v[0] in ("=", "+", "-", "@"):
        return "'" + v
    return v


def export_filename(company_id: int, fmt: str, now: Optional[datetime] = None) -> str:
    ts = (now or datetime.utcnow()).strftime("%Y%m%d-%H%M%S")
    return f"obligations_{company_id}_{ts}.{fmt}"


def tabular_rows(obligations: Sequence[Any], today: Optional[date] = None) -> List[Dict[str, Any]]:
    """Flat projection shared by CSV and XLSX (fixed column order)."""
    return [
        {
            "title": o.title,
            "description": o.description or "",
            "category": o.category,
            "deadline": _iso(o.deadline),
            "recurrence": o.recurrence,
            "status": o.status,
            "assignee": o.assigned_to or "",
            "risk": obligation_risk(o, today),
        }
        for o in obligations
    ]


# -----------------------------
# Formats
# -----------------------------
def to_csv(obligations: Sequence[Any], today: Optional[date] = None) -> str:
    output = io.StringIO()
    writer = csv.DictWriter(output, fieldnames=CSV_COLUMNS)
    writer.writeheader()
    for r in tabular_rows(obligations, today):
        writer.writerow({k: sanitize_cell(r.get(k)) for k in CSV_COLUMNS})
    return output.getvalue()


def to_json_records(obligations: Sequence[Any], today: Optional[date] = None) -> List[Dict[str, Any]]:
    records = []
    for o in obligations:
        rec = {k: getattr(o, k, None) for k in _STORED_FIELDS}
        for k in ("deadline", "created_at", "updated_at"):
            rec[k] = _iso(rec[k])
        rec["days_until_deadline"] = try_days_until_deadline(o.deadline, today)
        rec["risk_tier"] = obligation_risk(o, today)
        records.append(rec)
    return records


def to_json(obligations: Sequence[Any], today: Optional[date] = None) -> str:
    return json.dumps(to_json_records(obligations, today), ensure_ascii=False, indent=2)


def to_xlsx(obligations: Sequence[Any], today: Optional[date] = None) -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.title = "obligations"
    ws.append(CSV_COLUMNS)
    for r in tabular_rows(obligations, today):
        ws.append([sanitize_cell(r.get(k)) for k in CSV_COLUMNS])

    stream = io.BytesIO()
    wb.save(stream)
    return stream.getvalue()


# -----------------------------
# PDF reports
# -----------------------------
class _NumberedCanvas(canvas.Canvas):
    """Defers page output so every footer can say 'Page i of n'."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._saved_page_states: List[dict] = []

    def showPage(self):
        self._saved_page_states.append(dict(self.__dict__))
        self._startPage()

    def save(self):
        total = len(self._saved_page_states)
        for state in self._saved_page_states:
            self.__dict__.update(state)
            self._draw_footer(total)
            super().showPage()
        super().save()

    def _draw_footer(self, total: int) -> None:
        width, _ = A4
        self.setFont("Helvetica", 8)
        self.setFillColor(colors.grey)
        self.drawCentredString(width / 2, 10 * mm, f"Page {self._pageNumber} of {total}")


def _table(rows: List[List[Any]], header_color, col_widths=None, plain=False) -> Table:
    t = Table(rows, colWidths=col_widths, repeatRows=0 if plain else 1)
    style = [
        ("FONTSIZE", (0, 0), (-1, -1), 9),
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 4),
    ]
    if plain:
        style.append(("FONTNAME", (0, 0), (0, -1), "Helvetica-Bold"))
    else:
        style += [
            ("BACKGROUND", (0, 0), (-1, 0), header_color),
            ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
            ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
            ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, colors.HexColor("#f3f4f6")]),
        ]
    t.setStyle(TableStyle(style))
    return t


def _header(story: list, styles, title: str, company: Any, today: date, color) -> None:
    title_style = styles["Title"].clone("report_title", textColor=color)
    story.append(Paragraph(title, title_style))
    if company is not None:
        story.append(Paragraph(company.name or "", styles["Heading3"]))
        if getattr(company, "registration_number", None):
            story.append(Paragraph(f"Registration no.: {company.registration_number}", styles["Normal"]))
    story.append(Paragraph(f"Generated on {today.strftime('%d %B %Y')}", styles["Normal"]))
    story.append(Spacer(1, 8 * mm))


def _cell(styles, text: str) -> Paragraph:
    return Paragraph(text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;"), styles["BodyText"])


def _fmt_date(d: Any) -> str:
    return d.strftime("%d/%m/%Y") if hasattr(d, "strftime") else str(d or "")


def _build_pdf(story: list) -> bytes:
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer, pagesize=A4, leftMargin=14 * mm, rightMargin=14 * mm, topMargin=18 * mm, bottomMargin=18 * mm
    )
    doc.build(story, canvasmaker=_NumberedCanvas)
    return buffer.getvalue()


def compliance_report_pdf(obligations: Sequence[Any], company: Any = None, today: Optional[date] = None) -> bytes:
    today = today or date.today()
    styles = getSampleStyleSheet()
    blue = colors.HexColor("#1e40af")
    tiers = [obligation_risk(o, today) for o in obligations]

    story: list = []
    _header(story, styles, "Compliance Report", company, today, blue)

    story.append(Paragraph("Summary", styles["Heading2"]))
    story.append(
        _table(
            [
                ["Total obligations", str(len(obligations))],
                ["Completed", str(sum(1 for o in obligations if o.status == "completed"))],
                ["Pending", str(sum(1 for o in obligations if o.status == "pending"))],
                ["Overdue", str(sum(1 for o in obligations if o.status == "overdue"))],
                ["High risk", str(sum(1 for t in tiers if t == "high"))],
            ],
            blue,
            col_widths=[50 * mm, 30 * mm],
            plain=True,
        )
    )
    story.append(Spacer(1, 8 * mm))

    story.append(Paragraph("Obligation details", styles["Heading2"]))
    rows: List[List[Any]] = [["Title", "Category", "Deadline", "Status", "Risk", "Assignee"]]
    for o, tier in zip(obligations, tiers):
        rows.append([
            _cell(styles, o.title or ""),
            category_label(o.category),
            _fmt_date(o.deadline),
            status_label(o.status),
            risk_label(tier),
            _cell(styles, o.assigned_to or "-"),
        ])
    story.append(_table(rows, blue, col_widths=[50 * mm, 32 * mm, 22 * mm, 24 * mm, 24 * mm, 30 * mm]))
    return _build_pdf(story)


def risk_report_pdf(obligations: Sequence[Any], company: Any = None, today: Optional[date] = None) -> bytes:
    today = today or date.today()
    styles = getSampleStyleSheet()
    red = colors.HexColor("#b91c1c")
    tiers = [obligation_risk(o, today) for o in obligations]
    total = len(obligations) or 1

    story: list = []
    _header(story, styles, "Risk Indicators Report", company, today, red)

    story.append(Paragraph("Risk distribution", styles["Heading2"]))
    dist: List[List[Any]] = [["Risk level", "Obligations", "Percentage"]]
    for tier in RISK_TIERS:
        n = sum(1 for t in tiers if t == tier)
        dist.append([risk_label(tier), str(n), f"{n / total * 100:.1f}%"])
    story.append(_table(dist, red, col_widths=[50 * mm, 35 * mm, 30 * mm]))
    story.append(Spacer(1, 8 * mm))

    high = [(o, t) for o, t in zip(obligations, tiers) if t == "high"]
    story.append(Paragraph("High-risk obligations", styles["Heading2"]))
    if not high:
        story.append(Paragraph("No high-risk obligations.", styles["Normal"]))
    else:
        rows: List[List[Any]] = [["Title", "Category", "Deadline", "Status", "Days left"]]
        for o, _ in high:
            days = try_days_until_deadline(o.deadline, today)
            rows.append([
                _cell(styles, o.title or ""),
                category_label(o.category),
                _fmt_date(o.deadline),
                status_label(o.status),
                "-" if days is None else str(days),
            ])
        story.append(_table(rows, red, col_widths=[60 * mm, 35 * mm, 25 * mm, 28 * mm, 22 * mm]))
    return _build_pdf(story)


def render_export(
    fmt: str,
    obligations: Sequence[Any],
    *,
    company: Any = None,
    report: str = "compliance",
    today: Optional[date] = None,
) -> bytes:
    """Serialise a tenant's obligations to one of EXPORT_FORMATS."""
    if fmt == "csv":
        return to_csv(obligations, today).encode("utf-8")
    if fmt == "json":
        return to_json(obligations, today).encode("utf-8")
    if fmt == "xlsx":
        return to_xlsx(obligations, today)
    if fmt == "pdf":
        if report == "risk":
            return risk_report_pdf(obligations, company, today)
        return compliance_report_pdf(obligations, company, today)
    raise ValueError(f"Unsupported export format: {fmt}")
