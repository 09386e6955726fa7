# compliancetrack/api/v1/exports.py
import io
import logging
from datetime import date, datetime

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from compliancetrack.core.auth import get_db, get_current_user
from compliancetrack.core.tenancy import ensure_company_read
from compliancetrack.crud.company import get_company
from compliancetrack.crud.obligation import list_obligations
from compliancetrack.models.user import User
from compliancetrack.services.exports import MEDIA_TYPES, export_filename, render_export

router = APIRouter()
log = logging.getLogger("compliancetrack.exports")


@router.get("/companies/{company_id}/exports/obligations")
def export_obligations(
    company_id: int,
    fmt: str = Query("csv", alias="format", pattern="^(csv|json|xlsx|pdf)$"),
    report: str = Query("compliance", pattern="^(compliance|risk)$"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Download the tenant's obligations as CSV, JSON, XLSX or a PDF report
    (`report=compliance|risk`, PDF only).
    """
    ensure_company_read(db, current_user, company_id)
    rows = list_obligations(db, company_id)
    company = get_company(db, company_id)

    content = render_export(fmt, rows, company=company, report=report, today=date.today())
    filename = export_filename(company_id, fmt, datetime.utcnow())
    log.info("Export company_id=%s format=%s rows=%d", company_id, fmt, len(rows))

    headers = {
        "Content-Disposition": f"attachment; filename={filename}",
        "Cache-Control": "no-store",
    }
    return StreamingResponse(io.BytesIO(content), media_type=MEDIA_TYPES[fmt], headers=headers)
