# compliancetrack/worker/scheduler.py
from __future__ import annotations

import logging

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from tzlocal import get_localzone

from compliancetrack.core import config
from compliancetrack.db.session import SessionLocal
from compliancetrack.services.notifications import run_deadline_notifications

log = logging.getLogger("compliancetrack.scheduler")


def run_daily_deadline_emails() -> dict:
    """One deadline-email cycle with a fresh DB session."""
    db = SessionLocal()
    try:
        result = run_deadline_notifications(db)
    except Exception:
        db.rollback()
        log.exception("Deadline e-mail cycle failed")
        return {"sent": 0, "total_users": 0, "errors": ["cycle failed"]}
    finally:
        db.close()
    log.info(
        "Deadline e-mail cycle done sent=%s users=%s errors=%s",
        result["sent"], result["total_users"], len(result["errors"]),
    )
    return result


def make_scheduler() -> BackgroundScheduler:
    """
    BackgroundScheduler with the daily deadline-email job:
      - APP_TIMEZONE           (default: system tz via tzlocal)
      - APP_SCHEDULER_HOUR     (default: 7)
      - APP_SCHEDULER_MINUTE   (default: 0)
    """
    tzname = config.APP_TIMEZONE or str(get_localzone())

    sched = BackgroundScheduler(timezone=tzname)
    sched.add_job(
        run_daily_deadline_emails,
        CronTrigger(hour=config.APP_SCHEDULER_HOUR, minute=config.APP_SCHEDULER_MINUTE),
        id="daily_deadline_emails",
        replace_existing=True,
    )
    return sched
