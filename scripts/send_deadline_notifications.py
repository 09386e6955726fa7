#!/usr/bin/env python3
"""
Run one deadline-email cycle now (same job the daily scheduler runs).

    python scripts/send_deadline_notifications.py [--window-days N] [--dry-run]

--dry-run renders the e-mails and prints subjects instead of sending.
"""
import argparse
import logging
import os
import sys
from datetime import date

sys.path.append(os.getcwd())

from compliancetrack.core import config
from compliancetrack.db.session import SessionLocal
from compliancetrack.models.user import User
from compliancetrack.services.notifications import (
    collect_due_obligations,
    group_by_owner,
    render_deadline_email,
    run_deadline_notifications,
)


def _dry_run(db, window_days):
    today = date.today()
    grouped = group_by_owner(collect_due_obligations(db, today, window_days))
    for user_id, items in grouped.items():
        user = db.get(User, user_id)
        if user is None:
            continue
        subject, _ = render_deadline_email(user.full_name or "there", items, today)
        print(f"{user.email}: {subject}")
    return {"sent": 0, "total_users": len(grouped), "errors": []}


def main():
    parser = argparse.ArgumentParser(description="Send deadline notification e-mails once.")
    parser.add_argument("--window-days", type=int, default=config.DEADLINE_EMAIL_WINDOW_DAYS)
    parser.add_argument("--dry-run", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(level=config.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    db = SessionLocal()
    try:
        if args.dry_run:
            result = _dry_run(db, args.window_days)
        else:
            result = run_deadline_notifications(db, window_days=args.window_days)
    finally:
        db.close()

    print(f"sent={result['sent']} users={result['total_users']} errors={len(result['errors'])}")
    for err in result["errors"]:
        print(f"  {err}")
    return 1 if result["errors"] else 0


if __name__ == "__main__":
    sys.exit(main())
