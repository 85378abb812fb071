"""
Dev-only reset script for Task Tracker.

What it does:
- Deletes every row from tasks, session_tokens and users (children first).
- With --purge-expired-only, only drops expired session_tokens rows and leaves
  users and tasks alone.

Guardrails:
- Requires ENV=dev
- Requires confirmation prompt unless --yes is passed
- Logs actions to logs/ with a timestamped file
"""

from __future__ import annotations

import argparse
from datetime import datetime, timezone
from pathlib import Path
import sys
from typing import Iterable


# Allow `import app.*` from backend/
REPO_ROOT = Path(__file__).resolve().parents[1]
BACKEND_DIR = REPO_ROOT / "backend"
sys.path.insert(0, str(BACKEND_DIR))


from sqlalchemy import text  # noqa: E402

from app.core.config import settings  # noqa: E402
from app.core.database import SessionLocal  # noqa: E402
from app.services.sessions import purge_expired_sessions  # noqa: E402


# Order matters on backends without ON DELETE CASCADE enforcement (sqlite default).
TABLES_TO_CLEAR = [
    "tasks",
    "session_tokens",
    "users",
]


def utc_now_stamp() -> str:
    return datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")


def log_write(fp: Path, lines: Iterable[str]) -> None:
    fp.parent.mkdir(parents=True, exist_ok=True)
    with fp.open("a", encoding="utf-8") as f:
        for line in lines:
            f.write(line.rstrip("\n") + "\n")


def clear_tables(db, log_path: Path) -> None:
    if db.bind.dialect.name == "postgresql":
        sql = "TRUNCATE " + ", ".join(TABLES_TO_CLEAR) + " RESTART IDENTITY CASCADE;"
        log_write(log_path, [f"[db] executing: {sql}"])
        db.execute(text(sql))
    else:
        for table in TABLES_TO_CLEAR:
            log_write(log_path, [f"[db] executing: DELETE FROM {table}"])
            db.execute(text(f"DELETE FROM {table}"))
    db.commit()


def main() -> int:
    parser = argparse.ArgumentParser(description="Dev reset: clear task tracker tables.")
    parser.add_argument("--yes", action="store_true", help="Skip confirmation prompt.")
    parser.add_argument(
        "--purge-expired-only",
        action="store_true",
        help="Only delete expired session tokens.",
    )
    args = parser.parse_args()

    if (settings.ENV or "").strip().lower() != "dev":
        print(f"Refusing to run: ENV must be 'dev' (got {settings.ENV!r})")
        return 2

    log_path = REPO_ROOT / "logs" / f"reset_dev_db_{utc_now_stamp()}.log"
    log_write(log_path, [f"[start] {datetime.now(timezone.utc).isoformat()} env={settings.ENV}"])
    log_write(log_path, [f"[db] host_db={settings.DB_HOST}:{settings.DB_PORT}/{settings.DB_NAME} (creds redacted)"])

    if args.purge_expired_only:
        with SessionLocal() as db:
            purged = purge_expired_sessions(db)
        log_write(log_path, [f"[done] purged_sessions={purged}"])
        print(f"Purged {purged} expired sessions. Log written to: {log_path}")
        return 0

    if not args.yes:
        msg = (
            "WARNING: This will DELETE all rows from:\n"
            f"  {', '.join(TABLES_TO_CLEAR)}\n\n"
            "Type RESET to continue: "
        )
        resp = input(msg).strip()
        if resp != "RESET":
            print("Cancelled.")
            log_write(log_path, ["[cancelled] user did not confirm"])
            return 1

    with SessionLocal() as db:
        clear_tables(db, log_path)

    log_write(log_path, [f"[done] {datetime.now(timezone.utc).isoformat()}"])
    print(f"Done. Log written to: {log_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
