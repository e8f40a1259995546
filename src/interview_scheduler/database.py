"""SQLite persistence for applications, interviews and calendar credentials."""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime, timezone
from pathlib import Path

from interview_scheduler.errors import DuplicateInterviewError, PersistenceError
from interview_scheduler.schemas import (
    SCHEDULABLE_STATUSES,
    Application,
    ApplicationDetail,
    ApplicationStatus,
    CalendarToken,
    Candidate,
    EmailLog,
    Interview,
    InterviewStatus,
    InterviewType,
    Job,
)

log = logging.getLogger(__name__)


def _ts(value: datetime) -> str:
    """Store every timestamp as UTC ISO-8601 so equal instants compare equal."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


def _dt(value: str | None) -> datetime:
    if not value:
        return datetime.now(timezone.utc)
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class Database:
    def __init__(
        self,
        db_path: Path | str = "interview_scheduler.db",
        unique_interview_slots: bool = False,
    ) -> None:
        self.db_path = str(db_path)
        self.unique_interview_slots = unique_interview_slots
        self.conn = sqlite3.connect(self.db_path, check_same_thread=False)
        self.conn.row_factory = sqlite3.Row
        self._init_tables()

    def _init_tables(self) -> None:
        self.conn.executescript("""
            CREATE TABLE IF NOT EXISTS candidates (
                id TEXT PRIMARY KEY,
                full_name TEXT,
                email TEXT,
                created_at TEXT
            );

            CREATE TABLE IF NOT EXISTS jobs (
                id TEXT PRIMARY KEY,
                title TEXT,
                created_at TEXT
            );

            CREATE TABLE IF NOT EXISTS applications (
                id TEXT PRIMARY KEY,
                candidate_id TEXT NOT NULL,
                job_id TEXT NOT NULL,
                status TEXT NOT NULL DEFAULT 'applied',
                created_at TEXT,
                updated_at TEXT,
                UNIQUE(candidate_id, job_id)
            );

            CREATE TABLE IF NOT EXISTS interviews (
                id TEXT PRIMARY KEY,
                application_id TEXT NOT NULL,
                scheduled_at TEXT NOT NULL,
                duration_minutes INTEGER NOT NULL DEFAULT 60,
                interview_type TEXT NOT NULL DEFAULT 'Technical',
                status TEXT NOT NULL DEFAULT 'scheduled',
                meeting_url TEXT,
                meeting_id TEXT,
                notes TEXT,
                created_by TEXT,
                created_at TEXT,
                updated_at TEXT
            );

            CREATE TABLE IF NOT EXISTS calendar_tokens (
                user_id TEXT PRIMARY KEY,
                access_token TEXT NOT NULL,
                refresh_token TEXT NOT NULL,
                token_expiry TEXT NOT NULL,
                updated_at TEXT
            );

            CREATE TABLE IF NOT EXISTS email_logs (
                id TEXT PRIMARY KEY,
                candidate_id TEXT,
                email_type TEXT NOT NULL,
                recipient_email TEXT NOT NULL,
                subject TEXT NOT NULL,
                status TEXT NOT NULL DEFAULT 'sent',
                sent_at TEXT
            );
        """)
        if self.unique_interview_slots:
            # Cancelled interviews free their slot again
            self.conn.execute("""
                CREATE UNIQUE INDEX IF NOT EXISTS idx_interviews_slot
                ON interviews (application_id, scheduled_at)
                WHERE status = 'scheduled'
            """)
        self.conn.commit()

    # -- Candidates / jobs ----------------------------------------------------

    def save_candidate(self, c: Candidate) -> None:
        self.conn.execute(
            "INSERT OR REPLACE INTO candidates (id, full_name, email, created_at) VALUES (?, ?, ?, ?)",
            (c.id, c.full_name, c.email, _ts(c.created_at)),
        )
        self.conn.commit()

    def save_job(self, job: Job) -> None:
        self.conn.execute(
            "INSERT OR REPLACE INTO jobs (id, title, created_at) VALUES (?, ?, ?)",
            (job.id, job.title, _ts(job.created_at)),
        )
        self.conn.commit()

    # -- Applications ---------------------------------------------------------

    def save_application(self, app: Application) -> None:
        self.conn.execute(
            """INSERT OR REPLACE INTO applications
               (id, candidate_id, job_id, status, created_at, updated_at)
               VALUES (?, ?, ?, ?, ?, ?)""",
            (
                app.id, app.candidate_id, app.job_id, app.status.value,
                _ts(app.created_at), _ts(app.updated_at),
            ),
        )
        self.conn.commit()

    def get_application(self, application_id: str) -> ApplicationDetail | None:
        row = self.conn.execute(
            """SELECT a.id, a.status, a.candidate_id, a.job_id,
                      c.full_name AS candidate_name, c.email AS candidate_email,
                      j.title AS job_title
               FROM applications a
               LEFT JOIN candidates c ON c.id = a.candidate_id
               LEFT JOIN jobs j ON j.id = a.job_id
               WHERE a.id = ?""",
            (application_id,),
        ).fetchone()
        if not row:
            return None
        return self._row_to_application(row)

    def list_schedulable_applications(self) -> list[ApplicationDetail]:
        """Applications still early enough in the pipeline to get an interview."""
        statuses = [s.value for s in SCHEDULABLE_STATUSES]
        rows = self.conn.execute(
            f"""SELECT a.id, a.status, a.candidate_id, a.job_id,
                       c.full_name AS candidate_name, c.email AS candidate_email,
                       j.title AS job_title
                FROM applications a
                LEFT JOIN candidates c ON c.id = a.candidate_id
                LEFT JOIN jobs j ON j.id = a.job_id
                WHERE a.status IN ({", ".join("?" for _ in statuses)})
                ORDER BY a.created_at""",
            statuses,
        ).fetchall()
        return [self._row_to_application(r) for r in rows]

    def update_application_status(self, application_id: str, status: ApplicationStatus) -> bool:
        cur = self.conn.execute(
            "UPDATE applications SET status = ?, updated_at = ? WHERE id = ?",
            (status.value, _ts(datetime.now(timezone.utc)), application_id),
        )
        self.conn.commit()
        return cur.rowcount > 0

    def _row_to_application(self, row: sqlite3.Row) -> ApplicationDetail:
        return ApplicationDetail(
            id=row["id"],
            status=ApplicationStatus(row["status"]),
            candidate_id=row["candidate_id"],
            candidate_name=row["candidate_name"] or "Unknown",
            candidate_email=row["candidate_email"] or "",
            job_id=row["job_id"],
            job_title=row["job_title"] or "Unknown Position",
        )

    # -- Interviews -----------------------------------------------------------

    def insert_interview(self, interview: Interview) -> Interview:
        """Write a new interview row.

        Raises DuplicateInterviewError when slot uniqueness is enforced and
        the application already has a scheduled interview at that instant,
        PersistenceError for any other database failure.
        """
        try:
            self.conn.execute(
                """INSERT INTO interviews
                   (id, application_id, scheduled_at, duration_minutes, interview_type,
                    status, meeting_url, meeting_id, notes, created_by, created_at, updated_at)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    interview.id, interview.application_id, _ts(interview.scheduled_at),
                    interview.duration_minutes, interview.interview_type.value,
                    interview.status.value, interview.meeting_url, interview.meeting_id,
                    interview.notes, interview.created_by,
                    _ts(interview.created_at), _ts(interview.updated_at),
                ),
            )
            self.conn.commit()
        except sqlite3.IntegrityError as e:
            self.conn.rollback()
            if "idx_interviews_slot" in str(e) or "interviews.application_id" in str(e):
                raise DuplicateInterviewError(
                    f"Application {interview.application_id} already has an interview "
                    f"at {interview.scheduled_at.isoformat()}"
                ) from e
            raise PersistenceError(f"Could not save interview: {e}") from e
        except sqlite3.Error as e:
            self.conn.rollback()
            raise PersistenceError(f"Could not save interview: {e}") from e
        return interview

    def get_interview(self, interview_id: str) -> Interview | None:
        row = self.conn.execute(
            "SELECT * FROM interviews WHERE id = ?", (interview_id,)
        ).fetchone()
        if not row:
            return None
        return self._row_to_interview(row)

    def list_interviews(
        self,
        application_id: str | None = None,
        status: InterviewStatus | None = None,
    ) -> list[Interview]:
        clauses = []
        params: list[str] = []
        if application_id:
            clauses.append("application_id = ?")
            params.append(application_id)
        if status:
            clauses.append("status = ?")
            params.append(status.value)
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        rows = self.conn.execute(
            f"SELECT * FROM interviews {where} ORDER BY scheduled_at", params
        ).fetchall()
        return [self._row_to_interview(r) for r in rows]

    def update_interview_status(self, interview_id: str, status: InterviewStatus) -> bool:
        cur = self.conn.execute(
            "UPDATE interviews SET status = ?, updated_at = ? WHERE id = ?",
            (status.value, _ts(datetime.now(timezone.utc)), interview_id),
        )
        self.conn.commit()
        return cur.rowcount > 0

    def attach_meeting(self, interview_id: str, meeting_url: str, meeting_id: str | None = None) -> bool:
        cur = self.conn.execute(
            "UPDATE interviews SET meeting_url = ?, meeting_id = ?, updated_at = ? WHERE id = ?",
            (meeting_url, meeting_id, _ts(datetime.now(timezone.utc)), interview_id),
        )
        self.conn.commit()
        return cur.rowcount > 0

    def _row_to_interview(self, row: sqlite3.Row) -> Interview:
        return Interview(
            id=row["id"],
            application_id=row["application_id"],
            scheduled_at=_dt(row["scheduled_at"]),
            duration_minutes=row["duration_minutes"],
            interview_type=InterviewType(row["interview_type"]),
            status=InterviewStatus(row["status"]),
            meeting_url=row["meeting_url"],
            meeting_id=row["meeting_id"],
            notes=row["notes"] or "",
            created_by=row["created_by"] or "",
            created_at=_dt(row["created_at"]),
            updated_at=_dt(row["updated_at"]),
        )

    # -- Calendar credentials -------------------------------------------------

    def save_calendar_token(self, token: CalendarToken) -> None:
        self.conn.execute(
            """INSERT INTO calendar_tokens (user_id, access_token, refresh_token, token_expiry, updated_at)
               VALUES (?, ?, ?, ?, ?)
               ON CONFLICT(user_id) DO UPDATE SET
                   access_token = excluded.access_token,
                   refresh_token = CASE WHEN excluded.refresh_token != ''
                                        THEN excluded.refresh_token
                                        ELSE calendar_tokens.refresh_token END,
                   token_expiry = excluded.token_expiry,
                   updated_at = excluded.updated_at""",
            (
                token.user_id, token.access_token, token.refresh_token,
                _ts(token.token_expiry), _ts(datetime.now(timezone.utc)),
            ),
        )
        self.conn.commit()

    def get_calendar_token(self, user_id: str) -> CalendarToken | None:
        row = self.conn.execute(
            "SELECT * FROM calendar_tokens WHERE user_id = ?", (user_id,)
        ).fetchone()
        if not row:
            return None
        return CalendarToken(
            user_id=row["user_id"],
            access_token=row["access_token"],
            refresh_token=row["refresh_token"],
            token_expiry=_dt(row["token_expiry"]),
        )

    def delete_calendar_token(self, user_id: str) -> None:
        self.conn.execute("DELETE FROM calendar_tokens WHERE user_id = ?", (user_id,))
        self.conn.commit()

    # -- E-mail log -----------------------------------------------------------

    def log_email(self, entry: EmailLog) -> None:
        self.conn.execute(
            """INSERT INTO email_logs
               (id, candidate_id, email_type, recipient_email, subject, status, sent_at)
               VALUES (?, ?, ?, ?, ?, ?, ?)""",
            (
                entry.id, entry.candidate_id or None, entry.email_type,
                entry.recipient_email, entry.subject, entry.status, _ts(entry.sent_at),
            ),
        )
        self.conn.commit()

    def list_email_logs(self, candidate_id: str | None = None) -> list[EmailLog]:
        if candidate_id:
            rows = self.conn.execute(
                "SELECT * FROM email_logs WHERE candidate_id = ? ORDER BY sent_at DESC",
                (candidate_id,),
            ).fetchall()
        else:
            rows = self.conn.execute(
                "SELECT * FROM email_logs ORDER BY sent_at DESC"
            ).fetchall()
        return [
            EmailLog(
                id=r["id"], candidate_id=r["candidate_id"] or "",
                email_type=r["email_type"], recipient_email=r["recipient_email"],
                subject=r["subject"], status=r["status"], sent_at=_dt(r["sent_at"]),
            )
            for r in rows
        ]

    def close(self) -> None:
        self.conn.close()
