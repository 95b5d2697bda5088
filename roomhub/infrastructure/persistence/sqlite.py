import sqlite3
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from ...domain.errors import DuplicateEmail, DuplicatePhone, NotFound
from ...domain.models import Account, CodePurpose, PendingCode, Role
from ...domain.ports.persistence import AccountRepository

_CODE_COLUMNS = {
    CodePurpose.EMAIL_VERIFICATION: ("email_verification_code", "email_verification_expires"),
    CodePurpose.PASSWORD_RESET: ("password_reset_code", "password_reset_expires"),
}

_UPDATABLE_COLUMNS = frozenset(
    {
        "name",
        "last_name",
        "email",
        "region",
        "city",
        "phone",
        "bio",
        "habits",
        "profile_photo",
        "role",
        "is_email_verified",
        "password_hash",
    }
)


class SQLiteAccountRepository(AccountRepository):
    """SQLite-backed implementation of the account store."""

    def __init__(self, path: Union[Path, str]) -> None:
        if str(path) != ":memory:":
            path = Path(path)
            path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._lock = threading.Lock()
        self._initialize()

    def _initialize(self) -> None:
        with self._conn:
            self._conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS users (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL,
                    last_name TEXT NOT NULL,
                    email TEXT NOT NULL UNIQUE,
                    region TEXT NOT NULL,
                    city TEXT NOT NULL,
                    phone TEXT NOT NULL UNIQUE,
                    bio TEXT NOT NULL DEFAULT '',
                    habits TEXT NOT NULL DEFAULT '',
                    profile_photo TEXT NOT NULL DEFAULT '',
                    password_hash TEXT NOT NULL,
                    role TEXT NOT NULL DEFAULT 'seeker'
                        CHECK (role IN ('admin', 'seeker', 'host')),
                    is_email_verified INTEGER NOT NULL DEFAULT 0,
                    email_verification_code TEXT,
                    email_verification_expires TEXT,
                    password_reset_code TEXT,
                    password_reset_expires TEXT,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL,
                    CHECK ((email_verification_code IS NULL) = (email_verification_expires IS NULL)),
                    CHECK ((password_reset_code IS NULL) = (password_reset_expires IS NULL))
                );

                CREATE INDEX IF NOT EXISTS idx_users_role ON users(role);
                CREATE INDEX IF NOT EXISTS idx_users_created_at ON users(created_at);
                """
            )
        self._apply_migrations()

    def _apply_migrations(self) -> None:
        # Databases created before password reset existed lack these columns.
        with self._lock:
            cur = self._conn.execute("PRAGMA table_info(users)")
            columns = {row[1] for row in cur.fetchall()}
        for column in ("password_reset_code", "password_reset_expires"):
            if column not in columns:
                with self._lock, self._conn:
                    self._conn.execute(f"ALTER TABLE users ADD COLUMN {column} TEXT")

    def close(self) -> None:
        self._conn.close()

    # AccountRepository API --------------------------------------------------
    def create_account(
        self,
        *,
        name: str,
        last_name: str,
        email: str,
        region: str,
        city: str,
        phone: str,
        password_hash: str,
        role: Role,
        is_email_verified: bool,
        bio: str = "",
        habits: str = "",
    ) -> Account:
        now = self._now()
        try:
            with self._lock, self._conn:
                cur = self._conn.execute(
                    """
                    INSERT INTO users (
                        name, last_name, email, region, city, phone, bio, habits,
                        password_hash, role, is_email_verified, created_at, updated_at
                    )
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        name,
                        last_name,
                        email.lower(),
                        region,
                        city,
                        phone,
                        bio,
                        habits,
                        password_hash,
                        Role(role).value,
                        int(is_email_verified),
                        now,
                        now,
                    ),
                )
                account_id = cur.lastrowid
                cur = self._conn.execute("SELECT * FROM users WHERE id = ?", (account_id,))
                row = cur.fetchone()
        except sqlite3.IntegrityError as exc:
            raise self._translate_integrity_error(exc) from exc
        if not row:
            raise RuntimeError("Failed to persist account.")
        return self._row_to_account(row)

    def get_account(self, account_id: int) -> Optional[Account]:
        with self._lock:
            cur = self._conn.execute("SELECT * FROM users WHERE id = ?", (account_id,))
            row = cur.fetchone()
        return self._row_to_account(row) if row else None

    def get_account_by_email(self, email: str) -> Optional[Account]:
        with self._lock:
            cur = self._conn.execute("SELECT * FROM users WHERE email = ?", (email.lower(),))
            row = cur.fetchone()
        return self._row_to_account(row) if row else None

    def get_account_by_phone(self, phone: str) -> Optional[Account]:
        with self._lock:
            cur = self._conn.execute("SELECT * FROM users WHERE phone = ?", (phone,))
            row = cur.fetchone()
        return self._row_to_account(row) if row else None

    def update_account(self, account_id: int, **fields: Any) -> Account:
        unknown = set(fields) - _UPDATABLE_COLUMNS
        if unknown:
            raise ValueError(f"Unknown account fields: {', '.join(sorted(unknown))}")
        assignments = [f"{name} = ?" for name in fields]
        params: List[Any] = [self._to_db(name, value) for name, value in fields.items()]
        assignments.append("updated_at = ?")
        params.extend([self._now(), account_id])
        try:
            with self._lock, self._conn:
                self._conn.execute(
                    f"UPDATE users SET {', '.join(assignments)} WHERE id = ?",
                    params,
                )
                cur = self._conn.execute("SELECT * FROM users WHERE id = ?", (account_id,))
                row = cur.fetchone()
        except sqlite3.IntegrityError as exc:
            raise self._translate_integrity_error(exc) from exc
        if not row:
            raise NotFound(f"Account {account_id} not found")
        return self._row_to_account(row)

    def delete_account(self, account_id: int) -> bool:
        with self._lock, self._conn:
            cur = self._conn.execute("DELETE FROM users WHERE id = ?", (account_id,))
            return cur.rowcount > 0

    def set_pending_code(
        self,
        account_id: int,
        purpose: CodePurpose,
        code_hash: str,
        expires_at: datetime,
    ) -> None:
        code_col, expires_col = _CODE_COLUMNS[purpose]
        with self._lock, self._conn:
            cur = self._conn.execute(
                f"UPDATE users SET {code_col} = ?, {expires_col} = ?, updated_at = ? WHERE id = ?",
                (code_hash, self._format_datetime(expires_at), self._now(), account_id),
            )
        if cur.rowcount == 0:
            raise NotFound(f"Account {account_id} not found")

    def clear_pending_code(
        self,
        account_id: int,
        purpose: CodePurpose,
        expected_hash: Optional[str] = None,
    ) -> bool:
        code_col, expires_col = _CODE_COLUMNS[purpose]
        sql = f"UPDATE users SET {code_col} = NULL, {expires_col} = NULL, updated_at = ? WHERE id = ?"
        params: List[Any] = [self._now(), account_id]
        if expected_hash is not None:
            sql += f" AND {code_col} = ?"
            params.append(expected_hash)
        with self._lock, self._conn:
            cur = self._conn.execute(sql, params)
            return cur.rowcount == 1

    def consume_pending_code(
        self,
        account_id: int,
        purpose: CodePurpose,
        expected_hash: str,
        changes: Optional[Dict[str, Any]] = None,
    ) -> bool:
        changes = changes or {}
        unknown = set(changes) - _UPDATABLE_COLUMNS
        if unknown:
            raise ValueError(f"Unknown account fields: {', '.join(sorted(unknown))}")
        code_col, expires_col = _CODE_COLUMNS[purpose]
        assignments = [f"{code_col} = NULL", f"{expires_col} = NULL", "updated_at = ?"]
        params: List[Any] = [self._now()]
        for name, value in changes.items():
            assignments.append(f"{name} = ?")
            params.append(self._to_db(name, value))
        params.extend([account_id, expected_hash])
        with self._lock, self._conn:
            cur = self._conn.execute(
                f"UPDATE users SET {', '.join(assignments)} WHERE id = ? AND {code_col} = ?",
                params,
            )
            return cur.rowcount == 1

    def list_accounts(
        self,
        *,
        offset: int,
        limit: int,
        role: Optional[Role] = None,
        search: Optional[str] = None,
    ) -> Tuple[List[Account], int]:
        clauses: List[str] = []
        params: List[Any] = []
        if role is not None:
            clauses.append("role = ?")
            params.append(Role(role).value)
        if search:
            pattern = "%" + search.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_") + "%"
            clauses.append(
                "(name LIKE ? ESCAPE '\\' OR last_name LIKE ? ESCAPE '\\' OR email LIKE ? ESCAPE '\\')"
            )
            params.extend([pattern, pattern, pattern])
        where = f" WHERE {' AND '.join(clauses)}" if clauses else ""
        with self._lock:
            total = self._conn.execute(f"SELECT COUNT(*) FROM users{where}", params).fetchone()[0]
            cur = self._conn.execute(
                f"SELECT * FROM users{where} ORDER BY created_at DESC, id DESC LIMIT ? OFFSET ?",
                [*params, limit, offset],
            )
            rows = cur.fetchall()
        return [self._row_to_account(row) for row in rows], int(total)

    def count_accounts(
        self,
        *,
        role: Optional[Role] = None,
        is_email_verified: Optional[bool] = None,
    ) -> int:
        clauses: List[str] = []
        params: List[Any] = []
        if role is not None:
            clauses.append("role = ?")
            params.append(Role(role).value)
        if is_email_verified is not None:
            clauses.append("is_email_verified = ?")
            params.append(int(is_email_verified))
        where = f" WHERE {' AND '.join(clauses)}" if clauses else ""
        with self._lock:
            row = self._conn.execute(f"SELECT COUNT(*) FROM users{where}", params).fetchone()
        return int(row[0])

    # Helpers ----------------------------------------------------------------
    @staticmethod
    def _now() -> str:
        return datetime.now(timezone.utc).replace(microsecond=0).isoformat()

    @staticmethod
    def _format_datetime(value: datetime) -> str:
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc).isoformat()

    @staticmethod
    def _parse_datetime(value: str) -> datetime:
        try:
            result = datetime.fromisoformat(value)
        except ValueError:
            # Fallback for legacy formats without 'T'
            result = datetime.strptime(value, "%Y-%m-%d %H:%M:%S")
        if result.tzinfo is None:
            return result.replace(tzinfo=timezone.utc)
        return result.astimezone(timezone.utc)

    @staticmethod
    def _to_db(name: str, value: Any) -> Any:
        if name == "role":
            return Role(value).value
        if name == "is_email_verified":
            return int(bool(value))
        if name == "email":
            return value.lower()
        return value

    @staticmethod
    def _translate_integrity_error(exc: sqlite3.IntegrityError) -> Exception:
        message = str(exc)
        if "users.email" in message:
            return DuplicateEmail()
        if "users.phone" in message:
            return DuplicatePhone()
        return exc

    def _pending_code(self, row: sqlite3.Row, purpose: CodePurpose) -> Optional[PendingCode]:
        code_col, expires_col = _CODE_COLUMNS[purpose]
        if row[code_col] is None or row[expires_col] is None:
            return None
        return PendingCode(
            purpose=purpose,
            code_hash=row[code_col],
            expires_at=self._parse_datetime(row[expires_col]),
        )

    def _row_to_account(self, row: sqlite3.Row) -> Account:
        return Account(
            id=row["id"],
            name=row["name"],
            last_name=row["last_name"],
            email=row["email"],
            region=row["region"],
            city=row["city"],
            phone=row["phone"],
            password_hash=row["password_hash"],
            role=Role(row["role"]),
            bio=row["bio"] or "",
            habits=row["habits"] or "",
            profile_photo=row["profile_photo"] or "",
            is_email_verified=bool(row["is_email_verified"]),
            email_verification=self._pending_code(row, CodePurpose.EMAIL_VERIFICATION),
            password_reset=self._pending_code(row, CodePurpose.PASSWORD_RESET),
            created_at=self._parse_datetime(row["created_at"]),
            updated_at=self._parse_datetime(row["updated_at"]),
        )
