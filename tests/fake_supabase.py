"""
In-memory stand-in for the Supabase client used by the tests.

Implements the query-builder calls the services make (select/insert/update/
delete with eq/in_/or_/order/limit), the row-level policies of the real
database (writes outside the caller's rights silently match zero rows, inserts
are rejected with 42501), unique constraints, cascades, the last-owner
trigger, the delete_user_account RPC and the handful of auth calls.
"""

import re
import uuid
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

from supabase import PostgrestAPIError

WRITERS = {"owner", "admin", "editor"}
MANAGERS = {"owner", "admin"}

UNIQUE_KEYS = {
    "profiles": [("id",), ("email",)],
    "project_members": [("project_id", "profile_id")],
}

DEFAULTS = {
    "projects": {"description": None},
    "tasks": {"description": None, "completed": False},
    "profiles": {"avatar_url": None},
}

TIMESTAMP_COLUMN = {
    "profiles": "created_at",
    "projects": "created_at",
    "tasks": "created_at",
    "project_members": "joined_at",
}


def api_error(message, code):
    return PostgrestAPIError({"message": message, "code": code, "hint": None, "details": None})


def rls_error(table):
    return api_error(f'new row violates row-level security policy for table "{table}"', "42501")


class FakeDatabase:
    def __init__(self):
        self.tables = {"profiles": [], "projects": [], "project_members": [], "tasks": []}
        self.users = {}  # user_id -> dict
        self.passwords = {}  # email -> password
        self.tokens = {}  # token -> user_id
        self.fail_inserts = {}  # table -> exception raised on the next insert
        self.calls = []  # (table, operation) log
        self._clock = datetime(2026, 1, 1, tzinfo=timezone.utc)

    def now(self):
        self._clock += timedelta(seconds=1)
        return self._clock.isoformat()

    def role_of(self, user_id, project_id):
        for row in self.tables["project_members"]:
            if row["project_id"] == project_id and row["profile_id"] == user_id:
                return row["role"]
        return None

    def project(self, project_id):
        for row in self.tables["projects"]:
            if row["id"] == project_id:
                return row
        return None

    # --- row-level policies -------------------------------------------------

    def can_read(self, table, row, user_id):
        if table == "profiles":
            return True
        if table == "projects":
            return self.role_of(user_id, row["id"]) is not None or row["owner_id"] == user_id
        return self.role_of(user_id, row["project_id"]) is not None

    def can_write(self, table, row, user_id):
        if table == "profiles":
            return row["id"] == user_id
        if table == "projects":
            if self.role_of(user_id, row["id"]) == "owner":
                return True
            # creator rolling back a project that never got its owner membership
            has_members = any(m["project_id"] == row["id"] for m in self.tables["project_members"])
            return row["owner_id"] == user_id and not has_members
        if table == "tasks":
            return self.role_of(user_id, row["project_id"]) in WRITERS
        return self.role_of(user_id, row["project_id"]) in MANAGERS

    def can_insert(self, table, row, user_id):
        if table == "profiles":
            return row.get("id") == user_id
        if table == "projects":
            return row.get("owner_id") == user_id
        if table == "tasks":
            return self.role_of(user_id, row.get("project_id")) in WRITERS
        if self.role_of(user_id, row.get("project_id")) in MANAGERS:
            return True
        project = self.project(row.get("project_id"))
        return (
            project is not None
            and project["owner_id"] == user_id
            and row.get("profile_id") == user_id
            and row.get("role") == "owner"
        )

    # --- storage ------------------------------------------------------------

    def insert(self, table, values):
        rows = []
        for value in values:
            row = dict(DEFAULTS.get(table, {}))
            row.update(value)
            row.setdefault("id", str(uuid.uuid4()))
            row.setdefault(TIMESTAMP_COLUMN[table], self.now())
            for key in UNIQUE_KEYS.get(table, []):
                if any(all(r.get(k) == row.get(k) for k in key) for r in self.tables[table]):
                    raise api_error(f'duplicate key value violates unique constraint "{table}_{"_".join(key)}_key"', "23505")
            rows.append(row)
        self.tables[table].extend(rows)
        return rows

    def delete(self, table, rows):
        if table == "project_members":
            for row in rows:
                owners = [
                    r for r in self.tables[table]
                    if r["project_id"] == row["project_id"] and r["role"] == "owner" and r not in rows
                ]
                if row["role"] == "owner" and not owners and self.project(row["project_id"]) is not None:
                    raise api_error("Cannot remove the last owner of a project", "P0001")
        self.tables[table] = [r for r in self.tables[table] if r not in rows]
        if table == "projects":
            ids = {r["id"] for r in rows}
            for child in ("tasks", "project_members"):
                self.tables[child] = [r for r in self.tables[child] if r["project_id"] not in ids]
        return rows


def _ilike(pattern, value):
    regex = "^" + ".*".join(re.escape(part) for part in re.split(r"[*%]", pattern)) + "$"
    return value is not None and re.match(regex, str(value), re.IGNORECASE) is not None


class FakeQuery:
    def __init__(self, client, table):
        self.client = client
        self.db = client.db
        self.table = table
        self.operation = "select"
        self.columns = "*"
        self.values = None
        self.filters = []
        self.order_by = None
        self.limit_count = None

    def select(self, columns="*", count=None):
        self.columns = columns
        return self

    def insert(self, values):
        self.operation = "insert"
        self.values = values if isinstance(values, list) else [values]
        return self

    def update(self, values):
        self.operation = "update"
        self.values = values
        return self

    def delete(self):
        self.operation = "delete"
        return self

    def eq(self, column, value):
        self.filters.append(lambda row: row.get(column) == value)
        return self

    def in_(self, column, values):
        values = list(values)
        self.filters.append(lambda row: row.get(column) in values)
        return self

    def or_(self, filters):
        clauses = []
        for clause in filters.split(","):
            column, op, pattern = clause.split(".", 2)
            assert op == "ilike", op
            clauses.append((column, pattern))
        self.filters.append(lambda row: any(_ilike(p, row.get(c)) for c, p in clauses))
        return self

    def order(self, column, desc=False):
        self.order_by = (column, desc)
        return self

    def limit(self, count):
        self.limit_count = count
        return self

    def _project(self, row):
        if self.columns.strip() == "*":
            return dict(row)
        names = [c.strip() for c in self.columns.split(",")]
        return {name: row.get(name) for name in names}

    def _matching(self):
        return [r for r in self.db.tables[self.table] if all(f(r) for f in self.filters)]

    def _visible(self, rows):
        if self.client.service:
            return rows
        return [r for r in rows if self.db.can_read(self.table, r, self.client.user_id)]

    def _writable(self, rows):
        if self.client.service:
            return rows
        return [r for r in rows if self.db.can_write(self.table, r, self.client.user_id)]

    def execute(self):
        self.db.calls.append((self.table, self.operation))
        if self.operation == "insert":
            failure = self.db.fail_inserts.pop(self.table, None)
            if failure is not None:
                raise failure
            if not self.client.service:
                for value in self.values:
                    if not self.db.can_insert(self.table, value, self.client.user_id):
                        raise rls_error(self.table)
            rows = self.db.insert(self.table, self.values)
            return SimpleNamespace(data=[dict(r) for r in rows], count=None)

        rows = self._visible(self._matching())
        if self.operation == "update":
            rows = self._writable(rows)
            for row in rows:
                row.update(self.values)
            return SimpleNamespace(data=[dict(r) for r in rows], count=None)
        if self.operation == "delete":
            rows = self._writable(rows)
            self.db.delete(self.table, rows)
            return SimpleNamespace(data=[dict(r) for r in rows], count=None)

        if self.order_by:
            column, desc = self.order_by
            rows = sorted(rows, key=lambda r: r.get(column), reverse=desc)
        if self.limit_count is not None:
            rows = rows[:self.limit_count]
        return SimpleNamespace(data=[self._project(r) for r in rows], count=len(rows))


class FakeRpc:
    def __init__(self, client, name, params):
        self.client = client
        self.name = name
        self.params = params

    def execute(self):
        assert self.name == "delete_user_account", self.name
        db = self.client.db
        user_id = self.client.user_id
        if user_id is None:
            raise api_error("not authenticated", "42501")
        owned = [p for p in db.tables["projects"] if p["owner_id"] == user_id]
        db.tables["project_members"] = [
            m for m in db.tables["project_members"]
            if m["profile_id"] != user_id and m["project_id"] not in {p["id"] for p in owned}
        ]
        db.tables["tasks"] = [t for t in db.tables["tasks"] if t["project_id"] not in {p["id"] for p in owned}]
        db.tables["projects"] = [p for p in db.tables["projects"] if p["owner_id"] != user_id]
        db.tables["profiles"] = [p for p in db.tables["profiles"] if p["id"] != user_id]
        user = db.users.pop(user_id, None)
        if user is not None:
            db.passwords.pop(user["email"], None)
        db.tokens = {t: u for t, u in db.tokens.items() if u != user_id}
        return SimpleNamespace(data=None, count=None)


def _user_namespace(user):
    return SimpleNamespace(
        id=user["id"],
        email=user["email"],
        user_metadata=user["user_metadata"],
        app_metadata={},
        created_at=user["created_at"],
        updated_at=None,
        email_confirmed_at=user["created_at"],
    )


class FakeAdminAuth:
    def __init__(self, client):
        self.client = client
        self.db = client.db
        self.fail_updates = False

    def sign_out(self, jwt, scope="global"):
        self.db.tokens.pop(jwt, None)

    def update_user_by_id(self, user_id, attributes):
        if not self.client.service:
            raise Exception("User not allowed")
        if self.fail_updates:
            raise Exception("auth admin unavailable")
        user = self.db.users[user_id]
        if "password" in attributes:
            self.db.passwords[user["email"]] = attributes["password"]
        if "user_metadata" in attributes:
            user["user_metadata"].update(attributes["user_metadata"])
        return SimpleNamespace(user=_user_namespace(user))


class FakeAuth:
    def __init__(self, client):
        self.client = client
        self.db = client.db
        self.admin = FakeAdminAuth(client)

    def _session_for(self, user_id):
        token = f"token-{user_id}"
        self.db.tokens[token] = user_id
        return SimpleNamespace(access_token=token, refresh_token=f"refresh-{user_id}")

    def sign_up(self, credentials):
        email = credentials["email"].lower()
        if email in self.db.passwords:
            raise Exception("User already registered")
        user_id = str(uuid.uuid4())
        metadata = dict(credentials.get("options", {}).get("data", {}))
        self.db.users[user_id] = {"id": user_id, "email": email, "user_metadata": metadata, "created_at": self.db.now()}
        self.db.passwords[email] = credentials["password"]
        return SimpleNamespace(user=_user_namespace(self.db.users[user_id]), session=self._session_for(user_id))

    def sign_in_with_password(self, credentials):
        email = credentials["email"].lower()
        if self.db.passwords.get(email) != credentials["password"]:
            raise Exception("Invalid login credentials")
        user = next(u for u in self.db.users.values() if u["email"] == email)
        return SimpleNamespace(user=_user_namespace(user), session=self._session_for(user["id"]))

    def sign_in_with_oauth(self, credentials):
        redirect_to = credentials.get("options", {}).get("redirect_to", "")
        return SimpleNamespace(
            provider=credentials["provider"],
            url=f"https://fake.supabase.co/auth/v1/authorize?provider={credentials['provider']}&redirect_to={redirect_to}",
        )

    def get_user(self, jwt=None):
        user_id = self.db.tokens.get(jwt)
        if user_id is None or user_id not in self.db.users:
            raise Exception("invalid JWT: unable to parse or verify signature")
        return SimpleNamespace(user=_user_namespace(self.db.users[user_id]))


class FakeClient:
    def __init__(self, db, user_id=None, service=False):
        self.db = db
        self.user_id = user_id
        self.service = service
        self.auth = FakeAuth(self)

    def table(self, name):
        return FakeQuery(self, name)

    def rpc(self, name, params=None):
        return FakeRpc(self, name, params or {})


class FakeSupabaseFactory:
    """Drop-in for SupabaseClientFactory backed by one FakeDatabase"""

    def __init__(self, db=None):
        self.db = db or FakeDatabase()
        self.admin_failures = False

    def anon(self):
        return FakeClient(self.db)

    def for_token(self, token):
        return FakeClient(self.db, user_id=self.db.tokens.get(token))

    def service(self):
        client = FakeClient(self.db, service=True)
        client.auth.admin.fail_updates = self.admin_failures
        return client

    def add_user(self, email, username, password="secret123", with_profile=True, metadata=None):
        """Create an auth user (and by default its profile); returns (user_id, token)"""
        user_id = str(uuid.uuid4())
        self.db.users[user_id] = {
            "id": user_id,
            "email": email,
            "user_metadata": dict(metadata if metadata is not None else {"username": username}),
            "created_at": self.db.now(),
        }
        self.db.passwords[email] = password
        token = f"token-{user_id}"
        self.db.tokens[token] = user_id
        if with_profile:
            self.db.insert("profiles", [{"id": user_id, "username": username, "email": email}])
        return user_id, token
