"""In-memory stand-in for the parts of the Supabase client the app calls"""
import copy
import threading
import uuid
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import httpx
from postgrest.exceptions import APIError
from storage3.utils import StorageException

SERVER_EPOCH = datetime(2024, 8, 20, 10, 30, tzinfo=timezone.utc)


class FakeResponse:
    def __init__(self, data, count=None):
        self.data = data
        self.count = count


def _is_uuid(value) -> bool:
    try:
        uuid.UUID(str(value))
        return True
    except ValueError:
        return False


class FakeQuery:
    def __init__(self, db: "FakeSupabase", table: str):
        self._db = db
        self._table = table
        self._op = "select"
        self._payload = None
        self._filters = []
        self._limit = None

    def select(self, *columns, count=None):
        self._op = "select"
        return self

    def insert(self, data):
        self._op = "insert"
        self._payload = data
        return self

    def update(self, data):
        self._op = "update"
        self._payload = data
        return self

    def delete(self):
        self._op = "delete"
        return self

    def eq(self, column, value):
        self._filters.append((column, value))
        return self

    def limit(self, n):
        self._limit = n
        return self

    def execute(self):
        return self._db.run(self)


class FakeStorageBucket:
    def __init__(self, db: "FakeSupabase", bucket: str):
        self._db = db
        self._bucket = bucket

    def upload(self, path, file, file_options=None):
        if any(marker in path for marker in self._db.failing_uploads):
            raise StorageException({"message": "upload rejected", "statusCode": 500})
        with self._db.lock:
            self._db.blobs[(self._bucket, path)] = {
                "data": file,
                "content_type": (file_options or {}).get("content-type"),
            }
        return SimpleNamespace(path=path)

    def get_public_url(self, path):
        return f"https://fake.supabase.co/storage/v1/object/public/{self._bucket}/{path}"

    def remove(self, paths):
        if self._db.failing_removes:
            raise StorageException({"message": "remove rejected", "statusCode": 500})
        with self._db.lock:
            for path in paths:
                self._db.blobs.pop((self._bucket, path), None)
            self._db.remove_calls.append(list(paths))
        return [{"name": p} for p in paths]


class FakeStorage:
    def __init__(self, db: "FakeSupabase"):
        self._db = db

    def from_(self, bucket):
        return FakeStorageBucket(self._db, bucket)


class FakeAdminAuth:
    def __init__(self):
        self.revoked = []

    def sign_out(self, jwt, scope="global"):
        self.revoked.append(jwt)


class FakeAuth:
    def __init__(self):
        self.users = {}
        self.signed_out = 0
        self.unreachable = False
        self.admin = FakeAdminAuth()

    def _response(self, record):
        user = SimpleNamespace(
            id=record["id"],
            email=record["email"],
            user_metadata=record["user_metadata"],
        )
        session = SimpleNamespace(access_token=f"token-{record['id']}")
        return SimpleNamespace(user=user, session=session)

    def _check_reachable(self):
        if self.unreachable:
            raise httpx.ConnectError("identity service unreachable")

    def sign_up(self, credentials):
        self._check_reachable()
        options = credentials.get("options") or {}
        record = {
            "id": str(uuid.uuid4()),
            "email": credentials["email"],
            "password": credentials["password"],
            "user_metadata": options.get("data") or {},
        }
        self.users[credentials["email"]] = record
        return self._response(record)

    def sign_in_with_password(self, credentials):
        self._check_reachable()
        record = self.users.get(credentials["email"])
        if record is None or record["password"] != credentials["password"]:
            raise httpx.HTTPStatusError(
                "invalid login credentials",
                request=httpx.Request("POST", "https://fake.supabase.co/auth/v1/token"),
                response=httpx.Response(400),
            )
        return self._response(record)

    def sign_out(self):
        self.signed_out += 1


class FakeSupabase:
    """
    Tables, storage and auth kept in memory.

    Timestamps come from a fake server clock that advances one second per
    write, so created_at == updated_at for a fresh row and any later update
    is strictly newer.
    """

    def __init__(self):
        self.lock = threading.Lock()
        self.tables = {}
        self.blobs = {}
        self.remove_calls = []
        self.failing_ops = set()     # e.g. {"select", "insert"}
        self.failing_uploads = set()  # substrings of object paths to reject
        self.failing_removes = False
        self.queries = []
        self._clock = 0
        self.storage = FakeStorage(self)
        self.auth = FakeAuth()

    def table(self, name):
        return FakeQuery(self, name)

    def now(self) -> str:
        self._clock += 1
        return (SERVER_EPOCH + timedelta(seconds=self._clock)).isoformat()

    def rows(self, table="notes"):
        return self.tables.setdefault(table, [])

    def run(self, query: FakeQuery):
        self.queries.append((query._table, query._op, list(query._filters)))

        if query._op in self.failing_ops:
            raise APIError({"message": "upstream connect error", "code": "PGRST000"})

        for column, value in query._filters:
            if column == "id" and not _is_uuid(value):
                raise APIError({
                    "message": f'invalid input syntax for type uuid: "{value}"',
                    "code": "22P02",
                })

        rows = self.rows(query._table)

        def matches(row):
            return all(row.get(c) == v for c, v in query._filters)

        if query._op == "insert":
            now = self.now()
            row = {"id": str(uuid.uuid4()), "created_at": now, "updated_at": now}
            row.update(copy.deepcopy(query._payload))
            rows.append(row)
            return FakeResponse([copy.deepcopy(row)])

        if query._op == "update":
            changed = []
            payload = copy.deepcopy(query._payload)
            for row in rows:
                if matches(row):
                    for key, value in payload.items():
                        row[key] = self.now() if key == "updated_at" and value == "now" else value
                    changed.append(copy.deepcopy(row))
            return FakeResponse(changed)

        if query._op == "delete":
            removed = [row for row in rows if matches(row)]
            self.tables[query._table] = [row for row in rows if not matches(row)]
            return FakeResponse(copy.deepcopy(removed))

        found = [copy.deepcopy(row) for row in rows if matches(row)]
        if query._limit:
            found = found[:query._limit]
        return FakeResponse(found, count=len(found))
