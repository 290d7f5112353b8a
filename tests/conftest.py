import copy
import uuid

import pytest
from fastapi.testclient import TestClient
from jose import jwt

from organizer.core.config import Settings
from organizer.main import create_app
from organizer.services.provider import ProviderError, get_gateway


class ManualClock:
    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


def make_token(user_id: str) -> str:
    return jwt.encode({"sub": user_id}, "test-secret", algorithm="HS256")


class FakeGateway:
    """In-memory stand-in for the Supabase gateway."""

    def __init__(self):
        self.users = {}
        self.tokens = {}
        self.tables = {}
        self.fail_tables = False
        self.calls = []

    # ---- auth ----

    def add_user(self, email: str, password: str, name: str = "") -> tuple[dict, str]:
        user = {"id": str(uuid.uuid4()), "email": email, "user_metadata": {"name": name}}
        self.users[email] = (password, user)
        token = make_token(user["id"])
        self.tokens[token] = user
        return user, token

    def sign_up(self, email, password, name=""):
        if email in self.users:
            raise ProviderError("User already registered")
        user, _ = self.add_user(email, password, name)
        return {"user": user}

    def sign_in(self, email, password):
        self.calls.append(("sign_in", email))
        stored = self.users.get(email)
        if not stored or stored[0] != password:
            raise ProviderError("Invalid login credentials")
        user = stored[1]
        token = make_token(user["id"])
        self.tokens[token] = user
        return {"user": user, "token": token, "refreshToken": "refresh-" + user["id"]}

    def sign_out(self, access_token):
        self.tokens.pop(access_token, None)

    def get_user(self, access_token):
        return self.tokens.get(access_token)

    def refresh(self, refresh_token):
        for _, user in self.users.values():
            if refresh_token == "refresh-" + user["id"]:
                token = make_token(user["id"])
                self.tokens[token] = user
                return {"token": token, "refreshToken": refresh_token}
        raise ProviderError("Invalid Refresh Token")

    # ---- tables ----

    def _check(self):
        if self.fail_tables:
            raise ProviderError("connection refused")

    def _match(self, table, filters):
        return [
            row for row in self.tables.setdefault(table, [])
            if all(row.get(k) == v for k, v in filters.items())
        ]

    def select(self, table, access_token, filters, columns="*", order_by=None, descending=False):
        self._check()
        rows = [copy.deepcopy(r) for r in self._match(table, filters)]
        if order_by:
            rows.sort(key=lambda r: (r.get(order_by) is None, r.get(order_by)), reverse=descending)
        return rows

    def insert(self, table, access_token, row):
        self._check()
        stored = {"id": str(uuid.uuid4()), **row}
        self.tables.setdefault(table, []).append(stored)
        return copy.deepcopy(stored)

    def update(self, table, access_token, values, filters):
        self._check()
        rows = self._match(table, filters)
        if not rows:
            return None
        rows[0].update(values)
        return copy.deepcopy(rows[0])

    def delete(self, table, access_token, filters):
        self._check()
        doomed = self._match(table, filters)
        self.tables[table] = [r for r in self.tables.get(table, []) if r not in doomed]


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def settings():
    return Settings(SUPABASE_URL="http://supabase.test", SUPABASE_ANON_KEY="anon", _env_file=None)


@pytest.fixture
def app(settings, clock, gateway):
    app = create_app(settings, clock=clock)
    app.dependency_overrides[get_gateway] = lambda: gateway
    return app


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def user(gateway):
    user, token = gateway.add_user("alice@example.com", "secret123", "Alice")
    return {"user": user, "token": token, "headers": {"Authorization": f"Bearer {token}"}}


@pytest.fixture
def make_client(clock, gateway):
    def build(**overrides):
        settings = Settings(
            SUPABASE_URL="http://supabase.test",
            SUPABASE_ANON_KEY="anon",
            _env_file=None,
            **overrides,
        )
        app = create_app(settings, clock=clock)
        app.dependency_overrides[get_gateway] = lambda: gateway
        return TestClient(app)

    return build
