import json
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
import requests

from core.backend import BackendFacade
from core.config import Settings
from core.model_schemas import Course, Task, User
from core.results import Result
from core.store import AppStore

QUERY_METHODS = ("select", "insert", "update", "upsert", "delete", "eq", "order", "single", "maybe_single")


def make_query(data=None, error=None, count=None):
    """
    Chainable stand-in for a postgrest query builder.
    """
    query = MagicMock(name="query")
    for method in QUERY_METHODS:
        getattr(query, method).return_value = query
    if error is not None:
        query.execute.side_effect = error
    else:
        query.execute.return_value = SimpleNamespace(data=data, count=count)
    return query


class FakeSupabase:
    """
    Minimal Supabase client: per-table query mocks, auth and one storage bucket.
    """

    def __init__(self):
        self.tables = {}
        self.auth = MagicMock(name="auth")
        self.bucket = MagicMock(name="bucket")
        self.storage = MagicMock(name="storage")
        self.storage.from_.return_value = self.bucket

    def set_table(self, name, data=None, error=None, count=None):
        self.tables[name] = make_query(data, error, count)
        return self.tables[name]

    def table(self, name):
        if name not in self.tables:
            self.set_table(name, [])
        return self.tables[name]


def make_response(status=200, body=None, content_type="application/json", content=None):
    response = requests.Response()
    response.status_code = status
    response.headers["content-type"] = content_type
    if content is not None:
        response._content = content
    else:
        response._content = json.dumps(body if body is not None else {}).encode()
    return response


@pytest.fixture
def supabase():
    return FakeSupabase()


@pytest.fixture
def backend(supabase):
    return BackendFacade(supabase, bucket="documents")


@pytest.fixture
def settings():
    return Settings(
        supabase_url="https://project.supabase.co",
        supabase_anon_key="anon-key",
        api_base="http://api.test",
        ai_backend_url="http://ai.test",
        request_timeout=7,
    )


@pytest.fixture
def http():
    return MagicMock(name="http_session")


@pytest.fixture
def user():
    return User(id="user-1", email="ada@example.com", name="Ada", institution="Uni")


@pytest.fixture
def mock_backend(user):
    """
    BackendFacade double whose reads succeed with empty collections.
    """
    mock = MagicMock(spec=BackendFacade)
    mock.get_current_user.return_value = Result.success(user)
    mock.sign_in.return_value = Result.success(user)
    mock.sign_out.return_value = Result.success()
    for method in ("get_courses", "get_tasks", "get_notes", "get_documents", "get_voice_scripts"):
        getattr(mock, method).return_value = Result.success([])
    return mock


@pytest.fixture
def store(mock_backend):
    return AppStore(mock_backend)


@pytest.fixture
def signed_in_store(store, user):
    store.set_user(user)
    return store


def make_task(task_id, due_date, **fields):
    return Task(id=task_id, title=fields.pop("title", task_id), due_date=due_date, **fields)


def make_course(course_id, name=None, **fields):
    return Course(id=course_id, name=name or course_id, **fields)
