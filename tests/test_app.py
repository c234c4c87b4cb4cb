"""Tests for the Flask JSON API."""

from datetime import date, timedelta
from unittest.mock import MagicMock, patch

import pytest

import app as app_module
from exceptions import AuthError, StoreError
from insight import FALLBACK_MESSAGE
from models import HealthRecord, SessionContext
from record_store import RecordStore


def _records(n):
    return [
        HealthRecord(id=f"id-{i}", date=date(2024, 1, 1) + timedelta(days=i),
                     morning_weight=130.0, evening_weight=131.0,
                     has_bm=i % 2 == 0, bm_count=1 if i % 2 == 0 else 0)
        for i in reversed(range(n))
    ]


@pytest.fixture
def fake_store():
    store = MagicMock(spec=RecordStore)
    store.list.return_value = _records(3)
    with patch.object(app_module, "store", store):
        yield store


@pytest.fixture
def ctx():
    return SessionContext(user_id="user-1", username="alice", client=MagicMock())


@pytest.fixture
def client(fake_store, ctx):
    test_client = app_module.app.test_client()
    with patch.object(app_module, "login_user", return_value=ctx):
        resp = test_client.post("/auth/login", json={"username": "alice", "password": "secret1"})
    assert resp.status_code == 200
    return test_client


class TestAuth:
    def test_requires_login(self, fake_store):
        resp = app_module.app.test_client().get("/records")
        assert resp.status_code == 401
        fake_store.list.assert_not_called()

    def test_login_failure(self):
        with patch.object(app_module, "login_user", side_effect=AuthError("用户名或密码错误")):
            resp = app_module.app.test_client().post("/auth/login", json={"username": "a", "password": "x"})
        assert resp.status_code == 401
        assert resp.get_json()["error"] == "用户名或密码错误"

    def test_invalid_username_is_400(self):
        resp = app_module.app.test_client().post("/auth/login", json={"username": "bad name", "password": "secret1"})
        assert resp.status_code == 400

    def test_non_string_username_is_400(self):
        resp = app_module.app.test_client().post("/auth/login", json={"username": 12345, "password": "secret1"})
        assert resp.status_code == 400
        assert resp.get_json()["field"] == "username"

    def test_username_with_trailing_newline_is_400(self):
        resp = app_module.app.test_client().post("/auth/login", json={"username": "alice\n", "password": "secret1"})
        assert resp.status_code == 400

    def test_register_without_session(self):
        with patch.object(app_module, "register_user", return_value=None):
            resp = app_module.app.test_client().post("/auth/register", json={"username": "bob", "password": "secret1"})
        assert resp.status_code == 201
        assert resp.get_json()["loggedIn"] is False

    def test_logout_tears_down_session(self, client, ctx):
        resp = client.post("/auth/logout")
        assert resp.status_code == 200
        assert ctx.records == []
        assert client.get("/records").status_code == 401


class TestRecords:
    def test_list(self, client, fake_store):
        resp = client.get("/records")
        assert resp.status_code == 200
        assert [r["id"] for r in resp.get_json()["records"]] == ["id-2", "id-1", "id-0"]

    def test_list_failure_keeps_prior_state(self, client, fake_store, ctx):
        client.get("/records")
        fake_store.list.side_effect = StoreError("加载数据失败，请检查网络连接")
        resp = client.get("/records")
        assert resp.status_code == 502
        assert len(ctx.records) == 3

    def test_create_new_date_prepends(self, client, fake_store, ctx):
        fake_store.create_or_update.side_effect = lambda c, r: r.with_id("new")
        resp = client.post("/records", json={
            "date": "2024-01-10", "morningWeight": 129, "eveningWeight": 130.5, "hasBM": True,
        })
        assert resp.status_code == 201
        assert resp.get_json()["record"]["bmCount"] == 1
        assert len(ctx.records) == 4
        assert ctx.records[0].id == "new"

    def test_create_existing_date_replaces(self, client, fake_store, ctx):
        fake_store.create_or_update.side_effect = lambda c, r: r.with_id("id-1")
        resp = client.post("/records", json={
            "date": "2024-01-02", "morningWeight": 120, "eveningWeight": 121,
        })
        assert resp.status_code == 201
        assert len(ctx.records) == 3
        assert ctx.records[1].morning_weight == 120.0

    def test_create_without_principal_changes_nothing(self, client, fake_store, ctx):
        fake_store.create_or_update.return_value = None
        resp = client.post("/records", json={"date": "2024-01-10", "morningWeight": 1, "eveningWeight": 1})
        assert resp.get_json()["changed"] is False
        assert len(ctx.records) == 3

    def test_invalid_weight_never_hits_store(self, client, fake_store):
        resp = client.post("/records", json={"morningWeight": "abc", "eveningWeight": 1})
        assert resp.status_code == 400
        fake_store.create_or_update.assert_not_called()

    def test_non_text_notes_is_400(self, client, fake_store):
        resp = client.post("/records", json={"morningWeight": 1, "eveningWeight": 1, "notes": 5})
        assert resp.status_code == 400
        fake_store.create_or_update.assert_not_called()

    def test_list_body_is_400(self, client, fake_store):
        resp = client.post("/records", json=[1])
        assert resp.status_code == 400
        fake_store.create_or_update.assert_not_called()

    def test_update(self, client, fake_store, ctx):
        fake_store.update.side_effect = lambda c, r: r
        resp = client.put("/records/id-0", json={
            "date": "2024-01-01", "morningWeight": 125, "eveningWeight": 126,
        })
        assert resp.status_code == 200
        assert len(ctx.records) == 3
        assert ctx.records[2].morning_weight == 125.0

    def test_failed_update_leaves_cache(self, client, fake_store, ctx):
        fake_store.update.side_effect = StoreError("记录不存在或已被删除")
        resp = client.put("/records/gone", json={"morningWeight": 1, "eveningWeight": 1})
        assert resp.status_code == 502
        assert [r.morning_weight for r in ctx.records] == [130.0] * 3

    def test_delete(self, client, fake_store, ctx):
        resp = client.delete("/records/id-1")
        assert resp.status_code == 200
        fake_store.delete.assert_called_once_with(ctx, "id-1")
        assert [r.id for r in ctx.records] == ["id-2", "id-0"]

    def test_delete_unknown_id(self, client, ctx):
        assert client.delete("/records/nope").status_code == 200
        assert len(ctx.records) == 3


class TestViews:
    def test_dashboard(self, client):
        data = client.get("/dashboard").get_json()
        assert data["summary"]["totalDays"] == 3
        assert data["summary"]["bmRate"] == 67
        assert data["bmSplit"] == {"withBM": 2, "withoutBM": 1}
        assert "charts" in data

    def test_dashboard_empty(self, client, fake_store):
        fake_store.list.return_value = []
        assert client.get("/dashboard").get_json()["empty"] is True

    def test_history_filter(self, client):
        data = client.get("/history?start=2024-01-02").get_json()
        assert data["total"] == 2
        assert data["records"][0]["weightDiff"] == 1.0

    def test_export(self, client):
        resp = client.get("/export")
        assert resp.status_code == 200
        assert resp.data.startswith(b"\xef\xbb\xbf")
        assert "fitlog_records_" in resp.headers["Content-Disposition"]

    def test_export_empty_refused(self, client, fake_store):
        fake_store.list.return_value = []
        resp = client.get("/export")
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "暂无数据可供导出"


class TestInsight:
    def test_generate(self, client, ctx):
        with patch.object(app_module, "get_completer", return_value=lambda prompt: "多喝水"):
            resp = client.post("/insight")
        assert resp.status_code == 200
        assert resp.get_json()["insight"] == "多喝水"
        assert ctx.insight == "多喝水"
        assert ctx.insight_pending is False
        assert client.get("/insight").get_json()["insight"] == "多喝水"

    def test_too_few_records_makes_no_call(self, client, fake_store, ctx):
        fake_store.list.return_value = _records(2)
        complete = MagicMock()
        with patch.object(app_module, "get_completer", return_value=complete):
            resp = client.post("/insight")
        assert resp.status_code == 400
        complete.assert_not_called()
        assert ctx.insight_pending is False

    def test_provider_failure_returns_fallback(self, client):
        complete = MagicMock(side_effect=Exception("quota exceeded"))
        with patch.object(app_module, "get_completer", return_value=complete):
            resp = client.post("/insight")
        assert resp.status_code == 200
        assert resp.get_json()["insight"] == FALLBACK_MESSAGE

    def test_one_request_in_flight(self, client, ctx):
        ctx.insight_pending = True
        complete = MagicMock()
        with patch.object(app_module, "get_completer", return_value=complete):
            resp = client.post("/insight")
        assert resp.status_code == 409
        complete.assert_not_called()

    def test_reset(self, client, ctx):
        ctx.insight = "old"
        assert client.delete("/insight").status_code == 200
        assert ctx.insight is None


def test_health():
    resp = app_module.app.test_client().get("/health")
    assert resp.status_code == 200
    assert resp.get_json()["status"] == "ok"
