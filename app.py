"""
FitLog Flask app (JSON API).
Features:
 - Username/password accounts on Supabase Auth
 - Daily morning/evening weight + bowel-movement records (Supabase table, upsert per day)
 - 7-day dashboard statistics with plotly chart data
 - History filtering & pagination
 - CSV export (UTF-8 BOM, spreadsheet friendly)
 - AI health insight (Groq preferred, OpenAI fallback)
 - Health endpoint for uptime monitoring

Requirements (install in your venv):
pip install -e .
"""

import io
import json
import logging
import os
import sys
import time
from datetime import date
from functools import wraps

from flask import Flask, request, jsonify, session, send_file
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from plotly.utils import PlotlyJSONEncoder

import analytics
import export
import history
from auth_utils import login_user, logout_user, register_user
from config import Config
from exceptions import AuthError, StoreError, ValidationError
from forms import parse_record_form, to_date
from insight import get_completer, request_insight
from models import SessionRegistry
from reconcile import apply_delete, apply_update, apply_upsert
from record_store import RecordStore


# ============================================================
# Logging
# ============================================================
def setup_logging(level=Config.LOG_LEVEL):
    fmt = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(fmt, datefmt="%Y-%m-%d %H:%M:%S"))
    root = logging.getLogger()
    root.setLevel(level)
    root.handlers = [handler]
    # Quiet noisy deps
    for name in ("httpx", "httpcore", "hpack", "groq", "openai"):
        logging.getLogger(name).setLevel(logging.WARNING)


setup_logging()
logger = logging.getLogger("fitlog")

# ============================================================
# App initialization
# ============================================================
app = Flask(__name__)
CORS(app, supports_credentials=True)
app.secret_key = Config.SECRET_KEY
app.json.ensure_ascii = False
app.config["RATELIMIT_ENABLED"] = Config.RATELIMIT_ENABLED
limiter = Limiter(get_remote_address, app=app, default_limits=[Config.DEFAULT_RATE_LIMIT])

if not (Config.SUPABASE_URL and Config.SUPABASE_KEY):
    logger.warning("Supabase not configured; login and record storage will fail.")

store = RecordStore()
sessions = SessionRegistry()


# ============================================================
# Session helpers
# ============================================================
def current_context():
    return sessions.get(session.get("token"))


def login_required(view):
    @wraps(view)
    def wrapped(*args, **kwargs):
        ctx = current_context()
        if ctx is None or not ctx.is_authenticated:
            return jsonify({"error": "请先登录"}), 401
        return view(ctx, *args, **kwargs)
    return wrapped


def ensure_records(ctx):
    if not ctx.records_loaded:
        ctx.set_records(store.list(ctx))
    return ctx.records


def request_data():
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else request.form


def store_failure(e: StoreError):
    return jsonify({"error": str(e)}), 502


def json_response(payload, status=200):
    body = json.dumps(payload, cls=PlotlyJSONEncoder, ensure_ascii=False)
    return app.response_class(body, status=status, mimetype="application/json")


@app.errorhandler(ValidationError)
def handle_validation_error(e):
    return jsonify({"error": str(e), "field": e.field}), 400


@app.errorhandler(AuthError)
def handle_auth_error(e):
    return jsonify({"error": str(e)}), 401


# ============================================================
# Auth routes
# ============================================================
def _start_session(ctx):
    sessions.close(session.pop("token", None))
    session["token"] = sessions.open(ctx)


@app.route("/auth/register", methods=["POST"])
def register():
    data = request_data()
    ctx = register_user(data.get("username", ""), data.get("password", ""))
    if ctx is None:
        return jsonify({"registered": True, "loggedIn": False, "message": "注册成功！请直接登录。"}), 201
    _start_session(ctx)
    return jsonify({"registered": True, "loggedIn": True, "username": ctx.username}), 201


@app.route("/auth/login", methods=["POST"])
def login():
    data = request_data()
    ctx = login_user(data.get("username", ""), data.get("password", ""))
    _start_session(ctx)
    return jsonify({"loggedIn": True, "username": ctx.username})


@app.route("/auth/logout", methods=["POST"])
def logout():
    token = session.pop("token", None)
    ctx = sessions.get(token)
    if ctx is not None:
        logout_user(ctx)
    sessions.close(token)
    return jsonify({"loggedIn": False})


# ============================================================
# Records
# ============================================================
@app.route("/records", methods=["GET"])
@login_required
def list_records(ctx):
    try:
        ctx.set_records(store.list(ctx))
    except StoreError as e:
        return store_failure(e)
    return jsonify({"records": [r.to_dict() for r in ctx.records]})


@app.route("/records", methods=["POST"])
@login_required
def create_record(ctx):
    record = parse_record_form(request_data())
    try:
        ensure_records(ctx)
        stored = store.create_or_update(ctx, record)
    except StoreError as e:
        return store_failure(e)
    if stored is None:
        return jsonify({"changed": False, "record": None}), 200
    ctx.reconcile(apply_upsert, stored)
    return jsonify({"changed": True, "record": stored.to_dict()}), 201


@app.route("/records/<record_id>", methods=["PUT"])
@login_required
def update_record(ctx, record_id):
    record = parse_record_form(request_data(), record_id=record_id)
    try:
        ensure_records(ctx)
        updated = store.update(ctx, record)
    except StoreError as e:
        return store_failure(e)
    ctx.reconcile(apply_update, updated)
    return jsonify({"changed": True, "record": updated.to_dict()})


@app.route("/records/<record_id>", methods=["DELETE"])
@login_required
def delete_record(ctx, record_id):
    try:
        ensure_records(ctx)
        store.delete(ctx, record_id)
    except StoreError as e:
        return store_failure(e)
    ctx.reconcile(apply_delete, record_id)
    return jsonify({"deleted": record_id})


# ============================================================
# Dashboard, history, export
# ============================================================
@app.route("/dashboard", methods=["GET"])
@login_required
def dashboard(ctx):
    try:
        records = ensure_records(ctx)
    except StoreError as e:
        return store_failure(e)
    return json_response(analytics.dashboard(records))


@app.route("/history", methods=["GET"])
@login_required
def history_view(ctx):
    start = to_date(request.args["start"]) if request.args.get("start") else None
    end = to_date(request.args["end"]) if request.args.get("end") else None
    page = request.args.get("page", 1, type=int)
    try:
        records = ensure_records(ctx)
    except StoreError as e:
        return store_failure(e)
    result = history.paginate(history.filter_by_date(records, start, end), page)
    return jsonify({
        "records": [history.history_row(r) for r in result.items],
        "page": result.page,
        "totalPages": result.total_pages,
        "total": result.total,
    })


@app.route("/export", methods=["GET"])
@login_required
def export_csv(ctx):
    try:
        records = ensure_records(ctx)
    except StoreError as e:
        return store_failure(e)
    content = export.export_bytes(records)
    if content is None:
        return jsonify({"error": export.EMPTY_EXPORT_MESSAGE}), 400
    return send_file(
        io.BytesIO(content),
        as_attachment=True,
        download_name=export.export_filename(date.today()),
        mimetype="text/csv; charset=utf-8",
    )


# ============================================================
# AI insight
# ============================================================
@app.route("/insight", methods=["GET"])
@login_required
def get_insight(ctx):
    return jsonify({"insight": ctx.insight, "pending": ctx.insight_pending})


@app.route("/insight", methods=["POST"])
@limiter.limit(Config.INSIGHT_RATE_LIMIT)
@login_required
def generate_insight(ctx):
    try:
        records = ensure_records(ctx)
    except StoreError as e:
        return store_failure(e)
    if not ctx.begin_insight():
        return jsonify({"error": "正在分析中，请稍候"}), 409

    text = None
    try:
        text = request_insight(records, get_completer())
    finally:
        ctx.finish_insight(text)
    return jsonify({"insight": ctx.insight})


@app.route("/insight", methods=["DELETE"])
@login_required
def reset_insight(ctx):
    ctx.reset_insight()
    return jsonify({"insight": None})


@app.route("/health", methods=["GET"])
def health():
    return jsonify({"status": "ok", "time": time.time()}), 200


# ============================================================
# Run
# ============================================================
if __name__ == "__main__":
    # For production use gunicorn
    port = int(os.environ.get("PORT", 5000))
    app.run(host="0.0.0.0", port=port, debug=os.environ.get("FLASK_DEBUG", "False") == "True")
