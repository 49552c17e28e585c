"""
Flask route handlers for the REST API.

The caller identity is taken from the ``X-Caller-Identity`` header, which the
hosting environment sets after authenticating the user.
"""

import sys
import traceback

from flask import request, jsonify

from wellness.config import CALLER_HEADER
from wellness.errors import LedgerError, Unauthorized, NotFound, InvalidArgument, AmountMismatch
from wellness.models import to_plain
from wellness.reports import summarize_bills
from wellness.requests import ENTRY_POINTS, argument_names, build_request

STATUS_BY_ERROR = {
    InvalidArgument: 400,
    Unauthorized: 403,
    NotFound: 404,
    AmountMismatch: 409,
}


def error_status(error: LedgerError) -> int:
    for cls, status in STATUS_BY_ERROR.items():
        if isinstance(error, cls):
            return status
    return 500


def bad_body(name: str, details: str):
    return jsonify({
        "success": False,
        "entry_point": name,
        "error": InvalidArgument.kind,
        "details": details,
    }), 400


def register_routes(app, ledger):
    """Register all API routes on the Flask *app*."""

    # ── Health / info ────────────────────────────────────────────────

    @app.route("/", methods=["GET"])
    def index():
        return jsonify({
            "service": "Wellness Ledger API",
            "version": "1.0.0",
            "status": "running",
            "endpoints": {
                "call": "/api/call/<entry-point>",
                "entry_points": "/api/entry-points",
                "bill_report": "/api/bills/report",
                "health": "/health",
            },
        })

    @app.route("/health", methods=["GET"])
    def health():
        checks = {"database": False, "schema": False}
        try:
            checks = ledger.check_health()
        except Exception as e:
            print(f"[WARN] Health check failed: {e}", file=sys.stderr)

        all_healthy = all(checks.values())
        return jsonify({
            "status": "healthy" if all_healthy else "unhealthy",
            "checks": checks,
            "strict_writes": ledger.strict_writes,
        }), 200 if all_healthy else 503

    @app.route("/api/entry-points", methods=["GET"])
    def list_entry_points():
        return jsonify({
            "success": True,
            "entry_points": {name: list(argument_names(name)) for name in ENTRY_POINTS},
        }), 200

    # ── Entry points ─────────────────────────────────────────────────

    @app.route("/api/call/<name>", methods=["POST"])
    def call_entry_point(name):
        caller = request.headers.get(CALLER_HEADER, "").strip()
        if not caller:
            return jsonify({
                "success": False,
                "error": "Unauthorized",
                "details": f"{CALLER_HEADER} header is required",
            }), 401

        if request.data and not request.is_json:
            return bad_body(name, "Content-Type must be application/json")
        args = request.get_json(silent=True) if request.data else {}
        if args is None:
            return bad_body(name, "Request body is not valid JSON")

        try:
            req = build_request(name, args)
            result = ledger.execute(caller, req)
            return jsonify({
                "success": True,
                "entry_point": name,
                "result": to_plain(result),
            }), 200

        except LedgerError as e:
            return jsonify({
                "success": False,
                "entry_point": name,
                "error": e.kind,
                "details": str(e),
            }), error_status(e)
        except Exception as e:
            print(f"[ERROR] {name} failed: {e}", file=sys.stderr)
            traceback.print_exc()
            return jsonify({
                "success": False,
                "entry_point": name,
                "error": "InternalError",
                "details": str(e),
            }), 500

    # ── Reports ──────────────────────────────────────────────────────

    @app.route("/api/bills/report", methods=["GET"])
    def bill_report():
        df = ledger.load_bills()
        return jsonify({
            "success": True,
            "totals": summarize_bills(df),
            "bills": df.to_dict(orient="records"),
        }), 200

    # ── Error handlers ───────────────────────────────────────────────

    @app.errorhandler(404)
    def not_found(e):
        return jsonify({"error": "Endpoint not found", "message": str(e)}), 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return jsonify({"error": "Method not allowed", "message": str(e)}), 405

    @app.errorhandler(500)
    def internal_error(e):
        return jsonify({"error": "Internal server error", "message": str(e)}), 500
