"""
Flask application factory and server entry-point.
"""

import os
import sys
import traceback

from flask import Flask
from flask_cors import CORS

from wellness.config import DEPLOYER, STRICT_WRITES
from wellness.engine import LedgerEngine
from wellness.api.routes import register_routes


def create_app(ledger=None):
    """Build and return a fully configured Flask application."""
    app = Flask(__name__)
    CORS(app)

    # ── Initialise shared resources ──────────────────────────────────
    if ledger is None:
        try:
            print("[init] Initializing ledger store...")
            ledger = LedgerEngine()

            print(f"[init] Seeding genesis state (admin={DEPLOYER})...")
            ledger.initialize(DEPLOYER)

            print("[init] ✓ API server ready")
        except Exception as e:
            print(f"[FATAL] Failed to initialize: {e}", file=sys.stderr)
            traceback.print_exc()
            sys.exit(1)

    # ── Register routes ──────────────────────────────────────────────
    register_routes(app, ledger)

    return app


def main():
    """Run the development server."""
    print("=" * 60)
    print("Wellness Ledger – REST API Server")
    print("=" * 60)

    app = create_app()

    host = os.getenv("API_HOST", "0.0.0.0")
    port = int(os.getenv("API_PORT", "8000"))
    debug = os.getenv("FLASK_ENV") == "development"

    print(f"\n[server] Starting Flask API on {host}:{port}")
    print(f"[server] Debug mode: {debug}")
    print(f"[server] Strict write authorization: {STRICT_WRITES}")
    print("\nAPI Endpoints:")
    print(f"  - POST http://{host}:{port}/api/call/<entry-point>")
    print(f"  - GET  http://{host}:{port}/api/entry-points")
    print(f"  - GET  http://{host}:{port}/api/bills/report")
    print(f"  - GET  http://{host}:{port}/health")
    print("\n" + "=" * 60)

    app.run(host=host, port=port, debug=debug, threaded=True)


if __name__ == "__main__":
    main()
