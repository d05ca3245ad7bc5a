import logging

from flask import Flask, jsonify, request

from baby_api.chat.handler import run_query
from baby_api.config.settings import get_settings
from baby_api.engine.archetypes.run_manager import RunManager
from baby_api.engine.factory import build_default_brain


logger = logging.getLogger("baby_api.web")

# Parameters that may be repeated in the query string.
MULTI_VALUE_PARAMS = ("reply",)


def _query_params() -> dict:
    params: dict = {}
    for name in request.args:
        if name in MULTI_VALUE_PARAMS:
            params[name] = request.args.getlist(name)
        else:
            params[name] = request.args.get(name)
    return params


def create_app(brain: RunManager | None = None) -> Flask:
    app = Flask(__name__)

    # Resolved lazily so importing the app never touches the data file.
    def _brain() -> RunManager:
        return brain or build_default_brain()

    @app.get("/")
    def index():
        return jsonify(_brain().info())

    # teach / edit / remove / list / text lookup, picked by which params are present
    @app.get("/baby")
    def baby():
        result = run_query(_query_params(), _brain())
        if not result.ok:
            logger.warning("query failed: %s", result.payload.get("message"))
            return jsonify(result.payload), 500
        return jsonify(result.payload)

    @app.get("/stats")
    def stats():
        return jsonify(_brain().stats())

    @app.get("/health")
    def health():
        return jsonify(_brain().health())

    return app


if __name__ == "__main__":
    settings = get_settings()
    logging.basicConfig(level=settings.log_level, format="[%(asctime)s] %(levelname)s - %(message)s")

    app = create_app(build_default_brain())
    logger.info("Baby API server running on port %s", settings.port)
    app.run(host=settings.host, port=settings.port, debug=settings.debug, threaded=True)
