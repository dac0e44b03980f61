# series_tracker/web.py
from flask import Blueprint, current_app, jsonify, request
from werkzeug.exceptions import HTTPException
from series_tracker.repo import RepoError
from series_tracker.service import SeriesService, ValidationError, NotFoundError
import logging

logger = logging.getLogger(__name__)

bp = Blueprint("api", __name__, url_prefix="/api")

def register_routes(app, service: SeriesService):
    """
    Register blueprint and ensure SERVICE is in app.config.
    Call this once during app creation (run.create_app does this).
    """
    if "SERVICE" not in app.config:
        app.config["SERVICE"] = service
    app.register_blueprint(bp)
    logger.debug("Registered blueprint 'api' and injected SERVICE")

def ack(message: str, success: bool = True, code: int = 200):
    return jsonify({"success": success, "message": message}), code

def register_error_handlers(app):
    """Centralized handlers mapping service and store exceptions to JSON responses."""
    @app.errorhandler(ValidationError)
    def handle_validation_error(e):
        logger.warning("ValidationError: %s", e)
        return ack(str(e), success=False, code=400)

    @app.errorhandler(NotFoundError)
    def handle_not_found(e):
        logger.info("NotFoundError: %s", e)
        return ack(str(e), success=False, code=404)

    @app.errorhandler(RepoError)
    def handle_repo_error(e):
        # details stay in the server log
        logger.exception("RepoError on %s %s: %s", request.method, request.path, e)
        return ack("internal error", success=False, code=500)

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        return ack(e.description or e.name, success=False, code=e.code or 500)

# helper to get service instance
def current_service() -> SeriesService:
    return current_app.config["SERVICE"]

def json_body():
    # None for a missing or malformed body; the service rejects it with ValidationError
    return request.get_json(silent=True)

# -----------------------
# Series collection
# -----------------------
@bp.route("/series", methods=["GET"])
def series_list():
    svc = current_service()
    items = svc.list_series(search=request.args.get("search"),
                            status=request.args.get("status"),
                            sort=request.args.get("sort"))
    return jsonify([s.to_dict() for s in items])

@bp.route("/series", methods=["POST"])
def series_create():
    new_id = current_service().create_series(json_body())
    return jsonify(new_id), 201

# -----------------------
# Single series
# -----------------------
@bp.route("/series/<int:series_id>", methods=["GET"])
def series_detail(series_id: int):
    return jsonify(current_service().get_series(series_id).to_dict())

@bp.route("/series/<int:series_id>", methods=["PUT"])
def series_replace(series_id: int):
    current_service().replace_series(series_id, json_body())
    return ack("Series updated")

@bp.route("/series/<int:series_id>", methods=["PATCH"])
def series_patch(series_id: int):
    current_service().update_fields(series_id, json_body())
    return ack("Series updated")

@bp.route("/series/<int:series_id>", methods=["DELETE"])
def series_delete(series_id: int):
    current_service().delete_series(series_id)
    return ack("Series deleted")

# -----------------------
# Narrow mutations
# -----------------------
@bp.route("/series/<int:series_id>/status", methods=["PATCH"])
def series_status(series_id: int):
    current_service().update_status(series_id, json_body())
    return ack("Status updated")

@bp.route("/series/<int:series_id>/episode", methods=["PATCH"])
def series_episode(series_id: int):
    current_service().increment_episode(series_id)
    return ack("Episode incremented")

@bp.route("/series/<int:series_id>/upvote", methods=["PATCH"])
def series_upvote(series_id: int):
    current_service().upvote(series_id)
    return ack("Ranking incremented")

@bp.route("/series/<int:series_id>/downvote", methods=["PATCH"])
def series_downvote(series_id: int):
    current_service().downvote(series_id)
    return ack("Ranking decremented")
