"""JSON API routes - match creation, flips and AI turns.

Every response carries ``success``. Failures are structured
(``{"success": false, "error": ...}``) with 400 for bad input and 404 for
unknown matches; state is never left half-updated.
"""

from flask import Blueprint, current_app, jsonify, request
from pydantic import BaseModel, ValidationError

from concentration.engine.match import MatchNotFoundError, MatchRegistry
from concentration.models.board import InvalidDimensionsError

from ..schemas import AIMoveRequest, FlipRequest, MatchRequest, NewGameRequest

bp = Blueprint("api", __name__, url_prefix="/api")


class InvalidRequest(Exception):
    """Request body failed validation."""


def _registry() -> MatchRegistry:
    return current_app.extensions["match_registry"]


def _parse(model: type[BaseModel], data: dict | None = None):
    payload = data if data is not None else request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise InvalidRequest("Expected a JSON object body")
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) or "body" for err in e.errors())
        raise InvalidRequest(f"Invalid request: {fields}") from e


@bp.errorhandler(InvalidRequest)
def handle_invalid_request(e: InvalidRequest):
    return jsonify({"success": False, "error": str(e)}), 400


@bp.errorhandler(InvalidDimensionsError)
def handle_invalid_dimensions(e: InvalidDimensionsError):
    return jsonify({"success": False, "error": str(e)}), 400


@bp.errorhandler(MatchNotFoundError)
def handle_match_not_found(e: MatchNotFoundError):
    return jsonify({"success": False, "error": str(e)}), 404


@bp.route("/new", methods=["POST"])
def new_game():
    """Start a match; a supplied gameId is ended and replaced."""
    body = _parse(NewGameRequest)
    max_dim = current_app.config["MAX_DIMENSION"]
    if body.rows > max_dim or body.cols > max_dim:
        raise InvalidRequest(f"Dimensions may not exceed {max_dim}")

    match = _registry().create(body.rows, body.cols, replace_id=body.game_id)
    return jsonify({"success": True, "game": match.snapshot(), "gameId": match.match_id})


@bp.route("/flip", methods=["POST"])
def flip():
    """Human flip. Ignored flips still succeed, with ``applied: false``."""
    body = _parse(FlipRequest)
    match = _registry().get(body.game_id)
    outcome = match.flip(body.row, body.col)
    return jsonify(
        {
            "success": True,
            "applied": outcome.applied,
            "reason": outcome.reason.value if outcome.reason else None,
            "game": match.snapshot(),
        }
    )


@bp.route("/ai-move", methods=["POST"])
def ai_move():
    """Run a full AI turn and return every flip it made."""
    body = _parse(AIMoveRequest)
    match = _registry().get(body.game_id)
    result = match.play_ai_turn(body.difficulty, timeout=current_app.config["LLM_TIMEOUT"])
    return jsonify({"success": True, "game": match.snapshot(), **result.to_dict()})


@bp.route("/reset", methods=["POST"])
def reset():
    """Turn face down any unmatched face-up cards."""
    body = _parse(MatchRequest)
    match = _registry().get(body.game_id)
    match.clear_unmatched()
    return jsonify({"success": True, "game": match.snapshot()})


@bp.route("/state", methods=["GET"])
def state():
    body = _parse(MatchRequest, data=request.args.to_dict())
    match = _registry().get(body.game_id)
    return jsonify({"success": True, "game": match.snapshot()})


@bp.route("/end", methods=["POST"])
def end():
    """End a match and discard its AI session."""
    body = _parse(MatchRequest)
    _registry().end(body.game_id)
    return jsonify({"success": True})
