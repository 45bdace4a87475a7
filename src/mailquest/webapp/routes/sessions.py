"""Session routes - creation, phases, lock-in and scores."""

from flask import Blueprint, jsonify

from ..services.engine_service import engine_response, get_engine, json_body

bp = Blueprint("sessions", __name__, url_prefix="/api/sessions")


@bp.route("", methods=["POST"])
def create_session():
    """Create a lobby session.

    Body: {"room_code": str, "esp_teams": {name: [players]}, "destinations": {name: [players]}}
    """
    data = json_body()
    room_code = data.get("room_code")
    esp_teams = data.get("esp_teams")
    destinations = data.get("destinations")
    if not room_code or not isinstance(esp_teams, dict) or not isinstance(destinations, dict):
        return jsonify({"success": False, "error": "room_code, esp_teams and destinations are required"}), 400
    return engine_response(get_engine().create_session(room_code, esp_teams, destinations), 201)


@bp.route("/<room_code>", methods=["GET"])
def get_session(room_code: str):
    session = get_engine().get_session(room_code)
    if session is None:
        return jsonify({"success": False, "error": "Session not found", "reason": "session_not_found"}), 404
    return jsonify(session.to_dict())


@bp.route("/<room_code>/start", methods=["POST"])
def start(room_code: str):
    """Allocate starting resources (lobby -> resource_allocation)."""
    return engine_response(get_engine().start_resource_allocation(room_code))


@bp.route("/<room_code>/phase", methods=["POST"])
def transition(room_code: str):
    phase = json_body().get("phase")
    if not phase:
        return jsonify({"success": False, "error": "phase is required"}), 400
    return engine_response(get_engine().transition_phase(room_code, phase))


@bp.route("/<room_code>/teams/<team_name>/lock-in", methods=["POST"])
def lock_in_team(room_code: str, team_name: str):
    return engine_response(get_engine().lock_in_esp(room_code, team_name))


@bp.route("/<room_code>/destinations/<destination_name>/lock-in", methods=["POST"])
def lock_in_destination(room_code: str, destination_name: str):
    return engine_response(get_engine().lock_in_destination(room_code, destination_name))


@bp.route("/<room_code>/end-phase-early", methods=["POST"])
def end_phase_early(room_code: str):
    return engine_response(get_engine().end_phase_early(room_code))


@bp.route("/<room_code>/pause", methods=["POST"])
def pause(room_code: str):
    return engine_response(get_engine().pause(room_code))


@bp.route("/<room_code>/resume", methods=["POST"])
def resume(room_code: str):
    return engine_response(get_engine().resume(room_code))


@bp.route("/<room_code>/scores", methods=["GET"])
def scores(room_code: str):
    return engine_response(get_engine().final_scores(room_code))
