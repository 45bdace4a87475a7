"""Incident routes - listing, triggering and choices."""

from flask import Blueprint, jsonify

from ..services.engine_service import engine_response, get_engine, json_body

bp = Blueprint("incidents", __name__, url_prefix="/api/sessions/<room_code>/incidents")


@bp.route("", methods=["GET"])
def list_incidents(room_code: str):
    return engine_response(get_engine().list_incidents(room_code))


@bp.route("/<incident_id>", methods=["POST"])
def trigger(room_code: str, incident_id: str):
    """Trigger an incident. Body: {"selected_team": str} for targeted incidents."""
    return engine_response(
        get_engine().trigger_incident(room_code, incident_id, selected_team=json_body().get("selected_team"))
    )


@bp.route("/<incident_id>/choices", methods=["POST"])
def confirm_choice(room_code: str, incident_id: str):
    data = json_body()
    team = data.get("team")
    choice_id = data.get("choice_id")
    if not team or not choice_id:
        return jsonify({"success": False, "error": "team and choice_id are required"}), 400
    return engine_response(get_engine().confirm_incident_choice(room_code, team, incident_id, choice_id))
