"""Investigation vote routes for destinations."""

from flask import Blueprint, jsonify

from ..services.engine_service import engine_response, get_engine, json_body

bp = Blueprint(
    "investigations",
    __name__,
    url_prefix="/api/sessions/<room_code>/destinations/<destination_name>/investigation",
)


@bp.route("/vote", methods=["GET"])
def get_votes(room_code: str, destination_name: str):
    return engine_response(get_engine().investigation_votes(room_code, destination_name))


@bp.route("/vote", methods=["POST"])
def cast_vote(room_code: str, destination_name: str):
    """Cast or change a vote. Body: {"target_esp": str}."""
    target_esp = json_body().get("target_esp")
    if not target_esp:
        return jsonify({"success": False, "error": "target_esp is required"}), 400
    return engine_response(get_engine().cast_investigation_vote(room_code, destination_name, target_esp))


@bp.route("/vote", methods=["DELETE"])
def remove_vote(room_code: str, destination_name: str):
    return engine_response(get_engine().remove_investigation_vote(room_code, destination_name))
