"""Purchase routes - tech, destination tools, clients and policies."""

from flask import Blueprint, jsonify

from ..services.engine_service import engine_response, get_engine, json_body

bp = Blueprint("purchases", __name__, url_prefix="/api/sessions/<room_code>")


def _missing(field_name: str):
    return jsonify({"success": False, "error": f"{field_name} is required"}), 400


@bp.route("/teams/<team_name>/tech", methods=["POST"])
def purchase_tech(room_code: str, team_name: str):
    upgrade_id = json_body().get("upgrade_id")
    if not upgrade_id:
        return _missing("upgrade_id")
    return engine_response(get_engine().purchase_tech(room_code, team_name, upgrade_id))


@bp.route("/destinations/<destination_name>/tools", methods=["POST"])
def purchase_tool(room_code: str, destination_name: str):
    data = json_body()
    tool_id = data.get("tool_id")
    if not tool_id:
        return _missing("tool_id")
    return engine_response(
        get_engine().purchase_destination_tool(room_code, destination_name, tool_id, data.get("announcement"))
    )


@bp.route("/teams/<team_name>/clients", methods=["POST"])
def acquire_client(room_code: str, team_name: str):
    client_id = json_body().get("client_id")
    if not client_id:
        return _missing("client_id")
    return engine_response(get_engine().acquire_client(room_code, team_name, client_id))


@bp.route("/teams/<team_name>/clients/<client_id>/onboarding", methods=["POST"])
def configure_onboarding(room_code: str, team_name: str, client_id: str):
    data = json_body()
    return engine_response(
        get_engine().configure_onboarding(
            room_code,
            team_name,
            client_id,
            warmup=bool(data.get("warmup", False)),
            list_hygiene=bool(data.get("list_hygiene", False)),
        )
    )


@bp.route("/teams/<team_name>/clients/<client_id>/status", methods=["POST"])
def toggle_status(room_code: str, team_name: str, client_id: str):
    status = json_body().get("status")
    if not status:
        return _missing("status")
    return engine_response(get_engine().toggle_client_status(room_code, team_name, client_id, status))


@bp.route("/destinations/<destination_name>/filtering", methods=["POST"])
def set_filtering(room_code: str, destination_name: str):
    data = json_body()
    esp_name = data.get("esp_name")
    level = data.get("level")
    if not esp_name or not level:
        return jsonify({"success": False, "error": "esp_name and level are required"}), 400
    return engine_response(get_engine().set_filtering_policy(room_code, destination_name, esp_name, level))
