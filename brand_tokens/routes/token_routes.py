from flask import Blueprint, current_app

from ..errors import ValidationError
from ..services.token_service import TokenService
from ..utils import (ADMIN_ROLES, EDITOR_ROLES, get_actor_id, int_arg, json_body, ok,
                     roles_required)

bp = Blueprint("design_system", __name__, url_prefix="/api/design-system")


def _service() -> TokenService:
    return TokenService(default_page_size=current_app.config["TOKENS_DEFAULT_PAGE_SIZE"],
                        max_page_size=current_app.config["TOKENS_MAX_PAGE_SIZE"])


def _optional_int(body, key):
    value = body.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError([{"field": key, "constraint": "int_type",
                                "message": f"{key} must be an integer"}])
    return value


@bp.get("/tokens/<int:client_id>")
@roles_required()
def get_tokens(client_id):
    return ok(**_service().get_tokens(client_id, int_arg("version")))


@bp.post("/tokens")
@roles_required(*EDITOR_ROLES)
def update_tokens():
    body = json_body()
    client_id = _optional_int(body, "clientId")
    if client_id is None:
        raise ValidationError([{"field": "clientId", "constraint": "required",
                                "message": "clientId is required"}])
    result = _service().update_tokens(
        client_id,
        get_actor_id(),
        body.get("rawTokens"),
        source=body.get("source") or "manual_edit",
        version_name=body.get("versionName"),
        description=body.get("description"),
        base_version_id=_optional_int(body, "baseVersionId"),
        figma_connection_id=_optional_int(body, "figmaConnectionId"),
        sync_log_id=_optional_int(body, "syncLogId"),
    )
    current_app.logger.info("design tokens updated: client=%s version=%s changes=%d",
                            client_id, result.version.Id, result.changes_count)
    return ok(code=201, **result.to_json())


@bp.get("/versions/<int:client_id>")
@roles_required()
def list_versions(client_id):
    svc = _service()
    limit = int_arg("limit")
    offset = int_arg("offset", 0)
    versions = svc.list_versions(client_id, limit, offset)
    return ok(versions=[v.to_summary() for v in versions], offset=max(offset or 0, 0))


@bp.get("/versions/<int:client_id>/<int:version_id>")
@roles_required()
def get_version(client_id, version_id):
    version, changes = _service().get_version(client_id, version_id)
    return ok(version=version.to_dict(), changes=[c.to_dict() for c in changes])


@bp.post("/rollback/<int:client_id>/<int:version_id>")
@roles_required(*ADMIN_ROLES)
def rollback(client_id, version_id):
    result = _service().rollback(client_id, get_actor_id(), version_id)
    current_app.logger.info("design tokens rolled back: client=%s to=%s new=%s",
                            client_id, version_id, result.version.Id)
    return ok(code=201, **result.to_json())


@bp.post("/snapshot/<int:client_id>")
@roles_required(*EDITOR_ROLES)
def snapshot(client_id):
    body = json_body()
    label = body.get("label") or body.get("name") or ""
    result = _service().snapshot(client_id, get_actor_id(), label,
                                 description=body.get("description"))
    return ok(code=201, **result.to_json())
