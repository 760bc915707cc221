# brand_tokens/utils.py
from __future__ import annotations

from functools import wraps
from typing import Any, Dict, Optional

from flask import request, jsonify
from flask_jwt_extended import get_jwt_identity, get_jwt, jwt_required

EDITOR_ROLES = ("Editor", "Admin", "SuperAdmin")
ADMIN_ROLES = ("Admin", "SuperAdmin")


def get_actor_id() -> Optional[int]:
    ident = get_jwt_identity()
    if ident is None:
        return None
    try:
        return int(str(ident))
    except ValueError:
        return None


def get_actor_role() -> Optional[str]:
    return (get_jwt() or {}).get("role")


def roles_required(*roles: str):
    def deco(fn):
        @wraps(fn)
        @jwt_required()
        def wrapped(*args, **kwargs):
            role = get_actor_role()
            if roles and role not in roles:
                return bad("Forbidden", 403)
            return fn(*args, **kwargs)
        return wrapped
    return deco


def ok(data: Any = None, code: int = 200, **kw):
    res = {"ok": True}
    if data is not None:
        res["data"] = data
    res.update(kw)
    return jsonify(res), code


def bad(msg: str, code: int = 400, **kw):
    res = {"ok": False, "message": msg}
    res.update(kw)
    return jsonify(res), code


def json_body() -> Dict[str, Any]:
    body = request.get_json(silent=True)
    return body if isinstance(body, dict) else {}


def int_arg(name: str, default: Optional[int] = None) -> Optional[int]:
    """Integer query-string argument; junk falls back to ``default``."""
    return request.args.get(name, default=default, type=int)
