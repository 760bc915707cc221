from flask import Blueprint, jsonify, request
from flask_jwt_extended import create_access_token, jwt_required
from passlib.context import CryptContext

from ..models import db, User
from ..utils import bad, get_actor_id, get_actor_role

bp = Blueprint("auth", __name__)

pwd_ctx = CryptContext(schemes=["pbkdf2_sha256", "bcrypt"], deprecated="auto")


def _user_json(user):
    return {
        "id": user.Id,
        "username": user.Username,
        "email": user.Email,
        "name": user.Name,
        "role": user.role_rel.Name if user.role_rel else None,
    }


@bp.post("/api/auth/login")
def login():
    body = request.get_json(silent=True) or {}
    username = (body.get("username") or "").strip()
    password = body.get("password") or ""
    if not username or not password:
        return bad("Missing username or password")

    user = User.query.filter_by(Username=username).first()
    if not user or not pwd_ctx.verify(password, user.PasswordHash):
        return bad("Invalid username or password", 401)

    if pwd_ctx.needs_update(user.PasswordHash):
        user.PasswordHash = pwd_ctx.hash(password)
        db.session.commit()

    role = user.role_rel.Name if user.role_rel else None
    token = create_access_token(identity=str(user.Id),
                                additional_claims={"username": user.Username, "role": role})
    return jsonify({"ok": True, "access_token": token, "user": _user_json(user)})


@bp.get("/api/auth/me")
@jwt_required()
def me():
    uid = get_actor_id()
    user = db.session.get(User, uid) if uid else None
    if user is None:
        return bad("User not found", 404)
    data = _user_json(user)
    data["role"] = data["role"] or get_actor_role()
    return jsonify({"ok": True, "user": data})
