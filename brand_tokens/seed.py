# brand_tokens/seed.py
from __future__ import annotations

import copy
import os

from .app import create_app
from .models import db, Role, User, Client
from .routes.auth_routes import pwd_ctx
from .services.token_service import TokenService

ROLES = ("Viewer", "Editor", "Admin", "SuperAdmin")

DEFAULT_RAW_TOKENS = {
    "typography": {
        "fontSizeBase": 1,
        "lineHeightBase": 1.4,
        "typeScaleBase": 1.4,
        "letterSpacingBase": 0,
        "fontFamily1Base": "Rock Grotesque",
        "fontFamily2Base": "Rock Grotesque Wide",
        "fontFamilyMonoBase": "monospace",
    },
    "colors": {
        "brandPrimaryBase": "#0052CC",
        "brandSecondaryBase": "#172B4D",
        "neutralBase": "hsl(0, 0%, 60%)",
        "interactiveSuccessBase": "#28a745",
        "interactiveWarningBase": "#ffc107",
        "interactiveErrorBase": "#dc3545",
        "interactiveInfoBase": "#17a2b8",
    },
    "spacing": {
        "spacingUnitBase": 1,
        "spacingScaleBase": 1.5,
    },
    "borders": {
        "borderWidthBase": 1,
        "borderRadiusBase": 8,
    },
    "components": {
        "button": {
            "primaryBackgroundColor": "brandPrimaryBase",
            "primaryTextColor": "#ffffff",
            "secondaryBackgroundColor": "transparent",
            "secondaryTextColor": "brandPrimaryBase",
            "borderRadius": "borderRadiusBase",
        },
        "input": {
            "backgroundColor": "#ffffff",
            "borderColor": "#e5e7eb",
            "textColor": "#374151",
            "borderRadius": "borderRadiusBase",
        },
        "card": {
            "backgroundColor": "#ffffff",
            "borderColor": "#e5e7eb",
            "borderRadius": "borderRadiusBase",
        },
    },
}


def ensure_role(name: str) -> int:
    r = Role.query.filter_by(Name=name).first()
    if r:
        return r.Id
    r = Role(Name=name)
    db.session.add(r); db.session.commit()
    return r.Id


def ensure_user(username: str, role_name: str, email: str, password: str) -> int:
    role_id = ensure_role(role_name)
    u = User.query.filter_by(Username=username).first()
    if u:
        if u.RoleId != role_id:
            u.RoleId = role_id
            db.session.commit()
        return u.Id
    u = User(Username=username, PasswordHash=pwd_ctx.hash(password), Email=email,
             Name=username, RoleId=role_id)
    db.session.add(u); db.session.commit()
    return u.Id


def ensure_client(name: str) -> int:
    c = Client.query.filter_by(Name=name).first()
    if c:
        return c.Id
    c = Client(Name=name)
    db.session.add(c); db.session.commit()
    return c.Id


def ensure_tokens(client_id: int, user_id: int, service: TokenService | None = None):
    """Give a client its first version from the default tokens; returns None if it already has one."""
    service = service or TokenService()
    if service.versions.latest(client_id) is not None:
        return None
    return service.update_tokens(client_id, user_id, copy.deepcopy(DEFAULT_RAW_TOKENS),
                                 version_name="Initial design system")


def seed_data(app):
    with app.app_context():
        db.create_all()
        for name in ROLES:
            ensure_role(name)

        admin_user = os.getenv("SEED_ADMIN_USER", "admin")
        admin_pass = os.getenv("SEED_ADMIN_PASS", "admin123")
        admin_mail = os.getenv("SEED_ADMIN_MAIL", "admin@example.com")
        admin_id = ensure_user(admin_user, "SuperAdmin", admin_mail, admin_pass)

        client_id = ensure_client(os.getenv("SEED_CLIENT_NAME", "Demo Client"))
        result = ensure_tokens(client_id, admin_id)
        return {
            "admin": admin_user,
            "clientId": client_id,
            "versionId": result.version.Id if result else None,
        }


def run_seed():
    app = create_app()
    summary = seed_data(app)
    app.logger.info("Seed complete: admin=%s client=%s initial version=%s",
                    summary["admin"], summary["clientId"], summary["versionId"])
    print(f"Seed complete. Admin: {summary['admin']}, client id: {summary['clientId']}")


if __name__ == "__main__":
    run_seed()
