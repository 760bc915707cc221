import copy
import itertools

import pytest
from flask_jwt_extended import create_access_token

from brand_tokens.app import create_app
from brand_tokens.models import db, Client
from brand_tokens.seed import ROLES, ensure_role, ensure_user
from brand_tokens.services.token_service import TokenService

TEST_CONFIG = {
    "TESTING": True,
    "SQLALCHEMY_DATABASE_URI": "sqlite://",
    "JWT_SECRET_KEY": "test-only-secret-key-with-enough-bytes",
    "LOG_LEVEL": "DEBUG",
}

BASE_RAW = {
    "typography": {
        "fontSizeBase": 1,
        "lineHeightBase": 1.5,
        "typeScaleBase": 1.4,
        "letterSpacingBase": 0,
        "fontFamily1Base": "Inter",
        "fontFamily2Base": "Inter",
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
    "spacing": {"spacingUnitBase": 1, "spacingScaleBase": 1.5},
    "borders": {"borderWidthBase": 1, "borderRadiusBase": 8},
}

LEAF_COUNT = sum(len(fields) for fields in BASE_RAW.values())


def raw_tokens(**sections):
    """Copy of BASE_RAW; keyword args patch fields per category, e.g. colors={"brandPrimaryBase": "#ff0000"}."""
    tree = copy.deepcopy(BASE_RAW)
    for category, fields in sections.items():
        if fields is None:
            tree.pop(category, None)
        else:
            tree.setdefault(category, {}).update(fields)
    return tree


@pytest.fixture
def app():
    app = create_app(TEST_CONFIG)
    with app.app_context():
        db.create_all()
        for name in ROLES:
            ensure_role(name)
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def service(app):
    return TokenService()


@pytest.fixture
def make_tenant(app):
    def _make(name="Acme"):
        c = Client(Name=name)
        db.session.add(c)
        db.session.commit()
        return c.Id
    return _make


@pytest.fixture
def make_user(app):
    seq = itertools.count(1)

    def _make(role="Editor"):
        n = next(seq)
        return ensure_user(f"user{n}", role, f"user{n}@example.com", "secret-pass")
    return _make


@pytest.fixture
def auth_headers(make_user):
    def _headers(role="Editor"):
        uid = make_user(role)
        token = create_access_token(identity=str(uid), additional_claims={"role": role})
        return {"Authorization": f"Bearer {token}"}
    return _headers
