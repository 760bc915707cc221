import logging

import pytest
from conftest import LEAF_COUNT, raw_tokens
from sqlalchemy.exc import SQLAlchemyError

from brand_tokens.errors import Conflict, NotFound, PersistenceFailure, ValidationError
from brand_tokens.models import db, CurrentTokens, DesignSystemVersion


@pytest.fixture
def tenant(make_tenant):
    return make_tenant()


@pytest.fixture
def user(make_user):
    return make_user()


def _fail(*args, **kwargs):
    raise SQLAlchemyError("database is locked")


# ── Scenarios ─────────────────────────────────────────────────────────────────
def test_first_save(service, tenant, user):
    result = service.update_tokens(tenant, user, raw_tokens())
    assert result.changes_count == LEAF_COUNT
    assert result.semantic_tokens["colors"]["brandPrimary"] == "#0052CC"
    assert result.semantic_tokens["typography"]["fontSizeH4"] == "1rem"
    assert result.warnings == []
    assert result.version.Description == f"{LEAF_COUNT} created"
    assert result.version.IsSnapshot is False
    current = db.session.get(CurrentTokens, tenant)
    assert current.VersionId == result.version.Id
    assert current.RawTokens == result.raw_tokens


def test_no_op_save_is_recorded(service, tenant, user):
    service.update_tokens(tenant, user, raw_tokens())
    again = service.update_tokens(tenant, user, raw_tokens())
    assert again.changes_count == 0
    assert again.version.Description == "No changes"
    assert again.version.ChangesSummary == []
    assert len(service.list_versions(tenant)) == 2


def test_single_field_change(service, tenant, user):
    service.update_tokens(tenant, user, raw_tokens())
    result = service.update_tokens(tenant, user, raw_tokens(colors={"brandPrimaryBase": "#FF0000"}),
                                   source="figma_pull")
    assert result.changes_count == 1
    version, changes = service.get_version(tenant, result.version.Id)
    assert len(changes) == 1
    change = changes[0]
    assert (change.TokenType, change.TokenPath, change.ChangeType) == ("color", "colors.brandPrimaryBase", "updated")
    assert (change.OldValue, change.NewValue) == ("#0052CC", "#FF0000")
    assert change.ChangeSource == "figma_pull"
    assert version.Description == "1 updated"


def test_rollback(service, tenant, user):
    v1 = service.update_tokens(tenant, user, raw_tokens(), version_name="Launch").version
    service.update_tokens(tenant, user, raw_tokens(colors={"brandPrimaryBase": "#111111"}))
    service.update_tokens(tenant, user, raw_tokens(colors={"brandPrimaryBase": "#222222"}))

    result = service.rollback(tenant, user, v1.Id)
    v4 = result.version
    assert v4.RawTokens == v1.RawTokens
    assert v4.SemanticTokens == v1.SemanticTokens
    assert v4.ParentVersionId == v1.Id
    assert v4.VersionName == "Rollback to Launch"
    assert v4.Description == f"Rolled back to version {v1.Id}"
    assert v4.ChangesSummary == []
    assert service.get_version(tenant, v4.Id)[1] == []
    assert result.to_json()["rolledBackTo"]["id"] == v1.Id
    assert service.get_tokens(tenant)["rawTokens"] == v1.RawTokens
    assert [v.Id for v in service.list_versions(tenant)][0] == v4.Id


def test_rollback_name_without_label(service, tenant, user):
    v1 = service.update_tokens(tenant, user, raw_tokens()).version
    result = service.rollback(tenant, user, v1.Id)
    assert result.version.VersionName == f"Rollback to version {v1.Id}"


def test_save_after_rollback_diffs_against_rolled_back_state(service, tenant, user):
    v1 = service.update_tokens(tenant, user, raw_tokens()).version
    service.update_tokens(tenant, user, raw_tokens(colors={"brandPrimaryBase": "#111111"}))
    service.rollback(tenant, user, v1.Id)
    assert service.update_tokens(tenant, user, raw_tokens()).changes_count == 0


def test_cross_tenant_isolation(service, make_tenant, user):
    a, b = make_tenant("A"), make_tenant("B")
    vb = service.update_tokens(b, user, raw_tokens()).version
    with pytest.raises(NotFound):
        service.get_version(a, vb.Id)
    with pytest.raises(NotFound):
        service.get_tokens(a, vb.Id)
    with pytest.raises(NotFound):
        service.rollback(a, user, vb.Id)
    assert db.session.query(DesignSystemVersion).filter_by(ClientId=a).count() == 0


# ── Reads ─────────────────────────────────────────────────────────────────────
def test_get_tokens_current_and_by_version(service, tenant, user):
    v1 = service.update_tokens(tenant, user, raw_tokens(components={
        "button": {"primaryBackgroundColor": "brandPrimaryBase"}})).version
    service.update_tokens(tenant, user, raw_tokens(colors={"brandPrimaryBase": "#00AA00"}))

    current = service.get_tokens(tenant)
    assert current["rawTokens"]["colors"]["brandPrimaryBase"] == "#00AA00"
    assert current["componentTokens"] == {}

    old = service.get_tokens(tenant, v1.Id)
    assert old["version"]["id"] == v1.Id
    assert old["semanticTokens"]["colors"]["brandPrimary"] == "#0052CC"
    assert old["componentTokens"] == {"button": {"primaryBackgroundColor": "#0052CC"}}


def test_get_tokens_without_any_version(service, tenant):
    with pytest.raises(NotFound):
        service.get_tokens(tenant)


def test_unknown_client(service, user):
    with pytest.raises(NotFound):
        service.update_tokens(404, user, raw_tokens())
    with pytest.raises(NotFound):
        service.list_versions(404)


# ── Failures ──────────────────────────────────────────────────────────────────
def test_validation_failure_writes_nothing(service, tenant, user):
    with pytest.raises(ValidationError) as exc:
        service.update_tokens(tenant, user, raw_tokens(typography={"fontSizeBase": 0.49}))
    assert exc.value.fields == ["typography.fontSizeBase"]
    assert db.session.query(DesignSystemVersion).count() == 0


def test_unknown_source_rejected(service, tenant, user):
    with pytest.raises(ValidationError) as exc:
        service.update_tokens(tenant, user, raw_tokens(), source="carrier_pigeon")
    assert exc.value.fields == ["source"]


def test_persistence_failure(service, tenant, user, monkeypatch):
    monkeypatch.setattr(service.store, "create_changes", _fail)
    with pytest.raises(PersistenceFailure):
        service.update_tokens(tenant, user, raw_tokens())
    assert db.session.query(DesignSystemVersion).count() == 0
    assert db.session.get(CurrentTokens, tenant) is None


def test_materialization_failure_is_a_warning(service, tenant, user, monkeypatch):
    monkeypatch.setattr(service.store, "set_current_tokens", _fail)
    result = service.update_tokens(tenant, user, raw_tokens())
    assert len(result.warnings) == 1
    assert result.warnings[0].version_id == result.version.Id
    assert result.to_json()["warnings"][0]["versionId"] == result.version.Id
    assert db.session.get(CurrentTokens, tenant) is None
    # reads fall back to the latest version
    assert service.get_tokens(tenant)["version"]["id"] == result.version.Id


def test_stale_view_does_not_skew_next_diff(service, tenant, user, monkeypatch):
    service.update_tokens(tenant, user, raw_tokens())
    with monkeypatch.context() as m:
        m.setattr(service.store, "set_current_tokens", _fail)
        service.update_tokens(tenant, user, raw_tokens(colors={"brandPrimaryBase": "#123456"}))
    result = service.update_tokens(tenant, user, raw_tokens(colors={"brandPrimaryBase": "#123456"}))
    assert result.changes_count == 0


def test_conflict_on_stale_base_version(service, tenant, user):
    v1 = service.update_tokens(tenant, user, raw_tokens()).version
    v2 = service.update_tokens(tenant, user, raw_tokens(colors={"brandPrimaryBase": "#111111"}),
                               base_version_id=v1.Id).version
    with pytest.raises(Conflict) as exc:
        service.update_tokens(tenant, user, raw_tokens(), base_version_id=v1.Id)
    assert exc.value.to_dict()["latestVersionId"] == v2.Id
    assert exc.value.status_code == 409


def test_conflict_when_no_versions_exist(service, tenant, user):
    with pytest.raises(Conflict):
        service.update_tokens(tenant, user, raw_tokens(), base_version_id=1)


def test_provenance_is_stored(service, tenant, user):
    version = service.update_tokens(tenant, user, raw_tokens(), source="figma_pull",
                                    figma_connection_id=7, sync_log_id=42).version
    assert version.to_dict()["figmaConnectionId"] == 7
    assert version.to_dict()["syncLogId"] == 42


# ── Snapshots ─────────────────────────────────────────────────────────────────
def test_snapshot(service, tenant, user):
    first = service.update_tokens(tenant, user, raw_tokens()).version
    result = service.snapshot(tenant, user, "Release 1.0", description="Before rebrand")
    assert result.version.IsSnapshot is True
    assert result.version.VersionName == "Release 1.0"
    assert result.version.Description == "Before rebrand"
    assert result.changes_count == 0
    assert result.version.RawTokens == first.RawTokens


def test_snapshot_default_description(service, tenant, user):
    service.update_tokens(tenant, user, raw_tokens())
    assert service.snapshot(tenant, user, "Checkpoint").version.Description == "No changes"


def test_snapshot_needs_tokens_and_label(service, tenant, user):
    with pytest.raises(NotFound):
        service.snapshot(tenant, user, "Empty")
    service.update_tokens(tenant, user, raw_tokens())
    with pytest.raises(ValidationError) as exc:
        service.snapshot(tenant, user, "   ")
    assert exc.value.fields == ["label"]


# ── Logging ───────────────────────────────────────────────────────────────────
def test_state_transitions_are_logged(service, tenant, user, caplog):
    caplog.set_level(logging.DEBUG, logger="brand_tokens.services.token_service")
    service.update_tokens(tenant, user, raw_tokens())
    text = caplog.text
    for step in ("diffing -> synthesizing", "persisting -> materializing", "materializing -> done"):
        assert step in text


def test_failure_logs_failing_state(service, tenant, user, caplog):
    caplog.set_level(logging.DEBUG, logger="brand_tokens.services.token_service")
    with pytest.raises(ValidationError):
        service.update_tokens(tenant, user, {"typography": {}})
    assert "failed while validating" in caplog.text


def test_primary_change_keeps_other_semantics(service, tenant, user):
    first = service.update_tokens(tenant, user, raw_tokens()).semantic_tokens
    second = service.update_tokens(tenant, user,
                                   raw_tokens(colors={"brandPrimaryBase": "#FF0000"})).semantic_tokens
    for key in ("brandPrimaryXLight", "brandPrimaryLight", "brandPrimaryDark", "brandPrimaryXDark"):
        assert first["colors"][key] != second["colors"][key]
    assert first["typography"] == second["typography"]
    assert first["spacing"] == second["spacing"]


def test_blank_description_is_backfilled(service, tenant, user):
    version = service.update_tokens(tenant, user, raw_tokens(), description="").version
    assert version.Description == f"{LEAF_COUNT} created"
    snap = service.snapshot(tenant, user, "Checkpoint", description="").version
    assert snap.Description == "No changes"


def test_huge_neutral_hue_saves(service, tenant, user):
    huge = "hsl(" + "9" * 5000 + ", 0%, 50%)"
    result = service.update_tokens(tenant, user, raw_tokens(colors={"neutralBase": huge}))
    assert result.semantic_tokens["colors"]["neutral0"] == "#ffffff"
