# brand_tokens/services/version_store.py
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from ..errors import NotFound, PersistenceFailure
from ..models import db, utcnow, Client, CurrentTokens, DesignSystemChange, DesignSystemVersion
from .differ import TokenChange, summarize_changes

logger = logging.getLogger(__name__)


class TokenStore:
    """Relational persistence for design-system versions.

    Writes only flush; callers decide when to ``commit`` so that a version
    and its change rows land in one transaction.
    """

    def __init__(self, session=None):
        self.session = session or db.session

    # ── reads ────────────────────────────────────────────────────────────────
    def get_tenant(self, client_id: int) -> Optional[Client]:
        return self.session.get(Client, client_id)

    def get_current_tokens(self, client_id: int) -> Optional[CurrentTokens]:
        return self.session.get(CurrentTokens, client_id)

    def get_current_raw_tokens(self, client_id: int) -> Optional[Dict[str, Any]]:
        """Materialized raw tokens, or the latest version's when the view is missing or stale."""
        latest = self.get_latest_version(client_id)
        current = self.get_current_tokens(client_id)
        if current is not None and (latest is None or current.VersionId == latest.Id):
            return current.RawTokens
        if latest is not None:
            if current is not None:
                logger.info("current tokens for client %s are stale, using version %s", client_id, latest.Id)
            return latest.RawTokens
        return None

    def _versions(self, client_id: int):
        return (self.session.query(DesignSystemVersion)
                .filter(DesignSystemVersion.ClientId == client_id)
                .order_by(DesignSystemVersion.CreatedAt.desc(), DesignSystemVersion.Id.desc()))

    def get_latest_version(self, client_id: int) -> Optional[DesignSystemVersion]:
        return self._versions(client_id).first()

    def get_version(self, version_id: int) -> Optional[DesignSystemVersion]:
        return self.session.get(DesignSystemVersion, version_id)

    def list_versions(self, client_id: int, limit: int, offset: int) -> List[DesignSystemVersion]:
        return self._versions(client_id).offset(offset).limit(limit).all()

    def get_changes(self, version_id: int) -> List[DesignSystemChange]:
        return (self.session.query(DesignSystemChange)
                .filter(DesignSystemChange.VersionId == version_id)
                .order_by(DesignSystemChange.Id).all())

    # ── writes ───────────────────────────────────────────────────────────────
    def create_version(self, **data) -> DesignSystemVersion:
        version = DesignSystemVersion(**data)
        self.session.add(version)
        self.session.flush()
        return version

    def update_version_metadata(self, version_id: int, *, description: str,
                                changes_summary: List[Dict[str, Any]]) -> None:
        # One-time backfill: non-empty values are never overwritten.
        version = self.get_version(version_id)
        if not version.Description:
            version.Description = description
        if not version.ChangesSummary:
            version.ChangesSummary = changes_summary
        self.session.flush()

    def create_changes(self, version_id: int, changes: Iterable[TokenChange],
                       source: str) -> List[DesignSystemChange]:
        rows = [DesignSystemChange(
            VersionId=version_id,
            TokenType=c.token_type,
            TokenPath=c.token_path,
            ChangeType=c.change_type,
            OldValue=c.old_value,
            NewValue=c.new_value,
            ChangeSource=source,
        ) for c in changes]
        self.session.add_all(rows)
        self.session.flush()
        return rows

    def set_current_tokens(self, client_id: int, version_id: int,
                           raw_tokens: Dict[str, Any], semantic_tokens: Dict[str, Any]) -> CurrentTokens:
        row = self.get_current_tokens(client_id)
        if row is None:
            row = CurrentTokens(ClientId=client_id)
            self.session.add(row)
        row.VersionId = version_id
        row.RawTokens = raw_tokens
        row.SemanticTokens = semantic_tokens
        row.UpdatedAt = utcnow()
        self.session.flush()
        return row

    def touch_tenant(self, client_id: int) -> None:
        client = self.get_tenant(client_id)
        if client is not None:
            client.UpdatedAt = utcnow()
            self.session.flush()

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


class VersionStore:
    """Append-only version history on top of a TokenStore."""

    def __init__(self, store: TokenStore, default_page_size: int = 20, max_page_size: int = 100):
        self.store = store
        self.default_page_size = default_page_size
        self.max_page_size = max_page_size

    def create(self, *, client_id: int, user_id: int,
               raw_tokens: Dict[str, Any], semantic_tokens: Dict[str, Any],
               changes: List[TokenChange], source: str,
               version_name: Optional[str] = None, description: Optional[str] = None,
               parent_version_id: Optional[int] = None, is_snapshot: bool = False,
               figma_connection_id: Optional[int] = None,
               sync_log_id: Optional[int] = None) -> DesignSystemVersion:
        """Store one version and its change rows atomically."""
        try:
            version = self.store.create_version(
                ClientId=client_id,
                UserId=user_id,
                VersionName=version_name,
                Description=description,
                RawTokens=raw_tokens,
                SemanticTokens=semantic_tokens,
                ParentVersionId=parent_version_id,
                IsSnapshot=is_snapshot,
                FigmaConnectionId=figma_connection_id,
                SyncLogId=sync_log_id,
            )
            if changes:
                self.store.create_changes(version.Id, changes, source)
            self.store.update_version_metadata(
                version.Id,
                description=summarize_changes(changes),
                changes_summary=[c.to_json() for c in changes],
            )
            self.store.commit()
        except SQLAlchemyError as exc:
            self.store.rollback()
            logger.exception("saving design-system version for client %s failed", client_id)
            raise PersistenceFailure() from exc
        logger.info("client %s: stored version %s (%d changes)", client_id, version.Id, len(changes))
        return version

    def get(self, client_id: int, version_id: int) -> DesignSystemVersion:
        version = self.store.get_version(version_id)
        if version is None or version.ClientId != client_id:
            raise NotFound("Version not found")
        return version

    def latest(self, client_id: int) -> Optional[DesignSystemVersion]:
        return self.store.get_latest_version(client_id)

    def list(self, client_id: int, limit: Optional[int] = None,
             offset: Optional[int] = 0) -> List[DesignSystemVersion]:
        limit = self.default_page_size if limit is None else limit
        limit = max(min(int(limit), self.max_page_size), 1)
        offset = max(int(offset or 0), 0)
        return self.store.list_versions(client_id, limit, offset)

    def changes(self, client_id: int, version_id: int) -> List[DesignSystemChange]:
        version = self.get(client_id, version_id)
        return self.store.get_changes(version.Id)
