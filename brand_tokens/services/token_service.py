# brand_tokens/services/token_service.py
"""
Design-token write pipeline.

An update runs VALIDATING -> DIFFING -> SYNTHESIZING -> PERSISTING ->
MATERIALIZING -> DONE; any TokenError moves it to FAILED and is re-raised.
Materializing is best-effort: once the version is committed, a failure to
refresh the client's current tokens only adds a MaterializationWarning.
"""
from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError

from ..errors import Conflict, MaterializationWarning, NotFound, TokenError, ValidationError
from ..models import DesignSystemChange, DesignSystemVersion
from ..schemas import RawTokens, parse_raw_tokens
from .differ import TokenChange, diff_tokens
from .synthesizer import resolve_components, synthesize
from .version_store import TokenStore, VersionStore

logger = logging.getLogger(__name__)

SOURCES = ("manual_edit", "figma_pull", "figma_push", "api_update")


class UpdateState(str, Enum):
    VALIDATING = "validating"
    DIFFING = "diffing"
    SYNTHESIZING = "synthesizing"
    PERSISTING = "persisting"
    MATERIALIZING = "materializing"
    DONE = "done"
    FAILED = "failed"


@dataclass
class TokenUpdateResult:
    version: DesignSystemVersion
    changes: List[TokenChange]
    raw_tokens: Dict[str, Any]
    semantic_tokens: Dict[str, Any]
    warnings: List[MaterializationWarning] = field(default_factory=list)
    rolled_back_to: Optional[DesignSystemVersion] = None

    @property
    def changes_count(self) -> int:
        return len(self.changes)

    def to_json(self) -> Dict[str, Any]:
        out = {
            "version": self.version.to_summary(),
            "changesCount": self.changes_count,
            "rawTokens": self.raw_tokens,
            "semanticTokens": self.semantic_tokens,
            "warnings": [w.to_json() for w in self.warnings],
        }
        if self.rolled_back_to is not None:
            out["rolledBackTo"] = self.rolled_back_to.to_summary()
        return out


class _Run:
    """Tracks the state of one update so failures can say where they happened."""

    def __init__(self, client_id: int):
        self.client_id = client_id
        self.state = UpdateState.VALIDATING
        logger.debug("client %s: %s", client_id, self.state.value)

    def advance(self, state: UpdateState) -> None:
        logger.debug("client %s: %s -> %s", self.client_id, self.state.value, state.value)
        self.state = state


class TokenService:
    def __init__(self, store: Optional[TokenStore] = None,
                 default_page_size: int = 20, max_page_size: int = 100):
        self.store = store or TokenStore()
        self.versions = VersionStore(self.store, default_page_size=default_page_size,
                                     max_page_size=max_page_size)

    # ── helpers ──────────────────────────────────────────────────────────────
    def _require_client(self, client_id: int) -> None:
        if self.store.get_tenant(client_id) is None:
            raise NotFound("Client not found")

    def _current_raw(self, client_id: int) -> Optional[RawTokens]:
        tree = self.store.get_current_raw_tokens(client_id)
        return parse_raw_tokens(tree) if tree is not None else None

    def _materialize(self, client_id: int, version: DesignSystemVersion) -> List[MaterializationWarning]:
        version_id = version.Id
        try:
            self.store.set_current_tokens(client_id, version_id, version.RawTokens, version.SemanticTokens)
            self.store.touch_tenant(client_id)
            self.store.commit()
        except SQLAlchemyError:
            self.store.rollback()
            logger.exception("client %s: version %s saved but current tokens not updated",
                             client_id, version_id)
            return [MaterializationWarning(client_id, version_id)]
        return []

    # ── reads ────────────────────────────────────────────────────────────────
    def get_tokens(self, client_id: int, version_id: Optional[int] = None) -> Dict[str, Any]:
        """Raw, semantic and component tokens for the current state or a given version."""
        self._require_client(client_id)
        if version_id is not None:
            version = self.versions.get(client_id, version_id)
            raw = parse_raw_tokens(version.RawTokens)
        else:
            raw = self._current_raw(client_id)
            if raw is None:
                raise NotFound("No design tokens found")
            version = self.versions.latest(client_id)
        return {
            "rawTokens": raw.to_dict(),
            "semanticTokens": synthesize(raw).to_dict(),
            "componentTokens": resolve_components(raw),
            "version": version.to_summary() if version else None,
        }

    def list_versions(self, client_id: int, limit: Optional[int] = None,
                      offset: Optional[int] = 0) -> List[DesignSystemVersion]:
        self._require_client(client_id)
        return self.versions.list(client_id, limit, offset)

    def get_version(self, client_id: int,
                    version_id: int) -> Tuple[DesignSystemVersion, List[DesignSystemChange]]:
        self._require_client(client_id)
        version = self.versions.get(client_id, version_id)
        return version, self.store.get_changes(version.Id)

    # ── writes ───────────────────────────────────────────────────────────────
    def update_tokens(self, client_id: int, user_id: int, raw_tokens: Any,
                      source: str = "manual_edit", version_name: Optional[str] = None,
                      description: Optional[str] = None, base_version_id: Optional[int] = None,
                      figma_connection_id: Optional[int] = None,
                      sync_log_id: Optional[int] = None) -> TokenUpdateResult:
        return self._save(client_id, user_id, raw_tokens, source,
                          version_name=version_name, description=description,
                          base_version_id=base_version_id,
                          figma_connection_id=figma_connection_id, sync_log_id=sync_log_id)

    def snapshot(self, client_id: int, user_id: int, label: str,
                 description: Optional[str] = None) -> TokenUpdateResult:
        """Record the current tokens again, flagged as a user-requested snapshot."""
        if not (label or "").strip():
            raise ValidationError([{"field": "label", "constraint": "required",
                                    "message": "Snapshot label is required"}])
        self._require_client(client_id)
        current = self.store.get_current_raw_tokens(client_id)
        if current is None:
            raise NotFound("No design tokens found")
        return self._save(client_id, user_id, copy.deepcopy(current), "manual_edit",
                          version_name=label.strip(), description=description, is_snapshot=True)

    def rollback(self, client_id: int, user_id: int, target_version_id: int) -> TokenUpdateResult:
        """Copy a past version forward as a new version; no change rows are written."""
        self._require_client(client_id)
        target = self.versions.get(client_id, target_version_id)
        label = target.VersionName or f"version {target.Id}"
        version = self.versions.create(
            client_id=client_id,
            user_id=user_id,
            raw_tokens=copy.deepcopy(target.RawTokens),
            semantic_tokens=copy.deepcopy(target.SemanticTokens),
            changes=[],
            source="manual_edit",
            version_name=f"Rollback to {label}",
            description=f"Rolled back to version {target.Id}",
            parent_version_id=target.Id,
        )
        warnings = self._materialize(client_id, version)
        logger.info("client %s: rolled back to version %s as version %s",
                    client_id, target.Id, version.Id)
        return TokenUpdateResult(version, [], version.RawTokens, version.SemanticTokens,
                                 warnings, rolled_back_to=target)

    def _save(self, client_id: int, user_id: int, raw_tokens: Any, source: str, *,
              version_name: Optional[str] = None, description: Optional[str] = None,
              is_snapshot: bool = False, base_version_id: Optional[int] = None,
              figma_connection_id: Optional[int] = None,
              sync_log_id: Optional[int] = None) -> TokenUpdateResult:
        run = _Run(client_id)
        try:
            if source not in SOURCES:
                raise ValidationError([{"field": "source", "constraint": "enum",
                                        "message": f"source must be one of {', '.join(SOURCES)}"}])
            raw = parse_raw_tokens(raw_tokens)

            run.advance(UpdateState.DIFFING)
            self._require_client(client_id)
            if base_version_id is not None:
                latest = self.versions.latest(client_id)
                latest_id = latest.Id if latest else None
                if latest_id != base_version_id:
                    raise Conflict(base_version_id, latest_id)
            changes = diff_tokens(self._current_raw(client_id), raw)

            run.advance(UpdateState.SYNTHESIZING)
            semantic = synthesize(raw)

            run.advance(UpdateState.PERSISTING)
            version = self.versions.create(
                client_id=client_id,
                user_id=user_id,
                raw_tokens=raw.to_dict(),
                semantic_tokens=semantic.to_dict(),
                changes=changes,
                source=source,
                version_name=version_name,
                description=description,
                is_snapshot=is_snapshot,
                figma_connection_id=figma_connection_id,
                sync_log_id=sync_log_id,
            )

            run.advance(UpdateState.MATERIALIZING)
            warnings = self._materialize(client_id, version)
            run.advance(UpdateState.DONE)
        except TokenError as exc:
            failed_in = run.state
            run.advance(UpdateState.FAILED)
            logger.warning("client %s: token update failed while %s: %s",
                           client_id, failed_in.value, exc.message)
            raise
        return TokenUpdateResult(version, changes, version.RawTokens, version.SemanticTokens, warnings)
