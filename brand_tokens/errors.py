# brand_tokens/errors.py
from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Optional


class TokenError(Exception):
    """Base class for failures reported by the token engine."""

    status_code = 500
    message = "Design token operation failed"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.message)
        self.message = message or self.message

    def to_dict(self) -> Dict[str, Any]:
        return {"message": self.message}


class ValidationError(TokenError):
    """Raw tokens were rejected; carries one entry per failing field."""

    status_code = 400
    message = "Invalid design tokens"

    def __init__(self, errors: List[Dict[str, Any]], message: Optional[str] = None):
        super().__init__(message)
        self.errors = errors

    @property
    def fields(self) -> List[str]:
        return [e["field"] for e in self.errors]

    def to_dict(self) -> Dict[str, Any]:
        return {"message": self.message, "errors": self.errors}


class NotFound(TokenError):
    # Same response for "missing" and "owned by another client".
    status_code = 404
    message = "Not found"


class Conflict(TokenError):
    status_code = 409
    message = "Design tokens were changed by another request"

    def __init__(self, expected_version_id: Optional[int], latest_version_id: Optional[int]):
        super().__init__()
        self.expected_version_id = expected_version_id
        self.latest_version_id = latest_version_id

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "baseVersionId": self.expected_version_id,
            "latestVersionId": self.latest_version_id,
        }


class PersistenceFailure(TokenError):
    status_code = 500
    message = "Error saving design tokens"


@dataclass
class MaterializationWarning:
    """The version was stored but the client's current-token record was not updated."""

    client_id: int
    version_id: int
    message: str = "Version saved, but current tokens could not be updated"

    def to_json(self) -> Dict[str, Any]:
        d = asdict(self)
        return {"clientId": d["client_id"], "versionId": d["version_id"], "message": d["message"]}
