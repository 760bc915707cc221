# brand_tokens/services/differ.py
"""
Field-level diff between two raw token trees.

Trees are compared at ``category.field`` granularity. Component kinds
(button/input/card) are fields of the ``components`` category whose values
are compared structurally, so editing one override shows up as a single
``updated`` record for ``components.button``.
"""
from __future__ import annotations

import copy
from dataclasses import dataclass, asdict
from typing import Any, Dict, Iterable, List, Optional, Tuple

from ..schemas import (
    BorderTokens, ColorTokens, ComponentTokens, RawTokens, SpacingTokens, TypographyTokens,
)

CREATED = "created"
UPDATED = "updated"
DELETED = "deleted"

# (tree key, token type stored on the change row, declared field order)
CATEGORIES: Tuple[Tuple[str, str, Tuple[str, ...]], ...] = (
    ("typography", "typography", tuple(TypographyTokens.model_fields)),
    ("colors", "color", tuple(ColorTokens.model_fields)),
    ("spacing", "spacing", tuple(SpacingTokens.model_fields)),
    ("borders", "border_radius", tuple(BorderTokens.model_fields)),
    ("components", "component", tuple(ComponentTokens.model_fields)),
)


@dataclass(frozen=True)
class TokenChange:
    token_type: str
    token_path: str
    change_type: str
    old_value: Any = None
    new_value: Any = None

    def to_json(self) -> Dict[str, Any]:
        d = asdict(self)
        return {
            "type": d["token_type"],
            "path": d["token_path"],
            "action": d["change_type"],
            "oldValue": d["old_value"],
            "newValue": d["new_value"],
        }


def _tree(tokens: Optional[RawTokens]) -> Dict[str, Dict[str, Any]]:
    if tokens is None:
        return {}
    tree = tokens.to_dict()
    tree.setdefault("components", {})
    return tree


def diff_tokens(old: Optional[RawTokens], new: RawTokens) -> List[TokenChange]:
    """Ordered change records turning ``old`` into ``new``.

    ``old=None`` is the bootstrap case: every field of ``new`` is created.
    """
    old_tree, new_tree = _tree(old), _tree(new)
    changes: List[TokenChange] = []

    for category, token_type, fields in CATEGORIES:
        before = old_tree.get(category) or {}
        after = new_tree.get(category) or {}
        for name in fields:
            path = f"{category}.{name}"
            if name in after and name not in before:
                changes.append(TokenChange(token_type, path, CREATED, None, after[name]))
            elif name in after and before[name] != after[name]:
                changes.append(TokenChange(token_type, path, UPDATED, before[name], after[name]))
            elif name in before and name not in after:
                changes.append(TokenChange(token_type, path, DELETED, before[name], None))
    return changes


def count_changes(changes: Iterable[TokenChange]) -> Dict[str, int]:
    counts = {CREATED: 0, UPDATED: 0, DELETED: 0}
    for c in changes:
        counts[c.change_type] += 1
    return counts


def summarize_changes(changes: List[TokenChange]) -> str:
    if not changes:
        return "No changes"
    counts = count_changes(changes)
    return ", ".join(f"{n} {kind}" for kind, n in counts.items() if n)


def apply_changes(tree: Optional[Dict[str, Any]], changes: Iterable[TokenChange]) -> Dict[str, Any]:
    """Replay change records onto a plain raw-token tree (returns a new dict)."""
    result = copy.deepcopy(tree) if tree else {}
    for c in changes:
        category, name = c.token_path.split(".", 1)
        if c.change_type == DELETED:
            result.get(category, {}).pop(name, None)
        else:
            result.setdefault(category, {})[name] = copy.deepcopy(c.new_value)
    if result.get("components") == {}:
        del result["components"]
    return result
