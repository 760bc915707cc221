# brand_tokens/services/synthesizer.py
"""
Raw -> semantic token synthesis.

``synthesize`` is a pure function of its input: no clock, no randomness,
no I/O. Equal RawTokens always give equal SemanticTokens, which is what
lets versions store both trees and still treat the semantic one as
derived data.
"""
from __future__ import annotations

from typing import Dict, Optional

from ..schemas import RawTokens, SemanticTokens, TOKEN_REFERENCES
from . import scales
from .color_math import color_variations, neutral_scale

WHITE = "#ffffff"
OVERLAY = "rgba(0, 0, 0, 0.6)"


def _typography(raw: RawTokens) -> Dict[str, object]:
    t = raw.typography
    tokens: Dict[str, object] = {
        "fontFamilyHeading": t.fontFamily1Base,
        "fontFamilyBody": t.fontFamily2Base,
        "fontFamilyCode": t.fontFamilyMonoBase,
    }
    tokens.update(scales.type_scale(t.fontSizeBase, t.typeScaleBase))
    tokens.update(scales.line_heights(t.lineHeightBase))
    tokens.update(scales.font_weights())
    tokens.update(scales.letter_spacings(t.letterSpacingBase))
    return tokens


def _colors(raw: RawTokens) -> Dict[str, str]:
    c = raw.colors
    neutral = neutral_scale(c.neutralBase)
    primary = color_variations(c.brandPrimaryBase)
    secondary = color_variations(c.brandSecondaryBase)
    success = color_variations(c.interactiveSuccessBase)
    warning = color_variations(c.interactiveWarningBase)
    error = color_variations(c.interactiveErrorBase)
    info = color_variations(c.interactiveInfoBase)

    tokens = {f"neutral{i}": shade for i, shade in enumerate(neutral)}
    tokens.update({
        "brandPrimaryXLight": primary.x_light,
        "brandPrimaryLight": primary.light,
        "brandPrimary": c.brandPrimaryBase,
        "brandPrimaryDark": primary.dark,
        "brandPrimaryXDark": primary.x_dark,
        "brandSecondaryXLight": secondary.x_light,
        "brandSecondaryLight": secondary.light,
        "brandSecondary": c.brandSecondaryBase,
        "brandSecondaryDark": secondary.dark,
        "brandSecondaryXDark": secondary.x_dark,
        "successLight": success.light,
        "successDark": success.dark,
        "warningLight": warning.light,
        "warningDark": warning.dark,
        "errorLight": error.light,
        "errorDark": error.dark,
        "infoLight": info.light,
        "infoDark": info.dark,
        # role -> source table
        "textHeading": c.brandSecondaryBase,
        "textBody": neutral[9],
        "textMuted": neutral[5],
        "textInverted": WHITE,
        "textLink": c.brandPrimaryBase,
        "textLinkHover": primary.dark,
        "textError": error.dark,
        "textSuccess": success.dark,
        "backgroundPage": neutral[0],
        "backgroundSurface": neutral[1],
        "backgroundMuted": neutral[2],
        "backgroundOverlay": OVERLAY,
        "backgroundInverted": primary.dark,
        "borderDefault": scales.BORDER_RULE_COLOR,
        "borderMuted": neutral[3],
        "borderActive": c.brandPrimaryBase,
        "borderError": error.dark,
        "borderSuccess": success.dark,
        "buttonPrimaryBg": c.brandPrimaryBase,
        "buttonPrimaryText": WHITE,
        "buttonSecondaryBg": neutral[2],
        "buttonSecondaryText": c.brandSecondaryBase,
    })
    return tokens


def synthesize(raw: RawTokens) -> SemanticTokens:
    return SemanticTokens(
        typography=_typography(raw),
        colors=_colors(raw),
        spacing=scales.spacing_scale(raw.spacing.spacingUnitBase, raw.spacing.spacingScaleBase),
        borders=scales.radius_scale(raw.borders.borderRadiusBase, raw.borders.borderWidthBase),
        shadows=scales.shadow_scale(),
        transitions=scales.transition_scale(),
    )


def resolve_reference(raw: RawTokens, value: Optional[str]) -> Optional[str]:
    """Turn ``"brandPrimaryBase"`` into the value of ``colors.brandPrimaryBase``."""
    category = TOKEN_REFERENCES.get(value) if value else None
    if category is None:
        return value
    resolved = getattr(getattr(raw, category), value)
    if category == "borders":
        return scales.with_unit(resolved, "px")
    return resolved


def resolve_components(raw: RawTokens) -> Dict[str, Dict[str, str]]:
    """Component overrides with every symbolic reference replaced by its value."""
    if raw.components is None:
        return {}
    resolved: Dict[str, Dict[str, str]] = {}
    for kind, overrides in raw.components:
        if overrides is None:
            continue
        resolved[kind] = {
            name: resolve_reference(raw, value)
            for name, value in overrides
            if value is not None
        }
    return resolved
