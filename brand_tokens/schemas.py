# brand_tokens/schemas.py
"""
Token trees.

RawTokens is what people author (a handful of base values per category);
SemanticTokens is everything derived from it by services.synthesizer.
Field names are the camelCase keys used on the wire and in change paths
(e.g. ``colors.brandPrimaryBase``).
"""
from __future__ import annotations

import re
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from .errors import ValidationError

HEX_PATTERN = r"^#[0-9A-Fa-f]{6}$"

_LITERAL_RE = re.compile(
    r"^(#[0-9A-Fa-f]{3}|#[0-9A-Fa-f]{6}|#[0-9A-Fa-f]{8}"
    r"|(rgb|rgba|hsl|hsla)\([^)]*\)"
    r"|transparent|currentColor"
    r"|-?\d+(\.\d+)?(px|rem|em|%)?)$"
)


class _Category(BaseModel):
    model_config = ConfigDict(extra="forbid")


# ── Raw tokens ────────────────────────────────────────────────────────────────
class TypographyTokens(_Category):
    fontSizeBase: float = Field(ge=0.5, le=2)        # rem
    lineHeightBase: float = Field(ge=1, le=3)
    typeScaleBase: float = Field(ge=1.1, le=2)
    letterSpacingBase: float = Field(ge=-0.1, le=0.5)
    fontFamily1Base: str = Field(min_length=1)
    fontFamily2Base: str = Field(min_length=1)
    fontFamilyMonoBase: str = Field(min_length=1)


class ColorTokens(_Category):
    brandPrimaryBase: str = Field(pattern=HEX_PATTERN)
    brandSecondaryBase: str = Field(pattern=HEX_PATTERN)
    neutralBase: str = Field(min_length=1)            # usually hsl(...)
    interactiveSuccessBase: str = Field(pattern=HEX_PATTERN)
    interactiveWarningBase: str = Field(pattern=HEX_PATTERN)
    interactiveErrorBase: str = Field(pattern=HEX_PATTERN)
    interactiveInfoBase: str = Field(pattern=HEX_PATTERN)


class SpacingTokens(_Category):
    spacingUnitBase: float = Field(ge=0.25, le=2)    # rem
    spacingScaleBase: float = Field(ge=1.1, le=2)


class BorderTokens(_Category):
    borderWidthBase: float = Field(ge=1, le=8)       # px
    borderRadiusBase: float = Field(ge=0, le=50)     # px


# Symbolic names a component override may use instead of a literal value.
TOKEN_REFERENCES: Dict[str, str] = {
    **{name: "colors" for name in ColorTokens.model_fields},
    **{name: "borders" for name in BorderTokens.model_fields},
}


class _ComponentOverrides(_Category):
    @field_validator("*")
    @classmethod
    def _reference_or_literal(cls, value: Optional[str]) -> Optional[str]:
        if value is None or value in TOKEN_REFERENCES or _LITERAL_RE.match(value.strip()):
            return value
        raise ValueError(f"'{value}' is neither a token reference nor a color/size literal")


class ButtonTokens(_ComponentOverrides):
    primaryBackgroundColor: Optional[str] = None
    primaryTextColor: Optional[str] = None
    secondaryBackgroundColor: Optional[str] = None
    secondaryTextColor: Optional[str] = None
    borderRadius: Optional[str] = None


class InputTokens(_ComponentOverrides):
    backgroundColor: Optional[str] = None
    borderColor: Optional[str] = None
    textColor: Optional[str] = None
    borderRadius: Optional[str] = None


class CardTokens(_ComponentOverrides):
    backgroundColor: Optional[str] = None
    borderColor: Optional[str] = None
    borderRadius: Optional[str] = None


class ComponentTokens(_Category):
    button: Optional[ButtonTokens] = None
    input: Optional[InputTokens] = None
    card: Optional[CardTokens] = None


class RawTokens(_Category):
    typography: TypographyTokens
    colors: ColorTokens
    spacing: SpacingTokens
    borders: BorderTokens
    components: Optional[ComponentTokens] = None

    def to_dict(self) -> Dict[str, Any]:
        """Plain JSON tree; unset component kinds are left out."""
        return self.model_dump(mode="json", exclude_none=True)


def _field_path(loc) -> str:
    return ".".join(str(p) for p in loc) or "rawTokens"


def parse_raw_tokens(data: Union[RawTokens, Dict[str, Any], None]) -> RawTokens:
    """Validate a raw token tree, reporting every failing field at once."""
    if isinstance(data, RawTokens):
        return data
    try:
        return RawTokens.model_validate(data)
    except PydanticValidationError as exc:
        errors: List[Dict[str, Any]] = [
            {"field": _field_path(e["loc"]), "constraint": e["type"], "message": e["msg"]}
            for e in exc.errors()
        ]
        raise ValidationError(errors) from None


# ── Semantic tokens ───────────────────────────────────────────────────────────
class SemanticTypography(BaseModel):
    fontFamilyHeading: str
    fontFamilyBody: str
    fontFamilyCode: str
    fontSizeH1: str
    fontSizeH2: str
    fontSizeH3: str
    fontSizeH4: str
    fontSizeH5: str
    fontSizeH6: str
    fontSizeBody: str
    fontSizeCaption: str
    fontSizeCode: str
    lineHeightHeading: float
    lineHeightBody: float
    lineHeightCaption: float
    lineHeightCode: float
    fontWeightHeading: int
    fontWeightBody: int
    fontWeightCaption: int
    fontWeightCode: int
    letterSpacingHeading: float
    letterSpacingBody: float
    letterSpacingCaption: float
    letterSpacingCode: float


class SemanticColors(BaseModel):
    neutral0: str
    neutral1: str
    neutral2: str
    neutral3: str
    neutral4: str
    neutral5: str
    neutral6: str
    neutral7: str
    neutral8: str
    neutral9: str
    neutral10: str
    brandPrimaryXLight: str
    brandPrimaryLight: str
    brandPrimary: str
    brandPrimaryDark: str
    brandPrimaryXDark: str
    brandSecondaryXLight: str
    brandSecondaryLight: str
    brandSecondary: str
    brandSecondaryDark: str
    brandSecondaryXDark: str
    successLight: str
    successDark: str
    warningLight: str
    warningDark: str
    errorLight: str
    errorDark: str
    infoLight: str
    infoDark: str
    textHeading: str
    textBody: str
    textMuted: str
    textInverted: str
    textLink: str
    textLinkHover: str
    textError: str
    textSuccess: str
    backgroundPage: str
    backgroundSurface: str
    backgroundMuted: str
    backgroundOverlay: str
    backgroundInverted: str
    borderDefault: str
    borderMuted: str
    borderActive: str
    borderError: str
    borderSuccess: str
    buttonPrimaryBg: str
    buttonPrimaryText: str
    buttonSecondaryBg: str
    buttonSecondaryText: str


class SemanticSpacing(BaseModel):
    xs: str
    s: str
    m: str
    l: str
    xl: str
    xxl: str
    xxxl: str
    xxxxl: str
    paddingBody: str
    paddingSection: str
    paddingCard: str
    paddingButton: str
    marginHeading: str
    marginParagraph: str
    gapUI: str


class SemanticBorders(BaseModel):
    radiusXs: str
    radiusS: str
    radiusM: str
    radiusL: str
    radiusXl: str
    input: str
    button: str
    card: str
    radiusButton: str
    radiusInput: str
    radiusCard: str


class SemanticShadows(BaseModel):
    elevation0: str
    elevation1: str
    elevation2: str
    elevation3: str
    elevation4: str
    elevation5: str
    elevationCard: str
    elevationModal: str
    elevationButtonHover: str


class SemanticTransitions(BaseModel):
    ui: str
    button: str
    input: str


class SemanticTokens(BaseModel):
    typography: SemanticTypography
    colors: SemanticColors
    spacing: SemanticSpacing
    borders: SemanticBorders
    shadows: SemanticShadows
    transitions: SemanticTransitions

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")
