# brand_tokens/services/scales.py
from __future__ import annotations

from typing import Dict

BORDER_RULE_COLOR = "rgba(0, 0, 0, 0.1)"

SPACING_STEPS = (
    ("xs", -2), ("s", -1), ("m", 0), ("l", 1),
    ("xl", 2), ("xxl", 3), ("xxxl", 4), ("xxxxl", 5),
)

RADIUS_STEPS = (
    ("radiusXs", 0.25), ("radiusS", 0.5), ("radiusM", 1.0),
    ("radiusL", 1.5), ("radiusXl", 2.0),
)

SHADOWS: Dict[str, str] = {
    "elevation0": "none",
    "elevation1": "0 1px 3px rgba(0, 0, 0, 0.12), 0 1px 2px rgba(0, 0, 0, 0.24)",
    "elevation2": "0 3px 6px rgba(0, 0, 0, 0.16), 0 3px 6px rgba(0, 0, 0, 0.23)",
    "elevation3": "0 10px 20px rgba(0, 0, 0, 0.19), 0 6px 6px rgba(0, 0, 0, 0.23)",
    "elevation4": "0 14px 28px rgba(0, 0, 0, 0.25), 0 10px 10px rgba(0, 0, 0, 0.22)",
    "elevation5": "0 19px 38px rgba(0, 0, 0, 0.30), 0 15px 12px rgba(0, 0, 0, 0.22)",
}

TRANSITIONS: Dict[str, str] = {
    "ui": "all 200ms ease-in-out",
    "button": "background-color 200ms ease-in-out",
    "input": "border-color 200ms ease-in-out",
}

FONT_WEIGHTS: Dict[str, int] = {"Heading": 700, "Body": 400, "Caption": 500, "Code": 400}


def fmt_number(value: float) -> str:
    """Shortest text for a value rounded to 4 places: 1.0 -> '1', 0.71428 -> '0.7143'."""
    rounded = round(float(value), 4)
    if rounded == int(rounded):
        return str(int(rounded))
    return repr(rounded)


def with_unit(value: float, unit: str) -> str:
    return f"{fmt_number(value)}{unit}"


def _round(value: float) -> float:
    return round(float(value), 4) + 0.0


def type_scale(base: float, ratio: float, unit: str = "rem") -> Dict[str, str]:
    """Headings run b*r^3 (H1) down to b*r^-2 (H6); H4 is the body size."""
    sizes = {f"fontSizeH{i + 1}": with_unit(base * ratio ** (3 - i), unit) for i in range(6)}
    sizes["fontSizeBody"] = with_unit(base, unit)
    sizes["fontSizeCaption"] = with_unit(base / ratio ** 2, unit)
    sizes["fontSizeCode"] = with_unit(base / ratio, unit)
    return sizes


def line_heights(base: float) -> Dict[str, float]:
    return {
        "lineHeightHeading": _round(base * 1.2),
        "lineHeightBody": _round(base),
        "lineHeightCaption": _round(base * 0.9),
        "lineHeightCode": _round(base * 0.9),
    }


def letter_spacings(base: float) -> Dict[str, float]:
    return {
        "letterSpacingHeading": _round(base * 0.8),
        "letterSpacingBody": _round(base),
        "letterSpacingCaption": _round(base * 1.2),
        "letterSpacingCode": _round(base),
    }


def font_weights() -> Dict[str, int]:
    return {f"fontWeight{role}": weight for role, weight in FONT_WEIGHTS.items()}


def spacing_scale(unit: float, ratio: float) -> Dict[str, str]:
    steps = {name: with_unit(unit * ratio ** k, "rem") for name, k in SPACING_STEPS}
    small = with_unit(unit / ratio, "rem")
    base = with_unit(unit, "rem")
    large = with_unit(unit * ratio, "rem")
    steps.update({
        "paddingBody": base,
        "paddingSection": with_unit(unit * ratio ** 2, "rem"),
        "paddingCard": large,
        "paddingButton": f"{small} {base}",
        "marginHeading": f"{large} 0 {base} 0",
        "marginParagraph": f"{base} 0",
        "gapUI": small,
    })
    return steps


def radius_scale(radius: float, width: float) -> Dict[str, str]:
    scale = {name: with_unit(radius * factor, "px") for name, factor in RADIUS_STEPS}
    rule = f"{with_unit(width, 'px')} solid {BORDER_RULE_COLOR}"
    scale.update({
        "input": rule,
        "button": rule,
        "card": rule,
        "radiusButton": with_unit(radius * 0.5, "px"),
        "radiusInput": with_unit(radius * 0.5, "px"),
        "radiusCard": with_unit(radius, "px"),
    })
    return scale


def shadow_scale() -> Dict[str, str]:
    shadows = dict(SHADOWS)
    shadows.update({
        "elevationCard": SHADOWS["elevation2"],
        "elevationModal": SHADOWS["elevation5"],
        "elevationButtonHover": SHADOWS["elevation1"],
    })
    return shadows


def transition_scale() -> Dict[str, str]:
    return dict(TRANSITIONS)
