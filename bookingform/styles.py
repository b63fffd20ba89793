"""Style compiler: derives the form stylesheet from layout settings.

compile_stylesheet is a pure function; the same settings always yield the
same stylesheet. The accent tint is computed as rgba for hex and rgb()
inputs and falls back to color-mix for any other CSS color.
"""

import re
from typing import List, Optional, Tuple

from bookingform.config import LayoutSettings
from bookingform.types import ButtonPosition, ButtonStyle, ContainerStyle, SecondaryButtonStyle

TINT_ALPHA = 0.15
NARROW_VIEWPORT_PX = 640

_HEX_COLOR = re.compile(r"^#([0-9a-fA-F]{3,4}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$")
_RGB_COLOR = re.compile(
    r"^rgba?\(\s*(\d{1,3})\s*[, ]\s*(\d{1,3})\s*[, ]\s*(\d{1,3})\s*(?:[,/]\s*[\d.]+%?\s*)?\)$"
)

JUSTIFY_BY_POSITION = {
    ButtonPosition.LEFT: "flex-start",
    ButtonPosition.RIGHT: "flex-end",
    ButtonPosition.SPACE_BETWEEN: "space-between",
}


def parse_rgb(color: str) -> Optional[Tuple[int, int, int]]:
    """RGB channels of a hex or rgb()/rgba() color, None for other syntaxes.

    Examples:
        >>> parse_rgb("#f43f5e")
        (244, 63, 94)
        >>> parse_rgb("#fff")
        (255, 255, 255)
        >>> parse_rgb("rgba(16, 185, 129, 1)")
        (16, 185, 129)
        >>> parse_rgb("tomato") is None
        True
    """
    color = color.strip()
    match = _HEX_COLOR.match(color)
    if match:
        digits = match.group(1)
        if len(digits) in (3, 4):
            digits = "".join(ch * 2 for ch in digits[:3])
        return int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16)
    match = _RGB_COLOR.match(color)
    if match:
        channels = tuple(min(255, int(c)) for c in match.groups())
        return channels[0], channels[1], channels[2]
    return None


def accent_tint(color: str, alpha: float = TINT_ALPHA) -> str:
    """Low-opacity tint of the accent color.

    Examples:
        >>> accent_tint("#f43f5e")
        'rgba(244, 63, 94, 0.15)'
        >>> accent_tint("hsl(200 80% 50%)")
        'color-mix(in srgb, hsl(200 80% 50%) 15%, transparent)'
    """
    rgb = parse_rgb(color)
    if rgb is None:
        return f"color-mix(in srgb, {color} {round(alpha * 100)}%, transparent)"
    return f"rgba({rgb[0]}, {rgb[1]}, {rgb[2]}, {alpha})"


def _format_number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


def _custom_properties(layout: LayoutSettings, accent_color: str, padding: str) -> str:
    return f""":root {{
  --accent-color: {accent_color};
  --accent-tint: {accent_tint(accent_color)};
  --container-bg: {layout.container_color};
  --container-bg-dark: {layout.container_color_dark};
  --container-radius: {_format_number(layout.container_border_radius)}px;
  --form-padding: {padding};
}}"""


def _base_rules() -> str:
    return """*, *::before, *::after { box-sizing: border-box; }
html, body { margin: 0; background: transparent; }
body { padding: var(--form-padding); font-family: system-ui, -apple-system, "Segoe UI", Roboto, sans-serif; color: #1f2937; }
[hidden] { display: none !important; }
.form-container { position: relative; max-width: 42rem; margin: 0 auto; padding: 1.5rem; background: var(--container-bg); border-radius: var(--container-radius); }
.form-title { margin: 0 0 1rem; font-size: 1.5rem; font-weight: 700; text-align: center; }
.form-logo { display: block; max-height: 3rem; margin: 0 auto 0.75rem; }
.form-field { margin-bottom: 1rem; }
.form-label { display: block; margin-bottom: 0.375rem; font-size: 0.875rem; font-weight: 500; }
.required-marker { color: #ef4444; }
.optional-suffix { color: #6b7280; font-weight: 400; }
.form-input, .form-select { width: 100%; padding: 0.625rem 2.25rem 0.625rem 0.75rem; border: 1px solid #d1d5db; border-radius: 0.375rem; font: inherit; background: #fff; }
.form-input:focus, .form-select:focus { outline: none; border-color: var(--accent-color); box-shadow: 0 0 0 3px var(--accent-tint); }
.input-wrapper { position: relative; }
.input-trailing { position: absolute; top: 0.5rem; right: 0.5rem; display: flex; gap: 0.25rem; }
.clear-btn, .add-waypoint-btn { display: inline-flex; align-items: center; gap: 0.25rem; border: none; background: none; color: #6b7280; cursor: pointer; }
.add-waypoint-btn { color: var(--accent-color); font-size: 0.875rem; }
.icon { width: 1.25rem; height: 1.25rem; }
.radio-group, .checkbox-group { display: flex; flex-wrap: wrap; gap: 0.75rem; }
.radio-option, .checkbox-option { display: inline-flex; align-items: center; gap: 0.375rem; }
.radio-option input, .checkbox-option input { accent-color: var(--accent-color); }
.waypoints-container, .return-waypoints-container { display: flex; flex-direction: column; gap: 0.5rem; margin-bottom: 1rem; }
.waypoint-item { display: flex; align-items: center; gap: 0.5rem; }
.booking-type-selector { display: flex; flex-wrap: wrap; gap: 0.5rem; margin-bottom: 1.25rem; }
.booking-type-btn { flex: 1; display: inline-flex; align-items: center; justify-content: center; gap: 0.375rem; padding: 0.5rem 0.75rem; border: 1px solid #e5e7eb; border-radius: 0.375rem; background: #fff; cursor: pointer; }
.booking-type-btn.active { border-color: var(--accent-color); background: var(--accent-tint); color: var(--accent-color); }
.language-selector { position: absolute; top: 1rem; right: 1rem; }
.language-menu { position: absolute; right: 0; z-index: 40; margin: 0.25rem 0 0; padding: 0.25rem; list-style: none; background: #fff; border: 1px solid #e5e7eb; border-radius: 0.375rem; }
.flag { width: 1.3125rem; height: 0.9375rem; }
.fare-display { display: flex; justify-content: space-between; align-items: baseline; padding: 0.75rem 1rem; margin: 1rem 0; border-radius: 0.375rem; background: var(--accent-tint); }
.fare-amount { font-size: 1.25rem; font-weight: 700; color: var(--accent-color); }
.fare-note { display: block; font-size: 0.75rem; color: #6b7280; }
.collapsible-options { margin: 1rem 0; }
.extra-option { display: flex; align-items: center; justify-content: space-between; padding: 0.5rem 0; }
.extra-stepper { display: inline-flex; align-items: center; gap: 0.5rem; }
.extra-stepper button { width: 2rem; height: 2rem; border: 1px solid #d1d5db; border-radius: 0.375rem; background: #fff; cursor: pointer; }
.hourly-notes ul { margin: 0; padding-left: 1.25rem; font-size: 0.875rem; }
.vehicle-list { display: grid; grid-template-columns: repeat(auto-fill, minmax(12rem, 1fr)); gap: 1rem; }
.vehicle-card { padding: 1rem; border: 2px solid #e5e7eb; border-radius: var(--container-radius); cursor: pointer; transition: border-color 0.15s; }
.vehicle-card img { width: 100%; height: 7rem; object-fit: cover; border-radius: 0.375rem; }
.vehicle-card.selected { border-color: var(--accent-color); background: var(--accent-tint); }
.vehicle-specs { display: flex; gap: 0.75rem; font-size: 0.8125rem; color: #4b5563; }
.payment-methods { display: grid; grid-template-columns: repeat(auto-fit, minmax(8rem, 1fr)); gap: 0.75rem; }
.payment-btn { display: inline-flex; align-items: center; justify-content: center; gap: 0.5rem; padding: 0.75rem; border: 2px solid #e5e7eb; border-radius: 0.375rem; background: #fff; cursor: pointer; }
.payment-btn.selected { border-color: var(--accent-color); background: var(--accent-tint); color: var(--accent-color); }
.summary-section { margin-bottom: 1rem; padding-bottom: 1rem; border-bottom: 1px solid #e5e7eb; }
.summary-item { display: flex; justify-content: space-between; gap: 1rem; font-size: 0.875rem; padding: 0.25rem 0; }
.summary-total { display: flex; justify-content: space-between; font-size: 1.125rem; font-weight: 700; }
.confirmation { text-align: center; padding: 2rem 0; }
.confirmation .icon { width: 3rem; height: 3rem; color: var(--accent-color); }
.preview-notice { color: #92400e; background: #fef3c7; padding: 0.5rem; border-radius: 0.375rem; }
.validation-message { margin-top: 1rem; padding: 0.625rem 0.75rem; border-radius: 0.375rem; color: #b91c1c; background: #fee2e2; font-size: 0.875rem; }
.nav-container { display: flex; gap: 0.75rem; margin-top: 1.5rem; }
.btn-primary, .btn-secondary { padding: 0.625rem 1.5rem; font: inherit; font-weight: 600; cursor: pointer; }
.btn-primary:disabled { opacity: 0.5; cursor: not-allowed; }
.accepted-payments { display: flex; align-items: center; justify-content: center; gap: 0.5rem; margin-top: 1.5rem; font-size: 0.75rem; color: #6b7280; }
.payment-icon { width: 2.25rem; height: 1.5rem; }"""


def _container_rules(layout: LayoutSettings) -> str:
    if layout.container_style == ContainerStyle.CARD_WITH_SHADOW:
        return ".form-container { box-shadow: 0 10px 25px -5px rgba(0, 0, 0, 0.1), 0 8px 10px -6px rgba(0, 0, 0, 0.1); }"
    return ".form-container { box-shadow: none; border: 1px solid #e5e7eb; }"


def _dark_rules() -> str:
    rules = """.form-container { background: var(--container-bg-dark); color: #f3f4f6; }
  .form-input, .form-select, .booking-type-btn, .payment-btn, .language-menu { background: #1f2937; color: #f3f4f6; border-color: #374151; }
  .optional-suffix, .fare-note, .accepted-payments { color: #9ca3af; }"""
    themed = """[data-theme="dark"].form-container { background: var(--container-bg-dark); color: #f3f4f6; }
[data-theme="dark"] .form-input, [data-theme="dark"] .form-select { background: #1f2937; color: #f3f4f6; border-color: #374151; }"""
    return f"@media (prefers-color-scheme: dark) {{\n  {rules}\n}}\n{themed}"


def _button_rules(layout: LayoutSettings) -> str:
    rounded = layout.button_style == ButtonStyle.FILLED_ROUNDED
    radius = "9999px" if rounded else "0.25rem"
    rules: List[str] = []
    if rounded:
        rules.append(
            f".btn-primary {{ border: 2px solid var(--accent-color); border-radius: {radius}; "
            "background: var(--accent-color); color: #fff; }"
        )
        rules.append(".btn-primary:hover:not(:disabled) { filter: brightness(0.92); }")
    else:
        rules.append(
            f".btn-primary {{ border: 2px solid var(--accent-color); border-radius: {radius}; "
            "background: transparent; color: var(--accent-color); }"
        )
        rules.append(".btn-primary:hover:not(:disabled) { background: var(--accent-tint); }")

    if layout.secondary_button_style == SecondaryButtonStyle.FILLED:
        rules.append(
            f".btn-secondary {{ border: 2px solid transparent; border-radius: {radius}; "
            "background: var(--accent-tint); color: var(--accent-color); }"
        )
    else:
        rules.append(
            f".btn-secondary {{ border: 2px solid var(--accent-color); border-radius: {radius}; "
            "background: transparent; color: var(--accent-color); }"
        )
    rules.append(f".nav-container {{ justify-content: {JUSTIFY_BY_POSITION[layout.button_position]}; }}")
    return "\n".join(rules)


def _progress_rules() -> str:
    return """.progress-bar { display: flex; justify-content: space-between; margin-bottom: 1.5rem; }
.progress-step { flex: 1; display: flex; flex-direction: column; align-items: center; gap: 0.25rem; font-size: 0.75rem; color: #9ca3af; position: relative; }
.progress-step:not(:last-child)::after { content: ""; position: absolute; top: 0.875rem; left: calc(50% + 1rem); right: calc(-50% + 1rem); height: 2px; background: #e5e7eb; }
.progress-dot { display: inline-flex; align-items: center; justify-content: center; width: 1.75rem; height: 1.75rem; border-radius: 9999px; border: 2px solid #d1d5db; background: #fff; font-weight: 600; }
.progress-step.active { color: var(--accent-color); }
.progress-step.active .progress-dot { border-color: var(--accent-color); background: var(--accent-color); color: #fff; }
.progress-step.completed { color: var(--accent-color); }
.progress-step.completed .progress-dot { border-color: var(--accent-color); background: var(--accent-tint); color: var(--accent-color); }
.progress-step.completed:not(:last-child)::after { background: var(--accent-color); }"""


def _datetime_rules() -> str:
    return f""".datetime-picker {{ position: relative; }}
.datetime-triggers {{ display: grid; grid-template-columns: 1fr 1fr; gap: 0.5rem; }}
.datetime-trigger {{ display: inline-flex; align-items: center; gap: 0.5rem; padding: 0.625rem 0.75rem; border: 1px solid #d1d5db; border-radius: 0.375rem; background: #fff; font: inherit; cursor: pointer; text-align: left; }}
.form-popover {{ position: absolute; z-index: 50; top: calc(100% + 0.25rem); left: 0; width: 18rem; padding: 0.75rem; background: #fff; border: 1px solid #e5e7eb; border-radius: 0.5rem; box-shadow: 0 10px 15px -3px rgba(0, 0, 0, 0.1); }}
.time-popover {{ left: auto; right: 0; max-height: 16rem; overflow-y: auto; }}
.calendar-grid {{ display: grid; grid-template-columns: repeat(7, 1fr); gap: 0.125rem; text-align: center; }}
.calendar-day {{ padding: 0.375rem 0; border: none; border-radius: 0.375rem; background: none; cursor: pointer; }}
.calendar-day.outside {{ color: #d1d5db; }}
.calendar-day.today {{ font-weight: 700; }}
.calendar-day.selected, .time-slot.selected {{ background: var(--accent-color); color: #fff; }}
.calendar-day:disabled, .time-slot:disabled {{ color: #d1d5db; cursor: not-allowed; }}
.time-slots {{ display: grid; grid-template-columns: 1fr 1fr; gap: 0.25rem; }}
.time-slot {{ padding: 0.375rem; border: 1px solid #e5e7eb; border-radius: 0.375rem; background: #fff; cursor: pointer; }}
@media (max-width: {NARROW_VIEWPORT_PX}px) {{
  .form-popover, .time-popover {{ position: fixed; left: 0; right: 0; bottom: 0; top: auto; width: 100%; max-width: none; max-height: 70vh; border-radius: 0.75rem 0.75rem 0 0; }}
  .datetime-triggers {{ grid-template-columns: 1fr; }}
  .vehicle-list {{ grid-template-columns: 1fr; }}
}}"""


def compile_stylesheet(layout: LayoutSettings, accent_color: str, padding: str = "1.5rem") -> str:
    """Build the complete stylesheet for a form.

    Args:
        layout: Normalized layout settings
        accent_color: Any CSS color
        padding: Outer padding (already validated)

    Examples:
        >>> css = compile_stylesheet(LayoutSettings(), "#f43f5e")
        >>> "--accent-tint: rgba(244, 63, 94, 0.15);" in css
        True
    """
    parts = [
        _custom_properties(layout, accent_color, padding),
        _base_rules(),
        _container_rules(layout),
        _button_rules(layout),
        _progress_rules(),
        _datetime_rules(),
        _dark_rules(),
    ]
    if layout.custom_css:
        parts.append(layout.custom_css)
    return "\n".join(parts) + "\n"


__all__ = [
    "TINT_ALPHA",
    "NARROW_VIEWPORT_PX",
    "parse_rgb",
    "accent_tint",
    "compile_stylesheet",
]
