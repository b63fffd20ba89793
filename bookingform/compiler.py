"""Document compiler.

Combines the assembled markup tree, the compiled stylesheet, the versioned
browser runtime and the serialized configuration payload into one
self-contained HTML document. The same document serves the builder preview
(``preview=True``) and the public page (``preview=False``).

The runtime reads its configuration from a single JSON payload embedded in
``<script type="application/json" id="booking-form-config">``; no per-field
code is generated.
"""

import json
import logging
import re
from dataclasses import dataclass
from functools import lru_cache
from importlib import resources
from typing import Any, Dict, Iterable, Mapping, Optional, Union
from urllib.parse import quote

from bookingform.assembler import FormAssembler
from bookingform.config import BookingFormConfig, load_config
from bookingform.errors import ConfigLoadError
from bookingform.i18n import translate
from bookingform.markup import Element, Raw, h
from bookingform.settings import CompilerSettings, get_settings
from bookingform.styles import compile_stylesheet
from bookingform.types import BookingType

logger = logging.getLogger(__name__)

RUNTIME_VERSION = "1.0.0"
RUNTIME_SCRIPT = "booking-runtime.js"
CONFIG_SCRIPT_ID = "booking-form-config"

PADDING_PATTERN = re.compile(r"^(\d+(\.\d+)?(px|em|rem|%|vw|vh)|0)$")

RESIZE_MESSAGE_TYPE = "form-resize"

# Texts the browser runtime renders itself (labels, summary, submit states)
RUNTIME_STRING_KEYS = (
    "next_button", "back_button", "submitting", "try_again", "confirm_booking", "make_payment",
    "redirecting_to_payment", "redirecting_to_paypal", "fill_required_fields", "select_vehicle_to_continue",
    "enter_stop_location", "enter_final_destination", "remove_waypoint", "waypoint", "select_date",
    "select_time", "ride_details", "waypoints", "return_trip", "return_pickup", "return_waypoints",
    "return_dropoff", "your_vehicle", "passenger_contact_info", "extra_options", "payment_method",
    "promo_code", "total_fare", "edit", "yes", "no", "credit_card", "paypal", "cash", "preview_notice",
)


def validate_padding(value: Optional[str], default: str = "1.5rem") -> str:
    """Padding from the query string, or ``default`` when it is not a CSS length.

    Examples:
        >>> validate_padding("2rem")
        '2rem'
        >>> validate_padding("0")
        '0'
        >>> validate_padding("10px; color: red")
        '1.5rem'
    """
    if value and PADDING_PATTERN.match(value):
        return value
    if value:
        logger.debug("Ignoring invalid padding %r", value)
    return default


def resize_message(height: int) -> Dict[str, Any]:
    """The only message a compiled form posts to its embedding page.

    Examples:
        >>> resize_message(640)
        {'type': 'form-resize', 'height': 640}
    """
    return {"type": RESIZE_MESSAGE_TYPE, "height": int(height)}


def shareable_link(origin: str, tenant_id: str, padding: Optional[str] = None) -> str:
    """Public URL of a tenant's form; a valid padding is carried as a query parameter.

    Examples:
        >>> shareable_link("https://book.example.com", "abc123", "2rem")
        'https://book.example.com/form/abc123?padding=2rem'
        >>> shareable_link("https://book.example.com/", "abc123", "2 rem")
        'https://book.example.com/form/abc123'
    """
    link = f"{origin.rstrip('/')}/form/{tenant_id}"
    if padding and PADDING_PATTERN.match(padding):
        link += f"?padding={quote(padding, safe='')}"
    return link


def embed_snippet(link: str, tenant_id: str, width: str = "100%", height: str = "800") -> str:
    """Iframe tag plus the listener that applies resize messages to it."""
    iframe_id = f"its-booking-form-{tenant_id[:8] or '1'}"
    iframe = (
        f'<iframe id="{iframe_id}" src="{link}" width="{width}" height="{height}" '
        f'style="border:none; border-radius: 8px;" title="Booking Form"></iframe>'
    )
    script = (
        "<script>\n"
        "(function() {\n"
        f"  var iframe = document.getElementById('{iframe_id}');\n"
        "  if (!iframe) return;\n"
        "  window.addEventListener('message', function(event) {\n"
        f"    if (event.data && event.data.type === '{RESIZE_MESSAGE_TYPE}' && typeof event.data.height === 'number') {{\n"
        "      iframe.style.height = (event.data.height + 5) + 'px';\n"
        "    }\n"
        "  });\n"
        "})();\n"
        "</script>"
    )
    return f"{iframe}\n{script}"


@lru_cache()
def load_runtime_script() -> str:
    """Source of the versioned browser runtime shipped with the package."""
    return resources.files("bookingform").joinpath("static").joinpath(RUNTIME_SCRIPT).read_text(encoding="utf-8")


def runtime_strings(languages: Iterable[str]) -> Dict[str, Dict[str, str]]:
    """Runtime texts per language, English fallback already applied."""
    return {lang: {key: translate(key, lang) for key in RUNTIME_STRING_KEYS} for lang in languages}


def build_runtime_payload(
    config: BookingFormConfig,
    settings: CompilerSettings,
    *,
    preview: bool,
    tenant_id: Optional[str],
    lang: str,
    booking_type: Optional[BookingType],
) -> Dict[str, Any]:
    """Everything the browser runtime needs, as one JSON-serializable record."""
    payload = config.to_payload()
    payload.update({
        "version": RUNTIME_VERSION,
        "preview": preview,
        "tenantId": tenant_id,
        "lang": lang,
        "forcedBookingType": booking_type.value if booking_type else None,
        "strings": runtime_strings(config.customizations.selected_languages),
        "geocoder": {
            "accessToken": settings.geocoder_access_token,
            "countries": settings.geocoder_countries,
        },
        "api": {
            "baseUrl": settings.api_base_url,
            "anonKey": settings.api_anon_key,
        },
        "resizeSettleDelayMs": settings.resize_settle_delay_ms,
        "debug": settings.debug,
    })
    return payload


def serialize_payload(payload: Mapping[str, Any]) -> str:
    """JSON text safe to embed in a script element.

    Examples:
        >>> serialize_payload({"title": "</script>"})
        '{"title": "\\\\u003c/script\\\\u003e"}'
    """
    text = json.dumps(payload, ensure_ascii=False)
    return text.replace("<", "\\u003c").replace(">", "\\u003e").replace("&", "\\u0026")


def _safe_css(css: str) -> str:
    return re.sub(r"</(style)", r"<\\/\1", css, flags=re.IGNORECASE)


@dataclass(frozen=True)
class CompiledForm:
    """Result of compiling one configuration.

    Attributes:
        html: Complete document
        stylesheet: Compiled CSS embedded in the document
        payload: Runtime payload embedded as JSON
        body: Assembled wizard tree
    """
    html: str
    stylesheet: str
    payload: Dict[str, Any]
    body: Element

    def __str__(self) -> str:
        return self.html


def _document(title: str, lang: str, stylesheet: str, body: Element, payload: Mapping[str, Any],
              settings: CompilerSettings) -> Element:
    head = h(
        "head", None,
        h("meta", {"charset": "UTF-8"}),
        h("meta", {"name": "viewport", "content": "width=device-width, initial-scale=1.0"}),
        h("title", None, title),
        h("script", {"src": settings.geocoder_script_url}),
        h("link", {"rel": "stylesheet", "href": settings.geocoder_css_url, "type": "text/css"}),
        h("style", None, Raw(_safe_css(stylesheet))),
    )
    return h(
        "html", {"lang": lang},
        head,
        h(
            "body", None,
            body,
            h("script", {"type": "application/json", "id": CONFIG_SCRIPT_ID}, Raw(serialize_payload(payload))),
            h("script", {"data-runtime-version": RUNTIME_VERSION}, Raw(load_runtime_script())),
        ),
    )


def compile_form(
    config: BookingFormConfig,
    settings: Optional[CompilerSettings] = None,
    *,
    preview: bool = False,
    tenant_id: Optional[str] = None,
    padding: Optional[str] = None,
    lang: Optional[str] = None,
    booking_type: Optional[Union[str, BookingType]] = None,
) -> CompiledForm:
    """Compile a normalized configuration into a self-contained document.

    Args:
        config: Normalized configuration (see load_config)
        settings: Compiler settings; defaults to get_settings()
        preview: Builder preview; submission makes no external calls
        tenant_id: Owner of the form, required by the public page to submit
        padding: Outer padding; invalid values fall back to the default
        lang: Initial language; defaults to the configured default
        booking_type: Restrict the form to one enabled booking type

    Returns:
        CompiledForm with the document and its parts
    """
    settings = settings or get_settings()
    padding = validate_padding(padding, settings.default_padding)
    customizations = config.customizations
    if lang is not None and lang not in customizations.selected_languages:
        logger.warning("Language %r is not selected; using %r", lang, customizations.default_language)
        lang = None
    lang = lang or customizations.default_language

    assembler = FormAssembler(config, lang=lang, booking_type=booking_type)
    body = assembler.assemble()
    stylesheet = compile_stylesheet(config.layout, customizations.color, padding)
    payload = build_runtime_payload(
        config,
        settings,
        preview=preview,
        tenant_id=tenant_id,
        lang=lang,
        booking_type=assembler.forced_type,
    )
    document = _document(customizations.title, lang, stylesheet, body, payload, settings)
    html = "<!DOCTYPE html>\n" + document.render()
    logger.info(
        "Compiled booking form (%s, lang=%s, types=%s)",
        "preview" if preview else "public",
        lang,
        ",".join(bt.value for bt in assembler.booking_types),
    )
    return CompiledForm(html=html, stylesheet=stylesheet, payload=payload, body=body)


def render_error_page(message: str, lang: str = "en") -> str:
    """Full-page error document shown when a configuration cannot be loaded."""
    title = translate("form_unavailable", lang, "Booking form unavailable")
    document = h(
        "html", {"lang": lang},
        h("head", None,
          h("meta", {"charset": "UTF-8"}),
          h("meta", {"name": "viewport", "content": "width=device-width, initial-scale=1.0"}),
          h("title", None, title)),
        h("body", None,
          h("div", {"class": "form-error", "role": "alert"},
            h("h1", None, title),
            h("p", None, message))),
    )
    return "<!DOCTYPE html>\n" + document.render()


def render_public_form(
    raw_config: Optional[Mapping[str, Any]],
    query: Optional[Mapping[str, str]] = None,
    tenant_id: Optional[str] = None,
    settings: Optional[CompilerSettings] = None,
) -> str:
    """Render the public booking page for a stored configuration.

    Query parameters: ``padding`` (validated CSS length), ``lang`` and
    ``type`` (booking type restriction). A configuration that cannot be
    loaded yields the error page instead of a form.
    """
    query = query or {}
    try:
        config = load_config(raw_config)
    except ConfigLoadError as exc:
        logger.error("Could not load booking form for tenant %s: %s", tenant_id, exc.message)
        return render_error_page(exc.message)

    booking_type = query.get("type") or None
    if booking_type is not None and booking_type not in {bt.value for bt in BookingType}:
        logger.warning("Ignoring unknown booking type %r", booking_type)
        booking_type = None

    compiled = compile_form(
        config,
        settings,
        preview=False,
        tenant_id=tenant_id,
        padding=query.get("padding"),
        lang=query.get("lang"),
        booking_type=booking_type,
    )
    return compiled.html


__all__ = [
    "RUNTIME_VERSION",
    "CONFIG_SCRIPT_ID",
    "PADDING_PATTERN",
    "validate_padding",
    "resize_message",
    "shareable_link",
    "embed_snippet",
    "load_runtime_script",
    "runtime_strings",
    "build_runtime_payload",
    "serialize_payload",
    "CompiledForm",
    "compile_form",
    "render_error_page",
    "render_public_form",
]
