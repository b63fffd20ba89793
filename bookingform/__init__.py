"""Booking-form compiler and runtime.

Turns a declarative form schema plus a customization/style configuration
into a self-contained, embeddable booking wizard:
- Configuration loading with defaults and shape validation
- Field rendering and form assembly into a typed markup tree
- Style compilation from layout settings
- A five-step wizard runtime (browser script plus a Python session model)
  with conditional fields, fare computation, waypoints, extras and
  payment dispatch

Basic usage:
    >>> from bookingform import compile_form, load_config
    >>> config = load_config({"customizations": {"title": "Airport Rides"}})
    >>> compiled = compile_form(config, preview=True)
    >>> compiled.html.startswith("<!DOCTYPE html>")
    True
"""

__version__ = "1.0.0"
__author__ = "Booking Form Team"

# Version info
VERSION = (1, 0, 0)

# Core exports
from bookingform.compiler import CompiledForm, compile_form, render_public_form
from bookingform.config import BookingFormConfig, load_config
from bookingform.session import BookingSession

# Package metadata
__all__ = [
    "__version__",
    "VERSION",
    "BookingFormConfig",
    "BookingSession",
    "CompiledForm",
    "compile_form",
    "load_config",
    "render_public_form",
]
