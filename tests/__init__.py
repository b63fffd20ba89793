"""Test suite for the booking-form compiler and runtime.

This package contains tests for:
- Configuration loading, defaults and form structure
- Markup, field rendering, assembly and stylesheet compilation
- Document compilation and the public page entry point
- Booking session guards, fares, waypoints and submission
- Step state machine, events, validation and payments
"""
