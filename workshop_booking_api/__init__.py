"""
Top-level package for the Workshop Booking API.

This file makes ``workshop_booking_api`` a Python package so that
modules within ``app`` can be imported using fully qualified names
like ``workshop_booking_api.app.main``.

The package provides no public exports; all functionality lives in
submodules under ``app``.
"""

__all__ = []
