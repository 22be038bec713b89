"""Rates app package.

This app holds the date-dependent pricing configuration (calendar
overrides and group deposit bands) and the pricing engine that combines
them with a room type's base rate into a deterministic price breakdown.
"""
