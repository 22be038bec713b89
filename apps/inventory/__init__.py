"""Inventory app package.

This app owns the per-night room counters for every room type and the
ledger that reserves and releases them. The ledger is the only code that
decrements a counter, and it does so with conditional updates inside a
database transaction so that concurrent requests can never oversell a
room-night.
"""
