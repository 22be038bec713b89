"""Audit app package.

Append-only record of every booking state transition, administrative
override and bulk inventory edit. Entries are written in the same
transaction as the change they describe and are never updated or deleted.
"""
