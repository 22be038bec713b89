"""
Shared Kernel

Base classes, value objects, engine errors and transaction helpers used by
every booking engine app.
"""
