"""Bookings app package.

This app owns the reservation aggregate and its lifecycle: guest booking
rules, creation of provisional bookings (pricing plus an atomic inventory
reservation in one transaction), payment-driven confirmation, stay
transitions, cancellation with inventory release and administrative
overrides. Every transition is written to the audit log.
"""
