"""Finances app package.

This app records payment outcomes reported by the payment processor or
entered by staff for offline payments. It never initiates a charge; the
booking lifecycle reads the sum of succeeded payments to decide whether
a provisional booking can be confirmed.
"""
