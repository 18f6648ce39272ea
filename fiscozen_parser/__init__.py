"""
Fiscozen parser backend.

Relays free-text payment notifications to the Fiscozen web API as
customers and invoices.
"""

__version__ = "0.1.0"
