"""
Business logic on top of the provider session.

Modules are imported directly (e.g. fiscozen_parser.services.customer_service)
so the provider client and the services can depend on the session log
without import cycles.
"""
