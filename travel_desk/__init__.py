"""
Travel Desk: sale service composition core.

Domain models, the provider-allocation tracker, wizard step transitions and
the REST persistence layer used when services are added to a sale.
"""

__version__ = "0.1.0"
