"""Health check feature module.

Exposes ``/chk``, a plain-text probe that answers ``ok`` once the database
is reachable.
"""
