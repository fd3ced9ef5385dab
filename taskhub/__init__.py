"""Multi-tenant task tracker with account, session and ownership controls."""

__version__ = "0.1.0"
