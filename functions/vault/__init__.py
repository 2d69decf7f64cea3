"""
Backend package for the Creative Vault publishing site.

Persistence, session state, domain operations and notifications for a
single-owner site where readers browse, like and comment on works,
served through a FastAPI application.
"""
