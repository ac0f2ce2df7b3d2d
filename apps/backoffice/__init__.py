"""Backoffice app: platform admin dashboard and moderation endpoints."""
