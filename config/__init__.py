"""Top-level package for Django configuration.

Contains settings modules for the different environments of the PG Stay
API and the WSGI/ASGI entry points.
"""
