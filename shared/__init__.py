"""
Shared Kernel

Value objects, domain errors and API plumbing shared by every app.
"""
