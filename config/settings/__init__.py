"""Settings package for the PG Stay project.

`base.py` holds configuration shared across environments; `dev.py`,
`prod.py` and `test.py` extend it with environment specific overrides.
"""
