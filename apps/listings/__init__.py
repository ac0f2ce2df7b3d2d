"""Listings app package.

Holds PG (paying-guest) listings, their room types and the public
search API. New listings start unapproved and become searchable only
after an admin approves them; deleting a listing only deactivates it.
"""
