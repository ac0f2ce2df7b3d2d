"""Bookings app package.

This app encapsulates the booking domain: the booking model, the
availability check that decides whether a room type still has a free
room for a stay, and the booking lifecycle (cancellation window, owner
confirmation and completion). Reservations for the same room type are
serialized with a process lock plus a row lock on the room type.
"""
