"""Payments app package.

Payments for bookings go through Stripe PaymentIntents. A ``Payment``
row mirrors each intent; completing it marks the booking paid and
confirmed, refunds are issued by admins. Every gateway event we act on
is kept as a ``PaymentTransaction``.
"""
