"""Models for the review domain.

Defines the ``Review`` entity: a 1-5 star rating with a comment left by
a user for a PG. A user can review a given PG only once. The listing's
``rating`` and ``review_count`` are recomputed from all of its reviews
whenever one is added or removed.
"""

from __future__ import annotations

from django.conf import settings  # type: ignore
from django.core.validators import (  # type: ignore
    MaxLengthValidator,
    MaxValueValidator,
    MinLengthValidator,
    MinValueValidator,
)
from django.db import models  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class Review(models.Model):
    """Represents a review left by a user for a PG."""

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='reviews'
    )
    pg = models.ForeignKey(
        'listings.PG', on_delete=models.CASCADE, related_name='reviews'
    )
    rating = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(5)],
        help_text=_('Rating from 1 to 5'),
    )
    comment = models.TextField(validators=[MinLengthValidator(10), MaxLengthValidator(1000)])

    owner_response = models.TextField(
        blank=True,
        validators=[MaxLengthValidator(1000)],
        help_text=_('Reply from the PG owner'),
    )
    owner_response_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(fields=['user', 'pg'], name='review_one_per_user_and_pg'),
        ]
        indexes = [
            models.Index(fields=['pg', '-created_at']),
        ]

    def __str__(self) -> str:
        return f"Review by {self.user_id} for PG {self.pg_id} (Rating: {self.rating})"

    def set_owner_response(self, text: str) -> None:
        self.owner_response = text
        self.owner_response_at = timezone.now()
        self.save(update_fields=['owner_response', 'owner_response_at', 'updated_at'])
