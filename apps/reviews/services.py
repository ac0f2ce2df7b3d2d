"""Review services: creation, removal and listing rating aggregates."""

from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal

from django.db import IntegrityError, transaction  # type: ignore
from django.db.models import Count, Sum  # type: ignore

from apps.listings.models import PG
from apps.users.permissions import is_admin
from shared.domain.errors import ConflictError, ForbiddenError, NotFoundError

from .models import Review

logger = logging.getLogger(__name__)

ALREADY_REVIEWED = "You have already reviewed this PG"


def recompute_pg_rating(pg_id: int) -> PG:
    """Refresh ``rating`` and ``review_count`` from every review of the PG.

    The mean is rounded half-up to one decimal. Must run inside a
    transaction; the PG row is locked so concurrent reviews don't
    overwrite each other's aggregate.
    """
    pg = PG.objects.select_for_update().get(pk=pg_id)
    totals = Review.objects.filter(pg_id=pg_id).aggregate(total=Sum("rating"), count=Count("id"))
    count = totals["count"] or 0
    if count:
        mean = Decimal(totals["total"]) / Decimal(count)
        pg.rating = mean.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
    else:
        pg.rating = Decimal("0.0")
    pg.review_count = count
    pg.save(update_fields=["rating", "review_count", "updated_at"])
    return pg


def create_review(user, pg_id: int, rating: int, comment: str) -> Review:
    pg = PG.objects.filter(pk=pg_id, is_active=True).first()
    if pg is None:
        raise NotFoundError("PG not found")
    if Review.objects.filter(user=user, pg=pg).exists():
        raise ConflictError(ALREADY_REVIEWED)

    try:
        with transaction.atomic():
            review = Review.objects.create(user=user, pg=pg, rating=rating, comment=comment)
            recompute_pg_rating(pg.pk)
    except IntegrityError as exc:
        raise ConflictError(ALREADY_REVIEWED) from exc

    logger.info("Review %s added to PG %s by user %s", review.pk, pg.pk, user.pk)
    return review


def delete_review(review: Review, actor) -> None:
    if review.user_id != actor.pk and not is_admin(actor):
        raise ForbiddenError("You can only delete your own reviews")
    pg_id = review.pg_id
    with transaction.atomic():
        review.delete()
        recompute_pg_rating(pg_id)
    logger.info("Review removed from PG %s by user %s", pg_id, actor.pk)


def respond_to_review(review: Review, actor, text: str) -> Review:
    if review.pg.owner_id != actor.pk:
        raise ForbiddenError("Only the PG owner can respond to reviews")
    review.set_owner_response(text)
    return review
