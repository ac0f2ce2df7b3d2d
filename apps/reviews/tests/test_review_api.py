"""API tests for reviews and listing rating aggregates."""

from __future__ import annotations

from decimal import Decimal

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.listings.models import PG
from apps.reviews.models import Review
from apps.users.models import User


class ReviewAPITests(APITestCase):
    def setUp(self) -> None:
        self.owner = User.objects.create_user(
            email="owner@example.com", name="Owner", password="secret123", role=User.RoleChoices.OWNER
        )
        self.guests = [
            User.objects.create_user(email=f"guest{index}@example.com", name=f"Guest {index}", password="secret123")
            for index in range(4)
        ]
        self.pg = PG.objects.create(
            owner=self.owner,
            name="Review Test PG",
            description="Listing that collects reviews in the review tests.",
            address="2 Review Road",
            city="Mysuru",
            state="Karnataka",
            pincode="570001",
            is_approved=True,
        )
        self.url = reverse("pg-reviews", args=[self.pg.id])

    def _review(self, user, rating: int, comment: str = "Clean rooms and friendly staff."):
        self.client.force_authenticate(user)
        return self.client.post(self.url, {"rating": rating, "comment": comment}, format="json")

    def test_create_review_updates_rating(self) -> None:
        response = self._review(self.guests[0], 4)
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["user"]["id"], self.guests[0].id)

        self.pg.refresh_from_db()
        self.assertEqual(self.pg.rating, Decimal("4.0"))
        self.assertEqual(self.pg.review_count, 1)

    def test_rating_is_rounded_half_up_mean(self) -> None:
        for guest, rating in zip(self.guests, (5, 4, 4, 4)):
            self.assertEqual(self._review(guest, rating).status_code, status.HTTP_201_CREATED)

        self.pg.refresh_from_db()
        self.assertEqual(self.pg.rating, Decimal("4.3"))
        self.assertEqual(self.pg.review_count, 4)

    def test_duplicate_review_rejected(self) -> None:
        self._review(self.guests[0], 5)
        again = self._review(self.guests[0], 3)
        self.assertEqual(again.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(again.data["message"], "You have already reviewed this PG")
        self.assertEqual(Review.objects.count(), 1)

    def test_validation(self) -> None:
        out_of_range = self._review(self.guests[0], 6)
        self.assertEqual(out_of_range.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("rating", out_of_range.data["errors"])

        short = self._review(self.guests[0], 4, comment="Nice")
        self.assertEqual(short.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("comment", short.data["errors"])

    def test_public_list_is_paginated(self) -> None:
        self._review(self.guests[0], 5)
        self._review(self.guests[1], 3)
        self.client.force_authenticate(None)
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["pagination"]["total_items"], 2)

    def test_anonymous_cannot_review(self) -> None:
        response = self.client.post(self.url, {"rating": 5, "comment": "Great place to stay."}, format="json")
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_delete_recomputes_rating(self) -> None:
        self._review(self.guests[0], 5)
        low = self._review(self.guests[1], 1)

        self.client.force_authenticate(self.guests[2])
        forbidden = self.client.delete(reverse("review-detail", args=[low.data["id"]]))
        self.assertEqual(forbidden.status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(self.guests[1])
        deleted = self.client.delete(reverse("review-detail", args=[low.data["id"]]))
        self.assertEqual(deleted.status_code, status.HTTP_204_NO_CONTENT)

        self.pg.refresh_from_db()
        self.assertEqual(self.pg.rating, Decimal("5.0"))
        self.assertEqual(self.pg.review_count, 1)

    def test_owner_responds(self) -> None:
        created = self._review(self.guests[0], 4)
        url = reverse("review-respond", args=[created.data["id"]])

        forbidden = self.client.post(url, {"response": "Thanks!"}, format="json")
        self.assertEqual(forbidden.status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(self.owner)
        response = self.client.post(url, {"response": "Thanks for staying with us!"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["owner_response"], "Thanks for staying with us!")
        self.assertIsNotNone(response.data["owner_response_at"])
