"""Serializers for reviews.

Read serializer plus input serializers for creating a review and for the
owner's reply. The reviewing user and the PG come from the request.
"""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from shared.api.serializers import StrictFieldsMixin

from .models import Review


class ReviewCreateSerializer(StrictFieldsMixin, serializers.Serializer):
    rating = serializers.IntegerField()
    comment = serializers.CharField(min_length=10, max_length=1000)

    def validate_rating(self, value: int) -> int:  # type: ignore
        if value < 1 or value > 5:
            raise serializers.ValidationError('Rating must be between 1 and 5')
        return value


class OwnerResponseSerializer(StrictFieldsMixin, serializers.Serializer):
    response = serializers.CharField(max_length=1000)


class ReviewSerializer(serializers.ModelSerializer):
    """Read serializer for reviews including the author's name."""

    user = serializers.SerializerMethodField()
    pg_id = serializers.ReadOnlyField(source='pg.id')

    class Meta:
        model = Review
        fields = [
            'id',
            'user',
            'pg_id',
            'rating',
            'comment',
            'owner_response',
            'owner_response_at',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

    def get_user(self, obj: Review) -> dict:
        return {'id': obj.user_id, 'name': obj.user.name, 'avatar': obj.user.avatar}
