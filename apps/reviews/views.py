"""API views for reviews."""

from __future__ import annotations

from django.shortcuts import get_object_or_404  # type: ignore
from rest_framework import generics, mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.listings.models import PG

from . import services
from .models import Review
from .serializers import OwnerResponseSerializer, ReviewCreateSerializer, ReviewSerializer


class PGReviewListCreateView(generics.ListCreateAPIView):
    """``/pgs/<pg_id>/reviews/``: public list, authenticated create."""

    serializer_class = ReviewSerializer
    permission_classes = [permissions.IsAuthenticatedOrReadOnly]
    filter_backends: list = []

    def get_queryset(self):  # type: ignore
        pg = get_object_or_404(PG.objects.filter(is_active=True), pk=self.kwargs["pg_id"])
        return Review.objects.filter(pg=pg).select_related("user")

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = ReviewCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        review = services.create_review(
            request.user,
            self.kwargs["pg_id"],
            serializer.validated_data["rating"],
            serializer.validated_data["comment"],
        )
        return Response(ReviewSerializer(review).data, status=status.HTTP_201_CREATED)


class ReviewViewSet(mixins.RetrieveModelMixin, mixins.DestroyModelMixin, viewsets.GenericViewSet):
    """Single review retrieval, deletion and owner responses."""

    queryset = Review.objects.select_related("pg", "user").all()
    serializer_class = ReviewSerializer
    permission_classes = [permissions.IsAuthenticatedOrReadOnly]

    def destroy(self, request, *args, **kwargs):  # type: ignore
        services.delete_review(self.get_object(), request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["post", "put"], permission_classes=[permissions.IsAuthenticated])
    def respond(self, request, pk=None):  # type: ignore
        review = self.get_object()
        serializer = OwnerResponseSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        review = services.respond_to_review(review, request.user, serializer.validated_data["response"])
        return Response(ReviewSerializer(review).data, status=status.HTTP_200_OK)
