"""Serializer helpers shared by the API apps."""

from __future__ import annotations

from collections.abc import Mapping

from rest_framework import serializers  # type: ignore


class StrictFieldsMixin:
    """Reject payload keys the serializer does not accept as input.

    Read-only fields count as unknown, so clients cannot smuggle values
    such as ``owner`` or ``rating`` into an update.
    """

    def to_internal_value(self, data):  # type: ignore
        if isinstance(data, Mapping):
            writable = {name for name, field in self.fields.items() if not field.read_only}
            unknown = sorted(key for key in data if key not in writable)
            if unknown:
                raise serializers.ValidationError(
                    {key: ["This field is not allowed."] for key in unknown}
                )
        return super().to_internal_value(data)  # type: ignore[misc]
