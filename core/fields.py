from rest_framework import serializers


class OwnedPrimaryKeyRelatedField(serializers.PrimaryKeyRelatedField):
    """Primary key field that only resolves records owned by the requesting user."""

    def __init__(self, owner_field="owner", **kwargs):
        self.owner_field = owner_field
        super().__init__(**kwargs)

    def get_queryset(self):
        queryset = super().get_queryset()
        request = self.context.get("request")
        if request is None:
            return queryset.none()
        return queryset.filter(**{self.owner_field: request.user})


def query_param(request, name, field):
    """Return the query-string value ``name`` validated by ``field``, or None when absent."""
    value = request.query_params.get(name)
    if not value:
        return None
    try:
        return field.run_validation(value)
    except serializers.ValidationError as e:
        raise serializers.ValidationError({name: e.detail})
