import uuid


def generate_document_number(model, field: str, prefix: str) -> str:
    """Return a ``PREFIX-XXXXXXXX`` number not yet used in ``model.field``."""
    while True:
        candidate = f"{prefix}-{uuid.uuid4().hex[:8].upper()}"
        if not model.objects.filter(**{field: candidate}).exists():
            return candidate
