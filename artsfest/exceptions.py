"""REST framework integration for domain validation errors."""
from __future__ import annotations

import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import serializers
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


def api_exception_handler(exc, context):
    """Render Django ``ValidationError`` raised by services as HTTP 400."""

    if isinstance(exc, DjangoValidationError):
        detail = exc.message_dict if hasattr(exc, "error_dict") else exc.messages
        view = context.get("view")
        logger.warning("Rejected %s: %s", view.__class__.__name__ if view else "request", detail)
        exc = serializers.ValidationError(detail)
    return exception_handler(exc, context)
