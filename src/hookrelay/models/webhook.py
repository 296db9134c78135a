"""Pydantic model for the inbound webhook envelope."""

import json
from datetime import datetime
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, WrapValidator


def _none_on_error(value, handler):
    """Optional observability fields never reject a delivery."""
    try:
        return handler(value)
    except ValidationError:
        return None


OptionalText = Annotated[str | None, WrapValidator(_none_on_error)]


class WebhookEnvelope(BaseModel):
    """Observability view of a webhook delivery.

    Unknown fields are ignored. The raw request bytes, not this model, are
    what gets published.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    event_type: str = Field(..., alias="eventType")
    timestamp: OptionalText = None
    account_holder_uid: OptionalText = Field(default=None, alias="accountHolderUid")
    event_id: OptionalText = Field(default=None, alias="eventId")
    content: Any = None

    @classmethod
    def from_body(cls, body: bytes) -> "WebhookEnvelope":
        """Decode a request body, validating only the top-level fields.

        ``content`` is kept as whatever the JSON decoder produced, so lone
        surrogate escapes and deep nesting inside it are accepted.

        Raises:
            ValueError: body is not JSON, nests past the interpreter's
                recursion limit, or has no string ``eventType``.
                ``pydantic.ValidationError`` is a subclass.
        """
        try:
            document = json.loads(body)
        except RecursionError as exc:
            raise ValueError("webhook body nests too deeply") from exc
        return cls.model_validate(document)

    def occurred_at(self) -> datetime | None:
        """Parse ``timestamp`` as an ISO-8601 date-time (``Z`` suffix accepted)."""
        if not self.timestamp:
            return None
        return datetime.fromisoformat(self.timestamp.replace("Z", "+00:00"))
