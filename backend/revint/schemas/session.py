"""Session and reaction payloads.

Wire keys are camelCase, the format shared with the presentation plugin and
the audience client; attributes stay snake_case.
"""

from __future__ import annotations

from typing import Any

from marshmallow import (
    EXCLUDE,
    Schema,
    ValidationError,
    fields,
    post_dump,
    validate,
    validates_schema,
)

_non_empty = validate.Length(min=1)


class BaseSchema(Schema):
    """Base schema keeping field order and ignoring unknown input keys."""

    class Meta:
        ordered = True
        unknown = EXCLUDE


class NewSessionSchema(BaseSchema):
    """Input payload for opening a session."""

    user_token = fields.String(required=True, data_key="userToken", validate=_non_empty)
    api_url = fields.String(required=True, data_key="apiUrl", validate=_non_empty)
    web_ui_url = fields.String(required=True, data_key="webUiUrl", validate=_non_empty)
    ws_url = fields.String(load_default=None, allow_none=True, data_key="wsUrl")


class NewSessionResultSchema(BaseSchema):
    token = fields.String(required=True)
    host_uid = fields.String(required=True, data_key="hostUid")
    session_uid = fields.String(required=True, data_key="sessionUid")


class SessionInfoSchema(BaseSchema):
    """Public view of a session: what an audience member needs to log in."""

    user_token = fields.String(data_key="userToken")
    api_url = fields.String(data_key="apiUrl")
    web_ui_url = fields.String(data_key="webUiUrl")
    ws_url = fields.String(data_key="wsUrl")

    @post_dump
    def _omit_missing_ws_url(self, data: dict[str, Any], **kwargs: Any) -> dict[str, Any]:
        if data.get("wsUrl") is None:
            data.pop("wsUrl", None)
        return data


class SessionStateSchema(BaseSchema):
    """Full session record as returned by ``getState``."""

    token = fields.String()
    user_token = fields.String(data_key="userToken")
    page = fields.String()
    state = fields.String()
    uid = fields.String()
    api_url = fields.String(data_key="apiUrl")
    web_ui_url = fields.String(data_key="webUiUrl")
    ws_url = fields.String(data_key="wsUrl", allow_none=True)


class ReactionSchema(BaseSchema):
    time = fields.Integer()
    uid = fields.String()
    page = fields.String()
    reaction = fields.String()
    session_uid = fields.String(data_key="sessionUid")


class ReactionQuerySchema(BaseSchema):
    """Query string of the reaction listing; ``uid`` narrows a ``page``."""

    page = fields.String(load_default=None, validate=_non_empty)
    uid = fields.String(load_default=None, validate=_non_empty)

    @validates_schema
    def _uid_requires_page(self, data: dict[str, Any], **kwargs: Any) -> None:
        if data.get("uid") and not data.get("page"):
            raise ValidationError("uid filter requires page", field_name="uid")
