"""Session endpoints backed by the session and reaction services."""

from __future__ import annotations

from flask import Blueprint, request

from revint.api.deps import (
    apply_identity,
    get_services,
    json_response,
    request_context,
    timing,
)
from revint.schemas import (
    NewSessionResultSchema,
    ReactionQuerySchema,
    ReactionSchema,
    SessionInfoSchema,
    SessionStateSchema,
)

bp = Blueprint("sessions", __name__)

new_session_result_schema = NewSessionResultSchema()
session_info_schema = SessionInfoSchema()
session_state_schema = SessionStateSchema()
audience_state_schema = SessionStateSchema(exclude=("token",))
reaction_schema = ReactionSchema(many=True)
reaction_query_schema = ReactionQuerySchema()


@bp.post("/new")
@timing
def new_session():
    """Open a session for the host credential and issue the host identity."""

    ctx = request_context()
    result = get_services().sessions.new_session(request.get_json(silent=True), ctx)
    response = json_response(new_session_result_schema.dump(result), status=201)
    return apply_identity(response, ctx)


@bp.get("/<session_uid>")
@timing
def get_session(session_uid: str):
    """Public session discovery; ``null`` for unknown sessions."""

    info = get_services().sessions.get_session(session_uid)
    return json_response(session_info_schema.dump(info) if info is not None else None)


@bp.post("/<session_uid>/login")
@timing
def login(session_uid: str):
    """Register the caller as an audience member."""

    ctx = request_context(session_uid)
    uid = get_services().sessions.login(session_uid, ctx)
    return apply_identity(json_response({"uid": uid}), ctx)


@bp.post("/<session_uid>/user/<uid>/react/<page>/<reaction>")
@timing
def react(session_uid: str, uid: str, page: str, reaction: str):
    """Record one reaction of the logged-in audience member."""

    ctx = request_context(session_uid)
    ok = get_services().reactions.react(session_uid, uid, page, reaction, ctx)
    return json_response({"success": ok})


@bp.post("/<session_uid>/state/<page>/<state>")
@timing
def set_state(session_uid: str, page: str, state: str):
    """Move the session to a new page/state and notify live pipes."""

    ctx = request_context(session_uid)
    ok = get_services().sessions.set_state(session_uid, page, state, ctx)
    return json_response({"success": ok})


@bp.get("/<session_uid>/state")
@timing
def get_state(session_uid: str):
    """Read the session as host or as a logged-in audience member."""

    ctx = request_context(session_uid)
    result = get_services().sessions.get_state(session_uid, ctx)
    schema = session_state_schema if result.exposes_host_token else audience_state_schema
    return json_response(schema.dump(result.session))


@bp.get("/<session_uid>/reactions")
@timing
def list_reactions(session_uid: str):
    """List a session's reactions, optionally narrowed to a page and user."""

    query = reaction_query_schema.load(request.args)
    ctx = request_context(session_uid)
    reactions = get_services().reactions.list_reactions(
        session_uid, ctx, page=query["page"], uid=query["uid"]
    )
    return json_response({"data": reaction_schema.dump(reactions), "count": len(reactions)})
