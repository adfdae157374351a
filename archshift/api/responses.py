"""Convert engine Outcomes into HTTP responses."""

from fastapi import HTTPException

from archshift.core.outcome import Outcome

# Rejections that are client mistakes rather than unmet preconditions
ERROR_STATUS = {
    "node_not_found": 404,
    "invalid_kind": 400,
    "kind_not_in_palette": 400,
    "missing_required_field": 400,
    "app_name_required": 400,
    "invalid_scope": 400,
    "self_loop": 409,
    "duplicate_connection": 409,
    "source_locked": 409,
    "store_error": 503,
}


def outcome_response(outcome: Outcome) -> dict:
    """Return the outcome as JSON, or raise for mapped rejection codes.

    Precondition outcomes (inactive phase, unconfirmed source, target not
    ready, nothing to migrate) come back as 200 with ``ok: false``.
    """
    if not outcome.ok and outcome.code in ERROR_STATUS:
        raise HTTPException(status_code=ERROR_STATUS[outcome.code], detail=outcome.to_dict())
    return outcome.to_dict()
