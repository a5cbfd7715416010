"""Standardised API error responses.

Usage
-----
    from coinnovation.utils.errors import api_error, E

    return api_error(E.NOT_FOUND, "Step not found")
    return api_error(E.DATA_SOURCE, "Failed to load co-innovation process data.")
"""

from __future__ import annotations

from flask import jsonify


# ── Error code constants ──────────────────────────────────────────────
class E:
    """Machine-readable error code constants (``ERR_`` prefix)."""

    # Not-found – HTTP 404
    NOT_FOUND = "ERR_NOT_FOUND"

    # Method – HTTP 405
    METHOD_NOT_ALLOWED = "ERR_METHOD_NOT_ALLOWED"

    # Upstream data – HTTP 503
    DATA_SOURCE = "ERR_DATA_SOURCE"

    # Server – HTTP 500
    INTERNAL = "ERR_INTERNAL"


# ── Default HTTP status mapping ───────────────────────────────────────
_DEFAULT_STATUS: dict[str, int] = {
    E.NOT_FOUND: 404,
    E.METHOD_NOT_ALLOWED: 405,
    E.DATA_SOURCE: 503,
    E.INTERNAL: 500,
}


def api_error(
    code: str,
    message: str,
    *,
    status: int | None = None,
    details: dict | None = None,
):
    """Return a standard JSON error response.

    Parameters
    ----------
    code : str
        Machine-readable error code (use ``E.*`` constants).
    message : str
        Human-readable explanation for developers / UI.
    status : int, optional
        HTTP status override.  Falls back to ``_DEFAULT_STATUS[code]``,
        then to ``400``.
    details : dict, optional
        Extra structured payload.

    Returns
    -------
    tuple[Response, int]
        ``(jsonify(body), http_status)`` – drop-in for Flask views.
    """

    http_status = status or _DEFAULT_STATUS.get(code, 400)

    body: dict = {
        "error": message,
        "code": code,
    }
    if details:
        body["details"] = details

    return jsonify(body), http_status
