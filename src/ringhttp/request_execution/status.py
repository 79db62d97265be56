from __future__ import annotations

from ringhttp.request_execution.models import Response


def _status(response: Response | int) -> int:
    return response if isinstance(response, int) else response.status


def is_success(response: Response | int) -> bool:
    return 200 <= _status(response) < 300


def is_redirect(response: Response | int) -> bool:
    return 300 <= _status(response) < 400


def is_client_error(response: Response | int) -> bool:
    return 400 <= _status(response) < 500


def is_server_error(response: Response | int) -> bool:
    return 500 <= _status(response) < 600


def is_conflict(response: Response | int) -> bool:
    return _status(response) == 409


def is_unexceptional_status(response: Response | int) -> bool:
    """Statuses ExceptionsMiddleware lets through: [200, 400)."""
    return 200 <= _status(response) < 400
