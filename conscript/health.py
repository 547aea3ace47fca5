"""Maps a container's lifecycle status to an HTTP status code and message."""

from typing import Dict, Tuple

from conscript.schemas import HealthVerdict

HEALTH_TABLE: Dict[str, Tuple[int, str]] = {
    "running": (200, "Container {id} is healthy and running."),
    "created": (202, "Container {id} is created but not running."),
    "restarting": (503, "Container {id} is restarting."),
    "removing": (503, "Container {id} is being removed."),
    "paused": (423, "Container {id} is paused."),
    "exited": (410, "Container {id} has exited."),
    "dead": (500, "Container {id} is dead."),
}

UNKNOWN_STATE = (500, "Container {id} is in an unknown state: {status}.")


def classify(container_id: str, status: str) -> HealthVerdict:
    """Total over every status string; anything not in the table is reported as unknown."""
    status_code, template = HEALTH_TABLE.get(status, UNKNOWN_STATE)
    return HealthVerdict(
        status_code=status_code,
        message=template.format(id=container_id, status=status),
    )
