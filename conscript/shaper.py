"""
Shapes an inspected container into the response of ``/container/{id}``.

Callers pick fields with presence-only query parameters; with no recognized
parameter the default summary is returned.
"""

import json
from typing import Any, Callable, Dict, FrozenSet, Iterable, Tuple

from conscript.schemas import ContainerDetails, ContainerState, ContainerView

# query key -> (ContainerView field, accessor on ContainerState)
FIELD_MAP: Dict[str, Tuple[str, Callable[[ContainerState], Any]]] = {
    "status": ("status", lambda s: s.status),
    "running": ("running", lambda s: s.running),
    "paused": ("paused", lambda s: s.paused),
    "restarting": ("restarting", lambda s: s.restarting),
    "dead": ("dead", lambda s: s.dead),
    "error": ("error", lambda s: s.error),
    "exitcode": ("exit_code", lambda s: s.exit_code),
    "state": ("state", lambda s: s.full_state),
}

RECOGNIZED_FIELDS: FrozenSet[str] = frozenset(FIELD_MAP)

FieldSelection = FrozenSet[str]


def parse_field_selection(keys: Iterable[str]) -> FieldSelection:
    """Keeps the recognized keys, dropping anything else. Values are never looked at."""
    return frozenset(k for k in keys if k in RECOGNIZED_FIELDS)


def shape_container(details: ContainerDetails, selection: FieldSelection) -> ContainerView:
    state = details.state
    if not selection:
        return ContainerView(
            id=details.id,
            name=details.name,
            image=details.image,
            status=state.status,
            state=state.full_state,
        )

    values = {}
    for key in selection:
        field_name, accessor = FIELD_MAP[key]
        values[field_name] = accessor(state)
    return ContainerView(**values)


def render_view(view: ContainerView) -> str:
    """Indented JSON with sorted keys, byte-identical for identical views."""
    return json.dumps(view.to_wire(), indent=2, sort_keys=True)
