import functools
import json
import platform
import socket
import time
from datetime import timedelta
from email.utils import formatdate
from typing import Callable, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import PlainTextResponse, Response

from conscript import logger
from conscript.config import ServerConfig
from conscript.docker_manager import DockerManager
from conscript.exceptions import ConscriptError, RuntimeConnectionError
from conscript.health import classify
from conscript.schemas import RequestMeta, ServerInfo
from conscript.shaper import parse_field_selection, render_view, shape_container

router = APIRouter()

Connector = Callable[[], DockerManager]


def get_config(request: Request) -> ServerConfig:
    return request.app.state.config


def get_request_meta(request: Request) -> RequestMeta:
    server = request.scope.get("server")
    client = request.client
    return RequestMeta(
        server_address=f"{server[0]}:{server[1]}" if server else "unknown",
        client_address=f"{client.host}:{client.port}" if client else "unknown",
        path=request.url.path,
    )


def get_connector(config: ServerConfig = Depends(get_config)) -> Connector:
    """Returns a callable opening a fresh engine connection for this request."""
    return functools.partial(DockerManager, timeout=config.engine_timeout)


def _connect(connector: Connector) -> DockerManager:
    try:
        return connector()
    except RuntimeConnectionError as e:
        raise HTTPException(status_code=e.status_code, detail=f"Failed to create Docker client: {e}")


TRUE_VALUES = frozenset({"", "true", "1", "yes", "on"})
FALSE_VALUES = frozenset({"false", "0", "no", "off"})


def _query_flag(value: Optional[str], default: bool) -> bool:
    """A flag present without a value counts as set. Unrecognized values keep the default."""
    if value is None:
        return default
    value = value.strip().lower()
    if value in TRUE_VALUES:
        return True
    if value in FALSE_VALUES:
        return False
    return default


def _require_container_id(container_id: str) -> str:
    container_id = container_id.strip("/")
    if not container_id:
        raise HTTPException(status_code=400, detail="Container name is required")
    return container_id


@router.get("/", response_class=PlainTextResponse, summary="Version banner")
def get_root(
    config: ServerConfig = Depends(get_config),
    meta: RequestMeta = Depends(get_request_meta),
):
    logger.info(f"{meta.server_address}: got / request")
    return f"Conscript version {config.app_version}\n"


@router.get("/health", response_class=PlainTextResponse, summary="Liveness probe")
def get_health(meta: RequestMeta = Depends(get_request_meta)):
    logger.info(f"got /health request from {meta.server_address}")
    return "OK\n"


@router.get("/info", response_model=ServerInfo, summary="Server information")
def get_info(
    request: Request,
    config: ServerConfig = Depends(get_config),
    meta: RequestMeta = Depends(get_request_meta),
    connector: Connector = Depends(get_connector),
):
    """
    Application version, host name, process uptime, current time and the
    Python and Docker engine versions. An unreachable engine leaves
    ``engine_version`` empty instead of failing the request.
    """
    logger.info(f"got /info request from {meta.server_address}")
    try:
        hostname = socket.gethostname()
    except OSError as e:
        raise HTTPException(status_code=500, detail=f"Failed to get hostname: {e}")

    uptime = timedelta(seconds=time.monotonic() - request.app.state.started_at)

    engine_version = None
    try:
        with connector() as docker_manager:
            engine_version = docker_manager.engine_version()
    except RuntimeConnectionError as e:
        logger.warning(f"Docker engine unavailable for /info: {e}")

    return ServerInfo(
        application_version=config.app_version,
        hostname=hostname,
        uptime=str(uptime),
        current_time=formatdate(usegmt=True),
        runtime_version=f"Python {platform.python_version()}",
        engine_version=engine_version,
    )


@router.get("/containers", summary="List containers")
def list_containers(
    all: Optional[str] = Query(None, description="Include stopped containers (default). all=false lists running containers only."),
    as_json: Optional[str] = Query(None, alias="json", description="Return a JSON array instead of text lines."),
    meta: RequestMeta = Depends(get_request_meta),
    connector: Connector = Depends(get_connector),
):
    """
    List Docker containers.
    - **all**: If false, only running containers are listed. Defaults to true.
    - **json**: If true, return `[{id, names, image, status}]`; otherwise one text line per container.
    """
    logger.info(f"got /containers request from {meta.server_address}")
    list_all = _query_flag(all, default=True)
    with _connect(connector) as docker_manager:
        try:
            containers = docker_manager.list_containers(all=list_all)
        except ConscriptError as e:
            raise HTTPException(status_code=e.status_code, detail=f"Failed to list containers: {e}")

    if _query_flag(as_json, default=False):
        try:
            body = json.dumps([c.model_dump() for c in containers])
        except (TypeError, ValueError) as e:
            raise HTTPException(status_code=500, detail=f"Failed to encode JSON response: {e}")
        return Response(content=body + "\n", media_type="application/json")

    lines = [
        f"ID: {c.id}, Name: [{' '.join(c.names)}], Image: {c.image}, Status: {c.status}\n"
        for c in containers
    ]
    return PlainTextResponse("".join(lines))


# Registered before /container/{container_id:path} so health checks are not
# mistaken for an inspection of a container named "health".
@router.get("/container/health/{container_id:path}", response_class=PlainTextResponse, summary="Container health check")
def get_container_health(
    container_id: str,
    meta: RequestMeta = Depends(get_request_meta),
    connector: Connector = Depends(get_connector),
):
    """
    Translate a container's lifecycle status into an HTTP status code.
    The message is returned as the body for every outcome, including 200.
    """
    logger.info(f"got /health request for container {container_id} from {meta.server_address}")
    container_id = _require_container_id(container_id)

    with _connect(connector) as docker_manager:
        try:
            details = docker_manager.inspect_container(container_id)
        except ConscriptError as e:
            raise HTTPException(status_code=e.status_code, detail=f"Failed to inspect container '{container_id}': {e}")

    verdict = classify(container_id, details.state.status)
    if not verdict.healthy:
        logger.warning(f"Container {container_id} reported {details.state.status!r} -> {verdict.status_code}")
    return PlainTextResponse(verdict.message + "\n", status_code=verdict.status_code)


@router.get("/container/{container_id:path}", summary="Inspect a container")
def get_container(
    container_id: str,
    request: Request,
    meta: RequestMeta = Depends(get_request_meta),
    connector: Connector = Depends(get_connector),
):
    """
    Inspect a container.
    - **container_id**: The ID or name of the container.

    Presence-only query flags select fields: `status`, `running`, `paused`,
    `restarting`, `dead`, `error`, `exitcode`, `state`. Without any of them
    the response holds `ID`, `Name`, `Image`, `Status` and `State`.
    """
    logger.info(f"got request for container {container_id} from {meta.server_address}")
    container_id = _require_container_id(container_id)
    selection = parse_field_selection(request.query_params.keys())

    with _connect(connector) as docker_manager:
        try:
            details = docker_manager.inspect_container(container_id)
        except ConscriptError as e:
            raise HTTPException(status_code=e.status_code, detail=f"Failed to inspect container '{container_id}': {e}")

    try:
        body = render_view(shape_container(details, selection))
    except (TypeError, ValueError) as e:
        raise HTTPException(status_code=500, detail=f"Failed to marshal container JSON: {e}")
    return Response(content=body, media_type="application/json")
