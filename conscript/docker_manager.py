import docker
import docker.errors
import requests
from typing import Any, Dict, List, Optional

from conscript import logger
from conscript.exceptions import ContainerNotFoundError, RuntimeAPIError, RuntimeConnectionError
from conscript.schemas import ContainerDetails, ContainerState, ContainerSummary

DISPLAY_ID_LENGTH = 10


def short_id(full_id: str) -> str:
    """
    Returns the display form of a container ID: its first 10 characters.

    IDs shorter than that are returned unchanged.
    """
    if len(full_id) < DISPLAY_ID_LENGTH:
        logger.warning(f"Container ID '{full_id}' is shorter than {DISPLAY_ID_LENGTH} characters; displaying it whole.")
        return full_id
    return full_id[:DISPLAY_ID_LENGTH]


class DockerManager:
    """Read-only access to the Docker engine: list and inspect containers."""

    def __init__(self, timeout: Optional[int] = None):
        """
        Connects to the Docker engine described by the environment.

        Args:
            timeout: Seconds before a call to the engine is abandoned. Uses the
                     docker SDK default when None.

        Raises:
            RuntimeConnectionError: If the engine cannot be reached or the API
                                    version cannot be negotiated.
        """
        kwargs: Dict[str, Any] = {"version": "auto"}
        if timeout is not None:
            kwargs["timeout"] = timeout
        try:
            self.client = docker.from_env(**kwargs)
        except docker.errors.DockerException as e:
            logger.error(f"Failed to initialize Docker client: {e}")
            logger.error(
                "Please ensure Docker is running and accessible, or that DOCKER_HOST environment variable is set correctly."
            )
            raise RuntimeConnectionError(f"Failed to create Docker client: {e}") from e
        logger.debug("DockerManager connected to the Docker engine.")

    def __enter__(self) -> "DockerManager":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        try:
            self.client.close()
        except Exception as e:
            logger.debug(f"Ignoring error while closing Docker client: {e}")

    def list_containers(self, all: bool = True) -> List[ContainerSummary]:
        """
        Lists containers known to the engine.

        Args:
            all: If True, include stopped containers. Otherwise only running ones.

        Returns:
            A list of ContainerSummary objects, in engine order.

        Raises:
            RuntimeConnectionError: If the engine becomes unreachable.
            RuntimeAPIError: For any other engine error.
        """
        logger.info(f"Listing containers (all: {all})")
        try:
            containers = self.client.containers.list(all=all, sparse=True)
        except docker.errors.APIError as e:
            logger.error(f"Failed to list containers: {e}")
            raise RuntimeAPIError(str(e)) from e
        except (docker.errors.DockerException, requests.exceptions.RequestException) as e:
            logger.error(f"Docker engine unreachable while listing containers: {e}")
            raise RuntimeConnectionError(str(e)) from e

        summaries = []
        for c in containers:
            summaries.append(
                ContainerSummary(
                    id=short_id(c.id),
                    full_id=c.id,
                    names=list(c.attrs.get("Names") or []),
                    image=c.attrs.get("Image", ""),
                    status=c.status,
                )
            )
        logger.info(f"Found {len(summaries)} containers.")
        return summaries

    def inspect_container(self, container_id: str) -> ContainerDetails:
        """
        Inspects a single container.

        Args:
            container_id: ID (full or prefix) or name of the container.

        Returns:
            A ContainerDetails object with the container's lifecycle state.

        Raises:
            ContainerNotFoundError: If the engine does not know the container.
            RuntimeConnectionError: If the engine becomes unreachable.
            RuntimeAPIError: For any other engine error.
        """
        logger.info(f"Inspecting container {container_id}")
        try:
            container = self.client.containers.get(container_id)
        except docker.errors.NotFound as e:
            logger.warning(f"Container {container_id} not found.")
            raise ContainerNotFoundError(container_id, str(e)) from e
        except docker.errors.APIError as e:
            logger.error(f"Failed to inspect container {container_id}: {e}")
            raise RuntimeAPIError(str(e)) from e
        except (docker.errors.DockerException, requests.exceptions.RequestException) as e:
            logger.error(f"Docker engine unreachable while inspecting {container_id}: {e}")
            raise RuntimeConnectionError(str(e)) from e

        return details_from_attrs(container.attrs)

    def engine_version(self) -> Optional[str]:
        """Returns the engine's version string, or None if it cannot be read."""
        try:
            return self.client.version().get("Version")
        except (docker.errors.DockerException, requests.exceptions.RequestException) as e:
            logger.warning(f"Could not read Docker engine version: {e}")
            return None


def details_from_attrs(attrs: Dict[str, Any]) -> ContainerDetails:
    """Builds ContainerDetails from a raw inspect payload."""
    raw_state = attrs.get("State") or {}
    state = ContainerState(
        status=raw_state.get("Status", ""),
        running=bool(raw_state.get("Running", False)),
        paused=bool(raw_state.get("Paused", False)),
        restarting=bool(raw_state.get("Restarting", False)),
        dead=bool(raw_state.get("Dead", False)),
        error=raw_state.get("Error") or "",
        exit_code=int(raw_state.get("ExitCode") or 0),
        full_state=raw_state,
    )
    return ContainerDetails(
        id=attrs.get("Id", ""),
        name=attrs.get("Name", ""),
        image=attrs.get("Image", ""),
        state=state,
    )
