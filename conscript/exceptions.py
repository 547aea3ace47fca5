"""Errors raised by the Docker runtime adapter."""


class ConscriptError(Exception):
    """Base class for adapter errors. ``status_code`` is the HTTP status it maps to."""
    status_code = 500


class RuntimeConnectionError(ConscriptError):
    """The Docker engine is unreachable or API version negotiation failed."""
    status_code = 500


class RuntimeAPIError(ConscriptError):
    """The engine answered with an error (permission denied, bad request, ...)."""
    status_code = 500


class ContainerNotFoundError(ConscriptError):
    """The engine does not know the requested container."""
    status_code = 404

    def __init__(self, container_id: str, message: str = ""):
        self.container_id = container_id
        super().__init__(message or f"No such container: {container_id}")
