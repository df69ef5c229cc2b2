import logging
from typing import Any, Optional, Type, TypeVar, overload

import httpx
from pydantic import TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError

from alexandria_client.config import settings

logger = logging.getLogger(__name__)

U = TypeVar("U")

# Serializer that infers the wire shape from the runtime type of the body
_BODY_ADAPTER = TypeAdapter(Any)


class AlexandriaError(Exception):
    """Base class for every failure surfaced by the Alexandria client."""
    pass


class HttpError(AlexandriaError):
    """The request could not be built, sent or answered at the transport layer."""
    pass


class IoError(AlexandriaError):
    """Bytes could not be written to or read from an open request."""
    pass


class JsonError(AlexandriaError):
    """The response body could not be decoded into the expected type."""
    pass


class StatusError(AlexandriaError):
    """The server answered with a status other than 200."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class NotFound(StatusError):
    pass


class InternalError(StatusError):
    pass


class AuthError(StatusError):
    pass


class ApiSaidNo(StatusError):
    pass


class GotNull(AlexandriaError):
    """The server answered 200 but the body was empty or null."""
    pass


class StaleClientError(AlexandriaError):
    """A client handle was used after `authenticate` consumed it."""
    pass


_STATUS_ERRORS = {
    404: NotFound,
    500: InternalError,
    401: AuthError,
}


def _raise_for_status(response: httpx.Response) -> None:
    status = response.status_code
    if status == 200:
        return
    error_cls = _STATUS_ERRORS.get(status, ApiSaidNo)
    logger.warning("%s %s answered %s", response.request.method, response.request.url.path, status)
    raise error_cls(f"Server answered HTTP {status}", status_code=status)


def _decode(text: str, response_type: Any) -> Any:
    adapter = TypeAdapter(response_type)
    stripped = text.strip()
    if not stripped or stripped == "null":
        # An empty answer is only a value when the caller declared it optional
        try:
            return adapter.validate_python(None)
        except ValidationError as exc:
            raise GotNull("Server answered 200 with an empty body") from exc
    try:
        # Strict mode: JSON types must match the declared type exactly
        return adapter.validate_json(stripped, strict=True)
    except ValidationError as exc:
        logger.warning("Could not decode response body: %s", exc.errors()[0].get("msg"))
        raise JsonError(str(exc)) from exc


@overload
def execute(address: str, body: Any, method: str, response_type: Type[U], *,
            transport: Optional[httpx.BaseTransport] = ...,
            timeout: Optional[float] = ...) -> U: ...
@overload
def execute(address: str, body: Any = ..., method: str = ..., response_type: Any = ..., *,
            transport: Optional[httpx.BaseTransport] = ...,
            timeout: Optional[float] = ...) -> Any: ...
def execute(address: str, body: Any = None, method: str = "GET", response_type: Any = Any, *,
            transport: Optional[httpx.BaseTransport] = None,
            timeout: Optional[float] = None) -> Any:
    """Run one request/response round trip against the Alexandria server.

    ``body`` is JSON encoded when given; the 200 response is decoded into
    ``response_type``. Every failure is raised as an ``AlexandriaError``
    subclass, nothing is retried.
    """
    method = method.upper()
    try:
        url = httpx.URL(address)
    except httpx.InvalidURL as exc:
        raise HttpError(f"Invalid address: {exc}") from exc

    headers = {"Accept": "application/json"}
    content: Optional[bytes] = None
    if body is not None:
        try:
            content = _BODY_ADAPTER.dump_json(body)
        except PydanticSerializationError as exc:
            raise HttpError(f"Could not encode {type(body).__name__} request body") from exc
        headers["Content-Type"] = "application/json"

    deadline = httpx.Timeout(timeout if timeout is not None else settings.timeout)
    with httpx.Client(transport=transport, timeout=deadline) as client:
        request = client.build_request(method, url, content=content, headers=headers)
        logger.debug("%s %s://%s%s", method, url.scheme, url.host, url.path)
        try:
            response = client.send(request, stream=True)
        except httpx.WriteError as exc:
            raise IoError(f"Could not write request body: {exc}") from exc
        except httpx.RequestError as exc:
            logger.warning("%s %s failed: %s", method, url.path, exc)
            raise HttpError(str(exc) or type(exc).__name__) from exc

        try:
            _raise_for_status(response)
            try:
                response.read()
            except (httpx.TransportError, httpx.StreamError) as exc:
                raise IoError(f"Could not read response body: {exc}") from exc
            text = response.text
        finally:
            response.close()

    return _decode(text, response_type)


@overload
def get(address: str, response_type: Type[U], **kwargs: Any) -> U: ...
@overload
def get(address: str, response_type: Any = ..., **kwargs: Any) -> Any: ...
def get(address: str, response_type: Any = Any, **kwargs: Any) -> Any:
    return execute(address, None, "GET", response_type, **kwargs)


@overload
def post(address: str, body: Any, response_type: Type[U], **kwargs: Any) -> U: ...
@overload
def post(address: str, body: Any = ..., response_type: Any = ..., **kwargs: Any) -> Any: ...
def post(address: str, body: Any = None, response_type: Any = Any, **kwargs: Any) -> Any:
    return execute(address, body, "POST", response_type, **kwargs)


@overload
def put(address: str, body: Any, response_type: Type[U], **kwargs: Any) -> U: ...
@overload
def put(address: str, body: Any = ..., response_type: Any = ..., **kwargs: Any) -> Any: ...
def put(address: str, body: Any = None, response_type: Any = Any, **kwargs: Any) -> Any:
    return execute(address, body, "PUT", response_type, **kwargs)


@overload
def delete(address: str, body: Any, response_type: Type[U], **kwargs: Any) -> U: ...
@overload
def delete(address: str, body: Any = ..., response_type: Any = ..., **kwargs: Any) -> Any: ...
def delete(address: str, body: Any = None, response_type: Any = Any, **kwargs: Any) -> Any:
    return execute(address, body, "DELETE", response_type, **kwargs)
