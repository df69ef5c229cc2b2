import logging
from typing import TYPE_CHECKING, Any, Dict, List, Optional
from urllib.parse import quote, urlencode

import httpx

from alexandria_client.book import Action, ActionRequest, Book
from alexandria_client.config import settings
from alexandria_client.services import http_client
from alexandria_client.services.http_client import AuthError, StaleClientError

logger = logging.getLogger(__name__)

# Operations that only exist on an AuthenticatedClient
PRIVILEGED_OPERATIONS = frozenset({
    "checkout",
    "checkin",
    "update_book",
    "add_book",
    "delete_book",
    "register_book",
})


# Only AlexandriaClient.authenticate holds this
_AUTHENTICATED = object()


class AddressParseError(ValueError):
    """The base address of an Alexandria server could not be parsed."""
    pass


def _parse_base_address(base: str) -> str:
    """Validate ``base`` and return it without scheme or trailing slash.

    Accepts ``host``, ``host:port``, ``host/prefix`` and the same forms with an
    http(s) scheme in front; the scheme is chosen later by the client state.
    """
    if not isinstance(base, str) or not base.strip():
        raise AddressParseError("Server address cannot be empty.")

    raw = base.strip()
    scheme, sep, rest = raw.partition("://")
    if sep:
        if scheme.lower() not in ("http", "https"):
            raise AddressParseError(f"Unsupported scheme '{scheme}' in '{base}'.")
        raw = rest
    raw = raw.rstrip("/")

    if not raw or any(ch.isspace() or ch in "?#" for ch in raw):
        raise AddressParseError(f"Invalid server address '{base}'.")
    try:
        url = httpx.URL(f"http://{raw}")
    except httpx.InvalidURL as exc:
        raise AddressParseError(f"Invalid server address '{base}': {exc}") from exc
    if not url.host:
        raise AddressParseError(f"Invalid server address '{base}': missing host.")
    return raw


class BaseClient:
    """Catalog lookups available whether or not the client is authenticated."""

    def __init__(self, base_address: str, *, scheme: str,
                 transport: Optional[httpx.BaseTransport] = None,
                 timeout: Optional[float] = None) -> None:
        self._base = _parse_base_address(base_address)
        self._scheme = scheme
        self._transport = transport
        self._timeout = timeout
        self._consumed = False

    @property
    def base_address(self) -> str:
        return self._base

    @property
    def scheme(self) -> str:
        return self._scheme

    def __repr__(self) -> str:
        state = " (consumed)" if self._consumed else ""
        return f"<{type(self).__name__} {self._scheme}://{self._base}{state}>"

    # ------------------------- Request plumbing ------------------------- #
    def _url(self, *segments: str, params: Optional[Dict[str, Any]] = None) -> str:
        path = "/".join(quote(str(segment), safe="") for segment in segments)
        url = f"{self._scheme}://{self._base}/{path}"
        if params:
            url = f"{url}?{urlencode(params, quote_via=quote)}"
        return url

    def _ensure_usable(self) -> None:
        if self._consumed:
            raise StaleClientError(
                "This client was consumed by authenticate(); create a new one or use the returned client."
            )

    def _request(self, method: str, url: str, body: Any = None, response_type: Any = Any) -> Any:
        self._ensure_usable()
        return http_client.execute(
            url, body, method, response_type,
            transport=self._transport, timeout=self._timeout,
        )

    # ------------------------- Catalog lookups ------------------------- #
    def list_books(self, count: int) -> List[Book]:
        """Query for the first ``count`` books."""
        if count < 0:
            raise ValueError("count must not be negative.")
        return self._request("GET", self._url("book", params={"count": count}), response_type=List[Book])

    def get_book_by_isbn(self, isbn: str) -> Optional[Book]:
        """Look up a single book; ``None`` when the server has no such ISBN."""
        return self._request("GET", self._url("book", isbn), response_type=Optional[Book])


class AlexandriaClient(BaseClient):
    """An Alexandria server that has not been authenticated against.

    Books can be listed and looked up; everything that changes the catalog
    requires the client returned by :meth:`authenticate`.
    """

    def __init__(self, base_address: str, *,
                 transport: Optional[httpx.BaseTransport] = None,
                 timeout: Optional[float] = None) -> None:
        super().__init__(base_address, scheme=settings.insecure_scheme,
                         transport=transport, timeout=timeout)

    @classmethod
    def new(cls, base_address: str, **kwargs) -> "AlexandriaClient":
        return cls(base_address, **kwargs)

    if not TYPE_CHECKING:
        # Runtime guard only; statically these attributes do not exist
        def __getattr__(self, name: str) -> Any:
            if name in PRIVILEGED_OPERATIONS:
                raise AuthError(f"'{name}' requires an authenticated client; call authenticate() first.")
            raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}")

    def authenticate(self, user: str, password: str) -> "AuthenticatedClient":
        """Log in with a username/password pair.

        This client is consumed whether or not the login succeeds. All requests
        from the returned client, and the login itself, use the secure scheme.
        """
        self._ensure_usable()
        self._consumed = True

        authed = AuthenticatedClient(self._base, transport=self._transport, timeout=self._timeout,
                                     _token=_AUTHENTICATED)
        url = authed._url("auth", params={"user": user, "pass": password})
        try:
            authed._request("GET", url)
        except AuthError:
            logger.warning("Authentication against %s rejected", self._base)
            raise
        logger.info("Authenticated against %s as %s", self._base, user)
        return authed


class AuthenticatedClient(BaseClient):
    """An Alexandria server session allowed to change the catalog.

    Every method returns ``True`` when the server carried out the change and
    ``False`` when a business rule prevented it.
    """

    def __init__(self, base_address: str, *,
                 transport: Optional[httpx.BaseTransport] = None,
                 timeout: Optional[float] = None,
                 _token: Optional[object] = None) -> None:
        if _token is not _AUTHENTICATED:
            raise TypeError("AuthenticatedClient is only created by AlexandriaClient.authenticate().")
        super().__init__(base_address, scheme=settings.secure_scheme,
                         transport=transport, timeout=timeout)

    def _action(self, action: Action, isbn: str, student_id: str) -> bool:
        request = ActionRequest(action=action, isbn=isbn, student_id=student_id)
        endpoint = "checkout" if action is Action.CHECK_OUT else "checkin"
        return self._request("POST", self._url(endpoint), request, bool)

    def checkout(self, isbn: str, student_id: str) -> bool:
        """Check the book with ``isbn`` out to ``student_id``."""
        return self._action(Action.CHECK_OUT, isbn, student_id)

    def checkin(self, isbn: str, student_id: str) -> bool:
        """Return the book with ``isbn`` from ``student_id``."""
        return self._action(Action.CHECK_IN, isbn, student_id)

    def update_book(self, isbn: str, book: Book) -> bool:
        return self._request("POST", self._url("book", isbn), book, bool)

    def add_book(self, book: Book) -> bool:
        """Add a book; ``False`` when a book with that ISBN already exists."""
        return self._request("PUT", self._url("book"), book, bool)

    def delete_book(self, isbn: str) -> bool:
        """Remove a book; ``False`` when there are no copies to remove."""
        return self._request("DELETE", self._url("book", isbn), None, bool)

    def register_book(self, isbn: str) -> bool:
        return self._request("PUT", self._url("book", isbn), isbn, bool)
