"""Alexandria Client - API client for the Alexandria library catalog.

This package contains:
- The typestate client (client.py)
- Catalog data models (book.py)
- The HTTP request executor (services/http_client.py)
- The command-line interface (main.py)
"""

from alexandria_client.book import Action, ActionRequest, Book
from alexandria_client.client import (
    AddressParseError,
    AlexandriaClient,
    AuthenticatedClient,
    BaseClient,
)
from alexandria_client.services.http_client import (
    AlexandriaError,
    ApiSaidNo,
    AuthError,
    GotNull,
    HttpError,
    InternalError,
    IoError,
    JsonError,
    NotFound,
    StaleClientError,
    StatusError,
)

__all__ = [
    "Action",
    "ActionRequest",
    "Book",
    "AddressParseError",
    "AlexandriaClient",
    "AuthenticatedClient",
    "BaseClient",
    "AlexandriaError",
    "ApiSaidNo",
    "AuthError",
    "GotNull",
    "HttpError",
    "InternalError",
    "IoError",
    "JsonError",
    "NotFound",
    "StaleClientError",
    "StatusError",
]
