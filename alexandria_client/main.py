import logging
from functools import wraps
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

from alexandria_client.book import Book
from alexandria_client.client import AddressParseError, AlexandriaClient, AuthenticatedClient
from alexandria_client.config import settings
from alexandria_client.services.http_client import AlexandriaError, AuthError, NotFound
from alexandria_client.ui_helpers import (
    print_action_result,
    print_book_result,
    print_list_result,
    set_output_mode,
)

APP_NAME = "Alexandria CLI"

console = Console(stderr=True)

# Options shared by every command, filled in by the callback
_state = {"server": settings.base_url}


def make_client(server: str) -> AlexandriaClient:
    """Build an unauthenticated client for ``server``."""
    return AlexandriaClient(server)


def _authenticated(user: Optional[str], password: Optional[str]) -> AuthenticatedClient:
    user = user or settings.user
    password = password or settings.password
    if not user or not password:
        raise AuthError("No credentials given; pass --user/--password or set ALEXANDRIA_USER/ALEXANDRIA_PASS.")
    return make_client(_state["server"]).authenticate(user, password)


# Helper decorator turning client failures into a message and exit code 1
def handle_errors(func):
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except AddressParseError as e:
            console.print(f"[bold red]Invalid server address:[/] {escape(str(e))}")
        except NotFound:
            console.print("[bold red]Error:[/] the server answered 404 Not Found")
        except AlexandriaError as e:
            console.print(f"[bold red]Error ({type(e).__name__}):[/] {escape(str(e))}")
        raise typer.Exit(code=1)
    return wrapper


# --- Typer CLI Application ---
app = typer.Typer(help=APP_NAME)

@app.callback()
def _global_options(
    server: Optional[str] = typer.Option(
        None,
        "--server",
        "-s",
        help="Alexandria server address (default: ALEXANDRIA_BASE_URL)",
    ),
    output: Optional[str] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output format: plain | json | rich (default: plain)",
    ),
):
    """Global CLI options (server address, output mode)."""
    logging.basicConfig(level=logging.DEBUG if settings.debug else settings.log_level)
    _state["server"] = server or settings.base_url
    if output:
        set_output_mode(output)

@app.command("list")
@handle_errors
def cli_list(count: int = typer.Option(settings.default_count, "--count", "-n", min=0, help="Number of books to fetch")):
    """List the first books in the catalog."""
    books = make_client(_state["server"]).list_books(count)
    print_list_result(books)

@app.command("find")
@handle_errors
def cli_find(isbn: str):
    """Find a book by ISBN and show its details."""
    book = make_client(_state["server"]).get_book_by_isbn(isbn)
    print_book_result(book, isbn)

@app.command("checkout")
@handle_errors
def cli_checkout(
    isbn: str,
    student_id: str,
    user: Optional[str] = typer.Option(None, "--user", "-u"),
    password: Optional[str] = typer.Option(None, "--password", "-p"),
):
    """Check a book out to a student."""
    ok = _authenticated(user, password).checkout(isbn, student_id)
    print_action_result(ok, f"Book {isbn} checked out to {student_id}.", f"Book {isbn} could not be checked out.")

@app.command("checkin")
@handle_errors
def cli_checkin(
    isbn: str,
    student_id: str,
    user: Optional[str] = typer.Option(None, "--user", "-u"),
    password: Optional[str] = typer.Option(None, "--password", "-p"),
):
    """Check a book back in from a student."""
    ok = _authenticated(user, password).checkin(isbn, student_id)
    print_action_result(ok, f"Book {isbn} checked in from {student_id}.", f"Book {isbn} could not be checked in.")

@app.command("add")
@handle_errors
def cli_add(
    isbn: str,
    title: str = typer.Option(..., "--title", "-t"),
    author: str = typer.Option(..., "--author", "-a"),
    description: Optional[str] = typer.Option(None, "--description", "-d"),
    user: Optional[str] = typer.Option(None, "--user", "-u"),
    password: Optional[str] = typer.Option(None, "--password", "-p"),
):
    """Add a new book to the catalog."""
    book = Book(isbn=isbn, title=title, author=author, description=description)
    ok = _authenticated(user, password).add_book(book)
    print_action_result(ok, f"Successfully added: {title} by {author}", f"Book with ISBN {isbn} already exists.")

@app.command("remove")
@handle_errors
def cli_remove(
    isbn: str,
    user: Optional[str] = typer.Option(None, "--user", "-u"),
    password: Optional[str] = typer.Option(None, "--password", "-p"),
):
    """Remove a book by ISBN."""
    ok = _authenticated(user, password).delete_book(isbn)
    print_action_result(ok, f"Book with ISBN {isbn} has been removed.", f"Book with ISBN {isbn} not found.")

@app.command("register")
@handle_errors
def cli_register(
    isbn: str,
    user: Optional[str] = typer.Option(None, "--user", "-u"),
    password: Optional[str] = typer.Option(None, "--password", "-p"),
):
    """Register a book by ISBN."""
    ok = _authenticated(user, password).register_book(isbn)
    print_action_result(ok, f"Book with ISBN {isbn} has been registered.", f"Book with ISBN {isbn} could not be registered.")


if __name__ == "__main__":
    app()
