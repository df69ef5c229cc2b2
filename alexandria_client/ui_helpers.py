import os
import json
from typing import List, Optional
from rich.console import Console
from rich.table import Table
from rich.panel import Panel

from alexandria_client.book import Book

# Environment variable to control CLI output mode
# Allowed values: 'plain' (default), 'json', 'rich'
OUTPUT_MODE_ENV = "ALEXANDRIA_CLI_OUTPUT"

_console = Console()

def set_output_mode(mode: str) -> None:
    mode = (mode or "").lower().strip()
    if mode in {"plain", "json", "rich"}:
        os.environ[OUTPUT_MODE_ENV] = mode

def get_output_mode() -> str:
    return os.environ.get(OUTPUT_MODE_ENV, "plain").lower()

def print_list_result(books: List[Book]) -> None:
    """Print a list of books in the current output mode.
    - plain: 'ISBN - Title by Author' lines, or 'No books in library.'
    - json: JSON array of book objects
    - rich: Rich table
    """
    mode = get_output_mode()

    if not books:
        print("No books in library.")
        return

    if mode == "json":
        print(json.dumps([b.to_dict() for b in books], ensure_ascii=False))
    elif mode == "rich":
        table = Table(title="📚 Books", show_lines=True, header_style="bold cyan")
        table.add_column("ISBN", style="magenta", no_wrap=True)
        table.add_column("Title", style="white")
        table.add_column("Author", style="white")
        table.add_column("Available", justify="right")
        for b in books:
            table.add_row(b.isbn, b.title, b.author, f"{b.available}/{b.count}")
        _console.print(table)
    else:
        for b in books:
            print(f"{b.isbn} - {b.title} by {b.author}")

def print_book_result(book: Optional[Book], isbn: str) -> None:
    """Print a single lookup result, or a not-found line for an empty answer."""
    mode = get_output_mode()

    if book is None:
        if mode == "json":
            print("null")
        else:
            print(f"Book with ISBN {isbn} not found.")
        return

    if mode == "json":
        print(json.dumps(book.to_dict(), ensure_ascii=False))
    elif mode == "rich":
        content = (
            f"[bold]Title:[/] {book.title}\n[bold]Author:[/] {book.author}\n"
            f"[bold]ISBN:[/] {book.isbn}\n[bold]Available:[/] {book.available}/{book.count}"
        )
        _console.print(Panel.fit(content, title="📖 Book Found", border_style="green"))
    else:
        print("Book Found")
        print(f"Title: {book.title}")
        print(f"Author: {book.author}")
        print(f"ISBN: {book.isbn}")
        print(f"Available: {book.available}/{book.count}")

def print_action_result(ok: bool, success: str, failure: str) -> None:
    """Print the outcome of a catalog change."""
    if get_output_mode() == "json":
        print(json.dumps({"ok": ok}))
    else:
        print(success if ok else failure)
