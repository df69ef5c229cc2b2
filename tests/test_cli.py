import json

import pytest
from typer.testing import CliRunner

from alexandria_client import main
from alexandria_client.client import AlexandriaClient
from alexandria_client.main import app
from alexandria_client.ui_helpers import OUTPUT_MODE_ENV

runner = CliRunner()

CREDS = ["--user", "librarian", "--password", "hunter2"]


@pytest.fixture(autouse=True)
def stub_cli(monkeypatch, stub_server):
    monkeypatch.setenv(OUTPUT_MODE_ENV, "plain")
    monkeypatch.setattr(main, "make_client", lambda server: AlexandriaClient(server, transport=stub_server.transport))
    stub_server.add("GET", "/auth", None)
    return stub_server


def test_list_no_books(stub_server):
    stub_server.add("GET", "/book", [])
    result = runner.invoke(app, ["list"])
    assert result.exit_code == 0
    assert "No books in library." in result.output


def test_list_books(stub_server, sample_book_data):
    stub_server.add("GET", "/book", [sample_book_data])
    result = runner.invoke(app, ["list", "--count", "3"])
    assert result.exit_code == 0
    assert "9780199535675 - Ulysses by James Joyce" in result.output
    assert stub_server.last_request.url.params["count"] == "3"


def test_list_books_json(stub_server, sample_book_data):
    stub_server.add("GET", "/book", [sample_book_data])
    result = runner.invoke(app, ["--output", "json", "list"])
    assert result.exit_code == 0
    assert json.loads(result.output) == [sample_book_data]


def test_find_book_success(stub_server, sample_book_data):
    stub_server.add("GET", "/book/9780199535675", sample_book_data)
    result = runner.invoke(app, ["find", "9780199535675"])
    assert result.exit_code == 0
    assert "Book Found" in result.output
    assert "Title: Ulysses" in result.output
    assert "Author: James Joyce" in result.output


def test_find_book_not_found(stub_server):
    stub_server.add("GET", "/book/nonexistent", content=b"")
    result = runner.invoke(app, ["find", "nonexistent"])
    assert result.exit_code == 0
    assert "Book with ISBN nonexistent not found." in result.output


def test_find_book_404_exits_with_error(stub_server):
    result = runner.invoke(app, ["find", "missing"])
    assert result.exit_code == 1
    assert "404" in result.output


def test_add_book_success(stub_server):
    stub_server.add("PUT", "/book", True)
    result = runner.invoke(app, ["add", "123", "--title", "Test Book", "--author", "Test Author", *CREDS])
    assert result.exit_code == 0
    assert "Successfully added: Test Book by Test Author" in result.output
    assert json.loads(stub_server.last_request.content)["title"] == "Test Book"
    assert stub_server.last_request.url.scheme == "https"


def test_add_book_conflict(stub_server):
    stub_server.add("PUT", "/book", False)
    result = runner.invoke(app, ["add", "123", "--title", "Test Book", "--author", "Test Author", *CREDS])
    assert result.exit_code == 0
    assert "Book with ISBN 123 already exists." in result.output


def test_remove_book(stub_server):
    stub_server.add("DELETE", "/book/999", True)
    result = runner.invoke(app, ["remove", "999", *CREDS])
    assert result.exit_code == 0
    assert "Book with ISBN 999 has been removed." in result.output


def test_checkout_and_checkin(stub_server):
    stub_server.add("POST", "/checkout", True)
    stub_server.add("POST", "/checkin", False)

    result = runner.invoke(app, ["checkout", "123", "s-42", *CREDS])
    assert result.exit_code == 0
    assert "Book 123 checked out to s-42." in result.output

    result = runner.invoke(app, ["checkin", "123", "s-42", *CREDS])
    assert result.exit_code == 0
    assert "Book 123 could not be checked in." in result.output


def test_register_book(stub_server):
    stub_server.add("PUT", "/book/123", True)
    result = runner.invoke(app, ["register", "123", *CREDS])
    assert result.exit_code == 0
    assert "Book with ISBN 123 has been registered." in result.output


def test_privileged_command_without_credentials(stub_server, monkeypatch):
    monkeypatch.setattr(main.settings, "user", None)
    monkeypatch.setattr(main.settings, "password", None)
    result = runner.invoke(app, ["remove", "999"])
    assert result.exit_code == 1
    assert "No credentials given" in result.output
    assert stub_server.requests == []


def test_rejected_credentials(stub_server):
    stub_server.add("GET", "/auth", status=401, content=b"")
    result = runner.invoke(app, ["remove", "999", *CREDS])
    assert result.exit_code == 1
    assert "AuthError" in result.output


def test_invalid_server_address():
    result = runner.invoke(app, ["--server", "not a host", "list"])
    assert result.exit_code == 1
    assert "Invalid server address" in result.output
