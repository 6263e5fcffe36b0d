import os

import pytest

from posixlab.httpconn import (
    ERROR_400_FORM,
    ERROR_403_FORM,
    READ_BUFFER_SIZE,
    CheckState,
    HttpCode,
    HttpConnection,
    Method,
)

PAGE = b"<html><body>hi</body></html>"


@pytest.fixture
def root(tmp_path):
    page = tmp_path / "index.html"
    page.write_bytes(PAGE)
    os.chmod(page, 0o644)
    secret_page = tmp_path / "private.html"
    secret_page.write_bytes(b"hidden")
    os.chmod(secret_page, 0o600)
    (tmp_path / "sub").mkdir()
    return tmp_path


def request(conn, text):
    conn.feed(text.encode("latin-1"))
    return conn.process_read()


def test_complete_get_finds_file(root):
    conn = HttpConnection(root)
    code = request(conn, "GET /index.html HTTP/1.1\r\nHost: example.com\r\n\r\n")
    assert code is HttpCode.FILE_REQUEST
    assert conn.url == "/index.html"
    assert conn.host == "example.com"
    assert conn.method is Method.GET
    assert conn.real_file == str(root) + "/index.html"
    assert conn.file_size == len(PAGE)


def test_incomplete_request_waits_for_more(root):
    conn = HttpConnection(root)
    assert request(conn, "GET /index.html HTTP/1.1\r\nHost: exa") is HttpCode.NO_REQUEST
    assert conn.check_state is CheckState.HEADER
    assert request(conn, "mple.com\r\n\r\n") is HttpCode.FILE_REQUEST
    assert conn.host == "example.com"


def test_split_crlf_across_feeds(root):
    conn = HttpConnection(root)
    assert request(conn, "GET /index.html HTTP/1.1\r") is HttpCode.NO_REQUEST
    assert request(conn, "\n\r\n") is HttpCode.FILE_REQUEST


def test_method_is_case_insensitive(root):
    conn = HttpConnection(root)
    assert request(conn, "get /index.html http/1.1\r\n\r\n") is HttpCode.FILE_REQUEST


@pytest.mark.parametrize(
    "line",
    [
        "POST /index.html HTTP/1.1",
        "GET /index.html HTTP/1.0",
        "GET index.html HTTP/1.1",
        "GET",
        "GET /index.html",
    ],
)
def test_bad_request_lines(root, line):
    conn = HttpConnection(root)
    assert request(conn, line + "\r\n\r\n") is HttpCode.BAD_REQUEST


def test_absolute_url_is_reduced_to_path(root):
    conn = HttpConnection(root)
    code = request(conn, "GET http://example.com:10000/index.html HTTP/1.1\r\n\r\n")
    assert code is HttpCode.FILE_REQUEST
    assert conn.url == "/index.html"


def test_absolute_url_without_path_is_bad(root):
    conn = HttpConnection(root)
    code = request(conn, "GET http://example.com HTTP/1.1\r\n\r\n")
    assert code is HttpCode.BAD_REQUEST


def test_missing_file_and_directory_are_bad(root):
    missing = HttpConnection(root)
    assert request(missing, "GET /nope.html HTTP/1.1\r\n\r\n") is HttpCode.BAD_REQUEST
    directory = HttpConnection(root)
    assert request(directory, "GET /sub HTTP/1.1\r\n\r\n") is HttpCode.BAD_REQUEST


def test_file_not_readable_by_others_is_forbidden(root):
    conn = HttpConnection(root)
    code = request(conn, "GET /private.html HTTP/1.1\r\n\r\n")
    assert code is HttpCode.FORBIDDEN_REQUEST


def test_keep_alive_header_sets_linger(root):
    conn = HttpConnection(root)
    request(conn, "GET /index.html HTTP/1.1\r\nConnection:   keep-alive\r\n\r\n")
    assert conn.linger is True
    conn.process_write(HttpCode.FILE_REQUEST)
    assert b"Connection: keep-alive\r\n" in conn.pending_output()


def test_unknown_header_is_ignored(root):
    conn = HttpConnection(root)
    code = request(conn, "GET /index.html HTTP/1.1\r\nAccept: */*\r\n\r\n")
    assert code is HttpCode.FILE_REQUEST
    assert conn.linger is False


def test_body_with_content_length(root):
    conn = HttpConnection(root)
    code = request(
        conn, "GET /index.html HTTP/1.1\r\nContent-Length: 5\r\n\r\nhello"
    )
    assert code is HttpCode.FILE_REQUEST
    assert conn.content_length == 5
    assert conn.body == b"hello"


def test_bare_line_feed_is_never_accepted(root):
    conn = HttpConnection(root)
    assert request(conn, "GET /index.html HTTP/1.1\n\n") is HttpCode.NO_REQUEST
    assert conn.check_state is CheckState.REQUESTLINE
    assert conn.url is None


def test_file_response_layout(root):
    conn = HttpConnection(root)
    request(conn, "GET /index.html HTTP/1.1\r\n\r\n")
    assert conn.process_write(HttpCode.FILE_REQUEST) is True
    out = conn.pending_output()
    assert out.startswith(b"HTTP/1.1 200 OK\r\n")
    assert f"Content-Length: {len(PAGE)}\r\n".encode() in out
    assert b"Content-Type:text/html\r\n" in out
    assert b"Connection: close\r\n" in out
    header, _, content = out.partition(b"\r\n\r\n")
    assert content == PAGE


def test_error_responses(root):
    conn = HttpConnection(root)
    assert conn.process_write(HttpCode.BAD_REQUEST) is True
    out = conn.pending_output()
    assert out.startswith(b"HTTP/1.1 400 Bad Request\r\n")
    assert out.endswith(b"\r\n\r\n" + ERROR_400_FORM.encode())
    assert f"Content-Length: {len(ERROR_400_FORM)}\r\n".encode() in out

    other = HttpConnection(root)
    other.process_write(HttpCode.FORBIDDEN_REQUEST)
    assert other.pending_output().endswith(ERROR_403_FORM.encode())


@pytest.mark.parametrize("code", [HttpCode.NO_REQUEST, HttpCode.GET_REQUEST])
def test_process_write_rejects_non_responses(root, code):
    conn = HttpConnection(root)
    assert conn.process_write(code) is False
    assert conn.pending_output() == b""


def test_partial_sends_reassemble_and_close(root):
    conn = HttpConnection(root)
    request(conn, "GET /index.html HTTP/1.1\r\n\r\n")
    conn.process_write(HttpCode.FILE_REQUEST)
    full = conn.pending_output()
    sent = bytearray()
    keep = True
    while conn.pending_output():
        chunk = conn.pending_output()[:7]
        sent += chunk
        keep = conn.advance(len(chunk))
    assert bytes(sent) == full
    assert keep is False


def test_keep_alive_resets_after_send(root):
    conn = HttpConnection(root)
    request(conn, "GET /index.html HTTP/1.1\r\nConnection: keep-alive\r\n\r\n")
    conn.process_write(HttpCode.FILE_REQUEST)
    assert conn.advance(len(conn.pending_output())) is True
    assert conn.url is None
    assert conn.check_state is CheckState.REQUESTLINE
    assert conn.pending_output() == b""
    assert request(conn, "GET /index.html HTTP/1.1\r\n\r\n") is HttpCode.FILE_REQUEST


def test_advance_with_nothing_pending_resets(root):
    conn = HttpConnection(root)
    request(conn, "GET /index.html HTTP/1.1\r\n")
    assert conn.advance(0) is True
    assert conn.check_state is CheckState.REQUESTLINE


def test_advance_rejects_bad_counts(root):
    conn = HttpConnection(root)
    conn.process_write(HttpCode.BAD_REQUEST)
    pending = len(conn.pending_output())
    with pytest.raises(ValueError):
        conn.advance(pending + 1)
    with pytest.raises(ValueError):
        conn.advance(-1)
    assert len(conn.pending_output()) == pending


def test_feed_limits(root):
    conn = HttpConnection(root)
    assert conn.feed(b"") is False
    assert conn.feed(b"GET ") is True
    assert conn.feed(b"x" * READ_BUFFER_SIZE) is False
    assert conn.feed(b"more") is False


def test_reset_clears_request(root):
    conn = HttpConnection(root)
    request(conn, "GET /index.html HTTP/1.1\r\nHost: example.com\r\n\r\n")
    conn.reset()
    assert conn.host is None
    assert conn.url is None
    assert conn.real_file == ""
    assert conn.process_read() is HttpCode.NO_REQUEST