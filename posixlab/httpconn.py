"""HTTP/1.1 request parsing and response building for a single connection.

The connection object is independent of any socket: bytes received from a
client are handed to :meth:`HttpConnection.feed`, the request is parsed with
:meth:`HttpConnection.process_read`, a response is prepared with
:meth:`HttpConnection.process_write`, and the bytes to transmit are taken from
:meth:`HttpConnection.pending_output` and acknowledged with
:meth:`HttpConnection.advance`.
"""

from __future__ import annotations

import os
import re
import stat
from enum import Enum
from pathlib import Path

FILENAME_LEN = 200
READ_BUFFER_SIZE = 2048
WRITE_BUFFER_SIZE = 1024

OK_200_TITLE = "OK"
ERROR_400_TITLE = "Bad Request"
ERROR_400_FORM = "Your request has bad syntax or is inherently impossible to satisfy.\n"
ERROR_403_TITLE = "Forbidden"
ERROR_403_FORM = "You do not have permission to get file from this server.\n"
ERROR_404_TITLE = "Not Found"
ERROR_404_FORM = "The requested file was not found on this server.\n"
ERROR_500_TITLE = "Internal Error"
ERROR_500_FORM = "There was an unusual problem serving the requested file.\n"

_CR = 0x0D
_LF = 0x0A
_LINE_END = re.compile(rb"[\r\n]")
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


class Method(Enum):
    """Request methods; only GET is accepted."""

    GET = 0
    POST = 1
    HEAD = 2
    PUT = 3
    DELETE = 4
    TRACE = 5
    OPTIONS = 6
    CONNECT = 7


class CheckState(Enum):
    """Which part of the request the parser is currently reading."""

    REQUESTLINE = 0
    HEADER = 1
    CONTENT = 2


class HttpCode(Enum):
    """Outcome of parsing and serving a request."""

    NO_REQUEST = 0
    GET_REQUEST = 1
    BAD_REQUEST = 2
    NO_RESOURCE = 3
    FORBIDDEN_REQUEST = 4
    FILE_REQUEST = 5
    INTERNAL_ERROR = 6
    CLOSED_CONNECTION = 7


class LineStatus(Enum):
    """Result of scanning the read buffer for one line."""

    OK = 0
    BAD = 1
    OPEN = 2


_ERROR_RESPONSES = {
    HttpCode.INTERNAL_ERROR: (500, ERROR_500_TITLE, ERROR_500_FORM),
    HttpCode.BAD_REQUEST: (400, ERROR_400_TITLE, ERROR_400_FORM),
    HttpCode.NO_RESOURCE: (404, ERROR_404_TITLE, ERROR_404_FORM),
    HttpCode.FORBIDDEN_REQUEST: (403, ERROR_403_TITLE, ERROR_403_FORM),
}


def _atol(text: str) -> int:
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else 0


def _split_blank(text: str) -> tuple[str, str] | None:
    """Split at the first space or tab; None when there is none."""
    match = re.search(r"[ \t]", text)
    if match is None:
        return None
    return text[: match.start()], text[match.end():]


class HttpConnection:
    """Parsing and response state of one client connection."""

    def __init__(self, doc_root: str | os.PathLike[str]) -> None:
        self.doc_root = os.fspath(doc_root)
        self.reset()

    def reset(self) -> None:
        """Forget the current request and response, ready for the next one."""
        self.check_state = CheckState.REQUESTLINE
        self.linger = False
        self.method = Method.GET
        self.url: str | None = None
        self.version: str | None = None
        self.host: str | None = None
        self.content_length = 0
        self.body = b""
        self.real_file = ""
        self.file_size = 0
        self._read_buf = bytearray()
        self._checked = 0
        self._start_line = 0
        self._write_buf = bytearray()
        self._file: bytes | None = None
        self._response = b""
        self._bytes_sent = 0
        self._bytes_to_send = 0

    def feed(self, data: bytes) -> bool:
        """Append received bytes to the read buffer.

        Empty data means the peer closed the connection. Returns False when
        the peer closed or the read buffer is full, True otherwise.
        """
        room = READ_BUFFER_SIZE - len(self._read_buf)
        if room <= 0 or not data:
            return False
        self._read_buf += data[:room]
        return len(self._read_buf) < READ_BUFFER_SIZE

    def _parse_line(self) -> LineStatus:
        buf = self._read_buf
        match = _LINE_END.search(buf, self._checked)
        if match is None:
            self._checked = len(buf)
            return LineStatus.OPEN
        pos = self._checked = match.start()
        if buf[pos] == _CR:
            if pos + 1 == len(buf):
                return LineStatus.OPEN
            if buf[pos + 1] == _LF:
                buf[pos:pos + 2] = b"\0\0"
                self._checked = pos + 2
                return LineStatus.OK
            return LineStatus.BAD
        if pos > 1 and buf[pos - 1] == _CR:
            buf[pos - 1:pos + 1] = b"\0\0"
            self._checked = pos + 1
            return LineStatus.OK
        return LineStatus.BAD

    def _get_line(self) -> str:
        end = self._read_buf.find(b"\0", self._start_line)
        if end == -1:
            end = len(self._read_buf)
        return self._read_buf[self._start_line:end].decode("latin-1")

    def _parse_request_line(self, text: str) -> HttpCode:
        parts = _split_blank(text)
        if parts is None:
            return HttpCode.BAD_REQUEST
        method, rest = parts
        if method.lower() != "get":
            return HttpCode.BAD_REQUEST
        self.method = Method.GET
        parts = _split_blank(rest)
        if parts is None:
            return HttpCode.BAD_REQUEST
        url, version = parts
        self.version = version
        if version.lower() != "http/1.1":
            return HttpCode.BAD_REQUEST
        if url[:7].lower() == "http://":
            slash = url.find("/", 7)
            url = url[slash:] if slash != -1 else ""
        if not url.startswith("/"):
            return HttpCode.BAD_REQUEST
        self.url = url
        self.check_state = CheckState.HEADER
        return HttpCode.NO_REQUEST

    def _parse_headers(self, text: str) -> HttpCode:
        if text == "":
            if self.content_length != 0:
                self.check_state = CheckState.CONTENT
                return HttpCode.NO_REQUEST
            return HttpCode.GET_REQUEST
        lowered = text.lower()
        if lowered.startswith("connection:"):
            if text[11:].lstrip(" \t").lower() == "keep-alive":
                self.linger = True
        elif lowered.startswith("content-length:"):
            self.content_length = _atol(text[15:].lstrip(" \t"))
        elif lowered.startswith("host:"):
            self.host = text[5:].lstrip(" \t")
        else:
            print(f"oop! unknow header {text}")
        return HttpCode.NO_REQUEST

    def _parse_content(self) -> HttpCode:
        if len(self._read_buf) >= self._checked + self.content_length:
            start = self._start_line
            self.body = bytes(self._read_buf[start:start + self.content_length])
            return HttpCode.GET_REQUEST
        return HttpCode.NO_REQUEST

    def process_read(self) -> HttpCode:
        """Parse as much of the buffered request as possible.

        Returns NO_REQUEST while the request is incomplete, BAD_REQUEST for
        malformed input, or the outcome of looking up the requested file.
        """
        line_status = LineStatus.OK
        while (
            self.check_state is CheckState.CONTENT and line_status is LineStatus.OK
        ) or (line_status := self._parse_line()) is LineStatus.OK:
            text = self._get_line()
            self._start_line = self._checked
            print(f"got 1 http line: {text}")
            if self.check_state is CheckState.REQUESTLINE:
                if self._parse_request_line(text) is HttpCode.BAD_REQUEST:
                    return HttpCode.BAD_REQUEST
            elif self.check_state is CheckState.HEADER:
                result = self._parse_headers(text)
                if result is HttpCode.BAD_REQUEST:
                    return HttpCode.BAD_REQUEST
                if result is HttpCode.GET_REQUEST:
                    return self._do_request()
            else:
                if self._parse_content() is HttpCode.GET_REQUEST:
                    return self._do_request()
                line_status = LineStatus.OPEN
        return HttpCode.NO_REQUEST

    def _do_request(self) -> HttpCode:
        self.real_file = (self.doc_root + (self.url or ""))[: FILENAME_LEN - 1]
        try:
            st = os.stat(self.real_file)
        except OSError:
            return HttpCode.BAD_REQUEST
        if not st.st_mode & stat.S_IROTH:
            return HttpCode.FORBIDDEN_REQUEST
        if stat.S_ISDIR(st.st_mode):
            return HttpCode.BAD_REQUEST
        try:
            self._file = Path(self.real_file).read_bytes()
        except OSError:
            return HttpCode.BAD_REQUEST
        self.file_size = st.st_size
        return HttpCode.FILE_REQUEST

    def _add_response(self, text: str) -> bool:
        room = WRITE_BUFFER_SIZE - len(self._write_buf)
        if room <= 0:
            return False
        data = text.encode("utf-8")
        if len(data) >= room - 1:
            return False
        self._write_buf += data
        return True

    def _add_status_line(self, status: int, title: str) -> bool:
        return self._add_response(f"HTTP/1.1 {status} {title}\r\n")

    def _add_headers(self, content_length: int) -> None:
        self._add_response(f"Content-Length: {content_length}\r\n")
        self._add_response("Content-Type:text/html\r\n")
        self._add_response(
            f"Connection: {'keep-alive' if self.linger else 'close'}\r\n"
        )
        self._add_response("\r\n")

    def process_write(self, code: HttpCode) -> bool:
        """Prepare the response for a parse outcome.

        Returns False when no response can be built for the outcome.
        """
        if code is HttpCode.FILE_REQUEST:
            content = self._file or b""
            self._add_status_line(200, OK_200_TITLE)
            self._add_headers(len(content))
            self._response = bytes(self._write_buf) + content
        elif code in _ERROR_RESPONSES:
            status, title, form = _ERROR_RESPONSES[code]
            self._add_status_line(status, title)
            self._add_headers(len(form.encode("utf-8")))
            if not self._add_response(form):
                return False
            self._response = bytes(self._write_buf)
        else:
            return False
        self._bytes_sent = 0
        self._bytes_to_send = len(self._response)
        return True

    def pending_output(self) -> bytes:
        """Return the response bytes not yet sent."""
        return self._response[self._bytes_sent:self._bytes_sent + self._bytes_to_send]

    def advance(self, sent: int) -> bool:
        """Record that ``sent`` bytes of the pending output were transmitted.

        Returns True while the connection should stay open: output remains,
        or the response is complete and the client asked for keep-alive (the
        connection is then reset for the next request). Returns False once a
        response to a non keep-alive client has been sent completely.
        """
        if sent < 0:
            raise ValueError("sent must not be negative")
        if self._bytes_to_send == 0:
            self.reset()
            return True
        if sent > self._bytes_to_send:
            raise ValueError("sent exceeds the pending output")
        self._bytes_sent += sent
        self._bytes_to_send -= sent
        if self._bytes_to_send > 0:
            return True
        self._file = None
        if self.linger:
            self.reset()
            return True
        return False