# posixlab

A set of small, self-contained programs that show classic POSIX
systems-programming techniques at work: TCP and UDP sockets, broadcast,
`select`/`poll`/`epoll` echo servers, forking and threaded servers, named
pipes, memory mapping, shared memory, interval timers and signals,
producer/consumer threads, and an incremental HTTP/1.1 request parser.

Each piece can be imported and called from Python, and most also come
with a command to run them directly. The package has no third-party
dependencies and targets Python 3.10 or newer on a POSIX system
(several parts rely on `fork`, named pipes and signals; the epoll
backends need Linux).

## Installing

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## What is inside

| Module | What it does |
| --- | --- |
| `posixlab.calc` | `add`, `subtract`, `multiply`, `divide` on two integers |
| `posixlab.sorting` | `bubble_sort` and `select_sort`, each returning a new sorted list |
| `posixlab.sumdemo` | `triangular(n)` and the `report_lines` walk-through |
| `posixlab.lsl` | an `ls -l` style line for one file: `file_type_char`, `permission_string`, `long_listing` |
| `posixlab.httpconn` | `HttpConnection`: an incremental HTTP/1.1 GET request parser and response builder, independent of sockets |
| `posixlab.tcp` | one-shot, forking and threaded TCP echo servers and clients |
| `posixlab.udp` | UDP echo server and client, broadcast sender and receiver |
| `posixlab.multiplex` | `EchoServer` with a selectable `Backend` (`select`, `poll`, `epoll`, `epoll-et`), plus `reply_client` and `stdin_client` |
| `posixlab.alarm` | a repeating `SIGALRM` timer: `start_timer`, `stop_timer` |
| `posixlab.fifochat` | two-party chat over a pair of named pipes, turn-based (`chat_alternating`) or full duplex (`chat_duplex`) |
| `posixlab.ipc` | memory-mapped file copy and exchange, anonymous shared mappings, pipes to a child or a command, named shared memory |
| `posixlab.concurrency` | producer/consumer runs guarded by a mutex, a condition or semaphores, ticket selling with and without a lock, `RWLock`, a deadlock demonstration |

## Commands

```
posixlab-calc                 # arithmetic on 20 and 12
posixlab-sort                 # bubble sort and selection sort of two sample arrays
posixlab-sum [A B]            # step-by-step sums (defaults 10 and 30)
posixlab-ls FILE              # print one ls -l style line for FILE

posixlab-tcp server|client|fork-server|thread-server|loop-client [--host H] [--port P]
posixlab-udp server|client|broadcast|listen [--count N]
posixlab-multiplex server --backend select|poll|epoll|epoll-et [--port P]
posixlab-multiplex client|stdin-client [--host H] [--port P]

posixlab-alarm                # SIGALRM after 3 s, then every 2 s, until a key is read
posixlab-fifochat a|b [--duplex] [--fifo1 PATH] [--fifo2 PATH]
```

Run `posixlab-fifochat a` in one terminal and `posixlab-fifochat b` in
another; both create the named pipes if they are missing. Without
`--duplex` the two sides take turns, side `a` writing first.

## Using it from Python

```python
from posixlab.calc import add, divide
from posixlab.sorting import bubble_sort
from posixlab.lsl import long_listing

add(20, 12)                       # 32
divide(20, 12)                    # 1.666...
bubble_sort([12, 27, 55, 22, 67]) # [12, 22, 27, 55, 67]
print(long_listing("README.md"))
```

Parsing an HTTP request and building the response without any sockets:

```python
from posixlab.httpconn import HttpConnection, HttpCode

conn = HttpConnection("/srv/www")
conn.feed(b"GET /index.html HTTP/1.1\r\nHost: localhost\r\n\r\n")
code = conn.process_read()
if code is not HttpCode.NO_REQUEST:
    conn.process_write(code)
    payload = conn.pending_output()
    keep_open = conn.advance(len(payload))
```

`process_read` returns `FILE_REQUEST` when the file under the document
root exists, is world-readable and is not a directory, `BAD_REQUEST` for
malformed requests, missing files or directories, and
`FORBIDDEN_REQUEST` for files others may not read.

A multiplexing echo server in a background thread:

```python
import threading
from posixlab.multiplex import EchoServer, Backend, reply_client

server = EchoServer("127.0.0.1", 0, Backend.POLL)
threading.Thread(target=server.serve_forever, daemon=True).start()
reply_client("127.0.0.1", server.port, count=1)   # ["back from server"]
server.shutdown()
```

## What it does not do

- There is no HTTP server command: `posixlab.httpconn` only parses
  requests and builds responses, and does not listen on a port or read
  from sockets itself. There is no thread pool either; to serve files
  over the network you have to wire `HttpConnection` to sockets yourself.
- There is no daemon: nothing detaches from the terminal or writes
  timestamps to a file in the background.

## Notes

Most functions also print what they send and receive, as the commands
do. The `tcp`, `udp` and `multiplex` helpers that take a `count` run
forever when it is left out.