"""
Shared pytest fixtures for simplehttpd tests.
"""
import socket
import threading

import pytest

from simplehttpd.config import ServerConfig
from simplehttpd.daemon import HTTPDaemon
from simplehttpd.resolver import ContentResolver


class FakeEntry:
    """Stand-in for os.DirEntry."""

    def __init__(self, name):
        self.name = name


class FakeScandir:
    """Forward-only iterator with close(), like the object os.scandir() returns."""

    def __init__(self, names):
        self._entries = iter([FakeEntry(name) for name in names])
        self.advanced = 0
        self.closed = False

    def __iter__(self):
        return self

    def __next__(self):
        entry = next(self._entries)
        self.advanced += 1
        return entry

    def close(self):
        self.closed = True


@pytest.fixture
def doc_root(tmp_path):
    """Directory with a.txt ("hi\\n"), .hidden and sub/.

    Returns:
        pathlib.Path: the directory
    """
    (tmp_path / "a.txt").write_bytes(b"hi\n")
    (tmp_path / ".hidden").write_bytes(b"secret")
    (tmp_path / "sub").mkdir()
    return tmp_path


@pytest.fixture
def resolver(doc_root):
    return ContentResolver(str(doc_root))


@pytest.fixture
def config(doc_root):
    return ServerConfig(host="127.0.0.1", port=0, directory=str(doc_root), request_timeout=5)


@pytest.fixture
def daemon(config):
    """Running HTTPDaemon serving doc_root on an ephemeral loopback port."""
    d = HTTPDaemon(config, ContentResolver(config.root_directory, block_size=config.block_size))
    assert d.start()
    yield d
    d.stop()


def send_raw(port, data, host="127.0.0.1"):
    """Send raw bytes to the server and read until it closes the connection."""
    with socket.create_connection((host, port), timeout=5) as sock:
        sock.sendall(data)
        chunks = []
        while True:
            chunk = sock.recv(65536)
            if not chunk:
                break
            chunks.append(chunk)
    return b"".join(chunks)


def http_get(port, path, method="GET", host="127.0.0.1"):
    """Issue a request and split the reply.

    The path may be bytes to send a request target verbatim.

    Returns:
        tuple: (status, headers dict, body bytes), or None if the server
        closed the connection without responding
    """
    if isinstance(path, str):
        path = path.encode("ascii")
    request = method.encode("ascii") + b" " + path + b" HTTP/1.1\r\nHost: localhost\r\n\r\n"
    raw = send_raw(port, request, host=host)
    if not raw:
        return None
    head, body = raw.split(b"\r\n\r\n", 1)
    lines = head.decode("iso-8859-1").split("\r\n")
    status = int(lines[0].split()[1])
    headers = {}
    for line in lines[1:]:
        key, value = line.split(":", 1)
        headers[key.strip().lower()] = value.strip()
    return status, headers, body


@pytest.fixture(autouse=False)
def thread_leak_guard():
    """Fail the test if it leaves threads running behind."""
    before = set(t.ident for t in threading.enumerate())
    yield
    after = set(t.ident for t in threading.enumerate())
    leaked = [t for t in threading.enumerate() if t.ident in after - before]
    assert not leaked, "Thread leak detected:\n" + "\n".join(f"  - {t.name}" for t in leaked)
