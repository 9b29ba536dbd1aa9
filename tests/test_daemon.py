"""
End-to-end tests for HTTPDaemon over loopback sockets.
"""
import os
import socket
import sys
import threading

import pytest

from simplehttpd.config import ServerConfig
from simplehttpd.daemon import HTTPDaemon
from simplehttpd.resolver import ContentResolver

from conftest import http_get


@pytest.mark.timeout(20)
class TestServing:

    def test_file_scenario(self, daemon):
        status, headers, body = http_get(daemon.server_port, "/a.txt")
        assert status == 200
        assert headers["content-length"] == "3"
        assert "content-type" not in headers
        assert body == b"hi\n"

    def test_listing_scenario(self, daemon, doc_root):
        status, headers, body = http_get(daemon.server_port, "/missing")
        assert status == 200
        assert "content-length" not in headers

        names = [e.name for e in os.scandir(str(doc_root)) if not e.name.startswith(".")]
        assert body == "".join(f'<a href="/{n}">{n}</a><br>' for n in names).encode()
        assert body.count(b"<a ") == 2
        assert b".hidden" not in body

    def test_large_file_round_trip(self, daemon, doc_root):
        data = os.urandom(300 * 1024 + 123)
        (doc_root / "big.bin").write_bytes(data)
        status, headers, body = http_get(daemon.server_port, "/big.bin")
        assert status == 200
        assert int(headers["content-length"]) == len(data)
        assert body == data

    def test_non_get_closes_without_response(self, daemon):
        assert http_get(daemon.server_port, "/a.txt", method="DELETE") is None

    def test_percent_encoded_path(self, daemon, doc_root):
        (doc_root / "with space.txt").write_bytes(b"spaced")
        _, _, body = http_get(daemon.server_port, "/with%20space.txt?ignored=1")
        assert body == b"spaced"

    def test_raw_utf8_path(self, daemon, doc_root):
        (doc_root / "café.txt").write_bytes(b"coffee")
        status, headers, body = http_get(daemon.server_port, "/café.txt".encode("utf-8"))
        assert status == 200
        assert headers["content-length"] == "6"
        assert body == b"coffee"

    def test_percent_encoded_utf8_path(self, daemon, doc_root):
        (doc_root / "café.txt").write_bytes(b"coffee")
        _, _, body = http_get(daemon.server_port, "/caf%C3%A9.txt")
        assert body == b"coffee"

    @pytest.mark.skipif(sys.platform in ("win32", "darwin"), reason="filesystem needs arbitrary byte names")
    def test_non_utf8_name_reachable_from_listing(self, daemon, doc_root):
        name = b"x\xff.bin"
        try:
            with open(os.path.join(os.fsencode(str(doc_root)), name), "wb") as f:
                f.write(b"bytes")
        except OSError:
            pytest.skip("filesystem rejects non-UTF-8 names")

        _, _, listing = http_get(daemon.server_port, "/missing")
        assert b'<a href="/x\xff.bin">x\xff.bin</a><br>' in listing

        # Both the verbatim link target and its percent-encoded form serve the file
        assert http_get(daemon.server_port, b"/x\xff.bin")[2] == b"bytes"
        assert http_get(daemon.server_port, "/x%FF.bin")[2] == b"bytes"

    def test_concurrent_requests(self, daemon, doc_root):
        for i in range(8):
            (doc_root / f"f{i}.txt").write_bytes(str(i).encode() * 1000)

        results = {}

        def fetch(i):
            results[i] = http_get(daemon.server_port, f"/f{i}.txt")[2]

        threads = [threading.Thread(target=fetch, args=(i,)) for i in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=10)
            assert not t.is_alive()

        for i in range(8):
            assert results[i] == str(i).encode() * 1000


@pytest.mark.timeout(20)
class TestLifecycle:

    def test_start_stop(self, config, thread_leak_guard):
        d = HTTPDaemon(config, ContentResolver(config.root_directory))
        assert d.start()
        port = d.server_port
        assert d.is_running
        d.stop()
        assert not d.is_running
        assert d.server_port is None
        with pytest.raises(OSError):
            socket.create_connection(("127.0.0.1", port), timeout=1).close()

    def test_stop_twice(self, daemon):
        daemon.stop()
        daemon.stop()

    @pytest.mark.skipif(os.name == "nt", reason="SO_REUSEADDR semantics differ on Windows")
    def test_port_in_use(self, doc_root):
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as busy:
            busy.bind(("127.0.0.1", 0))
            busy.listen(1)
            config = ServerConfig(host="127.0.0.1", port=busy.getsockname()[1], directory=str(doc_root))
            d = HTTPDaemon(config, ContentResolver(config.root_directory))
            assert d.start() is False
            assert not d.is_running

    @pytest.mark.skipif(not socket.has_ipv6, reason="needs IPv6")
    def test_dual_stack(self, doc_root):
        config = ServerConfig(host="::", port=0, directory=str(doc_root), request_timeout=5)
        d = HTTPDaemon(config, ContentResolver(config.root_directory))
        if not d.start():
            pytest.skip("IPv6 not available on this host")
        try:
            assert http_get(d.server_port, "/a.txt", host="127.0.0.1")[2] == b"hi\n"
            try:
                result = http_get(d.server_port, "/a.txt", host="::1")
            except OSError:
                pytest.skip("no IPv6 loopback")
            assert result[2] == b"hi\n"
        finally:
            d.stop()
