"""Pytest configuration and shared fakes for photos-zipper tests."""
import json
import sys
import threading
import time
from pathlib import Path
from urllib.parse import urljoin

import pytest

# Allow running the tests from a checkout without installing the package
src_dir = Path(__file__).parent.parent / 'src'
if str(src_dir) not in sys.path:
    sys.path.insert(0, str(src_dir))

from photos_zipper.photos_lib.errors import ParseError, TransportError  # noqa: E402

FIXTURES = Path(__file__).parent / 'fixtures'


class FakeFetcher:
    """Serves canned responses keyed by root-relative path.

    Values may be bytes, str, a JSON-able dict/list, or an Exception instance
    to raise. Missing paths behave like HTTP 404.
    """

    def __init__(self, routes=None, base_url='http://photos.test/', delay=0.0):
        self.routes = dict(routes or {})
        self.base_url = base_url
        self.delay = delay
        self.calls = []
        self.probes = []
        self.fetched = []
        self.in_flight = 0
        self.max_in_flight = 0
        self._lock = threading.Lock()

    def url_for(self, path):
        return urljoin(self.base_url, path)

    def _lookup(self, path):
        self.calls.append(path)
        if path not in self.routes:
            raise TransportError(self.url_for(path), 'HTTP 404')
        value = self.routes[path]
        if isinstance(value, Exception):
            raise value
        return value

    def get_json(self, path):
        value = self._lookup(path)
        if isinstance(value, (dict, list)):
            return value
        if isinstance(value, bytes):
            value = value.decode('utf-8')
        try:
            return json.loads(value)
        except ValueError as e:
            raise ParseError(str(e)) from e

    def get_text(self, path):
        value = self._lookup(path)
        if isinstance(value, (dict, list)):
            return json.dumps(value)
        return value.decode('utf-8') if isinstance(value, bytes) else value

    def get_bytes(self, path):
        with self._lock:
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
            self.fetched.append(path)
        try:
            if self.delay:
                time.sleep(self.delay)
            value = self._lookup(path)
            return value.encode('utf-8') if isinstance(value, str) else value
        finally:
            with self._lock:
                self.in_flight -= 1

    def exists(self, path):
        self.probes.append(path)
        return path in self.routes and not isinstance(self.routes[path], Exception)

    def download_to(self, path, out_path):
        data = self.get_bytes(path)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_bytes(data)
        return out_path


@pytest.fixture
def fixture_text():
    def _read(name):
        return (FIXTURES / name).read_text(encoding='utf-8')
    return _read


@pytest.fixture
def make_fetcher():
    return FakeFetcher
