from types import SimpleNamespace

import pytest
import requests

from photos_zipper.photos_lib.errors import ParseError, TransportError
from photos_zipper.photos_lib.fetch import Fetcher, SessionFactory


class FakeResponse:
    def __init__(self, status_code=200, body=b'', url='http://photos.test/'):
        self.status_code = status_code
        self.ok = status_code < 400
        self.content = body
        self.text = body.decode('utf-8')
        self.url = url
        self.closed = False

    def json(self):
        import json
        return json.loads(self.text)

    def iter_content(self, chunk_size=8192):
        for i in range(0, len(self.content), 2):
            yield self.content[i:i + 2]

    def close(self):
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


def _fetcher(get=None, head=None, base_url='http://photos.test'):
    session = SimpleNamespace(get=get, head=head)
    return Fetcher(base_url, sessions=SimpleNamespace(get=lambda: session))


def test_url_for_joins_root_relative_paths():
    fetcher = _fetcher(base_url='https://example.com/site')
    assert fetcher.url_for('/photos/a.jpg') == 'https://example.com/photos/a.jpg'
    assert fetcher.url_for('https://cdn.example.com/x.zip') == 'https://cdn.example.com/x.zip'


def test_get_json_and_text():
    calls = []

    def fake_get(url, timeout=None, stream=False):
        calls.append((url, timeout))
        return FakeResponse(body=b'{"folders": ["a"]}', url=url)

    fetcher = _fetcher(get=fake_get)
    assert fetcher.get_json('/photos/manifest.json') == {'folders': ['a']}
    assert fetcher.get_text('/photos/manifest.json').startswith('{')
    assert calls[0] == ('http://photos.test/photos/manifest.json', None)


def test_http_error_status_is_transport_error():
    fetcher = _fetcher(get=lambda url, timeout=None, stream=False: FakeResponse(404, url=url))
    with pytest.raises(TransportError, match='HTTP 404'):
        fetcher.get_bytes('/missing.jpg')


def test_network_failure_is_transport_error():
    def boom(url, timeout=None, stream=False):
        raise requests.ConnectionError('refused')

    with pytest.raises(TransportError):
        _fetcher(get=boom).get_text('/photos/')


def test_bad_json_is_parse_error():
    fetcher = _fetcher(get=lambda url, timeout=None, stream=False: FakeResponse(body=b'<html>', url=url))
    with pytest.raises(ParseError):
        fetcher.get_json('/photos/index.json')


def test_exists_uses_head_and_swallows_errors():
    seen = []

    def fake_head(url, timeout=None, allow_redirects=False):
        seen.append((url, allow_redirects))
        if url.endswith('down.zip'):
            raise requests.Timeout('slow')
        return FakeResponse(200 if url.endswith('ok.zip') else 404, url=url)

    fetcher = _fetcher(head=fake_head)
    assert fetcher.exists('/ok.zip') is True
    assert fetcher.exists('/missing.zip') is False
    assert fetcher.exists('/down.zip') is False
    assert seen[0] == ('http://photos.test/ok.zip', True)


def test_download_to_streams_into_place(tmp_path):
    fetcher = _fetcher(get=lambda url, timeout=None, stream=False: FakeResponse(body=b'abcdef', url=url))
    out = fetcher.download_to('/photos/a.jpg', tmp_path / 'sub' / 'a.jpg')
    assert out.read_bytes() == b'abcdef'
    assert not (tmp_path / 'sub' / 'a.jpg.part').exists()


class DiskFullResponse(FakeResponse):
    def iter_content(self, chunk_size=8192):
        yield b'ab'
        raise OSError(28, 'No space left on device')


def test_download_to_removes_partial_file_on_write_error(tmp_path):
    fetcher = _fetcher(get=lambda url, timeout=None, stream=False: DiskFullResponse(body=b'abcdef', url=url))
    with pytest.raises(OSError):
        fetcher.download_to('/photos/a.jpg', tmp_path / 'a.jpg')
    assert not (tmp_path / 'a.jpg.part').exists()
    assert not (tmp_path / 'a.jpg').exists()


def test_session_factory_reuses_one_session_per_thread():
    factory = SessionFactory(verify=False)
    session = factory.get()
    assert factory.get() is session
    assert session.verify is False
    assert 'User-Agent' in session.headers
