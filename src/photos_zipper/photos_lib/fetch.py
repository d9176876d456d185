"""Network fetch helpers for the photos archive tools."""
import logging
import random
import threading
from pathlib import Path
from typing import Optional
from urllib.parse import urljoin

import requests

from .errors import ParseError, TransportError
from ..utils.constants import USER_AGENTS

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 512


def _get_random_user_agent() -> str:
    """Return a random user agent."""
    return random.choice(USER_AGENTS)


class SessionFactory:
    """One `requests.Session` per thread; archive workers never share a session."""

    def __init__(self, verify: bool = True):
        self.local = threading.local()
        self.verify = verify

    def get(self) -> requests.Session:
        session = getattr(self.local, 'session', None)
        if session is None:
            session = requests.Session()
            session.headers.update({
                'User-Agent': _get_random_user_agent(),
                'Accept': 'text/html,application/xhtml+xml,application/json;q=0.9,*/*;q=0.8',
            })
            session.verify = self.verify
            self.local.session = session
        return session


class Fetcher:
    """Fetches root-relative paths from the photo host.

    Every failure surfaces as `TransportError` (or `ParseError` for bad JSON);
    callers decide whether that means "not found" or "skip".
    """

    def __init__(self, base_url: str, timeout: Optional[float] = None, verify: bool = True,
                 sessions: Optional[SessionFactory] = None):
        self.base_url = base_url.rstrip('/') + '/'
        self.timeout = timeout
        self.sessions = sessions or SessionFactory(verify=verify)

    def url_for(self, path: str) -> str:
        return urljoin(self.base_url, path)

    def get(self, path: str, stream: bool = False) -> requests.Response:
        url = self.url_for(path)
        try:
            response = self.sessions.get().get(url, timeout=self.timeout, stream=stream)
        except requests.RequestException as e:
            raise TransportError(url, str(e)) from e
        if not response.ok:
            response.close()
            raise TransportError(url, f"HTTP {response.status_code}")
        return response

    def get_text(self, path: str) -> str:
        return self.get(path).text

    def get_json(self, path: str):
        response = self.get(path)
        try:
            return response.json()
        except ValueError as e:
            raise ParseError(f"Invalid JSON at {response.url}: {e}") from e

    def get_bytes(self, path: str) -> bytes:
        return self.get(path).content

    def exists(self, path: str) -> bool:
        """Lightweight existence probe (HEAD, redirects followed)."""
        url = self.url_for(path)
        try:
            response = self.sessions.get().head(url, timeout=self.timeout, allow_redirects=True)
        except requests.RequestException as e:
            logger.debug(f"Probe failed for {url}: {e}")
            return False
        response.close()
        return response.ok

    def download_to(self, path: str, out_path: Path) -> Path:
        """Stream a remote file to `out_path` through a `.part` file."""
        out_path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = out_path.with_suffix(out_path.suffix + '.part')
        with self.get(path, stream=True) as response:
            try:
                with tmp_path.open('wb') as f:
                    for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                        if chunk:
                            f.write(chunk)
            except requests.RequestException as e:
                tmp_path.unlink(missing_ok=True)
                raise TransportError(self.url_for(path), str(e)) from e
            except OSError:
                tmp_path.unlink(missing_ok=True)
                raise
        tmp_path.replace(out_path)
        return out_path
