"""Configuration for the photos archive tools.

Settings come from an optional `photos_config.json` shaped like:

    {
      "site": {"base_url": "...", "photos_root": "/photos/", "manifest": "manifest.json", "index": "index.json"},
      "defaults": {"download_dir": "downloads", "compression": "deflated"},
      "network": {"concurrency": 4, "sequential_pause": 0.25, "timeout": null, "verify_ssl": true},
      "zip": {"overrides": {"minnesota": "/photos/minnesota/minnesota.zip"}, "candidates": ["{folder_path}{name}.zip"]}
    }

Every section and key is optional. A missing or unreadable file yields the
defaults.
"""
import json
import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from .utils.constants import (
    COMPRESSION_METHODS,
    DEFAULT_CONCURRENCY,
    INDEX_NAME,
    MANIFEST_NAME,
    PHOTOS_ROOT,
    SEQUENTIAL_PAUSE,
    ZIP_CANDIDATES,
    ZIP_OVERRIDES,
)

logger = logging.getLogger(__name__)

CONFIG_FILENAME = 'photos_config.json'


@dataclass
class PhotosConfig:
    base_url: str = 'http://localhost:8000'
    photos_root: str = PHOTOS_ROOT
    manifest_name: str = MANIFEST_NAME
    index_name: str = INDEX_NAME
    download_dir: str = 'downloads'
    compression: str = 'deflated'
    concurrency: int = DEFAULT_CONCURRENCY
    sequential_pause: float = SEQUENTIAL_PAUSE
    timeout: Optional[float] = None
    verify_ssl: bool = True
    zip_overrides: Dict[str, str] = field(default_factory=lambda: dict(ZIP_OVERRIDES))
    zip_candidates: List[str] = field(default_factory=lambda: list(ZIP_CANDIDATES))

    def __post_init__(self):
        if not self.photos_root.endswith('/'):
            self.photos_root += '/'
        self.concurrency = max(1, int(self.concurrency))
        self.sequential_pause = max(0.0, float(self.sequential_pause))
        if self.compression not in COMPRESSION_METHODS:
            logger.warning(f"Unknown compression '{self.compression}', using deflated")
            self.compression = 'deflated'

    @classmethod
    def from_dict(cls, cfg: dict) -> 'PhotosConfig':
        site = cfg.get('site', {})
        defaults = cfg.get('defaults', {})
        net = cfg.get('network', {})
        zip_cfg = cfg.get('zip', {})
        base = cls()
        return cls(
            base_url=site.get('base_url', base.base_url),
            photos_root=site.get('photos_root', base.photos_root),
            manifest_name=site.get('manifest', base.manifest_name),
            index_name=site.get('index', base.index_name),
            download_dir=defaults.get('download_dir', base.download_dir),
            compression=defaults.get('compression', base.compression),
            concurrency=net.get('concurrency', base.concurrency),
            sequential_pause=net.get('sequential_pause', base.sequential_pause),
            timeout=net.get('timeout', base.timeout),
            verify_ssl=bool(net.get('verify_ssl', base.verify_ssl)),
            zip_overrides=dict(zip_cfg.get('overrides', base.zip_overrides)),
            zip_candidates=list(zip_cfg.get('candidates', base.zip_candidates)),
        )

    def to_dict(self) -> dict:
        flat = asdict(self)
        return {
            'site': {
                'base_url': flat['base_url'],
                'photos_root': flat['photos_root'],
                'manifest': flat['manifest_name'],
                'index': flat['index_name'],
            },
            'defaults': {'download_dir': flat['download_dir'], 'compression': flat['compression']},
            'network': {
                'concurrency': flat['concurrency'],
                'sequential_pause': flat['sequential_pause'],
                'timeout': flat['timeout'],
                'verify_ssl': flat['verify_ssl'],
            },
            'zip': {'overrides': flat['zip_overrides'], 'candidates': flat['zip_candidates']},
        }


def load_config(path=None) -> PhotosConfig:
    """Load `photos_config.json` from `path` (default: current directory)."""
    cfg_path = Path(path) if path else Path.cwd() / CONFIG_FILENAME
    cfg = {}
    if cfg_path.exists():
        try:
            with open(cfg_path, 'r', encoding='utf-8') as f:
                cfg = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read {cfg_path}: {e}; using defaults")
            cfg = {}
    if not isinstance(cfg, dict):
        logger.warning(f"{cfg_path} is not a JSON object; using defaults")
        cfg = {}
    return PhotosConfig.from_dict(cfg)
