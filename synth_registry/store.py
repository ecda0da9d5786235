from __future__ import annotations

import copy
import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Any

from .config import get_settings
from .constants import ASSETS_FILENAME, RELEASES_FILENAME
from .errors import NotFoundError, ValidationError

LOGGER = logging.getLogger('synth_registry.store')

DEPLOYED_FOLDER = 'deployed'


def read_json_file(path: Path) -> Any:
    LOGGER.debug('reading %s', path)
    try:
        return json.loads(path.read_text(encoding='utf-8'))
    except json.JSONDecodeError as exc:
        raise ValidationError(f'Malformed JSON in {path}: {exc}') from exc


def deployed_root() -> Path:
    return get_settings().data_dir / DEPLOYED_FOLDER


def bundled_networks() -> list[str]:
    root = deployed_root()
    if not root.is_dir():
        return []
    return sorted(child.name for child in root.iterdir() if child.is_dir())


@lru_cache(maxsize=None)
def _read_bundled_cached(data_dir: str, relative: str) -> Any:
    path = Path(data_dir) / relative
    if not path.exists():
        return None
    return read_json_file(path)


def read_bundled(folder_key: str, filename: str) -> Any:
    """Return a copy of one bundled file for a network folder, or None when the file is absent."""
    folder = deployed_root() / folder_key
    if not folder.is_dir():
        raise NotFoundError(f'No bundled deployment data for network: {folder_key}.')

    settings = get_settings()
    payload = _read_bundled_cached(str(settings.data_dir), f'{DEPLOYED_FOLDER}/{folder_key}/{filename}')
    # Callers get their own copy so the cached bundle stays pristine.
    return copy.deepcopy(payload)


def _read_shared(filename: str, label: str) -> Any:
    settings = get_settings()
    payload = _read_bundled_cached(str(settings.data_dir), filename)
    if payload is None:
        raise NotFoundError(f'Cannot find {label} file in {settings.data_dir}.')
    return copy.deepcopy(payload)


def load_assets() -> dict[str, dict[str, Any]]:
    return _read_shared(ASSETS_FILENAME, 'asset registry')


def load_releases() -> dict[str, Any]:
    return _read_shared(RELEASES_FILENAME, 'releases')


def cache_clear() -> None:
    _read_bundled_cached.cache_clear()
