from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Literal

from .constants import AST_FILENAME, AST_FOLDER, BUILD_FOLDER

PACKAGE_DATA_DIR = Path(__file__).resolve().parent / 'data'


def _repo_root() -> Path:
    return Path(__file__).resolve().parents[1]


def _resolve_path(path_value: str) -> Path:
    path = Path(path_value)
    if path.is_absolute():
        return path
    return _repo_root() / path


@dataclass(frozen=True)
class Settings:
    app_name: str
    environment: Literal['dev', 'prod', 'test']
    cors_origins: str
    data_dir: Path
    ast_path: Path
    default_network: str
    log_level: str


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    environment = os.getenv('ENVIRONMENT', 'dev').strip().lower()
    if environment not in {'dev', 'prod', 'test'}:
        environment = 'dev'

    data_dir_raw = os.getenv('SYNTH_REGISTRY_DATA_DIR', '').strip()

    return Settings(
        app_name=os.getenv('APP_NAME', 'synth-registry-api'),
        environment=environment,  # type: ignore[arg-type]
        cors_origins=os.getenv('CORS_ORIGINS', 'http://localhost:3000'),
        data_dir=_resolve_path(data_dir_raw) if data_dir_raw else PACKAGE_DATA_DIR,
        ast_path=_resolve_path(os.getenv('SYNTH_REGISTRY_AST_PATH', f'{BUILD_FOLDER}/{AST_FOLDER}/{AST_FILENAME}')),
        default_network=os.getenv('SYNTH_REGISTRY_DEFAULT_NETWORK', 'mainnet').strip() or 'mainnet',
        log_level=os.getenv('LOG_LEVEL', 'INFO').strip().upper() or 'INFO'
    )
