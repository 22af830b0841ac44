"""TOML settings profiles: named MapSettings presets stored on disk."""

import logging
import os
from pathlib import Path

import tomlkit

from domain.models import MapSettings
from domain.toml_sections import flat_to_sectioned, sectioned_to_flat
from shared.constants import PROFILES_DIR

logger = logging.getLogger(__name__)

PROFILE_SUFFIX = '.toml'


def _user_profiles_dir() -> Path:
    """
    Каталог профилей.

    При запуске из репозитория используется <repo>/configs/profiles,
    иначе $XDG_CONFIG_HOME/route-map/profiles (или ~/.config/...).
    """
    repo_profiles = Path(__file__).resolve().parents[2] / PROFILES_DIR
    if repo_profiles.is_dir():
        return repo_profiles
    config_home = os.getenv('XDG_CONFIG_HOME')
    base = Path(config_home) if config_home else Path.home() / '.config'
    return base / 'route-map' / 'profiles'


def ensure_profiles_dir() -> Path:
    folder = _user_profiles_dir()
    folder.mkdir(parents=True, exist_ok=True)
    return folder


def list_profiles() -> list[str]:
    return sorted(
        p.stem for p in ensure_profiles_dir().iterdir() if p.suffix == PROFILE_SUFFIX
    )


def profile_path(name: str) -> Path:
    return ensure_profiles_dir() / f'{name}{PROFILE_SUFFIX}'


def _resolve(name_or_path: str | Path) -> Path:
    candidate = Path(name_or_path)
    if candidate.suffix.lower() == PROFILE_SUFFIX and candidate.is_file():
        return candidate
    return profile_path(str(name_or_path))


def load_profile(name_or_path: str | Path) -> MapSettings:
    """
    Читает профиль и валидирует его как MapSettings.

    Принимает имя профиля из каталога профилей или путь к .toml файлу.
    Допускается как секционированный, так и плоский TOML.

    Raises:
        FileNotFoundError: профиль не найден.

    """
    path = _resolve(name_or_path)
    if not path.is_file():
        msg = f'Profile not found: {path}'
        raise FileNotFoundError(msg)
    document = tomlkit.parse(path.read_text(encoding='utf-8'))
    settings = MapSettings.model_validate(sectioned_to_flat(document.unwrap()))
    logger.info('Profile loaded: %s (zoom=%d)', path, settings.zoom)
    return settings


def save_profile(name: str, settings: MapSettings) -> Path:
    """Записывает профиль в секционированном виде; возвращает путь к файлу."""
    path = profile_path(name)
    document = tomlkit.document()
    for section, values in flat_to_sectioned(settings.model_dump(mode='json')).items():
        table = tomlkit.table()
        table.update(values)
        document.add(section, table)
    path.write_text(tomlkit.dumps(document), encoding='utf-8')
    logger.info('Profile saved: %s', path)
    return path


def delete_profile(name: str) -> None:
    profile_path(name).unlink(missing_ok=True)
