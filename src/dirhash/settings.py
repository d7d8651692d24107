import os
import tomllib
from pathlib import Path

CONFIG_ENV = 'DIRHASH_CONFIG'

# Settings keys
SETTING_EXTENSIONS = 'scan.extensions'
SETTING_JOBS = 'scan.jobs'
SETTING_CHUNK_SIZE = 'scan.chunk_size'
SETTING_ALGORITHM = 'scan.algorithm'
SETTING_DUPLICATES_ONLY = 'report.duplicates_only'
SETTING_SORT = 'report.sort'
SETTING_LOG_PATH = 'logging.path'
SETTING_LOG_LEVEL = 'logging.level'


class SettingsError(ValueError):
    pass


class Settings:
    """Read-only view over a TOML settings file.

    The file is optional. Without one, every get() returns its default. Values
    are returned as parsed; interpreting them is up to the caller.

    Example settings file:

        [scan]
        extensions = ["jpg", "png"]
        jobs = 4

        [logging]
        path = "/var/log/dirhash.log"
    """

    def __init__(self, path: Path | None = None):
        self._path = path
        self._settings = {}

        if path is not None:
            try:
                with open(path, 'rb') as f:
                    self._settings = tomllib.load(f)
            except tomllib.TOMLDecodeError as e:
                raise SettingsError(f"invalid settings file {path}: {e}") from e

    @classmethod
    def locate(cls, path: str | os.PathLike | None = None) -> 'Settings':
        """Load the file given explicitly, else the one named by DIRHASH_CONFIG, else nothing."""
        if path is None:
            path = os.environ.get(CONFIG_ENV) or None
        return cls(None if path is None else Path(path))

    @property
    def path(self) -> Path | None:
        return self._path

    def get(self, key: str, default=None):
        """Look up a value by dotted key, e.g. 'scan.jobs' reads settings['scan']['jobs'].

        Returns default when any part of the key path is missing or an
        intermediate value is not a table.
        """
        value = self._settings

        for k in key.split('.'):
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value
