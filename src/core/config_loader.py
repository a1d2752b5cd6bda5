# -*- coding: utf-8 -*-
"""
Configuration loader for the offline circulation tools.

Reads ``config/offline_circ.ini`` via ``configparser`` and exposes a
dict-like interface to the rest of the system.  Also provides helpers
for environment-variable interpolation of values such as the database
path.
"""

import os
import re
import configparser

CONFIG_FILENAME = "offline_circ.ini"

# Default config file search paths, in priority order
CONFIG_SEARCH_PATHS = [
    os.path.join(os.path.dirname(__file__), os.pardir, os.pardir, "config"),
    "/etc/offline_circ",
]

DEFAULT_DATABASE_PATH = "offline_circ.db"
DEFAULT_USERID = 0
DEFAULT_FILE_VERSION = "1.0"
DEFAULT_OUTPUT_DIR = "."
DEFAULT_GENERATOR = "export_offline_circ_log.py"
DEFAULT_GENERATOR_VERSION = "1.0"

_ENV_TOKEN = re.compile(r"\$\{([^}]+)\}")


class CircConfig(object):
    """Thin wrapper around ``ConfigParser`` with convenience methods
    for typed access and environment-variable substitution."""

    def __init__(self, config_path=None):
        self._parser = configparser.ConfigParser()
        self._path = config_path
        self._loaded = False

    # ---------------------------------------------------------------
    # Loading
    # ---------------------------------------------------------------

    def load(self, path=None):
        """Read the INI file from *path* or search the default locations."""
        if path is not None:
            self._path = path

        if self._path and os.path.isfile(self._path):
            self._parser.read(self._path, encoding="utf-8")
            self._loaded = True
            return

        for search_dir in CONFIG_SEARCH_PATHS:
            candidate = os.path.join(search_dir, CONFIG_FILENAME)
            if os.path.isfile(candidate):
                self._parser.read(candidate, encoding="utf-8")
                self._path = candidate
                self._loaded = True
                return

    def is_loaded(self):
        return self._loaded

    @property
    def path(self):
        return self._path

    # ---------------------------------------------------------------
    # Typed accessors
    # ---------------------------------------------------------------

    def get(self, section, key, fallback=None):
        try:
            value = self._parser.get(section, key)
            return self._interpolate_env(value)
        except (configparser.NoSectionError, configparser.NoOptionError):
            return fallback

    def get_int(self, section, key, fallback=0):
        raw = self.get(section, key)
        if raw is None:
            return fallback
        try:
            return int(raw)
        except (ValueError, TypeError):
            print("Config warning: bad integer for [%s] %s = %r" % (section, key, raw))
            return fallback

    # ---------------------------------------------------------------
    # Named settings used by the tools
    # ---------------------------------------------------------------

    def database_path(self):
        return self.get("database", "path", fallback=DEFAULT_DATABASE_PATH)

    def import_userid(self):
        return self.get_int("import", "userid", fallback=DEFAULT_USERID)

    def file_version(self):
        return self.get("import", "file_version", fallback=DEFAULT_FILE_VERSION)

    def output_dir(self):
        return self.get("export", "output_dir", fallback=DEFAULT_OUTPUT_DIR)

    def generator(self):
        return (
            self.get("export", "generator", fallback=DEFAULT_GENERATOR),
            self.get("export", "generator_version", fallback=DEFAULT_GENERATOR_VERSION),
        )

    # ---------------------------------------------------------------
    # Environment variable interpolation
    # ---------------------------------------------------------------

    @staticmethod
    def _interpolate_env(value):
        """Replace ``${VAR}`` tokens with the corresponding environment
        variable, or leave the token in place if the variable is unset."""
        if "${" not in value:
            return value

        def _replace(match):
            return os.environ.get(match.group(1), match.group(0))
        return _ENV_TOKEN.sub(_replace, value)


# -------------------------------------------------------------------
# Module-level convenience: load once and share
# -------------------------------------------------------------------

_global_config = None


def load_circ_config(path=None):
    """Load (or return the already-loaded) configuration.

    An explicit *path* always reloads, so a ``--config`` option on the
    command line wins over whatever was cached earlier in the process.
    """
    global _global_config
    if _global_config is None or path is not None:
        _global_config = CircConfig(path)
        _global_config.load(path)
    return _global_config


def reset_circ_config():
    global _global_config
    _global_config = None
