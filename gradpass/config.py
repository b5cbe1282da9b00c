# Copyright 2019-2025 ETH Zurich and the DaCe authors. All rights reserved.
""" Hierarchical configuration of gradpass.

    Entries are declared in ``config_schema.yml`` (type, default, description).
    User values are read from ``.gradpass.conf`` in the working directory, or
    from the file named by ``GRADPASS_CONFIG`` (default ``~/.gradpass.conf``).
    Any leaf entry can be overridden by an environment variable named
    ``GRADPASS_<key>_<subkey>``, e.g. ``GRADPASS_autodiff_mirror_suffix``.
"""
import contextlib
import copy
import os
from typing import Any, Dict, Optional, Tuple
import warnings

import yaml

_TRUE_STRINGS = ('true', '1', 'y', 'yes', 'on', 'verbose')


@contextlib.contextmanager
def set_temporary(*path, value):
    """ Temporarily sets the configuration entry at ``path`` to ``value``, restoring the old value on exit.

        :Example:

            with set_temporary("autodiff", "mirror_suffix", value="_recomputed"):
                grads = gradients(y, x, mirror_strategy="RecomputeAll")
    """
    old_value = Config.get(*path)
    Config.set(*path, value=value)
    try:
        yield
    finally:
        Config.set(*path, value=old_value)


@contextlib.contextmanager
def temporary_config():
    """
    Creates a context in which every configuration change is undone on exit.

    with temporary_config():
        Config.set("autodiff", "zero_op", value="fill_zero")
        Config.set("debugprint", value=True)
        grads = gradients(y, x)
    """
    snapshot = copy.deepcopy(Config._config)
    try:
        yield
    finally:
        Config._config = snapshot


def _split_keys(key_hierarchy) -> Tuple[str, ...]:
    # Accepts both ("a", "b") and ("a.b",)
    if len(key_hierarchy) == 1 and '.' in key_hierarchy[0]:
        return tuple(key_hierarchy[0].split('.'))
    return tuple(key_hierarchy)


def _fill_defaults(config: Dict[str, Any], schema: Dict[str, Any]) -> bool:
    """ Adds the schema defaults of entries missing from ``config``.

        :return: True if ``config`` was modified.
    """
    modified = False
    for key, entry in schema.items():
        if entry['type'] == 'dict':
            if key not in config:
                config[key] = {}
                modified = True
            modified |= _fill_defaults(config[key], entry['required'])
        elif key not in config:
            config[key] = copy.deepcopy(entry.get('default', [] if entry['type'] == 'list' else None))
            modified = True
    return modified


def _strip_defaults(config: Dict[str, Any], schema: Dict[str, Any]) -> Dict[str, Any]:
    result = {}
    for key, value in config.items():
        if key not in schema:  # Entry was removed from the schema
            continue
        entry = schema[key]
        if 'required' in entry:
            nested = _strip_defaults(value, entry['required'])
            if nested:
                result[key] = nested
        elif 'default' in entry and value != entry['default']:
            result[key] = value
    return result


class Config(object):
    """ Interface to the gradpass hierarchical configuration. """

    default_filename = '.gradpass.conf'
    _config: Dict[str, Any] = {}
    _config_metadata: Dict[str, Any] = {}
    _cfg_filename: Optional[str] = None
    _metadata_filename = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'config_schema.yml')

    @staticmethod
    def cfg_filename() -> Optional[str]:
        """ Returns the path of the loaded configuration file, or None if only defaults are in use. """
        return Config._cfg_filename

    @staticmethod
    def initialize():
        """
        Loads the schema and the first configuration file found.

        :note: This function runs automatically when the module is loaded.
        """
        if Config._config_metadata:
            return
        Config.load_schema()

        user_file = os.environ.get('GRADPASS_CONFIG', os.path.join(os.path.expanduser('~'), Config.default_filename))
        for filename in (Config.default_filename, user_file):
            if not os.path.isfile(filename):
                continue
            try:
                Config.load(filename)
            except OSError:
                continue
            Config._cfg_filename = filename
            return

        Config._config = {}
        _fill_defaults(Config._config, Config._config_metadata['required'])

    @staticmethod
    def load(filename: Optional[str] = None):
        """ Loads a configuration file. Entries it does not set take their default values.

            :param filename: The file to load. If unspecified, reloads the current configuration file.
        """
        filename = filename or Config._cfg_filename
        with open(filename, 'r') as f:
            try:
                Config._config = yaml.load(f, Loader=yaml.SafeLoader) or {}
            except yaml.YAMLError as ex:
                raise ValueError(f'Malformed gradpass configuration file "{filename}": {ex}') from ex
        _fill_defaults(Config._config, Config._config_metadata['required'])

    @staticmethod
    def load_schema(filename: Optional[str] = None):
        """ Loads the configuration schema.

            :param filename: The schema file. If unspecified, uses the schema shipped with the package.
        """
        with open(filename or Config._metadata_filename, 'r') as f:
            Config._config_metadata = yaml.load(f, Loader=yaml.SafeLoader)

    @staticmethod
    def save(path: Optional[str] = None, all: bool = False):
        """
        Saves the configuration to a file.

        :param path: The file to save to. If unspecified, uses the loaded configuration file.
        :param all: If False, only saves entries that differ from their defaults.
        """
        path = path or Config._cfg_filename
        if path is None:
            warnings.warn('No gradpass configuration file is loaded and no path was given, configuration not saved')
            return
        with open(path, 'w') as f:
            yaml.dump(Config._config if all else Config.nondefaults(), f, default_flow_style=False)

    @staticmethod
    def get_metadata(*key_hierarchy) -> Dict[str, Any]:
        """ Returns the schema of an entry, e.g. ``get_metadata('autodiff', 'zero_op')``. """
        entry = Config._config_metadata
        for key in _split_keys(key_hierarchy):
            entry = entry['required'][key]
        return entry

    @staticmethod
    def get_default(*key_hierarchy) -> Any:
        """ Returns the default value of an entry. """
        return Config.get_metadata(*key_hierarchy)['default']

    @staticmethod
    def get(*key_hierarchy) -> Any:
        """ Returns the current value of an entry, e.g. ``get('autodiff', 'mirror_suffix')`` or
            ``get('autodiff.mirror_suffix')``.

            Environment variable overrides take precedence over configuration files.
        """
        keys = _split_keys(key_hierarchy)
        envvar = 'GRADPASS_' + '_'.join(keys)
        if envvar in os.environ:
            return os.environ[envvar]

        value = Config._config
        for key in keys:
            value = value[key]
        return value

    @staticmethod
    def get_bool(*key_hierarchy) -> bool:
        """ Returns the value of a boolean entry, also accepting strings such as ``"yes"`` or ``"1"``
            from environment variable overrides. """
        value = Config.get(*key_hierarchy)
        if isinstance(value, bool):
            return value
        return str(value).lower() in _TRUE_STRINGS

    @staticmethod
    def set(*key_hierarchy, value=None, autosave: bool = False):
        """ Sets the value of an entry, e.g. ``Config.set('autodiff', 'mirror_suffix', value='_recomputed')``.

            :param autosave: If True, saves the configuration file after modification.
        """
        keys = _split_keys(key_hierarchy)
        section = Config._config
        for key in keys[:-1]:
            section = section[key]
        section[keys[-1]] = value
        if autosave:
            Config.save()

    @staticmethod
    def nondefaults() -> Dict[str, Any]:
        """ Returns the entries whose values differ from their defaults, as a nested dictionary. """
        return _strip_defaults(Config._config, Config._config_metadata['required'])


# Code that runs when the module is loaded
Config.initialize()
