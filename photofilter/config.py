"""
Configuration.

Defaults below, overridden by a YAML file, overridden by the environment:

    catalog:
      extended: false          # add hue shift, noir and posterize
      hue_angles: [90]
    library:
      root: ~/.photofilter/library
    api:
      endpoint: https://...
      timeout: 10
    output:
      jpeg_quality: 90
"""

import os
import copy
import logging

import yaml

from .catalog import default_catalog, extended_catalog
from .constants import C
from .source import DEFAULT_ENDPOINT

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = 'photofilter.yml'
ENV_LIBRARY  = 'PHOTOFILTER_LIBRARY'
ENV_ENDPOINT = 'PHOTOFILTER_ENDPOINT'

DEFAULTS = {
    'catalog': {'extended': False,
                'hue_angles': list(C.HUE_ANGLES)},
    'library': {'root': os.path.join('~', '.photofilter', 'library')},
    'api':     {'endpoint': DEFAULT_ENDPOINT,
                'timeout': C.DEFAULT_GET_TIMEOUT},
    'output':  {'jpeg_quality': C.DEFAULT_JPEG_QUALITY},
}


def merge(base, override):
    """Recursively merge dictionary `override` into a copy of `base`."""
    out = copy.deepcopy(base)
    for (k, v) in override.items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = merge(out[k], v)
        else:
            out[k] = v
    return out


def load_config(path=None, environ=None):
    """Return the configuration dictionary.
    :param path: YAML file. If None, DEFAULT_CONFIG_FILE is used when it exists.
    """
    environ = os.environ if environ is None else environ
    config = copy.deepcopy(DEFAULTS)
    if path is None and os.path.exists(DEFAULT_CONFIG_FILE):
        path = DEFAULT_CONFIG_FILE
    if path is not None:
        with open(path) as f:
            loaded = yaml.safe_load(f) or {}
        if not isinstance(loaded, dict):
            raise ValueError(f"{path}: configuration must be a mapping")
        for section in DEFAULTS:
            if section in loaded and not isinstance(loaded[section], dict):
                raise ValueError(f"{path}: '{section}' must be a mapping")
        logger.debug("config from %s: %s", path, loaded)
        config = merge(config, loaded)
    if environ.get(ENV_LIBRARY):
        config['library']['root'] = environ[ENV_LIBRARY]
    if environ.get(ENV_ENDPOINT):
        config['api']['endpoint'] = environ[ENV_ENDPOINT]
    config['library']['root'] = os.path.expanduser(config['library']['root'])
    return config


def catalog_from_config(config):
    """Make the FilterCatalog the configuration asks for."""
    cat = config['catalog']
    if cat.get('extended'):
        return extended_catalog(hue_angles=tuple(cat.get('hue_angles') or C.HUE_ANGLES))
    return default_catalog()
