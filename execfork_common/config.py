import collections.abc
import os.path
from typing import MutableMapping

import yaml
from jsonschema import validate

from execfork_common.env import PATH_CONFIG_BASE, PATH_CONFIG_OVERRIDE, PATH_CONFIG_SCHEMA

_config: MutableMapping = {}


def merge_dict(map_1: MutableMapping, map_2: MutableMapping) -> MutableMapping:
    # Modified from https://stackoverflow.com/a/3233356/11571888
    for k, v in map_2.items():
        if isinstance(v, collections.abc.MutableMapping):
            map_1[k] = merge_dict(map_1.get(k, {}), v)
        else:
            map_1[k] = v

    return map_1


def load_config(path_base: str, path_override: str, path_schema: str) -> MutableMapping:
    with open(path_base, "r", encoding="utf-8") as config_file:
        config = yaml.safe_load(config_file)

    # Override file is optional, and may be empty
    if os.path.exists(path_override):
        with open(path_override, "r", encoding="utf-8") as config_file:
            config = merge_dict(config, yaml.safe_load(config_file) or {})

    with open(path_schema, "r", encoding="utf-8") as config_schema:
        validate(config, yaml.safe_load(config_schema))

    return config


def get_config() -> MutableMapping:
    global _config

    if _config:
        return _config

    _config = load_config(PATH_CONFIG_BASE, PATH_CONFIG_OVERRIDE, PATH_CONFIG_SCHEMA)

    return _config
