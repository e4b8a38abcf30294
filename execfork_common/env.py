import os.path

from environs import Env

env = Env(expand_vars=True)
env.read_env()

_PACKAGE_DIR = os.path.dirname(os.path.abspath(__file__))

DEVELOPMENT_MODE: bool = env.bool("DEV", False)

with env.prefixed("EXECFORK_"):
    APP_NAME: str = env.str("APP_NAME", "execfork")

    with env.prefixed("PATH_CONFIG_"):
        PATH_CONFIG_BASE: str = env.str("BASE", os.path.join(_PACKAGE_DIR, "config.yaml"))
        PATH_CONFIG_OVERRIDE: str = env.str("OVERRIDE", "execfork-override.yaml")
        PATH_CONFIG_SCHEMA: str = env.str("SCHEMA", os.path.join(_PACKAGE_DIR, "config.schema.json"))
