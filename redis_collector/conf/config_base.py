from cistell import ConfigBase

from redis_collector.conf import constants


class ConfigCollectorBase(ConfigBase):
    """Base Config for the Redis Collector"""

    TOML_CONFIG_ID: str = constants.TOML_CONFIG_ID
    ENV_PREFIX: str = constants.ENV_PREFIX
    ENV_SEP: str = constants.ENV_SEPARATOR
    ENV_FILEPATH: str = constants.ENV_FILEPATH
    IGNORE_CLASS_NAME_SUBSTR: str = constants.IGNORE_CLASS_NAME_SUBSTR
