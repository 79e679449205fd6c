TOML_CONFIG_ID = "redis_collector"
ENV_PREFIX = "REDIS_COLLECTOR"
ENV_SEPARATOR = "__"
ENV_FILEPATH = "FILEPATH"
IGNORE_CLASS_NAME_SUBSTR = "Config"
