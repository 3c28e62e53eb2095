from scenevault.env.env import (
    Environment,
    get_env,
    reset_env_caches,
    get_logging_env,
    ConfigError,
    PROJECT_ROOT,
    STORE_KINDS,
    _load_dotenv,
)

from scenevault.env.paths import (
    data_dir,
    exports_dir,
    logs_dir,
    module_logs_dir,
    out_file,
)

__all__ = [
    "Environment",
    "get_env",
    "reset_env_caches",
    "get_logging_env",
    "ConfigError",
    "PROJECT_ROOT",
    "STORE_KINDS",
    "_load_dotenv",
    "data_dir",
    "exports_dir",
    "logs_dir",
    "module_logs_dir",
    "out_file",
]
