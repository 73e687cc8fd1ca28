import os
import yaml


class ConfigLoader:
    _instance = None
    _config = None

    def __new__(cls):
        """
        Create a singleton instance of ConfigLoader.
        Loads configuration from YAML file on first instantiation.
        """
        if cls._instance is None:
            cls._instance = super(ConfigLoader, cls).__new__(cls)
            cls._load_config()
        return cls._instance

    @classmethod
    def _load_config(cls):
        """
        Load config.yaml from the repository root into the class variable _config.
        A missing file leaves the configuration empty so built-in defaults apply.
        """
        config_path = os.path.join(os.path.dirname(__file__), "..", "config.yaml")
        config_path = os.path.abspath(config_path)
        if not os.path.isfile(config_path):
            cls._config = {}
            return
        with open(config_path, "r") as f:
            cls._config = yaml.safe_load(f) or {}

    def get_config(self):
        """
        Return the loaded configuration dictionary.
        """
        return self._config


def get_config():
    """
    Helper function to get the singleton configuration instance's config dictionary.
    """
    return ConfigLoader().get_config()


def get_default_limit(kind: str, fallback: int) -> int:
    """Return the configured default page size for a listing kind ("issues", "cycles")."""
    limits = get_config().get("default_limits") or {}
    return int(limits.get(kind, fallback))
