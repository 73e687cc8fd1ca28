from core.config import get_config  # type: ignore

DEFAULT_API_URL = "https://api.linear.app"
DEFAULT_PATHS = {"graphql": "/graphql"}


def get_endpoint(key):
    """Build the full backend URL for an `api_paths` key from config.yaml."""
    _cfg = get_config() or {}
    base_url = (_cfg.get("linear_api_url") or DEFAULT_API_URL).rstrip("/")

    path = (_cfg.get("api_paths") or {}).get(key) or DEFAULT_PATHS.get(key)
    if not path:
        raise KeyError(f"Missing API path for key '{key}' in config.yaml under 'api_paths'")

    return f"{base_url}{path}"
