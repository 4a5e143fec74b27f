"""Configuration settings for the provenance tracker."""

import os


def get_log_level():
    """Get logging level name from environment variables."""
    return os.environ.get("LOG_LEVEL", "INFO").upper()


def get_api_host_and_port():
    """Get API bind address from environment variables."""
    host = os.environ.get("API_HOST", "localhost")
    port = int(os.environ.get("API_PORT", "8000"))
    return dict(host=host, port=port)


def get_api_url():
    """Get API URL from environment variables."""
    api_config = get_api_host_and_port()
    return f"http://{api_config['host']}:{api_config['port']}"


def get_seed_sample_products():
    """Whether the demo products are registered when the API starts."""
    return os.environ.get("SEED_SAMPLE_PRODUCTS", "true").lower() == "true"


def get_random_seed():
    """Seed for jitter and batch number generation; None draws from the OS."""
    seed = os.environ.get("TRACKER_RANDOM_SEED")
    if seed is None or seed == "":
        return None
    return int(seed)


def get_redis_host_and_port():
    """Get Redis connection details from environment variables."""
    host = os.environ.get("REDIS_HOST", "localhost")
    port = int(os.environ.get("REDIS_PORT", "6379"))
    return dict(host=host, port=port)


def get_event_publishing_enabled():
    """Whether domain events are published to Redis."""
    return os.environ.get("PUBLISH_EVENTS", "false").lower() == "true"
