import yaml
import os
import logging
from dotenv import load_dotenv

logger = logging.getLogger("OBScanner.Config")

DEFAULT_FUTURES_BASE_URL = "https://fapi.binance.com"

def load_config(config_path="config.yaml"):
    """
    Loads configuration from a YAML file.
    """
    if not os.path.exists(config_path):
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r") as f:
        try:
            config = yaml.safe_load(f) or {}
            return config
        except yaml.YAMLError as e:
            logger.error(f"Error parsing config file: {e}")
            raise e

def load_credentials(env_path=".env"):
    """
    Loads endpoints and secrets from a specific .env file (or the process environment).
    """
    load_dotenv(env_path)

    api_key = os.getenv("SCANNER_API_KEY")
    if not api_key:
        logger.warning("SCANNER_API_KEY not set in .env, HTTP endpoint will reject all requests")

    return {
        "futures_base_url": os.getenv("BINANCE_FUTURES_BASE_URL", DEFAULT_FUTURES_BASE_URL),
        "api_key": api_key,
    }
