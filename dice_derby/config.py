import json
import os

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

PACKAGE_DIR = os.path.dirname(os.path.abspath(__file__))
DEFAULT_CONFIG_PATH = os.path.join(PACKAGE_DIR, 'configs', 'game_balance.json')
CONFIG_FILE_PATH = os.getenv('DICE_DERBY_CONFIG', DEFAULT_CONFIG_PATH)


def load_config(path=None):
    """
    Loads the game balance config file.
    Returns an empty dict (and warns) when the file is missing or unreadable.
    """
    path = path or CONFIG_FILE_PATH
    try:
        with open(path, 'r', encoding='utf-8') as f:
            config = json.load(f)
        return config
    except FileNotFoundError:
        print(f"WARNING: Could not find config file at {path}. Using built-in defaults.")
        return {}
    except json.JSONDecodeError as e:
        print(f"WARNING: Could not parse config file {path}: {e}. Using built-in defaults.")
        return {}


# Load the config ONCE when the module is first imported
BALANCE_CONFIG = load_config()


def get_config(key_path, default=None):
    """
    Safely gets a value from the loaded config using a 'dot.path'.
    Example: get_config('economy.turn_income')
    """
    if not BALANCE_CONFIG:
        return default

    try:
        value = BALANCE_CONFIG
        for key in key_path.split('.'):
            value = value[key]
        return value
    except (KeyError, TypeError):
        print(f"Warning: Could not find config key: {key_path}")
        return default
