import os
from pathlib import Path
from dotenv import set_key

from gui.utils.logging import log

ENV_PATH = Path(__file__).resolve().parents[2] / '.env'

# Settings the CLI is allowed to write
EDITABLE_KEYS = (
    'AGILOW_BACKEND_URL',
    'AGILOW_REQUEST_TIMEOUT',
    'TRELLO_APP_KEY',
    'TRELLO_REDIRECT_URI',
    'AGILOW_LOG_LEVEL',
)


def save_settings(values: dict, env_path: Path = ENV_PATH) -> int:
    unknown = sorted(set(values) - set(EDITABLE_KEYS))
    if unknown:
        raise KeyError(f"Unknown setting(s): {', '.join(unknown)}")
    for key, value in values.items():
        os.environ[key] = value
        if env_path.exists():
            set_key(str(env_path), key, value)
    log(f"Saved {len(values)} settings to .env")
    return len(values)
