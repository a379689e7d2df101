"""
Default render settings.

Defaults are read from settings.json next to this module. A missing or
unreadable file is reported and the built-in defaults are used instead.
The FRACTAL_RENDERER_WORKERS environment variable overrides the worker
count.
"""

import json
import logging
import os

logger = logging.getLogger(__name__)

SETTINGS_PATH = os.path.join(os.path.dirname(__file__), 'settings.json')
WORKERS_ENV = 'FRACTAL_RENDERER_WORKERS'

DEFAULTS = {
    'workers': None,    # None = one per CPU
    'color': 'escape',
}


def load_settings(path=None):
    """
    Load settings from a JSON file, merged over DEFAULTS.

    Args:
        path: File to read (default: the package's settings.json)

    Returns:
        dict with every key of DEFAULTS; unknown keys in the file are ignored
    """
    settings = dict(DEFAULTS)
    settings_path = path or SETTINGS_PATH
    try:
        with open(settings_path, 'r') as f:
            loaded = json.load(f)
    except (FileNotFoundError, json.JSONDecodeError) as e:
        print(f"Warning: Could not load {os.path.basename(settings_path)}: {e}")
        return settings

    if not isinstance(loaded, dict):
        print(f"Warning: Ignoring {os.path.basename(settings_path)}: expected a JSON object")
        return settings

    for key in DEFAULTS:
        if key in loaded:
            settings[key] = loaded[key]
    return settings


# Global settings loaded from JSON
_SETTINGS = load_settings()


def default_workers(settings=None):
    """
    Number of band workers to use when the caller does not pick one.

    Order of precedence: FRACTAL_RENDERER_WORKERS, the "workers" setting,
    then the CPU count.
    """
    settings = settings if settings is not None else _SETTINGS

    env_value = os.environ.get(WORKERS_ENV)
    if env_value:
        try:
            workers = int(env_value)
        except ValueError:
            workers = 0
        if workers > 0:
            return workers
        logger.warning("Ignoring %s=%r: expected a positive integer", WORKERS_ENV, env_value)

    workers = settings.get('workers')
    if isinstance(workers, int) and workers > 0:
        return workers

    return os.cpu_count() or 1
