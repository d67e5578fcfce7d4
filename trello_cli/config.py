"""
trello-cli shared configuration, constants, and module-level state.
Standalone module: only imports the exception hierarchy.
"""

import os
import tempfile

from trello_cli.exceptions import CliError, SetupError  # noqa: F401

# ---------------------------------------------------------------------------
# .env path and helpers
# ---------------------------------------------------------------------------

_PACKAGE_DIR = os.path.dirname(os.path.abspath(__file__))
_PROJECT_ROOT = os.path.dirname(_PACKAGE_DIR)


def default_env_path(environ=None, project_root=None):
    """Locate the .env file.

    TRELLO_CLI_ENV wins. A source checkout keeps its .env beside
    pyproject.toml; an installed package uses the user config directory.
    """
    environ = os.environ if environ is None else environ
    project_root = project_root or _PROJECT_ROOT
    if environ.get("TRELLO_CLI_ENV"):
        return environ["TRELLO_CLI_ENV"]
    if os.path.exists(os.path.join(project_root, "pyproject.toml")):
        return os.path.join(project_root, ".env")
    config_home = environ.get("XDG_CONFIG_HOME") or os.path.join(os.path.expanduser("~"), ".config")
    return os.path.join(config_home, "trello-cli", ".env")


ENV_PATH = default_env_path()


def load_env():
    """Read KEY=VALUE pairs from the .env file, then overlay TRELLO_* process vars."""
    env = {}
    if os.path.exists(ENV_PATH):
        with open(ENV_PATH) as f:
            for line in f:
                line = line.strip()
                if line and not line.startswith("#") and "=" in line:
                    key, val = line.split("=", 1)
                    env[key.strip()] = val.strip()
    for key, val in os.environ.items():
        if key.startswith("TRELLO_"):
            env[key] = val
    return env


def save_env_value(key, value):
    """Update or add a key in the .env file (atomic write-then-rename)."""
    lines = []
    found = False
    if os.path.exists(ENV_PATH):
        with open(ENV_PATH) as f:
            lines = f.readlines()
    for i, line in enumerate(lines):
        if line.strip().startswith(f"{key}="):
            lines[i] = f"{key}={value}\n"
            found = True
            break
    if not found:
        lines.append(f"{key}={value}\n")
    env_dir = os.path.dirname(ENV_PATH) or "."
    os.makedirs(env_dir, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=env_dir, prefix=".env_tmp_")
    try:
        with os.fdopen(fd, "w") as f:
            f.writelines(lines)
        os.replace(tmp_path, ENV_PATH)
    except Exception:
        try:
            os.remove(tmp_path)
        except OSError:
            pass
        raise
    # Owner-only on Unix/Mac. No-op on Windows.
    try:
        os.chmod(ENV_PATH, 0o600)
    except (OSError, NotImplementedError):
        pass
    env[key] = value


def _env_bool(key, default=False):
    """Parse common boolean env formats."""
    raw = env.get(key)
    if raw is None or raw == "":
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(key, default):
    """Parse integer env values with fallback."""
    raw = env.get(key)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(key, default):
    """Parse float env values with fallback."""
    raw = env.get(key)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_choice(key, default, choices):
    raw = (env.get(key) or "").strip().lower()
    return raw if raw in choices else default


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

VERSION = "0.3.0"
CONTRACT_SCHEMA_VERSION = "1.0"

VALID_FORMATS = ("text", "json")
VALID_MATCH_MODES = {"glob", "regex"}
VALID_AMBIGUOUS_POLICIES = {"list", "first"}

BOARD_FIELDS = ("id", "name", "closed", "url")
LIST_FIELDS = ("id", "name", "closed")
CARD_FIELDS = ("id", "name", "desc", "labels", "closed", "url", "idList", "idBoard",
               "dateLastActivity")
LABEL_FIELDS = ("id", "name", "color")
ATTACHMENT_FIELDS = ("id", "name", "url")

# ---------------------------------------------------------------------------
# Module-level state (loaded from .env / environment)
# ---------------------------------------------------------------------------

env = load_env()

API_KEY = env.get("TRELLO_API_KEY", "")
TOKEN = env.get("TRELLO_TOKEN", "")
BASE_URL = env.get("TRELLO_BASE_URL", "https://api.trello.com").rstrip("/")
HTTP_TIMEOUT_SECONDS = _env_int("TRELLO_HTTP_TIMEOUT_SECONDS", 30)
HTTP_MAX_RETRIES = _env_int("TRELLO_HTTP_MAX_RETRIES", 2)
HTTP_RETRY_BASE_SECONDS = _env_float("TRELLO_HTTP_RETRY_BASE_SECONDS", 1.0)
HTTP_MAX_RESPONSE_BYTES = _env_int("TRELLO_HTTP_MAX_RESPONSE_BYTES", 5_000_000)
HTTP_LOG_ENABLED = _env_bool("TRELLO_HTTP_LOG", False)

MATCH_MODE = _env_choice("TRELLO_MATCH_MODE", "glob", VALID_MATCH_MODES)
MATCH_WILDCARD = env.get("TRELLO_WILDCARD") or "*"
MATCH_CASE_SENSITIVE = _env_bool("TRELLO_CASE_SENSITIVE", False)
AMBIGUOUS_POLICY = _env_choice("TRELLO_AMBIGUOUS", "list", VALID_AMBIGUOUS_POLICIES)
UPDATE_MAX_RETRIES = max(1, _env_int("TRELLO_UPDATE_MAX_RETRIES", 3))

COLOR_ENABLED = _env_bool("TRELLO_COLOR", True) and "NO_COLOR" not in os.environ

# ---------------------------------------------------------------------------
# Runtime flags (set by cli.main)
# ---------------------------------------------------------------------------

RUNTIME_QUIET = False
STDERR_COLOR_ENABLED = False
