"""Path resolution for keytrust – single source of truth for the profile dir and db."""

from pathlib import Path
import os

from keytrust.config.defaults import AUDIT_LOG_FILENAME, DB_FILENAME, PROFILE_DIRNAME


def get_profile_dir() -> Path:
    """Return the directory holding the acceptance database.

    Checks environment variable KEYTRUST_PROFILE_DIR first; otherwise uses
    <home>/.keytrust.
    """
    env_path = os.environ.get("KEYTRUST_PROFILE_DIR")
    if env_path:
        return Path(env_path).expanduser()
    return Path.home() / PROFILE_DIRNAME


def get_db_path() -> Path:
    """Return the acceptance database path.

    KEYTRUST_DB_PATH wins over the profile directory.
    """
    env_path = os.environ.get("KEYTRUST_DB_PATH")
    if env_path:
        return Path(env_path).expanduser()
    return get_profile_dir() / DB_FILENAME


def get_audit_path(db_path: Path) -> Path:
    """Audit log lives next to the database."""
    return db_path.parent / AUDIT_LOG_FILENAME
