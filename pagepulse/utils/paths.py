# ==============================================================================
# Path Constants and Utilities
# ==============================================================================
"""
Centralized paths for files shipped with the package.
"""

from pathlib import Path


def get_package_root() -> Path:
    """
    Get the installed ``pagepulse`` package directory.

    Returns:
        Path to the package directory
    """
    return Path(__file__).parent.parent  # utils/paths.py -> pagepulse


def get_schema_dir() -> Path:
    """
    Get the schema directory containing SQL templates.

    Returns:
        Path to the schema directory
    """
    return get_package_root() / "schema"


def get_init_sql_path() -> Path:
    """
    Get the path to the database initialization SQL template.

    Returns:
        Path to init.sql
    """
    return get_schema_dir() / "init.sql"
