"""Environment variable loading for CLI scripts."""
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)


def load_env_if_present(env_file: Optional[str] = None) -> bool:
    """
    Load .env file if it exists.

    Args:
        env_file: Path to .env file (default: .env in project root)

    Returns:
        True if .env was loaded, False otherwise

    Never prints secret values. Safe to call at module level in CLI scripts.
    """
    if env_file is None:
        # lesmateriaal/utils/env.py -> project root
        project_root = Path(__file__).resolve().parent.parent.parent
        env_file = str(project_root / ".env")

    if not Path(env_file).exists():
        return False

    # override=False: existing env vars win over the file
    loaded = load_dotenv(env_file, override=False)
    if loaded:
        logger.debug("Loaded environment variables from %s", env_file)
    return loaded
