import logging
import os



logger = logging.getLogger(__name__)


def _env_int(
    name:    str,
    default: int,
    minimum: int = 0

) -> int:

    """
    Read an integer setting from the environment.

    :param name: Environment variable name
    :param default: Value used when the variable is unset or empty
    :param minimum: Smallest accepted value
    :raises ValueError: If the variable is not an integer or is below ``minimum``
    """

    raw = os.environ.get(name, "").strip()
    if not raw:
        return default

    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, not {raw!r}") from None

    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}, not {value}")

    logger.debug("%s overridden from environment: %d", name, value)
    return value


def _env_flag(
    name:    str,
    default: bool

) -> bool:

    raw = os.environ.get(name, "").strip().lower()
    if not raw:
        return default
    if raw in ("1", "true", "yes", "on"):
        return True
    if raw in ("0", "false", "no", "off"):
        return False
    raise ValueError(f"{name} must be a boolean flag, not {raw!r}")



# ---------- Fixed structural constants ----------
SKIP_LIST_MAX_LEVEL = 16
SKIP_LIST_P         = 0.5  # promotion probability per level
TRIE_BITS           = 31
PATH_CAPACITY       = 256  # scratch path for iterative descents; > any balanced height


# ---------- Environment-tunable settings ----------
DEFAULT_CAPACITY    = _env_int("WARPDS_DEFAULT_CAPACITY", 16, minimum=1)
SKIP_LIST_SEED      = _env_int("WARPDS_SKIP_LIST_SEED", 12345)
JIT_CACHE           = _env_flag("WARPDS_JIT_CACHE", False)
