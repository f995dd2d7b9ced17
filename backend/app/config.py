import logging
import sys

from core.environment import get_env_bool, get_env_list

DEBUG = get_env_bool("DEBUG", False)

# Comma-separated list of origins allowed to call the API from a browser
ALLOWED_ORIGINS = get_env_list("ALLOWED_ORIGINS", default=["http://localhost:3000", "http://localhost:5173"])


# Logging configuration
def setup_logging():
    """Configure application logging"""
    log_level = logging.DEBUG if DEBUG else logging.INFO

    # Configure root logger
    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout),
        ]
    )

    logger = logging.getLogger('hvac_diagnostics')
    logger.setLevel(log_level)

    # Suppress noisy third-party loggers
    for name in ('urllib3', 'httpx', 'httpcore', 'openai'):
        logging.getLogger(name).setLevel(logging.WARNING)

    return logger
