
import logging
from logging.handlers import TimedRotatingFileHandler
import os
from typing import Optional

LOG_FORMAT = '[%(asctime)s] %(levelname)s %(name)s: %(message)s'

file_handler = None


def setup_logging(level: Optional[str] = None, log_dir: Optional[str] = None, to_file: Optional[bool] = None):
    """Configure the root logger with a daily rotating file and the console.

    Unset arguments fall back to ``Settings`` (PLAYBOOK_AGENT_LOG_* env vars).
    """
    global file_handler
    from playbook_agent.config import get_settings

    settings = get_settings()
    level = (level or settings.log_level).upper()
    log_dir = os.path.abspath(log_dir or settings.log_dir)
    to_file = settings.log_to_file if to_file is None else to_file

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    formatter = logging.Formatter(LOG_FORMAT)
    # Close previous file handler if it exists
    close_logging()
    handlers = []
    if to_file:
        os.makedirs(log_dir, exist_ok=True)
        log_file = os.path.join(log_dir, 'playbook_agent.log')
        # Daily rotation, keep 14 days
        file_handler = TimedRotatingFileHandler(log_file, when="midnight", interval=1, backupCount=14)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)
    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    handlers.append(stream_handler)
    root_logger.handlers = handlers
    if file_handler:
        root_logger.info("[BOOT] Logging initialized, writing to %s", file_handler.baseFilename)
    else:
        root_logger.info("[BOOT] Logging initialized (console only)")


def close_logging():
    global file_handler
    if file_handler:
        file_handler.close()
        file_handler = None
