# logger.py

"""
Configure and expose a global logger for the StudyHub application.

This module sets up the logging format and level once, ensuring
consistent timestamped log messages across the store, the façades and
the Streamlit pages.
"""

import logging
import os

# Initialize the root logger with a structured format:
# - Timestamp: when the log entry was created
# - Logger name: identifies the source module
# - Log level: INFO, WARNING, ERROR, etc.
# - Message: the actual log text
logging.basicConfig(
    level=os.getenv("STUDYHUB_LOG_LEVEL", "INFO").upper(),
    format="[%(asctime)s] [%(name)s] %(levelname)s: %(message)s"
)

# Named logger for the application; children are created with get_logger()
logger = logging.getLogger("studyhub")


def get_logger(name: str) -> logging.Logger:
    """
    Return a child of the application logger, e.g. ``studyhub.store``.
    """
    return logger.getChild(name)
