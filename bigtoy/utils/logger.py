import logging
import sys
from bigtoy.utils.config import config

# Configure root logger - set to ERROR by default to suppress all non-bigtoy logs
logging.basicConfig(level=logging.ERROR, format=config.log_format, stream=sys.stdout)

# Configure only the bigtoy logger to show logs at the configured level
bigtoy_logger = logging.getLogger('bigtoy')
bigtoy_logger.setLevel(config.log_level)

# Create a dedicated handler for bigtoy logs
bigtoy_handler = logging.StreamHandler(sys.stdout)
bigtoy_handler.setFormatter(logging.Formatter(config.log_format))

# Remove any existing handlers to avoid duplicate logs
if bigtoy_logger.handlers:
    for handler in list(bigtoy_logger.handlers):
        bigtoy_logger.removeHandler(handler)

bigtoy_logger.addHandler(bigtoy_handler)

# Prevent bigtoy logs from propagating to the root logger to avoid duplication
bigtoy_logger.propagate = False

# Keep transport libraries quiet unless explicitly debugging
logging.getLogger('httpx').setLevel(logging.WARNING)
logging.getLogger('httpcore').setLevel(logging.WARNING)

# Get our specific module logger
logger = logging.getLogger(__name__)
