import logging
import sys

# 1. Console handler shared by every logger that doesn't define its own.
console_handler = logging.StreamHandler(sys.stdout)
console_handler.setLevel(logging.DEBUG)
formatter = logging.Formatter(
    "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
console_handler.setFormatter(formatter)

# 2. Package loggers (using __name__) inherit from this one.
package_logger = logging.getLogger(__name__)
package_logger.setLevel(logging.DEBUG)
package_logger.addHandler(console_handler)

# 3. Quiet chatty libraries
logging.getLogger("numba").setLevel(logging.WARNING)
