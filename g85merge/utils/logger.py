import logging
import sys

def configure_logging(level: int = logging.INFO):
    """
    Configures the root logger for the application.
    """
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )
