import logging
import sys
from typing import Optional

from shorturls.services.collector import CollectorClient, CollectorHandler

APP_LOGGER = "shorturls"


def configure_logging(level: str = "INFO", collector: Optional[CollectorClient] = None):
    logging.basicConfig(
        level=level,
        format='%(asctime)s | %(levelname)s | %(name)s | %(funcName)s:%(lineno)d | %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )

    logging.getLogger("uvicorn.error").propagate = True

    logging.getLogger("uvicorn.access").disabled = True

    logging.getLogger("redis").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    app_logger = logging.getLogger(APP_LOGGER)
    app_logger.setLevel(level)
    for handler in list(app_logger.handlers):
        if isinstance(handler, CollectorHandler):
            app_logger.removeHandler(handler)
    if collector is not None:
        app_logger.addHandler(CollectorHandler(collector))

    return app_logger
