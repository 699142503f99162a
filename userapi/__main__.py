"""Run the API with uvicorn: ``python -m userapi``."""

import uvicorn

from userapi.config import settings
from userapi.logger import configure_logging, get_logger


def main() -> None:
    configure_logging()
    logger = get_logger(__name__)
    logger.info("Starting User Service", host=settings.host, port=settings.port)
    uvicorn.run("userapi.main:app", host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    main()
