import os

import uvicorn

from airsense.config import settings
from utils.logging_utils import get_tagged_logger, setup_logging

logger = get_tagged_logger(__name__, tag="server")


if __name__ == "__main__":
    setup_logging(level=settings.log_level, service_name="airsense_api")
    logger.info(f"Starting AirSense+ with data source '{settings.data_source}'")

    uvicorn.run(
        "airsense.main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", 8000)),
        reload=False,
    )
