# snippetsync/main.py

import uvicorn

from snippetsync.config import get_settings
from snippetsync.observability.logger import configure_logging
from snippetsync.utils.logger import log_info


def main() -> None:
    """ Entry point: serve the FastAPI app with uvicorn. """
    settings = get_settings()
    configure_logging(settings)
    log_info(f"Server starting at http://{settings.HOST}:{settings.PORT}")
    uvicorn.run(
        "snippetsync.main_fastapi:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
