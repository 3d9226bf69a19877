import uvicorn

from contactbook.config import get_settings
from contactbook.main import create_app
from contactbook.observability import configure_logging


def main() -> None:
    settings = get_settings()
    configure_logging(settings)
    # log_config=None keeps uvicorn from replacing the structlog handlers.
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    main()
