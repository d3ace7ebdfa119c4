import uvicorn

from clinicalcanvas.config import Settings
from clinicalcanvas.logging_config import configure_logging
from clinicalcanvas.main import create_app


def main() -> None:
    settings = Settings.from_env()
    configure_logging(settings.log_level)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
