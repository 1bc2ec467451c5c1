"""Application entry point for FiNIX backend server."""

from finix.app import App
from finix.config import Config
from finix.logging import setup_logging
from finix.web.runner import run_server


def main() -> None:
    config = Config()
    setup_logging(config.debug)
    app = App(config)
    run_server(app, config)


if __name__ == "__main__":
    main()
