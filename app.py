import logging
import os
import socket

from record_browser.logging_config import configure_logging
from record_browser.ui.dash_app import create_dash_app

configure_logging()
logger = logging.getLogger("record_browser.app")

CONFIG_ROOT = os.getenv("RECORD_BROWSER_CONFIG", "config")

app = create_dash_app(CONFIG_ROOT)
server = app.server


def find_free_port(start_port: int, attempts: int = 100) -> int:
    """First port >= start_port nothing is listening on (start_port if none found)."""
    for port in range(start_port, start_port + attempts):
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
            if s.connect_ex(("localhost", port)) != 0:
                return port
    return start_port


if __name__ == "__main__":
    preferred_port = int(os.getenv("PORT", "8050"))
    port = find_free_port(preferred_port)
    debug = os.getenv("DEBUG", "0") == "1"

    if port != preferred_port:
        logger.warning("Port taken, using next free port", extra={"preferred": preferred_port, "port": port})

    logger.info("Starting record browser", extra={"port": port, "debug": debug, "config_root": CONFIG_ROOT})
    app.run(host=os.getenv("HOST", "0.0.0.0"), port=port, debug=debug)
