"""
ProxyServer class for CLI control of the FastAPI application.
"""
import logging
import os
import uvicorn

import settings
from .app import app

logger = logging.getLogger(__name__)

DEBUG_LOG_FILE = "gateway_debug.log"


class ProxyServer:
    """Gateway server wrapper for CLI control"""

    def __init__(self, debug: bool = False, bind_address: str = None, port: int = None):
        self.server = None
        self.config = None
        self.debug = debug
        self.bind_address = bind_address or settings.BIND_ADDRESS
        self.port = port or settings.PORT

        # Configure debug logging if enabled
        if debug:
            self._setup_debug_logging()

    def _setup_debug_logging(self):
        """Send DEBUG output to both the console and an appended log file"""
        root_logger = logging.getLogger()
        root_logger.setLevel(logging.DEBUG)

        # Clear existing handlers to avoid duplicates
        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)

        log_file = os.path.abspath(DEBUG_LOG_FILE)
        file_handler = logging.FileHandler(log_file, mode='a', encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)

        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.DEBUG)

        formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        file_handler.setFormatter(formatter)
        console_handler.setFormatter(formatter)

        root_logger.addHandler(file_handler)
        root_logger.addHandler(console_handler)

        logger.info(f"Debug logging enabled - appending to {log_file}")

    def run(self):
        """Run the gateway server (blocking)"""
        logger.info(f"Starting chat gateway on http://{self.bind_address}:{self.port}")
        logger.info("Available endpoints: /v1/messages (Anthropic), /v1/chat/completions (OpenAI)")
        logger.info(f"Upstream: {settings.UPSTREAM_BASE_URL}")
        if settings.STREAM_TRACE_ENABLED:
            logger.warning(
                "Stream tracing is ENABLED - raw stream chunks will be written inside '%s'",
                settings.STREAM_TRACE_DIR,
            )
        self.config = uvicorn.Config(
            app,
            host=self.bind_address,
            port=self.port,
            log_level="debug" if self.debug else settings.LOG_LEVEL,
            access_log=False  # Reduce noise in CLI
        )
        self.server = uvicorn.Server(self.config)
        self.server.run()

    def stop(self):
        """Stop the gateway server"""
        if self.server:
            self.server.should_exit = True
