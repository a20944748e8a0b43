"""Desktop launcher: run the API locally and open it in a window.

The server runs as a child process. ``start_server`` hands back a
``ServerProcess`` handle and the caller passes that same handle to
``stop_server``; nothing about the child lives in module state.
"""
import argparse
import logging
import subprocess
import sys
import time
import webbrowser
from dataclasses import dataclass
from typing import Optional

import httpx

from pjmotors import config
from pjmotors.logging_config import setup_logging

logger = logging.getLogger(__name__)


class ServerStartupError(RuntimeError):
    pass


@dataclass
class ServerProcess:
    url: str
    process: Optional[subprocess.Popen] = None

    @property
    def running(self) -> bool:
        return self.process is not None and self.process.poll() is None


def start_server(host: str = config.HOST, port: int = config.PORT) -> ServerProcess:
    command = [
        sys.executable, "-m", "uvicorn", "pjmotors.main:app",
        "--host", host, "--port", str(port),
    ]
    logger.info(f"starting server: {' '.join(command)}")
    try:
        process = subprocess.Popen(command)
    except OSError as e:
        raise ServerStartupError(f"Failed to start server: {e}") from e
    return ServerProcess(url=f"http://{host}:{port}", process=process)


def wait_until_ready(server: ServerProcess, timeout: float = config.STARTUP_TIMEOUT, interval: float = 0.5) -> None:
    """Poll the server until it answers any HTTP request."""
    deadline = time.monotonic() + timeout
    while True:
        if server.process is not None and server.process.poll() is not None:
            raise ServerStartupError(f"Server exited with code {server.process.returncode}")
        try:
            httpx.get(server.url, timeout=interval)
            logger.info(f"server ready at {server.url}")
            return
        except httpx.HTTPError:
            pass
        if time.monotonic() >= deadline:
            raise ServerStartupError("Server failed to start in time")
        time.sleep(interval)


def stop_server(server: ServerProcess, grace: float = 5.0) -> None:
    if not server.running:
        return
    logger.info("stopping server")
    server.process.terminate()
    try:
        server.process.wait(timeout=grace)
    except subprocess.TimeoutExpired:
        logger.warning("server did not exit, killing it")
        server.process.kill()
        server.process.wait()


def open_window(url: str) -> None:
    webbrowser.open(url, new=1)


def main(argv=None):
    parser = argparse.ArgumentParser(description="Run PJ Motors as a desktop app")
    parser.add_argument("--host", default=config.HOST)
    parser.add_argument("--port", type=int, default=config.PORT)
    parser.add_argument(
        "--external", action="store_true",
        help="attach to an already running development server",
    )
    args = parser.parse_args(argv)
    setup_logging(config.LOG_LEVEL)

    server = ServerProcess(url=f"http://{args.host}:{args.port}")
    try:
        try:
            if not args.external:
                server = start_server(args.host, args.port)
            wait_until_ready(server)
        except ServerStartupError as e:
            # The window still opens and shows whatever the server manages
            logger.error(f"error starting server: {e}")

        open_window(server.url)

        if server.process is not None:
            server.process.wait()
    except KeyboardInterrupt:
        logger.info("interrupted")
    finally:
        stop_server(server)
    return 0


if __name__ == "__main__":
    sys.exit(main())
