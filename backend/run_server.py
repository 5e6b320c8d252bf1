"""Fault Report Backend server."""

from __future__ import annotations

import argparse
import logging
import sys


def _parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the fault report backend")
    parser.add_argument("--host", default="0.0.0.0", help="interface to bind")
    parser.add_argument("--port", type=int, default=3000, help="port to listen on")
    parser.add_argument(
        "--log-level",
        default="info",
        choices=["debug", "info", "warning", "error"],
        help="application and uvicorn log level",
    )
    return parser.parse_args(argv)


def run_server(host: str, port: int, log_level: str) -> None:
    """Run the FastAPI server."""
    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    import uvicorn
    from fault_reports.main import app

    logging.getLogger(__name__).info("backend running on http://%s:%d", host, port)
    config = uvicorn.Config(app, host=host, port=port, log_level=log_level)
    uvicorn.Server(config).run()


def main() -> None:
    args = _parse_args(sys.argv[1:])
    run_server(args.host, args.port, args.log_level)


if __name__ == "__main__":
    main()
