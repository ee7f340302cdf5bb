"""
Lead Discovery Engine - Main Entry Point
========================================
Run this file to start the FastAPI server.

Usage:
    python main.py                     # Start server on port 8000
    python main.py --port 8080         # Start server on custom port
    python main.py --reload            # Start with auto-reload (dev mode)
    python main.py --log-level DEBUG   # Verbose pipeline logging

API Documentation:
    http://localhost:8000/docs        # Swagger UI
    http://localhost:8000/redoc       # ReDoc
"""

import argparse
import uvicorn
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

from lead_discovery.config.logging_config import setup_logging
from lead_discovery.config.settings import LOG_LEVEL


def main():
    parser = argparse.ArgumentParser(description="Lead Discovery Engine API Server")
    parser.add_argument(
        "--host",
        type=str,
        default="0.0.0.0",
        help="Host to bind the server to (default: 0.0.0.0)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Port to run the server on (default: 8000)",
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload for development",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        default=LOG_LEVEL.upper(),
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help=f"Pipeline log level (default: {LOG_LEVEL.upper()})",
    )

    args = parser.parse_args()
    logger = setup_logging(args.log_level)

    # Jobs and leads live in process memory, so a single worker is used
    logger.info("Lead Discovery Engine starting on http://%s:%s", args.host, args.port)
    logger.info("API docs: http://localhost:%s/docs", args.port)

    uvicorn.run(
        "lead_discovery.api.endpoints:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=args.log_level.lower(),
    )


if __name__ == "__main__":
    main()
