"""
FastAPI Production Server

Run the HEVA chat relay API in production mode.

Usage:
    python scripts/run-prod.py
    # Probe the Gemini endpoint before serving:
    python scripts/run-prod.py --check
"""

import argparse
import asyncio
import sys
import os
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))
os.chdir(project_root)

import uvicorn
from loguru import logger


def check_upstream() -> bool:
    """Send one probe message through the configured relay"""
    from src.llm.client import create_relay

    relay = create_relay()
    return asyncio.run(relay.check_connection())


def main():
    """Start the FastAPI production server"""
    parser = argparse.ArgumentParser(description="HEVA chat relay (production)")
    parser.add_argument("--check", action="store_true", help="probe the LLM endpoint before serving")
    args = parser.parse_args()

    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "8000"))

    logger.info("="*80)
    logger.info("HEVA Chat Relay - API Server (Production)")
    logger.info("="*80)

    if args.check and not check_upstream():
        logger.error("LLM connection check failed - refusing to start")
        sys.exit(1)

    logger.info(f"Server will be available at: http://{host}:{port}")
    logger.info(f"Health Check: http://{host}:{port}/health")
    logger.info(f"Chat: POST http://{host}:{port}/api/chat")
    logger.info("Press CTRL+C to stop the server")
    logger.info("="*80)

    uvicorn.run(
        "src.api.app:app",
        host=host,
        port=port,
        reload=False,
        log_level="info",
        access_log=True
    )


if __name__ == "__main__":
    main()
