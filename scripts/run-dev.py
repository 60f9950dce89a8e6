"""
FastAPI Development Server

Run the HEVA chat relay API in development mode.

Usage:
    python scripts/run-dev.py
    # OR
    uv run python scripts/run-dev.py
    # OR (after activating venv)
    source .venv/bin/activate
    python scripts/run-dev.py
"""

import sys
import os
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))
os.chdir(project_root)

import uvicorn
from loguru import logger


def main():
    """Start the FastAPI development server"""
    port = int(os.getenv("PORT", "8000"))

    logger.info("="*80)
    logger.info("HEVA Chat Relay - API Server")
    logger.info("="*80)
    logger.info("")
    logger.info("Starting FastAPI development server...")
    logger.info(f"Server will be available at: http://localhost:{port}")
    logger.info(f"API Documentation: http://localhost:{port}/docs")
    logger.info(f"Health Check: http://localhost:{port}/health")
    logger.info(f"Chat: POST http://localhost:{port}/api/chat")
    logger.info(f"History: GET http://localhost:{port}/api/chat/history")
    logger.info("")
    logger.info("Press CTRL+C to stop the server")
    logger.info("="*80)
    
    uvicorn.run(
        "src.api.app:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=port,
        reload=True,
        log_level="info",
        access_log=True,
        reload_dirs=[str(project_root / "src")]
    )


if __name__ == "__main__":
    main()
