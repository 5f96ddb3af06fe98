"""
Chat Queue Worker Runner
Run this as a separate process: python run_chat_worker.py
"""

import asyncio
import logging
import sys

from shiftly.workers.chat_worker import run_chat_worker

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)

if __name__ == "__main__":
    logger.info("🚀 Starting chat queue worker...")
    try:
        asyncio.run(run_chat_worker())
    except KeyboardInterrupt:
        logger.info("👋 Chat worker stopped by user")
    except Exception as e:
        logger.error(f"❌ Chat worker crashed: {e}")
        sys.exit(1)
