"""
Status Automation Worker Runner
Run this as a separate process: python run_worker.py
"""

import asyncio
import logging
import sys

from primaqonita.worker import run_status_worker

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)

logger = logging.getLogger(__name__)

if __name__ == "__main__":
    try:
        asyncio.run(run_status_worker())
    except KeyboardInterrupt:
        logger.info("👋 Status worker stopped by user")
    except Exception as e:
        logger.error(f"❌ Status worker crashed: {e}")
        sys.exit(1)
