#!/usr/bin/env python3
"""
Wallet Ledger Entry Point

Starts the FastAPI server with the wallet ledger configured from the
environment (WALLET_* variables or a .env file).
"""

import sys
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from wallet_ledger.api import run_server
from wallet_ledger.config import get_config
from wallet_ledger.logging_config import setup_logging


if __name__ == "__main__":
    config = get_config()
    logger = setup_logging(config.log_level, "wallet_ledger", config.log_format)
    logger.info("Ledger database: %s", config.database_url)
    logger.info("API available at: http://%s:%s (docs at /docs)", config.api_host, config.api_port)

    try:
        run_server(
            host=config.api_host,
            port=config.api_port,
            debug=False
        )
    except KeyboardInterrupt:
        logger.info("Shutting down wallet ledger")
    except Exception:
        logger.exception("Error starting server")
        sys.exit(1)
