#!/usr/bin/env python3
"""
Simple script to run the HVAC diagnostics backend server
"""
import uvicorn
import logging

from core.environment import get_env_bool, get_env_int

logger = logging.getLogger(__name__)

if __name__ == "__main__":
    port = get_env_int("PORT", 8000)
    logger.info(f"Starting HVAC diagnostics server on http://localhost:{port} (docs at /docs)")

    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=port,
        reload=get_env_bool("RELOAD", False),
        log_level="info"
    )
