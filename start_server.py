#!/usr/bin/env python3
"""
Startup script for the Task Manager Backend
This script starts the FastAPI server with proper configuration
"""

import uvicorn

from app.config.settings import AppConfig

def main():
    # Server configuration
    host = AppConfig.SERVER["host"]
    port = AppConfig.SERVER["port"]
    reload = AppConfig.SERVER["reload"]

    print("Starting Task Manager Backend Server...")
    print(f"Host: {host}")
    print(f"Port: {port}")
    print(f"Reload: {reload}")
    print("=" * 50)

    # Start the server
    uvicorn.run(
        "main:app",
        host=host,
        port=port,
        reload=reload,
        log_level=AppConfig.SERVER["log_level"].lower()
    )

if __name__ == "__main__":
    main()
