#!/usr/bin/env python
"""
Run the API Server

Starts the FastAPI server for parsing and testing curl commands.

Usage:
    python run_server.py

The server runs on http://localhost:8000 (PROMPT_EXTRACTOR_PORT to change)

Endpoints:
    GET  /api/health     - Health check
    POST /api/parse      - Parse a curl command
    POST /api/build      - Rebuild a curl command from edited messages
    POST /api/normalize  - Collapse a command onto one line
    POST /api/validate   - Validate messages
    POST /api/stats      - Message statistics
    POST /api/test       - Send messages to the live endpoint
"""

import uvicorn

from prompt_extractor import config

if __name__ == "__main__":
    uvicorn.run("prompt_extractor.server:app", host=config.API_HOST, port=config.API_PORT, reload=False)
