#!/usr/bin/env python3
"""
Wait for the booking backend, then run uvicorn.
Set SKIP_API_WAIT=1 to start without the backend (wizard and public pages still work).
"""
import os
import sys

# 1) Wait for the booking backend
if os.getenv("SKIP_API_WAIT") != "1":
    import wait_for_api  # noqa: F401

# 2) Start uvicorn (replace current process)
port = os.getenv("PORT", "8000")
os.execv(
    sys.executable,
    [sys.executable, "-m", "uvicorn", "modernband.main:app", "--host", "0.0.0.0", "--port", port],
)
