# tests/conftest.py
import asyncio
import sys

# Windows needs the selector loop for redis.asyncio and httpx under pytest.
if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())
