# backend/eventcal/__init__.py
"""
Package init: load environment variables from a .env file if present.
This runs before eventcal modules read os.getenv for configuration.
"""

from dotenv import load_dotenv

load_dotenv()

__version__ = "0.1.0"
