"""Vercel serverless handler for the KrishiLink API."""

import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from mangum import Mangum
from krishilink.api import app

# Mangum adapter for ASGI -> AWS Lambda/Vercel. Lifespan must run: it opens
# the database handle that every route reads from app.state.
handler = Mangum(app, lifespan="auto")
