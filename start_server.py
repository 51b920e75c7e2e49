#!/usr/bin/env python3
"""
Startup script for Vibe Builder FastAPI server
"""
import os
import sys
from pathlib import Path

import uvicorn

# Add the current directory to Python path
sys.path.insert(0, str(Path(__file__).parent))

if __name__ == "__main__":
    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "8000"))
    print("🚀 Starting Vibe Builder FastAPI Server")
    print("=" * 50)
    print(f"📍 Server will be available at: http://localhost:{port}")
    print(f"📚 API Documentation: http://localhost:{port}/docs")
    print(f"🔍 Health Check: http://localhost:{port}/health")
    print("=" * 50)

    uvicorn.run(
        "Vibe_Builder.main_fastapi:app",
        host=host,
        port=port,
        reload=os.getenv("RELOAD", "1") == "1",
        log_level="info"
    )
