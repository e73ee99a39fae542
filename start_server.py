#!/usr/bin/env python3

"""
Shrinkray Server Launcher

Checks the runtime prerequisites and launches the FastAPI server.
"""

import shutil
import sys
from pathlib import Path

# Add current directory to Python path
current_dir = Path(__file__).parent
sys.path.insert(0, str(current_dir))

if __name__ == "__main__":
    print("🗜️  Shrinkray Payload Reduction Server")
    print("=" * 50)
    print()

    if not (current_dir / "shrinkray").exists():
        print("❌ Error: shrinkray package not found!")
        print("Make sure you're running this script from the project root.")
        sys.exit(1)

    try:
        import fastapi
        import uvicorn
        print("✅ Web dependencies found")
    except ImportError:
        print("❌ Error: Web dependencies not installed!")
        print("Install with: pip install -e .")
        sys.exit(1)

    try:
        import numpy
        import PIL
        import brotli
        print("✅ Media dependencies found")
    except ImportError:
        print("❌ Error: Media dependencies not installed!")
        print("Install with: pip install -e .")
        sys.exit(1)

    from shrinkray.config import load_config
    from shrinkray.app import main

    config = load_config()
    if shutil.which(config.ffmpeg_binary):
        print(f"✅ Decoder found: {config.ffmpeg_binary}")
    else:
        print(f"⚠️  Warning: decoder '{config.ffmpeg_binary}' not found, /api/audio will fail")
        print("Install ffmpeg or set SHRINKRAY_FFMPEG")

    print("✅ Starting web server...")
    print()
    print("📖 Usage:")
    print(f"  - API Documentation: http://{config.host}:{config.port}/docs")
    print(f"  - Health Check: http://{config.host}:{config.port}/health")
    print()
    print("🛑 Press Ctrl+C to stop the server")
    print()

    try:
        main()
    except KeyboardInterrupt:
        print("\n👋 Server stopped by user")
    except Exception as e:
        print(f"\n❌ Server error: {e}")
        sys.exit(1)
