from pathlib import Path
import os
import sys

# Ensure backend directory is on sys.path so `catalog_api.*` imports work no matter where main is executed
BACKEND_ROOT = Path(__file__).resolve().parent
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

from catalog_api.main import app  # noqa: E402


if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
