"""Run the service with uvicorn: python -m files_api."""

import uvicorn

from files_api.main import create_app

if __name__ == "__main__":
    uvicorn.run(create_app(), host="0.0.0.0", port=8080)
