import os

import uvicorn

if __name__ == "__main__":
    uvicorn.run(
        "smartplanning.main:app",
        host=os.getenv("HOST", "0.0.0.0"),  # noqa: S104
        port=int(os.getenv("PORT", "8000")),
        reload=os.getenv("RELOAD", "false").lower() == "true",
    )
