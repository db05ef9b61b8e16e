

import os

import uvicorn

from peterparts.core.config import settings


def main():
    """Main entry point to run the application."""
    uvicorn.run(
        "peterparts.main:create_app",
        factory=True,
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        reload=not settings.is_production,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
