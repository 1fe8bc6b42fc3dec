"""Check-in Workbook - format-preserving spreadsheet round-trips for event check-in."""

from checkin_workbook.api import app, create_app

__all__ = ["app", "create_app"]
__version__ = "0.1.0"


def main() -> None:
    """Run the FastAPI server using uvicorn."""
    import uvicorn

    from checkin_workbook.config import settings

    uvicorn.run(
        "checkin_workbook.api:app",
        host=settings.server_host,
        port=settings.server_port,
        reload=settings.debug,
    )
