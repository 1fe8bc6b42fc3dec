"""FastAPI application for the check-in workbook engine."""

import uuid
from datetime import UTC, datetime
from pathlib import Path
from typing import Annotated, Any

from fastapi import (
    FastAPI,
    File,
    Form,
    HTTPException,
    Request,
    UploadFile,
    status,
)
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from checkin_workbook.config import settings, validate_settings_on_startup
from checkin_workbook.models import (
    CheckInEntry,
    ErrorDetail,
    HealthResponse,
    SheetRecordsResponse,
    WorkbookAnalysisResponse,
)
from checkin_workbook.services.checkin_export import (
    CheckInRecord,
    export_with_check_ins,
)
from checkin_workbook.services.codec import EncodeOptions, decode_workbook
from checkin_workbook.services.formatting_detector import (
    analyze_workbook,
    has_formatting,
)
from checkin_workbook.services.sheet_reader import sheet_to_records
from checkin_workbook.utils.exceptions import (
    CheckinWorkbookError,
    ErrorCode,
    FileTooLargeError,
    ValidationError,
)
from checkin_workbook.utils.logging import (
    clear_context,
    configure_logging,
    get_logger,
    get_request_id,
    set_request_id,
)

# Configure structured logging using settings
configure_logging(
    level=settings.log_level_int,
    use_structured_formatter=True,
)
logger = get_logger(__name__)

API_VERSION = "0.1.0"

MEDIA_TYPES = {
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "xlsm": "application/vnd.ms-excel.sheet.macroEnabled.12",
}

_check_in_list = TypeAdapter(list[CheckInEntry])


async def _read_upload(file: UploadFile, request_id: str | None) -> bytes:
    """Read an uploaded workbook and enforce the size limit."""
    if file.filename is None or file.filename == "":
        logger.warning("Request missing workbook file", request_id=request_id)
        raise ValidationError(message="A workbook file must be provided", field="file")

    content = await file.read()
    if len(content) > settings.max_file_size_bytes:
        logger.warning(
            "File too large",
            file_size=len(content),
            max_size=settings.max_file_size_bytes,
            request_id=request_id,
        )
        raise FileTooLargeError(
            file_size=len(content),
            max_size=settings.max_file_size_bytes,
            filename=file.filename,
        )
    return content


def _parse_check_ins(raw: str) -> list[CheckInRecord]:
    try:
        entries = _check_in_list.validate_json(raw)
    except PydanticValidationError as e:
        raise ValidationError(
            message="check_ins must be a JSON array of {row_number, checked_in_at}",
            field="check_ins",
            details={"errors": e.errors(include_url=False, include_context=False)},
        ) from e
    return [
        CheckInRecord(row_number=entry.row_number, checked_in_at=entry.checked_in_at)
        for entry in entries
    ]


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Check-in Workbook API",
        description=(
            "Reads attendee spreadsheets and exports them with a check-in time "
            "column while preserving the original formatting."
        ),
        version=API_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # Configure CORS using settings
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Content-Disposition", "X-Request-ID"],
    )

    # Validate settings on startup
    validate_settings_on_startup(settings)

    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next: Any) -> Any:
        """Middleware to assign and track request IDs.

        This middleware:
        1. Generates a unique request ID for each request
        2. Sets it in context for logging correlation
        3. Adds it to the response headers
        4. Clears context after request completes
        """
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
        set_request_id(request_id)
        request.state.request_id = request_id

        try:
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            return response
        finally:
            clear_context()

    @app.exception_handler(CheckinWorkbookError)
    async def workbook_exception_handler(
        request: Request, exc: CheckinWorkbookError
    ) -> JSONResponse:
        """Turn engine errors into structured error responses."""
        request_id = getattr(request.state, "request_id", get_request_id())
        logger.error(
            f"Workbook error: {exc.message}",
            error_code=exc.error_code.value,
            http_status=exc.http_status,
        )
        return JSONResponse(
            status_code=exc.http_status,
            content=ErrorDetail(
                detail=exc.message,
                error_code=exc.error_code.value,
                details=exc.details if exc.details else None,
                request_id=request_id,
            ).model_dump(exclude_none=True),
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(
        request: Request, exc: HTTPException
    ) -> JSONResponse:
        """Custom exception handler for HTTP exceptions."""
        request_id = getattr(request.state, "request_id", get_request_id())
        logger.warning(
            f"HTTP Error: {exc.detail}",
            status_code=exc.status_code,
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorDetail(
                detail=str(exc.detail),
                request_id=request_id,
            ).model_dump(exclude_none=True),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        """Catch-all exception handler for unexpected errors.

        Logs the full exception and returns a generic error response
        to avoid leaking internal details.
        """
        request_id = getattr(request.state, "request_id", get_request_id())
        logger.exception(
            f"Unexpected error: {type(exc).__name__}",
            error_type=type(exc).__name__,
        )
        if settings.debug:
            detail = f"Internal server error: {type(exc).__name__}: {exc}"
        else:
            detail = "Internal server error. Please try again later."

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=ErrorDetail(
                detail=detail,
                error_code=ErrorCode.INTERNAL_ERROR.value,
                request_id=request_id,
            ).model_dump(exclude_none=True),
        )

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check(request: Request) -> dict[str, Any]:
        """Check the health status of the service."""
        request_id = getattr(request.state, "request_id", None)
        logger.debug("Health check requested", request_id=request_id)
        return {
            "status": "healthy",
            "timestamp": datetime.now(UTC).isoformat(),
            "version": API_VERSION,
        }

    @app.post(
        "/workbooks/analyze",
        response_model=WorkbookAnalysisResponse,
        tags=["Workbooks"],
        responses={
            400: {"model": ErrorDetail, "description": "Not a spreadsheet"},
            413: {"model": ErrorDetail, "description": "File too large"},
            422: {"model": ErrorDetail, "description": "Unreadable workbook"},
        },
    )
    async def analyze(
        request: Request,
        file: Annotated[UploadFile, File(description="xlsx or xlsm workbook")],
    ) -> dict[str, Any]:
        """Report sheet sizes and whether the workbook carries formatting."""
        request_id = getattr(request.state, "request_id", None)
        content = await _read_upload(file, request_id)
        workbook = decode_workbook(content)
        sheets = analyze_workbook(workbook)

        logger.info(
            "Workbook analyzed",
            filename=file.filename,
            sheets=len(sheets),
            request_id=request_id,
        )
        return {
            "filename": file.filename,
            "sheet_names": workbook.sheet_names,
            "has_formatting": has_formatting(workbook),
            "has_macros": workbook.macro_payload is not None,
            "sheets": sheets,
        }

    @app.post(
        "/workbooks/records",
        response_model=SheetRecordsResponse,
        tags=["Workbooks"],
        responses={
            404: {"model": ErrorDetail, "description": "Sheet not found"},
            413: {"model": ErrorDetail, "description": "File too large"},
        },
    )
    async def records(
        request: Request,
        file: Annotated[UploadFile, File(description="xlsx or xlsm workbook")],
        sheet_name: Annotated[
            str | None, Form(description="Sheet to read (defaults to the first)")
        ] = None,
    ) -> dict[str, Any]:
        """Read one sheet as header-keyed records."""
        request_id = getattr(request.state, "request_id", None)
        content = await _read_upload(file, request_id)
        workbook = decode_workbook(content)
        if not workbook.sheet_names:
            raise ValidationError(message="Workbook has no sheets", field="file")
        sheet = workbook.get_sheet(sheet_name or workbook.sheet_names[0])
        result = sheet_to_records(sheet)

        logger.info(
            "Sheet records read",
            sheet=sheet.name,
            rows=len(result.rows),
            request_id=request_id,
        )
        return {
            "sheet_name": result.sheet_name,
            "headers": result.headers,
            "header_row": result.header_row,
            "rows": [
                {"row_number": row.row_number, "values": row.values}
                for row in result.rows
            ],
            "row_count": len(result.rows),
        }

    @app.post(
        "/workbooks/check-ins/export",
        tags=["Workbooks"],
        response_class=Response,
        responses={
            200: {"content": {MEDIA_TYPES["xlsx"]: {}, MEDIA_TYPES["xlsm"]: {}}},
            400: {"model": ErrorDetail, "description": "Invalid check-ins"},
            404: {"model": ErrorDetail, "description": "Sheet not found"},
            413: {"model": ErrorDetail, "description": "File too large"},
        },
    )
    async def export_check_ins(
        request: Request,
        file: Annotated[UploadFile, File(description="xlsx or xlsm workbook")],
        sheet_name: Annotated[str, Form(description="Sheet holding attendees")],
        check_ins: Annotated[
            str, Form(description="JSON array of {row_number, checked_in_at}")
        ],
        book_type: Annotated[
            str | None, Form(description="Output container: xlsx or xlsm")
        ] = None,
    ) -> Response:
        """Return the workbook with a check-in column added to one sheet."""
        request_id = getattr(request.state, "request_id", None)
        content = await _read_upload(file, request_id)
        records = _parse_check_ins(check_ins)
        options = EncodeOptions(book_type=book_type)
        output = export_with_check_ins(
            content, sheet_name, records, encode_options=options
        )

        out_type = (book_type or settings.output_book_type).lower()
        stem = Path(file.filename or "workbook").stem
        filename = f"{stem}_checked_in.{out_type}"
        logger.info(
            "Check-in export complete",
            sheet=sheet_name,
            check_ins=len(records),
            size_bytes=len(output),
            request_id=request_id,
        )
        return Response(
            content=output,
            media_type=MEDIA_TYPES[out_type],
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )

    logger.info("FastAPI application created successfully")
    return app


# Create the application instance
app = create_app()
