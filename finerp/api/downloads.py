import io
from fastapi.responses import StreamingResponse
from finerp.core.excel import XLSX_MEDIA_TYPE


def attachment(content: bytes, filename: str, media_type: str) -> StreamingResponse:
    return StreamingResponse(
        io.BytesIO(content),
        media_type=media_type,
        headers={
            "Content-Disposition": f"attachment; filename=\"{filename}\"",
            "Content-Length": str(len(content)),
        },
    )


def xlsx_attachment(content: bytes, filename: str) -> StreamingResponse:
    return attachment(content, filename, XLSX_MEDIA_TYPE)


def pdf_attachment(content: bytes, filename: str) -> StreamingResponse:
    return attachment(content, filename, "application/pdf")
