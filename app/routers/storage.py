# =============================================================================
# app/routers/storage.py - Blob Endpoints
# =============================================================================
# Serves stored files through signed keys:
#   GET /storage/blobs/{signed_key}/{filename}
#
# Build the path with HarnessApplication.blob_path(blob).
# =============================================================================

from urllib.parse import quote

from fastapi import APIRouter
from fastapi.responses import Response

from app.dependencies import HarnessDep

router = APIRouter()


def content_disposition(filename: str, disposition: str = "inline") -> str:
    """
    Content-Disposition value for a filename.

    Header values are latin-1, so filenames that don't survive URL quoting
    unchanged are sent RFC 5987 encoded (filename*=utf-8''...).
    """
    quoted = quote(filename)
    if quoted != filename:
        return f"{disposition}; filename*=utf-8''{quoted}"
    return f'{disposition}; filename="{filename}"'


@router.get("/blobs/{signed_key}/{filename}", name="blob")
async def show_blob(signed_key: str, filename: str, harness: HarnessDep):
    """
    Stream a blob.

    A tampered signature and a missing blob both answer 404.
    """
    storage = harness.storage
    key = storage.verify_signed_key(signed_key)
    blob = storage.find_blob(key)

    return Response(
        content=storage.download(blob),
        media_type=blob.content_type,
        headers={"Content-Disposition": content_disposition(blob.filename)},
    )
