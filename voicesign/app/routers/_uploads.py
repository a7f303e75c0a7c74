from fastapi import HTTPException, UploadFile, status

from ..settings import settings


def read_upload(file: UploadFile | None) -> tuple[UploadFile, bytes]:
    """Read an uploaded file, rejecting missing, empty and oversized uploads.

    Returns the upload together with its contents.
    """
    if file is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No file provided")
    data = file.file.read()
    if not data:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Uploaded file is empty")
    if len(data) > settings.max_upload_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail="Uploaded file is too large",
        )
    return file, data
