"""
Upload endpoints.

Two ways in: a multipart proxy upload through the API, or a signed URL
from /presign that the client PUTs the bytes to directly. Either way the
response carries the object URL to store on the memory.
"""
from fastapi import APIRouter, Depends, File, Query, Request, Response, UploadFile

from mementos.core.exceptions import ValidationError
from mementos.database.models import MediaType
from mementos.services import AuthUser, LocalStorage
from mementos.services.storage import DEFAULT_CONTENT_TYPE
from ..dependencies import get_raw_body, get_storage, require_auth_user
from ..schemas import PresignIn, PresignOut, UploadOut

router = APIRouter(prefix="/api/uploads", tags=["uploads"])


@router.post("", response_model=UploadOut, status_code=201)
def upload_file(
    file: UploadFile = File(...),
    auth_user: AuthUser = Depends(require_auth_user),
    storage: LocalStorage = Depends(get_storage),
) -> UploadOut:
    data = file.file.read(storage.max_upload_bytes + 1)
    content_type = file.content_type or DEFAULT_CONTENT_TYPE
    file_name = file.filename or "upload"

    key = storage.generate_key(file_name)
    url = storage.put_object(key, data, content_type)
    return UploadOut(
        key=key,
        url=url,
        media_name=file_name,
        media_size=len(data),
        media_type=MediaType.from_content_type(content_type).value,
    )


@router.post("/presign", response_model=PresignOut)
def presign_upload(
    payload: PresignIn,
    auth_user: AuthUser = Depends(require_auth_user),
    storage: LocalStorage = Depends(get_storage),
) -> PresignOut:
    key = storage.generate_key(payload.file_name)
    upload_url = storage.presign_upload(key, payload.content_type, payload.content_length)
    return PresignOut(key=key, upload_url=upload_url, url=storage.object_url(key))


@router.put("/{key}")
def put_signed_upload(
    key: str,
    request: Request,
    expires: int = Query(...),
    length: int = Query(...),
    signature: str = Query(...),
    body: bytes = Depends(get_raw_body),
    storage: LocalStorage = Depends(get_storage),
) -> dict:
    content_type = request.headers.get("content-type") or DEFAULT_CONTENT_TYPE
    storage.verify_upload(key, content_type, length, expires, signature)
    if len(body) != length:
        raise ValidationError(
            f"Upload length {len(body)} does not match the signed length {length}"
        )
    return {"key": key, "url": storage.put_object(key, body, content_type)}


@router.get("/{key}")
def get_upload(key: str, storage: LocalStorage = Depends(get_storage)) -> Response:
    data, content_type = storage.read_object(key)
    return Response(content=data, media_type=content_type)
