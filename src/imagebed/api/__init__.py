from .multipart import MultipartBody, encode_multipart, generate_boundary
from .transport import AsyncImageBedTransport
from .upload import (
    UPLOAD_FIELD_NAME,
    build_upload_params,
    interpret_response,
    upload_url,
)

__all__ = [
    "AsyncImageBedTransport",
    "MultipartBody",
    "UPLOAD_FIELD_NAME",
    "build_upload_params",
    "encode_multipart",
    "generate_boundary",
    "interpret_response",
    "upload_url",
]
