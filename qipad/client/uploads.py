"""Image Upload Flows - signed-URL uploader and multipart uploader.

Invariants:
    - Validation runs before any request: content type must start with the
      configured prefix ("image/"), size must be <= upload_max_bytes (5 MB)
    - A rejected file raises UploadValidationError after an error toast and
      no request is issued
    - Signed-URL flow: POST /api/objects/upload -> PUT bytes to uploadURL with
      the file's Content-Type -> POST /api/objects/acl; the returned image URL
      is "/objects/" + the last two path segments of uploadURL (query stripped)
    - ACL failure is a warning unless upload_acl_required is set
    - Multipart flow succeeds only on {"success": true, "imageUrl": ...}
"""

import logging
import mimetypes
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urlsplit

from qipad.client.api_request import ApiClient, parse_json
from qipad.client.notifier import Notifier
from qipad.config import Settings, get_settings
from qipad.core.errors import ApiRequestError, UploadError, UploadValidationError

logger = logging.getLogger(__name__)

UPLOAD_FAILED = "Upload failed"
UPLOAD_FAILED_DETAIL = "Failed to upload image. Please try again."


@dataclass(frozen=True)
class SelectedFile:
    name: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)

    @classmethod
    def from_path(cls, path: str | Path) -> "SelectedFile":
        path = Path(path)
        content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        return cls(name=path.name, content_type=content_type, data=path.read_bytes())


def validate_image(file: SelectedFile, settings: Settings) -> None:
    if not file.content_type.startswith(settings.upload_content_type_prefix):
        raise UploadValidationError(
            "Invalid file type", "Please select an image file",
        )
    if file.size > settings.upload_max_bytes:
        limit_mb = settings.upload_max_bytes // (1024 * 1024)
        raise UploadValidationError(
            "File too large", f"Please select an image smaller than {limit_mb}MB",
        )


def object_url_from_upload_url(upload_url: str) -> str:
    segments = [s for s in urlsplit(upload_url).path.split("/") if s]
    return "/objects/" + "/".join(segments[-2:])


class _BaseUploader:

    def __init__(
        self, api: ApiClient, notifier: Notifier, settings: Settings | None = None,
    ):
        self.api = api
        self.notifier = notifier
        self.settings = settings or get_settings()
        self.is_uploading = False

    def _validate(self, file: SelectedFile) -> None:
        try:
            validate_image(file, self.settings)
        except UploadValidationError as e:
            self.notifier.error(e.title, e.description)
            raise

    def _fail(self, message: str, step: str, cause: Exception | None = None) -> UploadError:
        logger.error(f"Upload error at {step}: {cause or message}")
        self.notifier.error(UPLOAD_FAILED, UPLOAD_FAILED_DETAIL)
        return UploadError(message, step)


class ObjectUploader(_BaseUploader):
    """Uploads through a signed storage URL, then records a public ACL."""

    async def upload(self, file: SelectedFile) -> str:
        self._validate(file)
        self.is_uploading = True
        try:
            try:
                response = await self.api.request("POST", "/api/objects/upload")
                upload_url = parse_json(response)["uploadURL"]
            except (ApiRequestError, KeyError, TypeError) as e:
                raise self._fail("Failed to get upload URL", "upload_url", e)

            try:
                await self.api.request(
                    "PUT", upload_url,
                    content=file.data,
                    headers={"Content-Type": file.content_type},
                    authenticated=False,
                )
            except ApiRequestError as e:
                raise self._fail("Failed to upload file", "transfer", e)

            image_url = object_url_from_upload_url(upload_url)
            await self._set_acl(upload_url)
        finally:
            self.is_uploading = False

        self.notifier.success("Upload successful", "Image uploaded successfully")
        return image_url

    async def _set_acl(self, upload_url: str) -> None:
        try:
            await self.api.request(
                "POST", "/api/objects/acl",
                json={"imageUrl": upload_url, "visibility": "public"},
            )
        except ApiRequestError as e:
            if self.settings.upload_acl_required:
                raise self._fail("Failed to set ACL policy", "acl", e)
            logger.warning(f"Failed to set ACL policy, but upload succeeded: {e}")


class SimpleImageUploader(_BaseUploader):
    """Uploads as multipart form field "image" to the project images endpoint."""

    endpoint = "/api/projects/images/upload"

    async def upload(self, file: SelectedFile) -> str:
        self._validate(file)
        self.is_uploading = True
        try:
            try:
                response = await self.api.request(
                    "POST", self.endpoint,
                    files={"image": (file.name, file.data, file.content_type)},
                )
            except ApiRequestError as e:
                raise self._fail("Failed to upload image", "transfer", e)
            data = parse_json(response)
            if not (isinstance(data, dict) and data.get("success") and data.get("imageUrl")):
                raise self._fail("Upload failed", "response")
        finally:
            self.is_uploading = False

        self.notifier.success("Success", "Image uploaded successfully!")
        return data["imageUrl"]
