"""Image Upload Flows - validation before any request, signed-URL and multipart paths.

Invariants:
    - Non-image or >5MB files raise before a single request is sent
    - Signed-URL flow returns "/objects/<dir>/<id>" and PUTs the raw bytes
      without the bearer token
    - ACL failure is only a warning unless the settings make it mandatory
"""

import pytest

from qipad.client.uploads import (
    ObjectUploader, SelectedFile, SimpleImageUploader,
    object_url_from_upload_url, validate_image,
)
from qipad.config import Settings, get_settings
from qipad.core.errors import UploadError, UploadValidationError

UPLOAD_URL = (
    "https://storage.test/qipad-objects/uploads/abc123"
    "?X-Qipad-Expires=1999999999&X-Qipad-Signature=deadbeef"
)
PNG = SelectedFile(name="logo.png", content_type="image/png", data=b"\x89PNG....")


def script_signed_upload(server, acl_status=200):
    server.on("POST", "/api/objects/upload", json={"uploadURL": UPLOAD_URL})
    server.on("PUT", "/qipad-objects/uploads/abc123", 200)
    server.on("POST", "/api/objects/acl", acl_status, json={"objectPath": "/objects/uploads/abc123"})


def test_validate_rejects_non_images():
    with pytest.raises(UploadValidationError) as exc:
        validate_image(SelectedFile("cv.pdf", "application/pdf", b"%PDF"), get_settings())
    assert exc.value.title == "Invalid file type"


def test_validate_size_limit_is_inclusive():
    limit = get_settings().upload_max_bytes
    validate_image(SelectedFile("a.png", "image/png", b"\0" * limit), get_settings())
    with pytest.raises(UploadValidationError) as exc:
        validate_image(SelectedFile("a.png", "image/png", b"\0" * (limit + 1)), get_settings())
    assert exc.value.title == "File too large"
    assert "5MB" in exc.value.description


def test_object_url_strips_host_and_query():
    assert object_url_from_upload_url(UPLOAD_URL) == "/objects/uploads/abc123"


async def test_rejected_file_sends_no_request(api, notifier, server):
    uploader = ObjectUploader(api, notifier)

    with pytest.raises(UploadValidationError):
        await uploader.upload(SelectedFile("notes.txt", "text/plain", b"hi"))

    assert server.requests == []
    assert notifier.last.title == "Invalid file type"
    assert notifier.last.variant == "destructive"
    assert not uploader.is_uploading


async def test_signed_upload_happy_path(api, notifier, server, tokens):
    tokens.set("tok")
    script_signed_upload(server)

    image_url = await ObjectUploader(api, notifier).upload(PNG)

    assert image_url == "/objects/uploads/abc123"
    put = server.calls("PUT", "/qipad-objects/uploads/abc123")[0]
    assert put.content == PNG.data
    assert put.headers["Content-Type"] == "image/png"
    assert "Authorization" not in put.headers
    acl = server.calls("POST", "/api/objects/acl")[0]
    assert server.body(acl) == {"imageUrl": UPLOAD_URL, "visibility": "public"}
    assert notifier.last.title == "Upload successful"


async def test_acl_failure_is_warning_by_default(api, notifier, server):
    script_signed_upload(server, acl_status=500)

    assert await ObjectUploader(api, notifier).upload(PNG) == "/objects/uploads/abc123"
    assert notifier.last.title == "Upload successful"


async def test_acl_failure_fails_when_required(api, notifier, server):
    script_signed_upload(server, acl_status=500)
    strict = Settings(upload_acl_required=True)

    with pytest.raises(UploadError) as exc:
        await ObjectUploader(api, notifier, strict).upload(PNG)

    assert exc.value.step == "acl"
    assert notifier.last.title == "Upload failed"


async def test_transfer_failure_reports_step(api, notifier, server):
    server.on("POST", "/api/objects/upload", json={"uploadURL": UPLOAD_URL})
    server.on("PUT", "/qipad-objects/uploads/abc123", 403, text="signature expired")

    with pytest.raises(UploadError) as exc:
        await ObjectUploader(api, notifier).upload(PNG)

    assert exc.value.step == "transfer"
    assert server.calls("POST", "/api/objects/acl") == []


async def test_multipart_upload_returns_image_url(api, notifier, server):
    server.on("POST", "/api/projects/images/upload", json={
        "success": True, "imageUrl": "/uploads/projects/logo.png",
    })

    image_url = await SimpleImageUploader(api, notifier).upload(PNG)

    assert image_url == "/uploads/projects/logo.png"
    request = server.requests[0]
    assert request.headers["Content-Type"].startswith("multipart/form-data")
    assert b'name="image"' in request.content
    assert notifier.last.title == "Success"


async def test_multipart_upload_requires_success_flag(api, notifier, server):
    server.on("POST", "/api/projects/images/upload", json={"success": False})

    with pytest.raises(UploadError) as exc:
        await SimpleImageUploader(api, notifier).upload(PNG)

    assert exc.value.step == "response"


def test_selected_file_from_path_guesses_type(tmp_path):
    path = tmp_path / "avatar.png"
    path.write_bytes(b"\x89PNG")

    selected = SelectedFile.from_path(path)

    assert selected.content_type == "image/png"
    assert selected.size == 4
