import httpx
import pytest

from blog.config import settings
from blog.uploads import service as upload_service
from conftest import auth_headers

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


@pytest.fixture()
def fake_host(monkeypatch):
    """외부 이미지 호스트 대신 호출 내역만 기록"""
    calls = []

    async def _upload(data, filename, content_type):
        calls.append((len(data), filename, content_type))
        return f"https://res.cloudinary.com/demo/image/upload/{filename}"

    monkeypatch.setattr(upload_service, "upload_image", _upload)
    return calls


async def test_upload_returns_public_url(client, signup, fake_host):
    token, _ = await signup("Alice", "alice@example.com")
    resp = await client.post(
        "/upload",
        files={"image": ("cat.png", PNG_BYTES, "image/png")},
        headers=auth_headers(token),
    )
    assert resp.status_code == 200
    assert resp.json() == {"imageUrl": "https://res.cloudinary.com/demo/image/upload/cat.png"}
    assert fake_host == [(len(PNG_BYTES), "cat.png", "image/png")]


async def test_upload_requires_auth(client, fake_host):
    resp = await client.post("/upload", files={"image": ("cat.png", PNG_BYTES, "image/png")})
    assert resp.status_code == 401
    assert fake_host == []


async def test_upload_rejects_bad_type_size_and_missing_file(client, signup, fake_host):
    token, _ = await signup("Alice", "alice@example.com")

    resp = await client.post(
        "/upload",
        files={"image": ("anim.gif", b"GIF89a", "image/gif")},
        headers=auth_headers(token),
    )
    assert resp.status_code == 400
    assert resp.json() == {"error": "Invalid file type. Only JPEG, PNG, and WebP are allowed."}

    big = b"\x00" * (settings.UPLOAD_MAX_BYTES + 1)
    resp = await client.post(
        "/upload",
        files={"image": ("huge.jpg", big, "image/jpeg")},
        headers=auth_headers(token),
    )
    assert resp.status_code == 400
    assert resp.json() == {"error": "File size too large. Maximum size is 5MB."}

    resp = await client.post("/upload", data={"other": "x"}, headers=auth_headers(token))
    assert resp.status_code == 400
    assert resp.json() == {"error": "No image file provided"}

    assert fake_host == []


async def test_upload_host_failure_is_500(client, signup, monkeypatch):
    token, _ = await signup("Alice", "alice@example.com")

    async def _fail(data, filename, content_type):
        raise upload_service.ImageUploadError("boom")

    monkeypatch.setattr(upload_service, "upload_image", _fail)
    resp = await client.post(
        "/upload",
        files={"image": ("cat.webp", PNG_BYTES, "image/webp")},
        headers=auth_headers(token),
    )
    assert resp.status_code == 500
    assert resp.json() == {"error": "Failed to upload image"}


async def test_upload_image_posts_signed_form(monkeypatch):
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["url"] = str(request.url)
        captured["body"] = request.content
        return httpx.Response(200, json={"secure_url": "https://res.cloudinary.com/demo/x.png"})

    real_client = httpx.AsyncClient
    monkeypatch.setattr(
        upload_service.httpx,
        "AsyncClient",
        lambda **kwargs: real_client(transport=httpx.MockTransport(handler), **kwargs),
    )
    monkeypatch.setattr(settings, "CLOUDINARY_CLOUD_NAME", "demo")
    monkeypatch.setattr(settings, "CLOUDINARY_API_KEY", "key")
    monkeypatch.setattr(settings, "CLOUDINARY_API_SECRET", "secret")

    url = await upload_service.upload_image(PNG_BYTES, "x.png", "image/png")
    assert url == "https://res.cloudinary.com/demo/x.png"
    assert captured["url"] == "https://api.cloudinary.com/v1_1/demo/image/upload"
    assert b'name="signature"' in captured["body"]
    assert b'name="api_key"' in captured["body"]


async def test_upload_image_without_credentials(monkeypatch):
    monkeypatch.setattr(settings, "CLOUDINARY_CLOUD_NAME", None)
    with pytest.raises(upload_service.ImageUploadError):
        await upload_service.upload_image(PNG_BYTES, "x.png", "image/png")


async def test_sign_params_matches_cloudinary_scheme():
    import hashlib

    expected = hashlib.sha1(b"folder=blog-app&timestamp=1700000000abcd").hexdigest()
    assert upload_service.sign_params({"timestamp": "1700000000", "folder": "blog-app"}, "abcd") == expected
