from types import SimpleNamespace

import pytest
from botocore.exceptions import ClientError

from orderboard.core.errors import UpstreamFailure
from orderboard.services import r2_storage


def test_upload_image_builds_order_key_and_resized_url(monkeypatch):
    captured = {}

    class FakeClient:
        def upload_fileobj(self, file_obj, bucket_name, object_key, ExtraArgs=None):
            captured["bucket_name"] = bucket_name
            captured["object_key"] = object_key
            captured["payload"] = file_obj.read()
            captured["extra_args"] = ExtraArgs

    monkeypatch.setenv("R2_BUCKET_NAME", "test-bucket")
    monkeypatch.setenv("R2_PUBLIC_URL", "https://cdn.example.com/")
    monkeypatch.setattr(r2_storage, "_get_r2_client", lambda: FakeClient())
    monkeypatch.setattr(r2_storage, "uuid4", lambda: SimpleNamespace(hex="fixeduuid"))

    file_url = r2_storage.R2ImageStorage().upload_image(b"abc", filename="Foto.JPG", content_type="image/jpeg")

    assert captured["bucket_name"] == "test-bucket"
    assert captured["object_key"] == "robleka-pedidos/orders/fixeduuid.jpg"
    assert captured["payload"] == b"abc"
    assert captured["extra_args"] == {"ContentType": "image/jpeg"}
    assert file_url == (
        "https://cdn.example.com/cdn-cgi/image/width=800,height=600,fit=scale-down,quality=85/"
        "robleka-pedidos/orders/fixeduuid.jpg"
    )


def test_object_key_extension_falls_back_to_content_type(monkeypatch):
    monkeypatch.setattr(r2_storage, "uuid4", lambda: SimpleNamespace(hex="fixeduuid"))

    key = r2_storage.build_object_key("blob", "image/webp", folder="/pedidos/")

    assert key == "pedidos/orders/fixeduuid.webp"


def test_public_url_without_transforms():
    url = r2_storage.build_public_url("https://cdn.example.com", "pedidos/orders/a.png", transform=False)

    assert url == "https://cdn.example.com/pedidos/orders/a.png"


def test_missing_bucket_configuration_is_upstream_failure(monkeypatch):
    monkeypatch.delenv("R2_BUCKET_NAME", raising=False)

    with pytest.raises(UpstreamFailure) as exc:
        r2_storage.R2ImageStorage().upload_image(b"abc", filename="a.png", content_type="image/png")

    assert exc.value.status_code == 502
    assert "R2_BUCKET_NAME" in exc.value.message


def test_client_error_is_reported_as_upstream_failure(monkeypatch):
    class FailingClient:
        def upload_fileobj(self, *_args, **_kwargs):
            raise ClientError({"Error": {"Code": "AccessDenied", "Message": "denied"}}, "PutObject")

    monkeypatch.setenv("R2_BUCKET_NAME", "test-bucket")
    monkeypatch.setenv("R2_PUBLIC_URL", "https://cdn.example.com")
    monkeypatch.setattr(r2_storage, "_get_r2_client", lambda: FailingClient())

    with pytest.raises(UpstreamFailure) as exc:
        r2_storage.R2ImageStorage().upload_image(b"abc", filename="a.png", content_type="image/png")

    assert exc.value.status_code == 502
    assert exc.value.message == "Error al subir la imagen"
