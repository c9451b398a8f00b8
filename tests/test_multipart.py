"""Tests for multipart limits, spooling and error mapping."""

from unittest.mock import MagicMock

import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient

from legacy.constants.multipart import MIB
from legacy_web.common.advice import ProblemDetailsAdvice
from legacy_web.multipart import (
    MultipartConfig,
    MultipartResolver,
    MultipartRoute,
    MultipartSizeLimitMiddleware,
    is_on_disk,
)


@pytest.fixture
def upload_dir(tmp_path):
    path = tmp_path / "upload"
    path.mkdir()
    return path


@pytest.fixture
def small_config(upload_dir):
    return MultipartConfig(
        location=upload_dir,
        max_file_size=1024,
        max_request_size=4096,
        file_size_threshold=512,
    )


@pytest.fixture
def received():
    return MagicMock()


@pytest.fixture
def client(small_config, received):
    app = FastAPI()
    app.router.route_class = MultipartRoute
    app.state.multipart_resolver = MultipartResolver(small_config)
    ProblemDetailsAdvice().install(app)

    @app.post("/upload")
    async def upload(request: Request):
        form = await request.form()
        received(form)
        files = {
            name: {"size": value.size, "on_disk": is_on_disk(value)}
            for name, value in form.multi_items()
            if not isinstance(value, str)
        }
        fields = {name: value for name, value in form.multi_items() if isinstance(value, str)}
        return {"files": files, "fields": fields}

    return TestClient(app)


class TestMultipartConfig:
    """Tests for MultipartConfig."""

    def test_defaults(self, upload_dir):
        config = MultipartConfig(location=upload_dir)

        assert config.max_file_size == 20 * MIB == 20971520
        assert config.max_request_size == 40 * MIB == 41943040
        assert config.file_size_threshold == 20 * MIB

    @pytest.mark.parametrize(
        "overrides",
        [
            {"max_file_size": 0},
            {"max_request_size": -1},
            {"file_size_threshold": -1},
        ],
    )
    def test_rejects_invalid_limits(self, upload_dir, overrides):
        with pytest.raises(ValueError):
            MultipartConfig(location=upload_dir, **overrides)

    def test_spool_file_rolls_over_at_threshold(self, small_config):
        spool = small_config.create_spool_file()
        try:
            spool.write(b"x" * 511)
            assert not spool._rolled
            spool.write(b"x")
            assert spool._rolled
        finally:
            spool.close()

    def test_default_threshold_file_at_cap_on_disk(self, upload_dir):
        spool = MultipartConfig(location=upload_dir).create_spool_file()
        try:
            spool.write(b"\0" * (20 * MIB - 1))
            assert not spool._rolled
            spool.write(b"\0")
            assert spool._rolled
        finally:
            spool.close()

    def test_zero_threshold_always_on_disk(self, upload_dir):
        config = MultipartConfig(location=upload_dir, file_size_threshold=0)

        with config.create_spool_file() as spool:
            assert not hasattr(spool, "_rolled")


class TestMultipartRoute:
    """Tests for multipart handling through MultipartRoute."""

    def test_small_file_stays_in_memory(self, client):
        response = client.post("/upload", files={"doc": ("a.txt", b"x" * 511)})

        assert response.status_code == 200
        assert response.json()["files"]["doc"] == {"size": 511, "on_disk": False}

    def test_file_at_threshold_goes_to_disk(self, client):
        response = client.post("/upload", files={"doc": ("a.txt", b"x" * 512)})

        assert response.status_code == 200
        assert response.json()["files"]["doc"] == {"size": 512, "on_disk": True}

    def test_file_at_limit_accepted(self, client):
        response = client.post("/upload", files={"doc": ("a.bin", b"x" * 1024)})

        assert response.status_code == 200
        assert response.json()["files"]["doc"]["size"] == 1024

    def test_plain_fields_parsed(self, client):
        response = client.post(
            "/upload", data={"title": "report"}, files={"doc": ("a.txt", b"hello")}
        )

        assert response.status_code == 200
        assert response.json()["fields"] == {"title": "report"}

    def test_file_over_limit_rejected(self, client, received):
        response = client.post("/upload", files={"doc": ("a.bin", b"x" * 1025)})

        assert response.status_code == 413
        assert response.headers["content-type"] == "application/problem+json"
        body = response.json()
        assert body["title"] == "Payload Too Large"
        assert body["details"] == {"limit": 1024, "scope": "file"}
        received.assert_not_called()

    def test_request_over_limit_rejected(self, client, received):
        files = [(f"doc{i}", (f"{i}.bin", b"x" * 1000)) for i in range(5)]

        response = client.post("/upload", files=files)

        assert response.status_code == 413
        assert response.json()["details"] == {"limit": 4096, "scope": "request"}
        received.assert_not_called()

    def test_missing_boundary_is_bad_request(self, client, received):
        response = client.post(
            "/upload", content=b"--x\r\n", headers={"Content-Type": "multipart/form-data"}
        )

        assert response.status_code == 400
        assert response.json()["type"] == "urn:legacy:error:multipart-parse-error"
        received.assert_not_called()

    def test_non_multipart_untouched(self, client):
        response = client.post("/upload", data={"title": "report"})

        assert response.status_code == 200
        assert response.json()["fields"] == {"title": "report"}


class TestMultipartSizeLimitMiddleware:
    """Tests for the Content-Length check."""

    @pytest.fixture
    def guarded_client(self, received):
        app = FastAPI()
        app.add_middleware(MultipartSizeLimitMiddleware, max_request_size=4096)

        @app.post("/upload")
        async def upload():
            received()
            return {"ok": True}

        return TestClient(app)

    def test_rejects_declared_oversize(self, guarded_client, received):
        files = [(f"doc{i}", (f"{i}.bin", b"x" * 1000)) for i in range(5)]

        response = guarded_client.post("/upload", files=files)

        assert response.status_code == 413
        assert response.json()["details"]["scope"] == "request"
        received.assert_not_called()

    def test_allows_small_request(self, guarded_client, received):
        response = guarded_client.post("/upload", files={"doc": ("a.txt", b"x" * 100)})

        assert response.status_code == 200
        received.assert_called_once()

    def test_ignores_non_multipart(self, guarded_client, received):
        response = guarded_client.post("/upload", content=b"x" * 5000)

        assert response.status_code == 200
        received.assert_called_once()
