"""Unit tests for domain exceptions."""

from vidhost.domain.exceptions import (
    AuthenticationError,
    CatalogWriteError,
    ConfigurationError,
    DomainException,
    IngestionException,
    MediaNotFoundError,
    MissingInputError,
    ThumbnailDerivationError,
    UploadError,
    VideoNormalizationError,
)
from vidhost.domain.models import IngestionStep


class TestDomainException:
    """Tests for base DomainException."""

    def test_is_exception(self):
        assert isinstance(DomainException("Test error"), Exception)

    def test_message(self):
        assert str(DomainException("Custom message")) == "Custom message"


class TestMissingInputError:
    """Tests for MissingInputError."""

    def test_lists_missing_fields(self):
        exc = MissingInputError(["videoFile", "creatorName"])
        assert exc.missing == ["videoFile", "creatorName"]
        assert "videoFile, creatorName" in str(exc)
        assert isinstance(exc, DomainException)


class TestIngestionExceptions:
    """Tests for pipeline stage failures."""

    def test_stage_names(self):
        assert ThumbnailDerivationError("x").stage == "thumbnail derivation"
        assert VideoNormalizationError("x").stage == "video normalization"
        assert UploadError("x", "videos/a.mp4").stage == "upload"
        assert CatalogWriteError("x").stage == "catalog write"

    def test_all_are_ingestion_exceptions(self):
        for exc in (
            ThumbnailDerivationError("x"),
            VideoNormalizationError("x"),
            UploadError("x", "k"),
            CatalogWriteError("x"),
        ):
            assert isinstance(exc, IngestionException)
            assert isinstance(exc, DomainException)

    def test_step_defaults_to_none(self):
        exc = ThumbnailDerivationError("ffmpeg exited with status 1")
        assert exc.step is None
        assert exc.reason == "ffmpeg exited with status 1"
        assert str(exc) == "thumbnail derivation failed: ffmpeg exited with status 1"

    def test_step_is_kept(self):
        exc = CatalogWriteError("duplicate key", IngestionStep.VIDEO_UPLOADED)
        assert exc.step == IngestionStep.VIDEO_UPLOADED

    def test_upload_error_names_key(self):
        exc = UploadError("connection reset", "thumbnails/thumb-1-2.png")
        assert exc.key == "thumbnails/thumb-1-2.png"
        assert exc.reason == "thumbnails/thumb-1-2.png: connection reset"


class TestReadSideExceptions:
    """Tests for not-found, auth and configuration errors."""

    def test_media_not_found(self):
        exc = MediaNotFoundError("videos/missing.mp4")
        assert exc.key == "videos/missing.mp4"
        assert "videos/missing.mp4" in str(exc)

    def test_authentication_message_is_generic(self):
        assert str(AuthenticationError()) == "Invalid username or password"

    def test_configuration_error(self):
        exc = ConfigurationError("blob_storage", ["bucket", "public_url"])
        assert exc.section == "blob_storage"
        assert exc.missing == ["bucket", "public_url"]
        assert "bucket, public_url" in str(exc)
