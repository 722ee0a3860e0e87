"""Tests for the upload CLI."""

from unittest.mock import AsyncMock, patch

import click
import pytest
from click.testing import CliRunner

from assetbank.cli import main, parse_fields
from assetbank.upload.models import UploadFailure, UploadResult, UploadState


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def asset_file(tmp_path):
    path = tmp_path / "logo.png"
    path.write_bytes(b"png-bytes")
    return path


@pytest.fixture(autouse=True)
def no_logging_setup():
    with patch("assetbank.cli.setup_logging"):
        yield


def test_parse_fields():
    assert parse_fields(("name=Logo", "tags=a,b", "description=x=y")) == {
        "name": "Logo",
        "tags": "a,b",
        "description": "x=y",
    }


def test_parse_fields_rejects_missing_separator():
    with pytest.raises(click.BadParameter):
        parse_fields(("name",))


def test_upload_new_asset(runner, asset_file):
    result_model = UploadResult(success=True, mediaitems=[], batchId="b", mediaid="m1")

    with patch("assetbank.cli.run_upload", new=AsyncMock(return_value=result_model)) as mock_run:
        result = runner.invoke(main, [str(asset_file), "--brand-id", "b1", "-f", "name=Logo"])

    assert result.exit_code == 0, result.output
    mock_run.assert_awaited_once_with(asset_file, {"name": "Logo", "brandId": "b1"})
    assert "m1" in result.output


def test_upload_failure_exit_code(runner, asset_file):
    failure = UploadFailure(
        error="Unable to upload file. Invalid or Empty brandId",
        kind="validation",
        state=UploadState.FAILED,
        last_state=UploadState.FINALIZED,
    )

    with patch("assetbank.cli.run_upload", new=AsyncMock(return_value=failure)):
        result = runner.invoke(main, [str(asset_file)])

    assert result.exit_code == 1
    assert "Invalid or Empty brandId" in result.output


def test_missing_configuration(runner, asset_file):
    with patch(
        "assetbank.cli.run_upload", new=AsyncMock(side_effect=ValueError("API_BASE_URL not configured"))
    ):
        result = runner.invoke(main, [str(asset_file), "--media-id", "m1"])

    assert result.exit_code == 1
    assert "API_BASE_URL not configured" in result.output


def test_missing_file(runner, tmp_path):
    result = runner.invoke(main, [str(tmp_path / "missing.png"), "--brand-id", "b1"])

    assert result.exit_code == 2


def test_unsuccessful_save_exit_code(runner, asset_file):
    result_model = UploadResult(success=False, mediaitems=[], batchId="b", mediaid=None)

    with patch("assetbank.cli.run_upload", new=AsyncMock(return_value=result_model)):
        result = runner.invoke(main, [str(asset_file), "--brand-id", "b1"])

    assert result.exit_code == 1
