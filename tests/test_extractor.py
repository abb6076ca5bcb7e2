"""Tests for the embedded metadata extractor."""

import json
import subprocess
from datetime import datetime
from pathlib import Path
from unittest.mock import Mock, patch

import pytest

from mediasort.extractor.exiftool import ExiftoolNotFoundError, ExiftoolResult, ExiftoolRunner
from mediasort.extractor.parser import (
    clean_device_string,
    get_first_value,
    parse_embedded_metadata,
    parse_exif_date,
)
from mediasort.extractor.reader import ExiftoolMetadataReader, MetadataResult, NullMetadataReader
from mediasort.models import EmbeddedMetadata


class TestParseExifDate:
    """Tests for parse_exif_date function."""

    def test_standard_format(self) -> None:
        assert parse_exif_date("2017:06:22 10:11:12") == datetime(2017, 6, 22, 10, 11, 12)

    def test_iso_format(self) -> None:
        assert parse_exif_date("2017-06-22T10:11:12") == datetime(2017, 6, 22, 10, 11, 12)

    def test_with_timezone(self) -> None:
        assert parse_exif_date("2017:06:22 10:11:12+02:00") == datetime(2017, 6, 22, 10, 11, 12)

    def test_with_subseconds(self) -> None:
        assert parse_exif_date("2017:06:22 10:11:12.345") == datetime(2017, 6, 22, 10, 11, 12)

    def test_none_value(self) -> None:
        assert parse_exif_date(None) is None

    def test_empty_string(self) -> None:
        assert parse_exif_date("   ") is None

    def test_zero_date(self) -> None:
        assert parse_exif_date("0000:00:00 00:00:00") is None

    def test_non_string(self) -> None:
        assert parse_exif_date(20170622) is None

    def test_garbage(self) -> None:
        assert parse_exif_date("yesterday") is None


class TestGetFirstValue:
    """Tests for get_first_value function."""

    def test_returns_first_existing(self) -> None:
        metadata = {"EXIF:Model": None, "QuickTime:Model": "iPhone 8"}
        assert get_first_value(metadata, "EXIF:Model", "QuickTime:Model") == "iPhone 8"

    def test_returns_none_if_all_missing(self) -> None:
        assert get_first_value({}, "EXIF:Model") is None


class TestCleanDeviceString:
    """Tests for clean_device_string function."""

    def test_strips_quotes_commas_and_whitespace(self) -> None:
        assert clean_device_string(' "NIKON CORPORATION", ') == "NIKON CORPORATION"

    def test_empty_after_cleaning(self) -> None:
        assert clean_device_string('"",') is None

    def test_none(self) -> None:
        assert clean_device_string(None) is None


class TestParseEmbeddedMetadata:
    """Tests for parse_embedded_metadata function."""

    def test_exif_record(self) -> None:
        record = {
            "SourceFile": "/pics/IMG_1.jpg",
            "EXIF:DateTimeOriginal": "2017:06:22 10:11:12",
            "EXIF:ModifyDate": "2018:01:01 00:00:00",
            "EXIF:Make": "Canon",
            "EXIF:Model": "Canon EOS 100D",
        }

        result = parse_embedded_metadata(record)

        assert result == EmbeddedMetadata(
            date_original=datetime(2017, 6, 22, 10, 11, 12),
            date_modified=datetime(2018, 1, 1),
            make="Canon",
            model="Canon EOS 100D",
        )

    def test_quicktime_record(self) -> None:
        record = {"QuickTime:CreateDate": "2014:06:20 08:00:00", "QuickTime:Model": "CAN-L11"}

        result = parse_embedded_metadata(record)

        assert result.date_original == datetime(2014, 6, 20, 8)
        assert result.model == "CAN-L11"
        assert result.make is None

    def test_falls_through_zero_dates(self) -> None:
        record = {
            "EXIF:DateTimeOriginal": "0000:00:00 00:00:00",
            "QuickTime:CreateDate": "2014:06:20 08:00:00",
        }

        assert parse_embedded_metadata(record).date_original == datetime(2014, 6, 20, 8)

    def test_empty_record(self) -> None:
        assert parse_embedded_metadata({}) == EmbeddedMetadata()


class TestExiftoolRunner:
    """Tests for ExiftoolRunner class."""

    @patch("shutil.which")
    def test_raises_if_not_found(self, mock_which: Mock) -> None:
        mock_which.return_value = None
        with pytest.raises(ExiftoolNotFoundError):
            ExiftoolRunner()

    @patch.object(ExiftoolRunner, "_check_exiftool", return_value="12.76")
    @patch("subprocess.run")
    def test_extract_batch_maps_records(self, mock_run: Mock, _: Mock) -> None:
        mock_run.return_value = subprocess.CompletedProcess(
            args=[],
            returncode=1,
            stdout=json.dumps([{"SourceFile": "/a.jpg", "EXIF:Model": "X"}]).encode(),
            stderr=b"",
        )

        results = ExiftoolRunner().extract_batch(["/a.jpg", "/b.jpg"])

        assert results[0] == ExiftoolResult("/a.jpg", {"SourceFile": "/a.jpg", "EXIF:Model": "X"})
        assert results[1].error == "No output from exiftool"

    @patch.object(ExiftoolRunner, "_check_exiftool", return_value="12.76")
    @patch("subprocess.run")
    def test_extract_batch_fatal_exit(self, mock_run: Mock, _: Mock) -> None:
        mock_run.return_value = subprocess.CompletedProcess(
            args=[], returncode=2, stdout=b"", stderr=b"boom"
        )

        results = ExiftoolRunner().extract_batch(["/a.jpg"])

        assert results == [ExiftoolResult("/a.jpg", {}, "boom")]

    @patch.object(ExiftoolRunner, "_check_exiftool", return_value="12.76")
    @patch("subprocess.run")
    def test_extract_batch_bad_json(self, mock_run: Mock, _: Mock) -> None:
        mock_run.return_value = subprocess.CompletedProcess(
            args=[], returncode=0, stdout=b"{not json", stderr=b""
        )

        results = ExiftoolRunner().extract_batch(["/a.jpg"])

        assert results[0].error.startswith("JSON parse error")

    @patch.object(ExiftoolRunner, "_check_exiftool", return_value="12.76")
    @patch("subprocess.run")
    def test_extract_batch_non_utf8_file_name(self, mock_run: Mock, _: Mock) -> None:
        # how os.fsdecode presents the name byte 0xff
        path = "/pics/\udcff.jpg"
        mock_run.return_value = subprocess.CompletedProcess(
            args=[],
            returncode=0,
            stdout=b'[{"SourceFile": "/pics/\xff.jpg", "EXIF:Model": "X"}]',
            stderr=b"",
        )

        results = ExiftoolRunner().extract_batch([path])

        assert results[0].error is None
        assert results[0].metadata["EXIF:Model"] == "X"

    @patch.object(ExiftoolRunner, "_check_exiftool", return_value="12.76")
    @patch("subprocess.run")
    def test_extract_batch_undecodable_stderr(self, mock_run: Mock, _: Mock) -> None:
        mock_run.return_value = subprocess.CompletedProcess(
            args=[], returncode=2, stdout=b"", stderr=b"cannot open \xfe"
        )

        results = ExiftoolRunner().extract_batch(["/a.jpg"])

        assert results[0].error == "cannot open \ufffd"

    @patch.object(ExiftoolRunner, "_check_exiftool", return_value="12.76")
    @patch("subprocess.run")
    def test_extract_batch_unexpected_json_shape(self, mock_run: Mock, _: Mock) -> None:
        mock_run.return_value = subprocess.CompletedProcess(
            args=[], returncode=0, stdout=b'{"SourceFile": "/a.jpg"}', stderr=b""
        )

        results = ExiftoolRunner().extract_batch(["/a.jpg"])

        assert results[0].error == "Unexpected exiftool output"

    @patch.object(ExiftoolRunner, "_check_exiftool", return_value="12.76")
    def test_extract_batch_empty(self, _: Mock) -> None:
        assert ExiftoolRunner().extract_batch([]) == []


class TestExiftoolMetadataReader:
    """Tests for ExiftoolMetadataReader class."""

    def test_read_batch(self) -> None:
        runner = Mock()
        runner.extract_batch.return_value = [
            ExiftoolResult("/pics/a.jpg", {"EXIF:DateTimeOriginal": "2017:06:22 10:11:12"}),
            ExiftoolResult("/pics/b.jpg", {}, "No output from exiftool"),
        ]
        reader = ExiftoolMetadataReader(runner=runner)

        results = reader.read_batch([Path("/pics/a.jpg"), Path("/pics/b.jpg")])

        runner.extract_batch.assert_called_once_with(["/pics/a.jpg", "/pics/b.jpg"])
        assert results[Path("/pics/a.jpg")].metadata.date_original == datetime(2017, 6, 22, 10, 11, 12)
        assert results[Path("/pics/b.jpg")] == MetadataResult(error="No output from exiftool")

    def test_read_batch_empty(self) -> None:
        runner = Mock()
        reader = ExiftoolMetadataReader(runner=runner)

        assert reader.read_batch([]) == {}
        runner.extract_batch.assert_not_called()


class TestNullMetadataReader:
    """Tests for NullMetadataReader class."""

    def test_returns_nothing(self) -> None:
        assert NullMetadataReader().read_batch([Path("/a.jpg")]) == {}
