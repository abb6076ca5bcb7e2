"""Classification of scanned files into supported media files."""

from collections.abc import Iterable
from datetime import datetime, timezone

from mediasort.config import DATE_DIR_FORMAT, Config
from mediasort.extractor.parser import clean_device_string
from mediasort.models import MediaType, RawFile, SupportedFile, SupportLevel

IMAGE_EXTENSIONS = frozenset(
    {"jpg", "jpeg", "png", "tiff", "tif", "heic", "heif", "webp", "crw", "cr2", "nef", "nrw", "arw", "dng"}
)
VIDEO_EXTENSIONS = frozenset({"avif", "mp4", "mov", "3gp", "avi", "m4v"})
AUDIO_EXTENSIONS = frozenset({"amr", "ogg", "m4a"})

BASE_EXTENSIONS: dict[str, MediaType] = {
    **{ext: MediaType.IMAGE for ext in IMAGE_EXTENSIONS},
    **{ext: MediaType.VIDEO for ext in VIDEO_EXTENSIONS},
    **{ext: MediaType.AUDIO for ext in AUDIO_EXTENSIONS},
}


def is_base_extension(extension: str | None) -> bool:
    return extension is not None and extension.lower() in BASE_EXTENSIONS


def get_media_type(
    extension: str | None,
    custom_extensions: dict[str, list[str]] | None = None,
) -> tuple[MediaType, bool]:
    """Return the media type for an extension and whether it came from the custom table."""
    if not extension:
        return MediaType.UNKNOWN, False

    extension = extension.lower()
    if extension in BASE_EXTENSIONS:
        return BASE_EXTENSIONS[extension], False

    for category, extensions in (custom_extensions or {}).items():
        if extension in extensions:
            return MediaType(category), True

    return MediaType.UNKNOWN, False


def device_name(make: str | None, model: str | None, include_make: bool = True) -> str | None:
    """Build a device identity from the embedded make and model.

    The make is only prefixed when the model does not already start with it,
    so "Canon" + "Canon EOS 100D" stays "Canon EOS 100D".
    """
    model = clean_device_string(model)
    if not model:
        return None

    make = clean_device_string(make)
    if include_make and make and not model.lower().startswith(make.lower()):
        return f"{make} {model}"
    return model


def classify(raw: RawFile, config: Config) -> SupportedFile:
    """Turn a scanned file into a SupportedFile. Never raises."""
    media_type, is_custom = get_media_type(
        raw.parsed_filename.extension, config.custom.extensions
    )
    fs_date = _format_timestamp(raw.modified)

    if raw.read_error or media_type is MediaType.UNKNOWN:
        reason = raw.read_error or "unknown extension"
        return _supported_file(
            raw, media_type, SupportLevel.UNSUPPORTED, fs_date, "fs_modified", None, reason
        )

    if is_custom:
        return _supported_file(
            raw, media_type, SupportLevel.PARTIAL, fs_date, "fs_modified", None, "custom extension"
        )

    metadata = raw.metadata
    if metadata is None:
        reason = raw.metadata_error or "no embedded metadata"
        return _supported_file(
            raw, media_type, SupportLevel.PARTIAL, fs_date, "fs_modified", None, reason
        )

    device = device_name(metadata.make, metadata.model, config.options.include_device_make)
    if device is not None:
        device = config.custom.device_names.get(device, device)

    if metadata.date_original:
        date, date_source = metadata.date_original.strftime(DATE_DIR_FORMAT), "exif_original"
    elif metadata.date_modified:
        date, date_source = metadata.date_modified.strftime(DATE_DIR_FORMAT), "exif_modified"
    else:
        return _supported_file(
            raw, media_type, SupportLevel.PARTIAL, fs_date, "fs_modified", device, "no embedded date"
        )

    return _supported_file(raw, media_type, SupportLevel.FULL, date, date_source, device, None)


def non_custom_device_names(files: Iterable[SupportedFile], config: Config) -> list[str]:
    """Device names that were not rewritten through the custom device table."""
    custom_values = set(config.custom.device_names.values())
    names = {
        f.device
        for f in files
        if f.device is not None and f.device not in custom_values
    }
    return sorted(names)


def _supported_file(
    raw: RawFile,
    media_type: MediaType,
    support: SupportLevel,
    date: str,
    date_source: str,
    device: str | None,
    reason: str | None,
) -> SupportedFile:
    return SupportedFile(
        source_path=raw.path,
        source_root=raw.source_root,
        directory=raw.directory,
        file_name=raw.parsed_filename.full,
        extension=raw.parsed_filename.extension,
        media_type=media_type,
        support=support,
        date=date,
        date_source=date_source,
        device=device,
        size=raw.size,
        reason=reason,
    )


def _format_timestamp(timestamp: float) -> str:
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).strftime(DATE_DIR_FORMAT)
