"""
Archive Packager

Bundles the per-table SQL files into an in-memory ZIP archive. Entries carry
fixed timestamps and permissions so identical input yields byte-identical
archives. The run manifest (JSON) is stored as the archive comment, which
keeps the entry list to exactly one file per table.
"""

import io
import json
import logging
import zipfile
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from .errors import PackagingError
from .utils import PathManager, stable_hash_bytes

logger = logging.getLogger(__name__)

FIXED_DATE_TIME = (1980, 1, 1, 0, 0, 0)
FILE_MODE = 0o644
MAX_COMMENT_BYTES = 65535

COMPRESSION_METHODS = {
    "deflate": zipfile.ZIP_DEFLATED,
    "stored": zipfile.ZIP_STORED,
}


def entry_names(table_names: Iterable[str]) -> Dict[str, str]:
    """
    Archive entry names for a set of tables, one distinct file per table

    Names that clean to the same file (or differ only in case) get a numeric
    suffix in table order: `a_b.sql`, `a_b_2.sql`.

    Returns:
        Mapping of table name to entry name
    """
    names: Dict[str, str] = {}
    taken = set()
    for table_name in table_names:
        stem = PathManager.clean_filename(table_name)
        candidate, counter = f"{stem}.sql", 1
        while candidate.lower() in taken:
            counter += 1
            candidate = f"{stem}_{counter}.sql"
        taken.add(candidate.lower())
        names[table_name] = candidate
    return names


class ArchivePackager:
    """
    Packages named text artifacts into ZIP bytes

    Args:
        compression: 'deflate' or 'stored'
    """

    def __init__(self, compression: str = "deflate"):
        if compression not in COMPRESSION_METHODS:
            raise ValueError(
                f"Unsupported compression '{compression}'. Available: {', '.join(COMPRESSION_METHODS)}"
            )
        self.compression = compression
        self.compress_type = COMPRESSION_METHODS[compression]

    def package(self, artifacts: Mapping[str, str], manifest: Optional[Dict[str, Any]] = None) -> bytes:
        """
        Build the archive

        Args:
            artifacts: Ordered mapping of entry name to text content
            manifest: Run metadata to store as the archive comment (entry
                names and SHA-256 digests are added to it)

        Returns:
            ZIP archive bytes

        Raises:
            PackagingError: If any entry or the manifest cannot be written
        """
        encoded = []
        seen = set()
        for name, text in artifacts.items():
            clean = PathManager.clean_filename(name)
            if clean in seen:
                raise PackagingError(clean, "duplicate entry name")
            seen.add(clean)
            try:
                encoded.append((clean, text.encode("utf-8")))
            except (UnicodeEncodeError, AttributeError) as e:
                raise PackagingError(clean, f"content cannot be encoded as UTF-8: {e}") from e

        comment = b""
        if manifest is not None:
            comment = self._encode_manifest(manifest, encoded)

        buffer = io.BytesIO()
        try:
            with zipfile.ZipFile(buffer, "w", self.compress_type) as zf:
                for name, data in encoded:
                    info = zipfile.ZipInfo(name, date_time=FIXED_DATE_TIME)
                    info.compress_type = self.compress_type
                    info.create_system = 3  # unix
                    info.external_attr = FILE_MODE << 16
                    zf.writestr(info, data)
                zf.comment = comment
        except (zipfile.BadZipFile, zipfile.LargeZipFile, ValueError, OSError) as e:
            raise PackagingError(None, str(e)) from e

        payload = buffer.getvalue()
        logger.info(f"Packaged {len(encoded)} file(s) into a {len(payload)} byte archive")
        return payload

    def _encode_manifest(self, manifest: Dict[str, Any], encoded) -> bytes:
        files = [
            {"name": name, "size": len(data), "sha256": stable_hash_bytes(data)}
            for name, data in encoded
        ]
        document = dict(manifest)
        document["files"] = files
        document["content_hash"] = stable_hash_bytes(
            "".join(f"{entry['name']}:{entry['sha256']}\n" for entry in files).encode("utf-8")
        )

        try:
            comment = json.dumps(document, sort_keys=True, separators=(",", ":"), default=str).encode("utf-8")
        except (TypeError, ValueError) as e:
            raise PackagingError(None, f"manifest is not serializable: {e}") from e

        if len(comment) > MAX_COMMENT_BYTES:
            raise PackagingError(None, f"manifest is {len(comment)} bytes, the limit is {MAX_COMMENT_BYTES}")
        return comment


def read_archive(buffer: bytes) -> Tuple[Dict[str, str], Optional[Dict[str, Any]]]:
    """
    Read an archive produced by ArchivePackager

    Args:
        buffer: ZIP archive bytes

    Returns:
        Tuple of (entry name -> text in archive order, manifest or None)
    """
    with zipfile.ZipFile(io.BytesIO(buffer)) as zf:
        entries = {info.filename: zf.read(info).decode("utf-8") for info in zf.infolist()}
        manifest = json.loads(zf.comment.decode("utf-8")) if zf.comment else None
    return entries, manifest
