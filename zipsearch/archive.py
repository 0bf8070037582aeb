"""
Entry listing of uploaded zip archives.

Only the central directory is read; member contents are never extracted.
"""

import io
import zipfile
from typing import List


class ArchiveError(ValueError):
    """Uploaded file is not a readable zip archive"""


def list_entry_names(content: bytes) -> List[str]:
    """
    Return the entry names of a zip archive in directory order.

    Raises:
        ArchiveError: Content is not a zip archive or is corrupted
    """
    try:
        with zipfile.ZipFile(io.BytesIO(content)) as archive:
            return [info.filename for info in archive.infolist()]
    except (zipfile.BadZipFile, zipfile.LargeZipFile, EOFError) as e:
        raise ArchiveError(f"Not a valid zip archive: {e}") from e
