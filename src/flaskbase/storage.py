"""
flaskbase - File storage.

Uploads go to /storage/{bucket}/upload as multipart (file + path);
public URLs are built locally.
"""

from pathlib import Path
from typing import BinaryIO
from urllib.parse import quote

from flaskbase.models import Result
from flaskbase.transport import ApiTransport

FileInput = bytes | BinaryIO | Path | str

# Characters encodeURIComponent leaves unescaped besides the unreserved set
_URI_SAFE = "!*'()"


def _file_field(path: str, file: FileInput) -> tuple[str, bytes | BinaryIO]:
    """(filename, content) for the multipart "file" field."""
    if isinstance(file, (str, Path)):
        source = Path(file)
        return source.name, source.read_bytes()
    filename = Path(path).name or "file"
    name = getattr(file, "name", None)
    if isinstance(name, str):
        filename = Path(name).name
    return filename, file


class BucketClient:
    def __init__(self, transport: ApiTransport, bucket: str):
        self._transport = transport
        self.bucket = bucket

    async def upload(self, path: str, file: FileInput) -> Result:
        """
        Upload a file to `path` inside the bucket.

        Args:
            path: Destination path within the bucket
            file: Raw bytes, an open binary file, or a filesystem path

        Returns:
            Result with {"path", "publicUrl"}
        """
        return await self._transport.request(
            f"/storage/{self.bucket}/upload",
            method="POST",
            files={"file": _file_field(path, file)},
            data={"path": path},
        )

    def get_public_url(self, path: str) -> Result:
        url = self._transport.url_for(f"/storage/{self.bucket}/public/{quote(path, safe=_URI_SAFE)}")
        return Result(data={"publicUrl": url}, error=None)


class StorageClient:
    def __init__(self, transport: ApiTransport):
        self._transport = transport

    def from_(self, bucket: str) -> BucketClient:
        return BucketClient(self._transport, bucket)
