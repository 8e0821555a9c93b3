"""
Object storage for uploaded study files.
Files live under STORAGE_ROOT/<bucket>/<path>; downloads go through
time-limited signed URLs whose token is a JWT over (bucket, path, exp).
"""
from __future__ import annotations
from datetime import datetime, timedelta
from pathlib import Path, PurePosixPath
from typing import Optional
from urllib.parse import quote
import logging
import re

from jose import JWTError, jwt

from cuaderno.config import settings

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


class StorageError(Exception):
    """Raised for invalid paths, missing objects and I/O failures."""


def safe_filename(name: str) -> str:
    """Basename with anything outside [A-Za-z0-9._-] collapsed to '_'."""
    base = PurePosixPath((name or "").replace("\\", "/")).name
    cleaned = _UNSAFE_CHARS.sub("_", base).strip("._")
    return cleaned or "file"


class ObjectStorage:
    def __init__(
        self,
        root: Optional[str] = None,
        bucket: Optional[str] = None,
        *,
        public_base_url: Optional[str] = None,
        secret: Optional[str] = None,
        algorithm: Optional[str] = None,
    ):
        self.root = Path(root or settings.STORAGE_ROOT)
        self.bucket = bucket or settings.STORAGE_BUCKET
        self.public_base_url = (public_base_url or settings.PUBLIC_BASE_URL).rstrip("/")
        self.secret = secret if secret is not None else settings.JWT_SECRET
        self.algorithm = algorithm or settings.JWT_ALG

    # ---- paths ----
    @staticmethod
    def normalize(path: str) -> str:
        """Relative POSIX key; rejects empty keys and any '..' segment."""
        parts = [p for p in PurePosixPath((path or "").replace("\\", "/")).parts if p not in ("/", ".")]
        if not parts or any(p == ".." for p in parts):
            raise StorageError(f"Invalid object path: {path!r}")
        return "/".join(parts)

    def _resolve(self, path: str) -> Path:
        return self.root / self.bucket / self.normalize(path)

    # ---- object operations ----
    def upload(self, path: str, data: bytes, *, upsert: bool = False) -> str:
        key = self.normalize(path)
        target = self._resolve(key)
        if target.exists() and not upsert:
            raise StorageError(f"Object already exists: {key}")
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        except OSError as e:
            logger.error(f"Storage upload failed for {key}: {e}")
            raise StorageError(str(e)) from e
        logger.info(f"Stored object {self.bucket}/{key} ({len(data)} bytes)")
        return key

    def open_path(self, path: str) -> Path:
        """Filesystem location of an existing object."""
        target = self._resolve(path)
        if not target.is_file():
            raise StorageError(f"Object not found: {path}")
        return target

    def download(self, path: str) -> bytes:
        target = self.open_path(path)
        try:
            return target.read_bytes()
        except OSError as e:
            raise StorageError(str(e)) from e

    def remove(self, path: str) -> bool:
        target = self._resolve(path)
        if not target.exists():
            return False
        try:
            target.unlink()
        except OSError as e:
            logger.error(f"Storage remove failed for {path}: {e}")
            raise StorageError(str(e)) from e
        return True

    # ---- signed URLs ----
    def create_signed_url(self, path: str, expires_in: int = 3600) -> str:
        key = self.normalize(path)
        if not self._resolve(key).is_file():
            raise StorageError(f"Object not found: {key}")
        token = jwt.encode(
            {
                "bucket": self.bucket,
                "path": key,
                "exp": datetime.utcnow() + timedelta(seconds=expires_in),
            },
            self.secret,
            algorithm=self.algorithm,
        )
        return f"{self.public_base_url}/storage/{quote(self.bucket)}/{quote(key)}?token={token}"

    def verify_token(self, token: str, path: str) -> bool:
        """True when the token was issued for exactly this bucket/path and has not expired."""
        try:
            claims = jwt.decode(token, self.secret, algorithms=[self.algorithm])
            return claims.get("bucket") == self.bucket and claims.get("path") == self.normalize(path)
        except (JWTError, StorageError):
            return False
