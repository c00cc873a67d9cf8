"""Local-disk submission transport and file store."""

from __future__ import annotations

from pathlib import Path

from payrail.core.exceptions import SubmissionConflictError
from payrail.models.submission import SubmissionReceipt


class LocalFileStore:
    """IFileStore rooted at a directory."""

    def __init__(self, root: str | Path) -> None:
        self._root = Path(root)

    def read(self, path: str) -> bytes:
        return (self._root / path).read_bytes()

    def write(self, path: str, data: bytes, content_type: str = "application/octet-stream") -> str:
        target = self._root / path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
        return str(target)

    def list_files(self, prefix: str) -> list[str]:
        if not self._root.exists():
            return []
        found = (p.relative_to(self._root).as_posix() for p in self._root.rglob("*") if p.is_file())
        return sorted(p for p in found if p.startswith(prefix))


class LocalFileTransport:
    """ISubmissionTransport writing ``payroll_<tag>.ach`` to a directory.

    An existing file is never replaced. Submitting identical bytes again is
    accepted; different bytes under the same name raise
    ``SubmissionConflictError``.
    """

    def __init__(self, directory: str | Path = ".") -> None:
        self._directory = Path(directory)

    def submit(self, file_text: str, tag: str) -> SubmissionReceipt:
        self._directory.mkdir(parents=True, exist_ok=True)
        path = self._directory / f"payroll_{tag}.ach"
        data = file_text.encode("ascii")
        try:
            with open(path, "xb") as fh:
                fh.write(data)
        except FileExistsError:
            if path.read_bytes() != data:
                raise SubmissionConflictError(f"{path} already exists with different content") from None
        return SubmissionReceipt(mode="LOCAL", location=str(path))
