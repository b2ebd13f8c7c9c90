"""Line-delimited JSON mirror files under a single root directory."""

from __future__ import annotations

import json
from pathlib import Path
from typing import IO, Iterable

from ..errors import MalformedMirrorError, MirrorFileMissingError


class MirrorWriter:
    """Open sink writing one JSON object per line."""

    def __init__(self, path: Path, mode: str) -> None:
        self.path = path
        self.mode = mode
        self._file: IO[str] = path.open(mode, encoding="utf-8", newline="")
        self.count = 0

    def write(self, record: dict) -> None:
        json.dump(record, self._file, ensure_ascii=False)
        self._file.write("\n")
        self.count += 1

    def write_many(self, records: Iterable[dict]) -> None:
        for record in records:
            self.write(record)

    def flush(self) -> None:
        self._file.flush()

    def close(self) -> None:
        if not self._file.closed:
            self._file.close()

    @property
    def closed(self) -> bool:
        return self._file.closed

    def __enter__(self) -> "MirrorWriter":
        return self

    def __exit__(self, *_exc_info) -> None:
        self.close()


class MirrorStore:
    """Read, write, append and delete mirror files by name."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def path_for(self, name: str) -> Path:
        return self.root / name

    def exists(self, name: str) -> bool:
        return self.path_for(name).is_file()

    def open_for_write(self, name: str) -> MirrorWriter:
        return self._open(name, "w")

    def open_for_append(self, name: str) -> MirrorWriter:
        return self._open(name, "a")

    def _open(self, name: str, mode: str) -> MirrorWriter:
        self.root.mkdir(parents=True, exist_ok=True)
        return MirrorWriter(self.path_for(name), mode)

    def read_all(self, name: str) -> list[dict]:
        """Parse every non-blank line of a mirror file.

        A missing final newline is fine. Any line that does not decode to a JSON
        object aborts the read: skipping it would shift the grouping of every
        record after it.
        """

        path = self.path_for(name)
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise MirrorFileMissingError(f"Mirror file not found: {path}") from None
        records: list[dict] = []
        for line_number, line in enumerate(text.splitlines(), start=1):
            if not line.strip():
                continue
            try:
                record = json.loads(line)
            except json.JSONDecodeError as exc:
                raise MalformedMirrorError(path, line_number, exc.msg) from exc
            if not isinstance(record, dict):
                raise MalformedMirrorError(path, line_number, "expected a JSON object")
            records.append(record)
        return records

    def delete_if_exists(self, name: str) -> bool:
        """Remove a mirror file; return ``False`` when there was nothing to remove."""

        try:
            self.path_for(name).unlink()
        except FileNotFoundError:
            return False
        return True


__all__ = ["MirrorStore", "MirrorWriter"]
