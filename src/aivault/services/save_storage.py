"""File-system storage for the single autosave blob."""
from __future__ import annotations

from pathlib import Path

from aivault.services.errors import SaveLoadError

SAVE_FILENAME = "save.json"


class SaveFileStore:
    """Reads and writes the raw save text at a fixed path."""

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def exists(self) -> bool:
        return self._path.exists()

    def read(self) -> str | None:
        """Return the stored text, or None when nothing has been saved yet."""
        try:
            return self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise SaveLoadError(f"Unable to read save file: {self._path}") from exc

    def write(self, text: str) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
            tmp_path.write_text(text, encoding="utf-8")
            tmp_path.replace(self._path)
        except OSError as exc:
            raise SaveLoadError(f"Unable to write save file: {self._path}") from exc

    def delete(self) -> None:
        try:
            self._path.unlink()
        except FileNotFoundError:
            return
        except OSError as exc:
            raise SaveLoadError(f"Unable to delete save file: {self._path}") from exc
