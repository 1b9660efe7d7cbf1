"""
Local artifact storage for clipforge.

Synthesized narration is written here and served by the API under /media,
so the video assembler can fetch it by URL and the media host can upload
it from disk.
"""
import uuid
from pathlib import Path
from typing import Optional


class FileManager:
    """
    Manage locally generated artifacts.

    Layout:
    - {base_dir}/{batch_id}/audio/  - narration tracks

    Implements path traversal protection to prevent directory escape attacks.
    """

    def __init__(self, base_dir: str | Path, public_base_url: str):
        """
        Args:
            base_dir: Root directory for all artifacts
            public_base_url: Server URL that serves base_dir under /media
        """
        self.base_dir = Path(base_dir).resolve()
        self.base_dir.mkdir(parents=True, exist_ok=True)
        self.public_base_url = public_base_url.rstrip("/")

    def _subdir(self, batch_id: str, kind: str) -> Path:
        target = (self.base_dir / batch_id / kind).resolve()

        if not target.is_relative_to(self.base_dir):
            raise ValueError("Invalid artifact path")

        target.mkdir(parents=True, exist_ok=True)
        return target

    def save_audio(self, data: bytes, batch_id: Optional[str] = None, extension: str = "mp3") -> Path:
        """
        Save a narration track.

        Args:
            data: Encoded audio bytes
            batch_id: Grouping directory; a new one is created when omitted
            extension: File extension without the dot

        Returns:
            Path to the saved file
        """
        batch_id = batch_id or uuid.uuid4().hex
        filepath = self._subdir(batch_id, "audio") / f"narration_{uuid.uuid4().hex[:8]}.{extension}"
        filepath.write_bytes(data)
        return filepath

    def public_url(self, path: Path) -> str:
        """Map a stored file to its URL under the /media mount."""
        relative = Path(path).resolve().relative_to(self.base_dir)
        return f"{self.public_base_url}/media/{relative.as_posix()}"

    def resolve_public_url(self, url: str) -> Optional[Path]:
        """Inverse of public_url; None for URLs that are not ours."""
        prefix = f"{self.public_base_url}/media/"
        if not url.startswith(prefix):
            return None
        candidate = (self.base_dir / url[len(prefix):]).resolve()
        if not candidate.is_relative_to(self.base_dir) or not candidate.is_file():
            return None
        return candidate
