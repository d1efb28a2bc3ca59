"""On-disk cache of work item type icons."""

from pathlib import Path

from ..sources import AzureDevOpsSource
from .api_client import AzureDevOpsClient
from .api_client_core import _ClientLogger

SVG_DATA_PREFIX = "image/svg+xml;utf8,"


def icon_filename(project: str, work_item_type: str) -> str:
    return f"{project.lower()}_{work_item_type.lower()}.svg"


class WorkItemIconCache:
    """Icons stored as ``<project>_<type>.svg`` files under ``icons_dir``.

    The in-memory map mirrors the directory. It is filled by
    ``update_icon_map`` and refilled whenever a new icon is written.
    """

    def __init__(self, icons_dir: Path, client: AzureDevOpsClient | None = None):
        self.icons_dir = Path(icons_dir)
        self._client = client
        self._icon_map: dict[str, str] = {}
        self._logger = _ClientLogger("ICONS")

    def update_icon_map(self) -> None:
        """Reload every ``.svg`` file in the directory into memory.

        Unreadable files are logged and left out of the map.
        """
        if not self.icons_dir.is_dir():
            return

        icon_map: dict[str, str] = {}
        for path in self.icons_dir.iterdir():
            if not path.is_file() or path.suffix.lower() != ".svg":
                continue
            try:
                svg_content = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                self._logger.warning(f"Skipping unreadable icon {path.name}: {e}")
                continue
            icon_map[path.name.lower()] = f"{SVG_DATA_PREFIX}{svg_content}"
        self._icon_map = icon_map

    def get_icon_uri(self, project: str, work_item_type: str) -> str | None:
        """Return a ``data:`` URI for the icon, or None if it is not cached."""
        icon = self._icon_map.get(icon_filename(project, work_item_type))
        if icon is None:
            return None
        return f"data:{icon}"

    async def ensure_icon_cached(
        self, source: AzureDevOpsSource, project: str, work_item_type: str
    ) -> Path:
        """Download the icon for a work item type unless it is already on disk."""
        self.icons_dir.mkdir(parents=True, exist_ok=True)
        icon_path = self.icons_dir / icon_filename(project, work_item_type)
        if icon_path.exists():
            return icon_path

        if self._client is None:
            raise RuntimeError("WorkItemIconCache has no client to download icons with")

        icon_url = await self._client.get_work_item_icon_url(source, project, work_item_type)
        svg = await self._client.download_icon(icon_url)
        icon_path.write_text(svg, encoding="utf-8")
        self._logger.info(f"Cached icon {icon_path.name}")

        self.update_icon_map()
        return icon_path
