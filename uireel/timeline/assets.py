from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable, Mapping

# Vector output from the Extractor is preferred over the raster crop.
ASSET_SUFFIXES = (".svg", ".png")


class AssetManifest:
    """Extractor output: one addressable asset path per promotable element id."""

    def __init__(self, paths: Mapping[str, str] | None = None) -> None:
        self._paths: dict[str, str] = {}
        for element_id, path in (paths or {}).items():
            token = str(path or "").strip()
            if token:
                self._paths[str(element_id)] = token

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any] | None) -> "AssetManifest":
        return cls({str(key): str(value) for key, value in (mapping or {}).items() if value})

    @classmethod
    def discover(cls, directory: Path | str, element_ids: Iterable[str]) -> "AssetManifest":
        root = Path(directory)
        found: dict[str, str] = {}
        if not root.is_dir():
            return cls(found)
        for element_id in element_ids:
            for suffix in ASSET_SUFFIXES:
                candidate = root / f"{element_id}{suffix}"
                if candidate.is_file():
                    found[element_id] = str(candidate)
                    break
        return cls(found)

    def path_for(self, element_id: str) -> str | None:
        return self._paths.get(element_id)

    def asset_type(self, element_id: str) -> str | None:
        path = self._paths.get(element_id)
        if path is None:
            return None
        return "svg" if path.lower().endswith(".svg") else "image"

    def as_dict(self) -> dict[str, str]:
        return dict(self._paths)

    def __contains__(self, element_id: object) -> bool:
        return element_id in self._paths

    def __len__(self) -> int:
        return len(self._paths)


__all__ = ["ASSET_SUFFIXES", "AssetManifest"]
