"""Cache collaborators whose statistics are merged into the report.

The report treats their output as opaque. The asset registry is fed by the
collector from observed resource entries; this service caches no API
responses itself, so the API side reports an empty cache unless a real
provider is injected.
"""

from typing import Any, Dict, Protocol

from perf_monitor.domain.entries import ResourceEntry

FONT_EXTENSIONS = (".woff2", ".woff", ".ttf", ".otf")


class CacheStatsProvider(Protocol):
    def get_cache_stats(self) -> Dict[str, Any]: ...


class EmptyApiCache:
    def get_cache_stats(self) -> Dict[str, Any]:
        return {"size": 0, "entries": []}


class AssetRegistry:
    """Fonts, images and preloaded resources seen by the page."""

    def __init__(self):
        self.preloaded_resources: set[str] = set()
        self.loaded_fonts: set[str] = set()
        self.cached_images: set[str] = set()

    def record_resource(self, entry: ResourceEntry) -> None:
        url = entry.name.split("?", 1)[0].lower()
        if url.endswith(FONT_EXTENSIONS):
            self.loaded_fonts.add(entry.name)
        elif entry.initiator_type == "img":
            self.cached_images.add(entry.name)
        elif entry.initiator_type == "link":
            self.preloaded_resources.add(entry.name)

    def get_cache_stats(self) -> Dict[str, Any]:
        return {
            "preloaded_resources": len(self.preloaded_resources),
            "loaded_fonts": len(self.loaded_fonts),
            "cached_images": len(self.cached_images),
        }
