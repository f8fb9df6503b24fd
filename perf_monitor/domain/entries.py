"""Performance timeline entries as reported by a page beacon.

Field names mirror the browser ``PerformanceEntry`` family in snake_case.
Timestamps are milliseconds relative to the page's time origin.
"""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field

from .models import MemoryUsage, NetworkInfo


class BaseEntry(BaseModel):
    name: str = Field("", description="Entry name (URL for navigation/resource)")
    start_time: float = Field(0.0, ge=0, description="Start time (ms)")
    duration: float = Field(0.0, ge=0, description="Duration (ms)")
    navigation_id: str | None = Field(
        None, description="Identifier of the navigation the entry belongs to"
    )


class NavigationEntry(BaseEntry):
    entry_type: Literal["navigation"] = "navigation"
    fetch_start: float = 0.0
    dom_content_loaded_event_end: float = 0.0
    load_event_end: float = 0.0


class ResourceEntry(BaseEntry):
    entry_type: Literal["resource"] = "resource"
    response_end: float = 0.0
    transfer_size: int | None = None
    initiator_type: str = "other"


class PaintEntry(BaseEntry):
    entry_type: Literal["paint"] = "paint"


class MeasureEntry(BaseEntry):
    entry_type: Literal["measure"] = "measure"


class LargestContentfulPaintEntry(BaseEntry):
    entry_type: Literal["largest-contentful-paint"] = "largest-contentful-paint"
    size: int = 0


class FirstInputEntry(BaseEntry):
    entry_type: Literal["first-input"] = "first-input"
    processing_start: float = 0.0


class LayoutShiftEntry(BaseEntry):
    entry_type: Literal["layout-shift"] = "layout-shift"
    value: float = Field(0.0, ge=0)
    had_recent_input: bool = False


PerformanceEntry = Annotated[
    Union[
        NavigationEntry,
        ResourceEntry,
        PaintEntry,
        MeasureEntry,
        LargestContentfulPaintEntry,
        FirstInputEntry,
        LayoutShiftEntry,
    ],
    Field(discriminator="entry_type"),
]


class Beacon(BaseModel):
    """One batch of entries posted by a page, plus its capability snapshots."""

    entries: list[PerformanceEntry] = Field(default_factory=list)
    memory: MemoryUsage | None = Field(
        None, description="Heap introspection, when the browser exposes it"
    )
    connection: NetworkInfo | None = Field(
        None, description="Network information, when the browser exposes it"
    )
