class PerformanceMonitorError(Exception):
    """Base error for the performance monitor."""


class UnsupportedEntryTypeError(PerformanceMonitorError):
    def __init__(self, entry_types: list[str]):
        self.entry_types = list(entry_types)
        super().__init__(
            f"Unsupported performance entry type(s): {', '.join(self.entry_types)}"
        )
