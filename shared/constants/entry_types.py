class EntryTypes:
    """Centralised performance entry type names"""

    NAVIGATION = "navigation"
    RESOURCE = "resource"
    MEASURE = "measure"
    PAINT = "paint"
    LARGEST_CONTENTFUL_PAINT = "largest-contentful-paint"
    FIRST_INPUT = "first-input"
    LAYOUT_SHIFT = "layout-shift"

    # Paint entry names
    FIRST_CONTENTFUL_PAINT = "first-contentful-paint"

    @classmethod
    def timeline_types(cls) -> list[str]:
        """Entry types delivered to the umbrella observer"""
        return [cls.NAVIGATION, cls.RESOURCE, cls.MEASURE, cls.PAINT]

    @classmethod
    def web_vital_types(cls) -> list[str]:
        return [cls.LARGEST_CONTENTFUL_PAINT, cls.FIRST_INPUT, cls.LAYOUT_SHIFT]

    @classmethod
    def all_types(cls) -> list[str]:
        return cls.timeline_types() + cls.web_vital_types()
