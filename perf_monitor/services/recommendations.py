from typing import List, Optional

from perf_monitor.core.config import Settings, settings
from perf_monitor.domain.models import PerformanceSample

PAGE_LOAD_ADVICE = "Page load time is high. Consider code splitting and lazy loading."
LCP_ADVICE = "LCP is poor. Optimize critical resources and images."
CLS_ADVICE = (
    "CLS is poor. Add size attributes to images and reserve space for dynamic content."
)
FID_ADVICE = "FID is poor. Optimize JavaScript execution and consider web workers."
MEMORY_ADVICE = (
    "Memory usage is high. Check for memory leaks and optimize component cleanup."
)


def generate_recommendations(
    current: Optional[PerformanceSample], thresholds: Settings = settings
) -> List[str]:
    """Advisory strings for every threshold ``current`` exceeds (strictly)."""
    recommendations: List[str] = []
    if current is None:
        return recommendations

    if current.page_load_ms > thresholds.page_load_threshold_ms:
        recommendations.append(PAGE_LOAD_ADVICE)
    if current.largest_contentful_paint_ms > thresholds.lcp_threshold_ms:
        recommendations.append(LCP_ADVICE)
    if current.cumulative_layout_shift > thresholds.cls_threshold:
        recommendations.append(CLS_ADVICE)
    if current.first_input_delay_ms > thresholds.fid_threshold_ms:
        recommendations.append(FID_ADVICE)
    memory = current.memory_usage
    if memory and memory.used > memory.limit * thresholds.memory_usage_ratio_threshold:
        recommendations.append(MEMORY_ADVICE)
    return recommendations
