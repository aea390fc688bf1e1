"""Rule-based insights over a site metrics snapshot."""

from dataclasses import dataclass


@dataclass
class MetricsSnapshot:
    """Site metrics supplied by the caller."""
    bounce_rate: float  # percent
    avg_session_duration: float  # minutes
    conversion_rate: float  # percent
    organic_traffic: int = 0
    backlinks: int = 0


STANDING_INSIGHTS = [
    "Top performing keywords show strong potential for content expansion.",
    "Organic traffic growth indicates successful SEO strategy implementation.",
]


def generate_insights(data: MetricsSnapshot) -> list[str]:
    insights = []

    if data.bounce_rate > 40:
        insights.append("High bounce rate detected. Consider improving page load speed and content relevance.")

    if data.avg_session_duration < 2:
        insights.append("Low session duration. Enhance content engagement with interactive elements.")

    if data.conversion_rate < 3:
        insights.append("Conversion rate below industry average. Optimize CTAs and landing pages.")

    return insights + STANDING_INSIGHTS
