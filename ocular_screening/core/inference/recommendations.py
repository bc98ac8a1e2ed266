"""
Recommendation text for cognitive assessments.

Category baselines plus biomarker-triggered additions, and the observed
pattern / professional guidance texts used when no narration is available.
"""
from typing import Any, Dict, List

MAX_RECOMMENDATIONS = 6

CATEGORY_RECOMMENDATIONS: Dict[str, List[str]] = {
    "high": [
        "Urgent consultation with neurologist recommended",
        "Comprehensive cognitive assessment advised",
        "Regular monitoring of daily functioning changes",
        "Consider brain imaging studies if not recently done",
    ],
    "medium": [
        "Schedule appointment with healthcare provider",
        "Cognitive exercises and brain training recommended",
        "Monitor for memory and concentration changes",
        "Maintain healthy lifestyle with regular exercise",
    ],
    "low": [
        "Continue regular health check-ups",
        "Maintain cognitive activities and social engagement",
        "Healthy Mediterranean diet may support brain health",
        "Regular physical activity supports cognitive function",
    ],
}

# (biomarker attribute, threshold, text)
BIOMARKER_RECOMMENDATIONS = [
    ("saccade", 40.0, "Eye movement exercises may improve coordination"),
    ("fixation", 50.0, "Focus and attention training could be beneficial"),
    ("velocity", 30.0, "Visual tracking exercises may help eye movement speed"),
]

OBSERVED_PATTERNS = [
    ("saccade", 40.0, "Delayed saccadic eye movements observed"),
    ("pursuit", 50.0, "Reduced smooth pursuit tracking capability"),
    ("fixation", 30.0, "Decreased fixation stability during visual tasks"),
]

PROFESSIONAL_GUIDANCE: Dict[str, str] = {
    "low": (
        "These results appear within normal ranges for cognitive screening. "
        "Continue regular health check-ups and maintain cognitive activities."
    ),
    "medium": (
        "Some patterns suggest further evaluation may be beneficial. Please share these "
        "results with your healthcare provider for personalized assessment."
    ),
    "high": (
        "These patterns indicate that professional neurological evaluation is recommended. "
        "Please consult with a specialist for comprehensive assessment."
    ),
}


def generate_recommendations(category: str, biomarkers: Any) -> List[str]:
    """Category baseline followed by biomarker-specific items, at most six."""
    recommendations = list(CATEGORY_RECOMMENDATIONS[category])
    for attribute, threshold, text in BIOMARKER_RECOMMENDATIONS:
        if getattr(biomarkers, attribute) > threshold:
            recommendations.append(text)
    return recommendations[:MAX_RECOMMENDATIONS]


def observed_patterns(biomarkers: Any) -> List[str]:
    return [text for attribute, threshold, text in OBSERVED_PATTERNS if getattr(biomarkers, attribute) > threshold]


def professional_guidance(category: str) -> str:
    return PROFESSIONAL_GUIDANCE[category]
