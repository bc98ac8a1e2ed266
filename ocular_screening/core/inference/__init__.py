"""
Inference Module

Per-frame cognitive scoring, reference-profile comparison and risk classification.
"""
from .scoring import CognitiveScorer, ScoringWeights
from .patterns import (
    AggregatedMetrics, AggregationConfig, ReferenceProfile, REFERENCE_PROFILES,
    aggregate_metrics, pattern_similarity, profile_similarities,
)
from .risk_engine import (
    RiskCategory, BiomarkerImpairments, CognitiveAssessment, ClassifierConfig,
    RiskClassifier, default_assessment,
)

__all__ = [
    "CognitiveScorer",
    "ScoringWeights",
    "AggregatedMetrics",
    "AggregationConfig",
    "ReferenceProfile",
    "REFERENCE_PROFILES",
    "aggregate_metrics",
    "pattern_similarity",
    "profile_similarities",
    "RiskCategory",
    "BiomarkerImpairments",
    "CognitiveAssessment",
    "ClassifierConfig",
    "RiskClassifier",
    "default_assessment",
]
