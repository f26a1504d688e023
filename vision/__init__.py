"""Vision package exports."""

from vision.classifier import classify
from vision.detections import (
    DetectionStatus,
    EnrichedDetection,
    Frame,
    RawDetection,
    RiskLevel,
)
from vision.modes import ModeController, ModeProfile, ModeTrigger, OperatingMode
from vision.sampler import AdaptiveSampler, SamplerConfig, SamplerState, SamplerTier

__all__ = [
    "AdaptiveSampler",
    "DetectionStatus",
    "EnrichedDetection",
    "Frame",
    "ModeController",
    "ModeProfile",
    "ModeTrigger",
    "OperatingMode",
    "RawDetection",
    "RiskLevel",
    "SamplerConfig",
    "SamplerState",
    "SamplerTier",
    "classify",
]
