"""Class label tables shared by the classifier and the description rules."""

from __future__ import annotations

from vision.detections import RiskLevel

STREET_LABELS = (
    "car",
    "bus",
    "truck",
    "motorcycle",
    "bicycle",
    "person",
    "traffic light",
    "stop sign",
    "dog",
    "cat",
)

INDOOR_LABELS = (
    "chair",
    "table",
    "couch",
    "bed",
    "potted plant",
    "tv",
    "laptop",
    "mouse",
    "keyboard",
    "cell phone",
    "microwave",
    "oven",
    "toaster",
    "sink",
    "refrigerator",
    "book",
    "clock",
    "vase",
    "scissors",
    "teddy bear",
    "hair drier",
    "toothbrush",
    "bottle",
    "cup",
    "fork",
    "knife",
    "spoon",
    "bowl",
    "banana",
    "apple",
    "sandwich",
    "orange",
    "broccoli",
    "carrot",
    "hot dog",
    "pizza",
    "donut",
    "cake",
    "person",
)

# Labels that make a detection safety-critical in modes with vehicle rules.
HIGH_SALIENCE_LABELS = frozenset({"traffic light", "stop sign", "car", "bus", "truck"})

VEHICLE_LABELS = frozenset({"car", "bus", "truck"})

TRAFFIC_SIGNAL_LABEL = "traffic light"

_HIGH_RISK = frozenset({"car", "bus", "truck", "motorcycle", "bicycle"})
_MEDIUM_RISK = frozenset({"person", "dog", "cat", "stairs", "traffic light", "stop sign"})


def classify_risk(label: str) -> RiskLevel:
    """Return the fixed risk tier for a class label."""

    if label in _HIGH_RISK:
        return RiskLevel.HIGH
    if label in _MEDIUM_RISK:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW
