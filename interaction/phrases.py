"""Spoken phrasing for alert directives and mode announcements."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from vision.detections import DetectionStatus, EnrichedDetection
from vision.labels import TRAFFIC_SIGNAL_LABEL, VEHICLE_LABELS
from vision.modes import ModeProfile, OperatingMode

# Zone edges as fractions of frame width (250px and 390px of a 640px frame).
LEFT_EDGE = 250 / 640
RIGHT_EDGE = 390 / 640


class Position(str, Enum):
    """Horizontal zone of a detection."""

    LEFT = "left"
    AHEAD = "ahead"
    RIGHT = "right"


def position_for(center_ratio: float) -> Position:
    if center_ratio < LEFT_EDGE:
        return Position.LEFT
    if center_ratio > RIGHT_EDGE:
        return Position.RIGHT
    return Position.AHEAD


@dataclass(frozen=True)
class PhraseBook:
    """Locale-specific templates for spoken output."""

    locale: str
    positions: dict[Position, str]
    unknown_in_path: str
    unknown_object: str
    floor_barrier: str
    traffic_signal: str
    oncoming_vehicle: str
    generic: str
    get_closer_suffix: str
    uncertain_prefix: str
    mode_activated: dict[OperatingMode, str]
    labels: dict[str, str] = field(default_factory=dict)

    def spoken_label(self, label: str) -> str:
        return self.labels.get(label, label)


ENGLISH = PhraseBook(
    locale="en",
    positions={Position.LEFT: "on your left", Position.AHEAD: "ahead", Position.RIGHT: "on your right"},
    unknown_in_path="Unknown object in your path",
    unknown_object="I could not identify this object",
    floor_barrier="Caution: obstacle on the ground {position}.",
    traffic_signal="Traffic light {position}.",
    oncoming_vehicle="Moving vehicle ahead.",
    generic="{label} {position}",
    get_closer_suffix=". Get closer.",
    uncertain_prefix="It might be ",
    mode_activated={
        OperatingMode.OUTDOOR: "Outdoor mode on",
        OperatingMode.INDOOR: "Indoor mode on",
        OperatingMode.READING: "Reading mode on. Point at the text.",
    },
    labels={"tv": "television", "cell phone": "phone"},
)

PORTUGUESE = PhraseBook(
    locale="pt-BR",
    positions={Position.LEFT: "à esquerda", Position.AHEAD: "à frente", Position.RIGHT: "à direita"},
    unknown_in_path="Objeto desconhecido no seu caminho",
    unknown_object="Não consegui identificar este objeto",
    floor_barrier="Atenção: obstáculo no chão {position}.",
    traffic_signal="Semáforo {position}.",
    oncoming_vehicle="Veículo em movimento à frente.",
    generic="{label} {position}",
    get_closer_suffix=". Chegue mais perto.",
    uncertain_prefix="Pode ser ",
    mode_activated={
        OperatingMode.OUTDOOR: "Modo Rua ativado",
        OperatingMode.INDOOR: "Modo Interno ativado",
        OperatingMode.READING: "Modo Leitura ativado. Aponte para o texto.",
    },
    labels={
        "person": "pessoa", "bicycle": "bicicleta", "car": "carro", "motorcycle": "moto",
        "airplane": "avião", "bus": "ônibus", "train": "trem", "truck": "caminhão",
        "boat": "barco", "traffic light": "semáforo", "fire hydrant": "hidrante",
        "stop sign": "placa de pare", "parking meter": "parquímetro", "bench": "banco",
        "bird": "pássaro", "cat": "gato", "dog": "cachorro", "horse": "cavalo",
        "sheep": "ovelha", "cow": "vaca", "elephant": "elefante", "bear": "urso",
        "zebra": "zebra", "giraffe": "girafa", "backpack": "mochila", "umbrella": "guarda-chuva",
        "handbag": "bolsa", "tie": "gravata", "suitcase": "mala", "frisbee": "frisbee",
        "skis": "esquis", "snowboard": "snowboard", "sports ball": "bola", "kite": "pipa",
        "baseball bat": "taco de beisebol", "baseball glove": "luva de beisebol",
        "skateboard": "skate", "surfboard": "prancha de surfe", "tennis racket": "raquete de tênis",
        "bottle": "garrafa", "wine glass": "taça de vinho", "cup": "copo", "fork": "garfo",
        "knife": "faca", "spoon": "colher", "bowl": "tigela", "banana": "banana",
        "apple": "maçã", "sandwich": "sanduíche", "orange": "laranja", "broccoli": "brócolis",
        "carrot": "cenoura", "hot dog": "cachorro-quente", "pizza": "pizza", "donut": "rosquinha",
        "cake": "bolo", "chair": "cadeira", "couch": "sofá", "potted plant": "planta de vaso",
        "bed": "cama", "dining table": "mesa de jantar", "toilet": "vaso sanitário",
        "tv": "televisão", "laptop": "notebook", "mouse": "mouse", "remote": "controle remoto",
        "keyboard": "teclado", "cell phone": "celular", "microwave": "micro-ondas",
        "oven": "forno", "toaster": "torradeira", "sink": "pia", "refrigerator": "geladeira",
        "book": "livro", "clock": "relógio", "vase": "vaso", "scissors": "tesoura",
        "teddy bear": "ursinho de pelúcia", "hair drier": "secador de cabelo",
        "toothbrush": "escova de dentes", "stairs": "escada", "door": "porta",
    },
)

PHRASE_BOOKS = {book.locale: book for book in (ENGLISH, PORTUGUESE)}


def get_phrase_book(locale: str | None) -> PhraseBook:
    """Return the phrase book for ``locale``, defaulting to English."""

    if not locale:
        return ENGLISH
    book = PHRASE_BOOKS.get(locale)
    if book is None:
        raise ValueError(f"Unsupported speech locale: {locale!r}")
    return book


def describe(
    detection: EnrichedDetection,
    profile: ModeProfile,
    phrases: PhraseBook = ENGLISH,
) -> str:
    """Return the spoken description for a detection; first matching rule wins."""

    if detection.status is DetectionStatus.UNKNOWN:
        if profile.mode is OperatingMode.OUTDOOR:
            return phrases.unknown_in_path
        return phrases.unknown_object

    position = position_for(detection.center_ratio)
    spoken_position = phrases.positions[position]

    if detection.is_floor_barrier:
        return phrases.floor_barrier.format(position=spoken_position)

    if detection.label == TRAFFIC_SIGNAL_LABEL:
        return phrases.traffic_signal.format(position=spoken_position)

    if profile.vehicle_rules and detection.label in VEHICLE_LABELS and position is Position.AHEAD:
        return phrases.oncoming_vehicle

    text = phrases.generic.format(
        label=phrases.spoken_label(detection.label),
        position=spoken_position,
    )
    if detection.status is DetectionStatus.GET_CLOSER:
        text += phrases.get_closer_suffix
    if detection.status is DetectionStatus.UNCERTAIN:
        text = phrases.uncertain_prefix + text
    return text
