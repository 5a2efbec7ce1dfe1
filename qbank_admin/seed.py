"""
Demo question bank: one subject with nested modules, sub-modules and
four-option questions. ``clear`` + ``seed`` give a deterministic state.
"""
import logging
from typing import Dict, List

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from qbank_admin.models.orm import Answer, Module, Question, Subject, SubModule

logger = logging.getLogger(__name__)


def _q(text: str, correct: str, *wrong: str) -> dict:
    return {"text": text, "answers": [{"text": correct, "is_correct": True}] + [{"text": w} for w in wrong]}


SEED_DATA: List[dict] = [
    {
        "name": "Aviation ATPL",
        "description": "Airline Transport Pilot Licence foundational theoretical knowledge.",
        "modules": [
            {
                "name": "Principles of Flight",
                "description": "Basic and applied aerodynamics.",
                "sub_modules": [
                    {"name": "Aerodynamics Basics", "questions": [
                        _q("Lift on a wing is primarily generated as a result of which pressure relationship?",
                           "Lower static pressure over the upper surface",
                           "Higher static pressure over the upper surface",
                           "Equal static pressure but higher temperature above",
                           "Centrifugal pressure acting outward"),
                        _q("Induced drag generally decreases when:",
                           "Airspeed increases (at constant lift)",
                           "Aspect ratio decreases",
                           "Angle of attack decreases below zero",
                           "The aircraft climbs at constant IAS"),
                    ]},
                    {"name": "Stall & Drag", "questions": [
                        _q("The critical angle of attack is the angle at which:",
                           "Maximum lift coefficient is reached",
                           "Parasite drag is minimum",
                           "Induced drag becomes zero",
                           "Lift becomes zero"),
                        _q("Ground effect reduces:",
                           "Induced drag close to the surface",
                           "Parasite drag at all altitudes",
                           "Weight of the aircraft",
                           "Stall speed in all phases of flight equally"),
                    ]},
                ],
            },
            {
                "name": "Meteorology",
                "description": "Atmospheric structure and weather phenomena.",
                "sub_modules": [
                    {"name": "Atmosphere & Pressure", "questions": [
                        _q("Standard sea level pressure and temperature (ISA) are:",
                           "1013.25 hPa and 15°C",
                           "1000.00 hPa and 0°C",
                           "1015.00 hPa and 20°C",
                           "980.00 hPa and 10°C"),
                        _q("Pressure lapse rate in the lower standard atmosphere is best described as:",
                           "Pressure decreases approximately exponentially with altitude",
                           "Pressure increases linearly with altitude",
                           "Pressure remains constant to the tropopause",
                           "Pressure decreases linearly at 6.5 hPa per 1000 ft"),
                    ]},
                    {"name": "Clouds & Icing", "questions": [
                        _q("Supercooled liquid water is most likely in which temperature band?",
                           "0°C to about -20°C",
                           "Above +15°C",
                           "Below -40°C",
                           "Only exactly at 0°C"),
                        _q("Rime ice forms when:",
                           "Small supercooled droplets freeze rapidly on impact",
                           "Large droplets freeze slowly producing clear layers",
                           "Water vapor sublimates directly into ice crystals forming glaze",
                           "Airframe temperature is above freezing"),
                    ]},
                ],
            },
            {
                "name": "Human Performance",
                "description": "Physiological and psychological factors affecting pilots.",
                "sub_modules": [
                    {"name": "Physiology", "questions": [
                        _q("Hypoxia risk increases notably above which cabin altitude (unacclimatized)?",
                           "10,000 ft",
                           "2,000 ft",
                           "4,000 ft",
                           "6,000 ft (no further increase thereafter)"),
                        _q("A common early symptom of hypoxia is:",
                           "Impaired judgment / euphoria",
                           "Sharp chest pain",
                           "Immediate loss of consciousness",
                           "Tunnel vision always first"),
                    ]},
                    {"name": "CRM & Decision Making", "questions": [
                        _q("Crew Resource Management primarily aims to improve:",
                           "Interpersonal communication and decision processes",
                           "Only manual flying precision",
                           "Aircraft structural performance",
                           "Fuel burn optimization exclusively"),
                        _q("A hazardous attitude characterized by \"I can do it, watch this\" is best termed:",
                           "Macho",
                           "Resignation",
                           "Complacency",
                           "Invulnerability mitigation"),
                    ]},
                ],
            },
        ],
    },
]


def clear(db: Session) -> None:
    # children first so it also works without ON DELETE CASCADE
    for model in (Answer, Question, SubModule, Module, Subject):
        db.execute(delete(model))


def _answers(raw: List[dict]) -> List[Answer]:
    """A question with no flagged answer gets its first one marked correct."""
    flagged = any(a.get("is_correct") for a in raw)
    return [Answer(text=a["text"], is_correct=bool(a.get("is_correct")) or (not flagged and i == 0))
            for i, a in enumerate(raw)]


def seed(db: Session, data: List[dict] = SEED_DATA) -> None:
    for s in data:
        subject = Subject(name=s["name"], description=s.get("description"))
        for m in s.get("modules", []):
            module = Module(name=m["name"], description=m.get("description"))
            subject.modules.append(module)
            for sm in m.get("sub_modules", []):
                sub_module = SubModule(name=sm["name"], description=sm.get("description"))
                module.sub_modules.append(sub_module)
                for q in sm.get("questions", []):
                    sub_module.questions.append(Question(text=q["text"], answers=_answers(q["answers"])))
        db.add(subject)
        db.flush()


def counts(db: Session) -> Dict[str, int]:
    return {
        model.__tablename__: db.scalar(select(func.count()).select_from(model)) or 0
        for model in (Subject, Module, SubModule, Question, Answer)
    }
