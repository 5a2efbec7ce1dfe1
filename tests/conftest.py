from typing import Iterable, Optional, Tuple

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import func, select

from qbank_admin.core.config import Settings
from qbank_admin.core.database import Store
from qbank_admin.main import create_app
from qbank_admin.models.orm import Answer, Module, Question, Subject, SubModule

USERNAME = "raptor"
PASSWORD = "0424"


class Factory:
    """Inserts rows through short-lived sessions and hands back their ids."""

    def __init__(self, store: Store):
        self.store = store

    def _add(self, obj) -> int:
        with self.store.session() as db:
            db.add(obj); db.commit()
            return obj.id

    def subject(self, name: str = "Aviation ATPL", description: Optional[str] = None) -> int:
        return self._add(Subject(name=name, description=description))

    def module(self, subject_id: int, name: str = "Meteorology", description: Optional[str] = None) -> int:
        return self._add(Module(name=name, description=description, subject_id=subject_id))

    def sub_module(self, module_id: int, name: str = "Clouds & Icing", description: Optional[str] = None) -> int:
        return self._add(SubModule(name=name, description=description, module_id=module_id))

    def question(self, sub_module_id: int, text: str = "Rime ice forms when:",
                 answers: Iterable[Tuple[str, bool]] = (("Small droplets freeze rapidly", True),
                                                       ("Airframe is above freezing", False))) -> int:
        return self._add(Question(text=text, sub_module_id=sub_module_id,
                                  answers=[Answer(text=t, is_correct=c) for t, c in answers]))

    def count(self, model) -> int:
        with self.store.session() as db:
            return db.scalar(select(func.count()).select_from(model))


@pytest.fixture
def settings():
    return Settings(_env_file=None, ENVIRONMENT="testing", DATABASE_URL="sqlite://", LOG_LEVEL="WARNING")


@pytest.fixture
def store(settings):
    store = Store(settings.DATABASE_URL)
    store.create_all()
    yield store
    store.dispose()


@pytest.fixture
def make(store):
    return Factory(store)


@pytest.fixture
def anon_client(settings, store):
    with TestClient(create_app(settings, store)) as c:
        yield c


@pytest.fixture
def client(anon_client):
    r = anon_client.post("/api/auth/login", json={"username": USERNAME, "password": PASSWORD})
    assert r.status_code == 200
    return anon_client


@pytest.fixture
def tree(make):
    """Two subjects; Aviation has Meteorology (two sub-modules) and Principles of Flight (one)."""
    aviation = make.subject("Aviation ATPL", "Airline Transport Pilot Licence")
    maritime = make.subject("Maritime", "Deck officer theory")
    meteo = make.module(aviation, "Meteorology", "Weather phenomena")
    pof = make.module(aviation, "Principles of Flight", "Aerodynamics")
    nav = make.module(maritime, "Navigation")
    icing = make.sub_module(meteo, "Clouds & Icing")
    pressure = make.sub_module(meteo, "Atmosphere & Pressure")
    stall = make.sub_module(pof, "Stall & Drag")
    charts = make.sub_module(nav, "Charts")
    return {
        "subjects": {"aviation": aviation, "maritime": maritime},
        "modules": {"meteo": meteo, "pof": pof, "nav": nav},
        "sub_modules": {"icing": icing, "pressure": pressure, "stall": stall, "charts": charts},
        "questions": {
            "icing": [make.question(icing, f"Icing question {i}") for i in range(3)],
            "pressure": [make.question(pressure, f"Pressure question {i}") for i in range(2)],
            "stall": [make.question(stall, f"Stall question {i}") for i in range(4)],
            "charts": [make.question(charts, f"Charts question {i}") for i in range(3)],
        },
    }
