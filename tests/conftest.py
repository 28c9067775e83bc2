"""
Shared test fixtures
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from techmate.core.database import Base
from techmate.models import Machine, Technician, Part, Intervention, Profile  # noqa: F401


FIVE_PART_SOLUTION = (
    "1. **Diagnóstico**: Rolamento do motor desgastado\n"
    "2. **Causa Provável**: Falta de lubrificação\n"
    "3. **Solução Recomendada**: Substituir o rolamento e lubrificar\n"
    "4. **Prevenção**: Plano de lubrificação mensal\n"
    "5. **Peças Necessárias**: Rolamento 6205-2RS"
)


@pytest.fixture
def engine():
    """In-memory SQLite shared across threads, with foreign keys enforced"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )

    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(engine):
    """Create test database session"""
    Session = sessionmaker(bind=engine)
    session = Session()
    yield session
    session.close()


@pytest.fixture
def machine(db_session):
    machine = Machine(
        model="Torno CNC Haas ST-20",
        location="Pavilhão A",
        specifications={"Potência": "15 kW", "Peso": 3400}
    )
    db_session.add(machine)
    db_session.commit()
    return machine


@pytest.fixture
def technician(db_session):
    technician = Technician(name="Ana Ferreira", specialty="Eletromecânica")
    db_session.add(technician)
    db_session.commit()
    return technician
