import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["AUTO_CREATE_TABLES"] = "false"
os.environ["ENVIRONMENT"] = "testing"
os.environ["JWT_SECRET_KEY"] = "test-secret-key-for-dormhub-suite"

from decimal import Decimal  # noqa: E402
from types import SimpleNamespace  # noqa: E402

import pytest  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from dormhub.config.settings import settings  # noqa: E402
from dormhub.db.base import Base, import_models  # noqa: E402
from dormhub.models import Building, Room, Service, Student, User  # noqa: E402
from dormhub.schemas.common.enums import RoomStatus, RoomType, UserRole  # noqa: E402
from dormhub.services.allocation import AllocationService  # noqa: E402
from dormhub.services.attendance import CheckInOutService  # noqa: E402
from dormhub.services.common.permissions import Principal  # noqa: E402
from dormhub.services.common.security import JWTSettings, create_access_token  # noqa: E402
from dormhub.services.notification import NotificationService  # noqa: E402
from dormhub.services.payment import PaymentService  # noqa: E402
from dormhub.services.preference import PreferenceService  # noqa: E402
from dormhub.services.room import RoomQueryService, RoomService  # noqa: E402


@pytest.fixture
def engine():
    import_models()
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory):
    """Plain session for arranging and asserting state."""
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def seed(db):
    admin = User(name="Admin", email="admin@dorm.test", role=UserRole.ADMIN.value, is_active=True)
    users = [
        User(name=f"Student {n}", email=f"s{n}@dorm.test", role=UserRole.STUDENT.value, is_active=True)
        for n in (1, 2, 3)
    ]
    db.add(admin)
    db.add_all(users)
    db.flush()

    students = [
        Student(name=user.name, email=user.email, year=2, user_id=user.id)
        for user in users
    ]
    wifi = Service(name="WiFi", icon="wifi")
    ac = Service(name="Air conditioning", icon="ac")
    laundry = Service(name="Laundry", icon="laundry")
    building = Building(name="North Hall", address="1 Campus Road")
    db.add_all(students + [wifi, ac, laundry, building])
    db.commit()

    return SimpleNamespace(
        admin=admin,
        users=users,
        students=students,
        services=SimpleNamespace(wifi=wifi, ac=ac, laundry=laundry),
        building=building,
    )


@pytest.fixture
def make_room(db):
    """Insert a room directly, bypassing the room service."""

    def _make(
        room_number,
        total_beds=2,
        room_type=RoomType.SHARED,
        bed_price=Decimal("150.00"),
        room_price=None,
        services=(),
        maintenance=False,
    ):
        room = Room(
            room_number=room_number,
            room_type=room_type.value,
            total_beds=total_beds,
            available_beds=total_beds,
            status=RoomStatus.MAINTENANCE.value if maintenance else RoomStatus.AVAILABLE.value,
            is_under_maintenance=maintenance,
            room_price=room_price,
            bed_price=bed_price,
            images=[],
        )
        room.services = list(services)
        db.add(room)
        db.commit()
        return room

    return _make


@pytest.fixture
def admin_actor(seed):
    return Principal(user_id=seed.admin.id, role=UserRole.ADMIN)


@pytest.fixture
def student_actors(seed):
    return [Principal(user_id=user.id, role=UserRole.STUDENT) for user in seed.users]


@pytest.fixture
def notifier(session_factory):
    return NotificationService(session_factory)


@pytest.fixture
def preference_service(session_factory):
    return PreferenceService(session_factory)


@pytest.fixture
def allocation(session_factory, notifier):
    return AllocationService(session_factory, notifier)


@pytest.fixture
def room_service(session_factory, notifier, preference_service):
    return RoomService(session_factory, notifier, preference_service)


@pytest.fixture
def room_queries(session_factory):
    return RoomQueryService(session_factory)


@pytest.fixture
def payment_service(session_factory):
    return PaymentService(session_factory)


@pytest.fixture
def check_in_out(session_factory, notifier):
    return CheckInOutService(session_factory, notifier)


@pytest.fixture
def jwt_settings():
    return JWTSettings(secret_key=settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


@pytest.fixture
def auth_headers(jwt_settings):
    def _headers(user_id, role):
        token = create_access_token(subject=user_id, role=role, jwt_settings=jwt_settings)
        return {"Authorization": f"Bearer {token}"}

    return _headers
