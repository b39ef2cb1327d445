"""
CMIS Student Portal - Test Configuration and Fixtures
"""
import os
from datetime import datetime
from typing import AsyncGenerator, Callable, Awaitable
import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool
from faker import Faker

# Set testing environment (before any cmis_portal import reads settings)
os.environ['ENVIRONMENT'] = 'test'
os.environ['DATABASE_URL'] = 'sqlite+aiosqlite:///./test_cmis.db'
os.environ['JWT_SECRET_KEY'] = 'test-jwt-secret-key-for-testing'
os.environ['AWS_S3_BUCKET_NAME'] = 'test-bucket'
os.environ['N8N_WEBHOOK_URL'] = ''
os.environ['REGISTRATION_MODE'] = 'open'
os.environ['BCRYPT_ROUNDS'] = '4'
os.environ['LOG_FILE'] = ''

from cmis_portal.main import app
from cmis_portal.core.database import Base, get_db
from cmis_portal.core.security import get_password_hash, create_student_token
from cmis_portal.models.student import Student
from cmis_portal.services.storage_service import get_storage_service
from cmis_portal.services.webhook_service import AutomationWebhookService, get_webhook_service
from mocks.fake_storage import FakeStorageService

fake = Faker()

# Test database setup
TEST_DATABASE_URL = 'sqlite+aiosqlite:///./test_cmis.db'
test_engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=NullPool)
TestSessionLocal = async_sessionmaker(
    bind=test_engine,
    class_=AsyncSession,
    expire_on_commit=False
)


@pytest.fixture(scope='function')
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database session for each test"""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        yield session
        await session.rollback()

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
def fake_storage() -> FakeStorageService:
    """In-memory object storage"""
    return FakeStorageService()


@pytest.fixture
def webhook() -> AutomationWebhookService:
    """Unconfigured webhook: registration notifications are skipped"""
    return AutomationWebhookService(url='')


@pytest.fixture
async def client(
    db_session: AsyncSession,
    fake_storage: FakeStorageService,
    webhook: AutomationWebhookService
) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with database, storage and webhook overrides"""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage_service] = lambda: fake_storage
    app.dependency_overrides[get_webhook_service] = lambda: webhook

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac

    app.dependency_overrides.clear()


def tamu_email() -> str:
    return f"{fake.unique.user_name()}@tamu.edu"


def make_uin() -> str:
    return str(fake.unique.random_number(digits=9, fix_len=True))


@pytest.fixture
def student_factory(db_session: AsyncSession) -> Callable[..., Awaitable[Student]]:
    """Insert a student row directly (bypasses the registration workflow)"""
    async def _create(**overrides) -> Student:
        now = datetime.utcnow()
        email = overrides.pop('email', None) or tamu_email()
        values = dict(
            uin=make_uin(),
            email=email,
            name=fake.name(),
            degree_type='Masters',
            academic_level='Graduate',
            graduation_year=2026,
            need_mentorship=False,
            domain_interests=[],
            target_industries=[],
            skills=[],
            is_registered=True,
            created_at=now,
            updated_at=now,
            created_by=email,
            updated_by=email,
        )
        password = overrides.pop('plain_password', None)
        if password:
            values['password'] = get_password_hash(password)
        values.update(overrides)
        student = Student(**values)
        db_session.add(student)
        await db_session.commit()
        await db_session.refresh(student)
        return student

    return _create


@pytest.fixture
async def test_student(student_factory) -> Student:
    """Registered student with a known password"""
    return await student_factory(plain_password='testpassword123')


@pytest.fixture
def auth_headers(test_student: Student) -> dict:
    """Generate authentication headers for test student"""
    token = create_student_token(test_student.student_id, test_student.email)
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def registration_form() -> dict:
    """Minimal valid registration form"""
    return {
        'name': fake.name(),
        'uin': make_uin(),
        'email': tamu_email(),
        'degreeType': 'Masters',
        'academicLevel': 'Graduate',
        'graduationYear': '2026',
    }
