"""
Invoicely - Test Yapilandirmasi (conftest.py)

SQLite in-memory veritabani kullanarak PostgreSQL gerektirmeden
tum API endpoint'lerini test etmeye olanak saglar.

Her test fonksiyonu icin temiz bir veritabani ve bos bir taslak deposu olusturulur.
"""

import uuid
from decimal import Decimal

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient

from invoicely.database import Base, get_db
from invoicely.dependencies import SessionContext
from invoicely.main import app
from invoicely.rate_limit import limiter
from invoicely.services.auth import hash_password, create_access_token
from invoicely.services.drafts import DraftStore, get_draft_store

# Tum modelleri import et - Base.metadata.create_all icin gerekli
from invoicely.models import User, Customer, Product, BusinessSettings


# ---------------------------------------------------------------------------
# SQLite In-Memory Test Veritabani
# ---------------------------------------------------------------------------

SQLITE_TEST_URL = "sqlite:///file::memory:?cache=shared"

test_engine = create_engine(
    SQLITE_TEST_URL,
    connect_args={"check_same_thread": False},
    echo=False,
)


# SQLite varsayilan olarak foreign key constraint'leri uygulamaz
@event.listens_for(test_engine, "connect")
def _set_sqlite_pragma(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(scope="function")
def db_session():
    """Her test icin tablolari olustur, test bitince sil."""
    Base.metadata.create_all(bind=test_engine)

    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=test_engine)


@pytest.fixture(scope="function")
def draft_store():
    """Her test icin bos taslak deposu."""
    return DraftStore()


@pytest.fixture(scope="function")
def client(db_session, draft_store):
    """
    FastAPI TestClient.
    get_db ve get_draft_store override edilir; rate limit testlerde kapali.
    """
    def _override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_draft_store] = lambda: draft_store
    limiter.enabled = False

    with TestClient(app, raise_server_exceptions=False) as c:
        yield c

    limiter.enabled = True
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def test_user(db_session):
    """
    Test kullanicisi.
    Sifre: "Test1234!"
    """
    user = User(
        id=uuid.uuid4(),
        email="test@invoicely.com",
        hashed_password=hash_password("Test1234!"),
        full_name="Test User",
        is_active=True,
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture(scope="function")
def auth_headers(test_user):
    """{"Authorization": "Bearer <jwt_token>"}"""
    token = create_access_token(test_user.id)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(scope="function")
def member_ctx(test_user):
    return SessionContext(user=test_user)


@pytest.fixture(scope="function")
def guest_ctx():
    return SessionContext.guest("guest-token-1")


@pytest.fixture(scope="function")
def test_customer(db_session, test_user):
    customer = Customer(
        id=uuid.uuid4(),
        owner_id=test_user.id,
        name="Acme Traders",
        email="billing@acme.example",
        phone="+91 98765 43210",
        address="12 MG Road\nBengaluru",
    )
    db_session.add(customer)
    db_session.commit()
    db_session.refresh(customer)
    return customer


@pytest.fixture(scope="function")
def test_product(db_session, test_user):
    """10 adet stoklu, aktif test urunu."""
    product = Product(
        id=uuid.uuid4(),
        owner_id=test_user.id,
        name="Logo Design",
        description="Vector logo package",
        sku="SKU-LOGO",
        category="Design",
        unit_price=Decimal("12500.00"),
        unit="piece",
        current_stock=10,
        min_stock_level=2,
        is_active=True,
    )
    db_session.add(product)
    db_session.commit()
    db_session.refresh(product)
    return product


@pytest.fixture(scope="function")
def business_settings(db_session, test_user):
    record = BusinessSettings(
        owner_id=test_user.id,
        business_name="Doeasy Services",
        business_address="4th Floor, Tech Park\nPune",
        business_phone="020 1234 5678",
        payment_instructions="Pay within 15 days.",
        thank_you_note="Thanks for your business.",
        bank_details="A/C No: 000111222\nIFSC: TEST0001",
        upi_id="doeasy@upi",
    )
    db_session.add(record)
    db_session.commit()
    db_session.refresh(record)
    return record
