"""
Pytest fixtures for SellerDesk backend tests.

Provides test database setup, two isolated sellers with their catalog and
sales, and a test client plus seller header helper.
"""

from decimal import Decimal

import pytest

from sellerdesk import create_app
from sellerdesk.extensions import db
from sellerdesk.models import Category, Customer, Product, Sale, Seller, Tag
from sellerdesk.services.persistence import SqlAlchemyStore


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'MULTI_WRITE_ATOMIC': True,
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()
        app.config['MULTI_WRITE_ATOMIC'] = True


@pytest.fixture(scope='function')
def store(db_session):
    """Persistence client over the test session."""
    return SqlAlchemyStore(db_session)


@pytest.fixture(scope='function')
def seller_a(db_session):
    """Create Seller A (first tenant)."""
    seller = Seller(name="Seller A - Ada Books", email="ada@example.com", is_active=True)
    db_session.add(seller)
    db_session.commit()
    return seller


@pytest.fixture(scope='function')
def seller_b(db_session):
    """Create Seller B (second tenant)."""
    seller = Seller(name="Seller B - Bit Audio", email="bit@example.com", is_active=True)
    db_session.add(seller)
    db_session.commit()
    return seller


@pytest.fixture(scope='function')
def customer_a(db_session, seller_a):
    """Customer of Seller A."""
    customer = Customer(seller_id=seller_a.id, name="Grace", email="grace@example.com")
    db_session.add(customer)
    db_session.commit()
    return customer


@pytest.fixture(scope='function')
def other_customer_a(db_session, seller_a):
    """Second customer of Seller A."""
    customer = Customer(seller_id=seller_a.id, name="Linus", email="linus@example.com")
    db_session.add(customer)
    db_session.commit()
    return customer


@pytest.fixture(scope='function')
def customer_b(db_session, seller_b):
    """Customer of Seller B."""
    customer = Customer(seller_id=seller_b.id, name="Barbara", email="barbara@example.com")
    db_session.add(customer)
    db_session.commit()
    return customer


@pytest.fixture(scope='function')
def product_a(db_session, seller_a):
    """Create Product owned by Seller A."""
    product = Product(seller_id=seller_a.id, name="Python Ebook", price=Decimal("50.00"), status="published")
    db_session.add(product)
    db_session.commit()
    return product


@pytest.fixture(scope='function')
def product_b(db_session, seller_b):
    """Create Product owned by Seller B."""
    product = Product(seller_id=seller_b.id, name="Synth Presets", price=Decimal("20.00"), status="published")
    db_session.add(product)
    db_session.commit()
    return product


@pytest.fixture(scope='function')
def sale_a(db_session, seller_a, customer_a, product_a):
    """Completed 50.00 sale of product_a to customer_a."""
    sale = Sale(
        seller_id=seller_a.id,
        customer_id=customer_a.id,
        product_id=product_a.id,
        amount=Decimal("50.00"),
        status="completed",
    )
    db_session.add(sale)
    db_session.commit()
    return sale


@pytest.fixture(scope='function')
def sale_b(db_session, seller_b, customer_b, product_b):
    """Completed 20.00 sale of product_b to customer_b."""
    sale = Sale(
        seller_id=seller_b.id,
        customer_id=customer_b.id,
        product_id=product_b.id,
        amount=Decimal("20.00"),
        status="completed",
    )
    db_session.add(sale)
    db_session.commit()
    return sale


@pytest.fixture(scope='function')
def categories_a(db_session, seller_a):
    """Three categories owned by Seller A: ebooks, courses, templates."""
    categories = [
        Category(seller_id=seller_a.id, name=name, slug=name.lower())
        for name in ("Ebooks", "Courses", "Templates")
    ]
    db_session.add_all(categories)
    db_session.commit()
    return categories


@pytest.fixture(scope='function')
def tags_a(db_session, seller_a):
    """Two tags owned by Seller A."""
    tags = [
        Tag(seller_id=seller_a.id, name=name, slug=name.lower())
        for name in ("Python", "Beginner")
    ]
    db_session.add_all(tags)
    db_session.commit()
    return tags


@pytest.fixture(scope='function')
def category_b(db_session, seller_b):
    """Category owned by Seller B."""
    category = Category(seller_id=seller_b.id, name="Audio", slug="audio")
    db_session.add(category)
    db_session.commit()
    return category


@pytest.fixture(scope='function')
def tag_b(db_session, seller_b):
    """Tag owned by Seller B."""
    tag = Tag(seller_id=seller_b.id, name="Synth", slug="synth")
    db_session.add(tag)
    db_session.commit()
    return tag


def seller_headers(seller) -> dict:
    """Helper to create the seller identity header."""
    return {'X-Seller-Id': str(seller.id)}


@pytest.fixture(scope='function')
def headers_a(seller_a):
    """Request headers acting as Seller A."""
    return seller_headers(seller_a)


@pytest.fixture(scope='function')
def headers_b(seller_b):
    """Request headers acting as Seller B."""
    return seller_headers(seller_b)
