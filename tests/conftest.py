import json
import os

# Settings are read at import time, so the environment must be ready first
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key-for-jwt-signing-only"
os.environ["ADMIN_EMAIL"] = "admin@example.com"
os.environ["ADMIN_PASSWORD"] = "admin-pass"
os.environ["ADMIN_TOKEN"] = "admin-secret-token"
os.environ["RECAPTCHA_ENABLED"] = "true"
os.environ["EMAIL_ENABLED"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
from fastapi.testclient import TestClient

from tourist_helper.auth.captcha import get_captcha_verifier
from tourist_helper.database import Base, SessionLocal, engine
from tourist_helper.main import app
from tourist_helper.notifications import get_mailer
from tourist_helper.packages.storage import ImageStorage, get_image_storage

VALID_CAPTCHA = "valid-captcha"
ADMIN_TOKEN = "admin-secret-token"


class FakeCaptcha:
    def verify(self, token):
        return token == VALID_CAPTCHA


class RecordingMailer:
    def __init__(self):
        self.sent = []
        self.fail = False

    def send(self, to, subject, html):
        self.sent.append({"to": to, "subject": subject, "html": html})
        return not self.fail

    def subjects_for(self, to):
        return [m["subject"] for m in self.sent if m["to"] == to]


@pytest.fixture(autouse=True)
def reset_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def mailer():
    return RecordingMailer()


@pytest.fixture
def storage(tmp_path):
    return ImageStorage(str(tmp_path), max_files=10)


@pytest.fixture
def client(mailer, storage):
    app.dependency_overrides[get_captcha_verifier] = lambda: FakeCaptcha()
    app.dependency_overrides[get_mailer] = lambda: mailer
    app.dependency_overrides[get_image_storage] = lambda: storage
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def auth(token):
    return {"Authorization": f"Bearer {token}"}


def admin_headers():
    return auth(ADMIN_TOKEN)


def signup(client, email, role="tourist", name=None, password="secret123", **extra):
    payload = {
        "name": name or email.split("@")[0].title(),
        "email": email,
        "phone": "9876543210",
        "password": password,
        "role": role,
        "captchaToken": VALID_CAPTCHA,
    }
    payload.update(extra)
    resp = client.post("/api/users/signup", json=payload)
    assert resp.status_code == 201, resp.text
    body = resp.json()
    return body["user"], body["token"]


def create_package(client, token, title="Backwater Cruise", price="5000", files=None, **fields):
    data = {
        "title": title,
        "description": "Houseboat stay on the backwaters",
        "price": price,
        "duration": "3 Days",
        "location": "Alleppey",
        "highlights": json.dumps(["Houseboat", "Sunset cruise"]),
        "includes": json.dumps(["Meals"]),
        "itinerary": json.dumps([
            {"day": 1, "title": "Boarding", "activities": "Cruise", "meals": "Lunch", "accommodation": "Boat"},
            {"day": 2, "title": "Villages", "activities": "Walk", "meals": "All", "accommodation": "Boat"},
        ]),
    }
    data.update(fields)
    resp = client.post("/api/packages", data=data, files=files, headers=auth(token))
    assert resp.status_code == 201, resp.text
    return resp.json()["package"]


def approve_package(client, package_id):
    resp = client.put(f"/api/admin/approve-package/{package_id}", headers=admin_headers())
    assert resp.status_code == 200, resp.text
    return resp.json()["package"]


def book(client, token, package, tourist, guests=1, total_price=None, **extra):
    payload = {
        "packageId": package["id"],
        "touristId": tourist["id"],
        "sellerId": package["createdBy"],
        "travelDate": "2030-01-15T00:00:00",
        "guests": guests,
        "totalPrice": total_price if total_price is not None else package["price"] * guests,
    }
    payload.update(extra)
    return client.post("/api/bookings", json=payload, headers=auth(token))


@pytest.fixture
def marketplace(client):
    """A tourist, a seller and one approved package owned by the seller"""
    tourist, tourist_token = signup(client, "alice@example.com")
    seller, seller_token = signup(client, "bob@example.com", role="seller", agencyName="Bob Tours")
    package = approve_package(client, create_package(client, seller_token)["id"])
    return {
        "tourist": tourist,
        "tourist_token": tourist_token,
        "seller": seller,
        "seller_token": seller_token,
        "package": package,
    }
