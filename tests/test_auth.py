from conftest import COMPANY_ID
from core.security import get_current_user
from main import app
from models.user import User
from seed_users import SEED_ACCOUNTS, seed_accounts
from services.auth_service import AuthService


def _use_real_auth():
    app.dependency_overrides.pop(get_current_user, None)


def test_register_login_and_me(client):
    _use_real_auth()
    response = client.post(
        "/auth/register",
        json={
            "email": "planner@example.com",
            "username": "planner",
            "password": "Str0ngPass!",
            "role": "planner",
            "sector": "Planning",
            "company_id": str(COMPANY_ID),
        },
    )
    assert response.status_code == 200, response.text
    assert response.json()["role"] == "PLANNER"

    login = client.post("/auth/login", data={"username": "planner@example.com", "password": "Str0ngPass!"})
    assert login.status_code == 200
    token = login.json()["access_token"]
    assert login.json()["sector"] == "Planning"

    me = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["company_id"] == str(COMPANY_ID)


def test_admin_cannot_self_register(client):
    response = client.post(
        "/auth/register",
        json={"email": "boss@example.com", "username": "boss", "password": "Str0ngPass!", "role": "ADMIN"},
    )
    assert response.status_code == 403


def test_bad_password_is_rejected(client):
    _use_real_auth()
    client.post(
        "/auth/register",
        json={"email": "viewer@example.com", "username": "viewer", "password": "Str0ngPass!"},
    )

    response = client.post("/auth/login", data={"username": "viewer@example.com", "password": "wrong-pass"})

    assert response.status_code == 401


def test_routes_require_a_token(client):
    _use_real_auth()
    assert client.get("/api/plans/").status_code == 401


def test_seed_accounts_is_repeatable(db_session):
    created = seed_accounts(db_session, "SeedPass123!", COMPANY_ID)
    assert created == [email for email, *_ in SEED_ACCOUNTS]
    assert seed_accounts(db_session, "SeedPass123!") == []

    admin = db_session.query(User).filter(User.role == "ADMIN").one()
    assert admin.company_id == COMPANY_ID
    assert AuthService.verify_password("SeedPass123!", admin.hashed_password)
