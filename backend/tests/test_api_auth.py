"""
Tests API pour l'authentification : inscription, connexion, session par cookie, déconnexion.
"""

import json
from unittest.mock import patch

from collegeconnect.config import settings
from collegeconnect.exceptions import DuplicateCollegeId, InvalidCredentials
from collegeconnect.models.user import User, UserSession


def register_payload(**overrides):
    payload = {
        "email": "priya.sharma@college.edu",
        "password": "password123",
        "firstName": "Priya",
        "lastName": "Sharma",
        "role": "student",
        "collegeId": "STU2024001",
        "department": "Computer Science",
        "year": "2",
    }
    payload.update(overrides)
    return payload


# ============================================================
# POST /api/auth/register
# ============================================================

class TestRegister:
    def test_inscription_ouvre_une_session(self, sqlite_client, db):
        response = sqlite_client.post("/api/auth/register", json=register_payload())

        assert response.status_code == 201
        user = response.json()["user"]
        assert user["email"] == "priya.sharma@college.edu"
        assert user["collegeId"] == "STU2024001"
        assert "password" not in user
        assert "passwordHash" not in user
        assert settings.SESSION_COOKIE_NAME in response.cookies
        assert db.query(UserSession).count() == 1

        me = sqlite_client.get("/api/auth/me")
        assert me.status_code == 200
        assert me.json()["user"]["id"] == user["id"]

    def test_email_deja_utilise(self, sqlite_client, db):
        sqlite_client.post("/api/auth/register", json=register_payload())

        response = sqlite_client.post("/api/auth/register", json=register_payload(collegeId="STU2024002"))

        assert response.status_code == 400
        assert response.json()["detail"] == "User with this email already exists"
        assert db.query(User).count() == 1

    def test_college_id_deja_utilise(self, sqlite_client):
        sqlite_client.post("/api/auth/register", json=register_payload())

        response = sqlite_client.post("/api/auth/register", json=register_payload(email="other@college.edu"))

        assert response.status_code == 400
        assert response.json()["detail"] == "This College ID is already in use"

    def test_mot_de_passe_trop_court(self, sqlite_client, db):
        response = sqlite_client.post("/api/auth/register", json=register_payload(password="123"))

        assert response.status_code == 400
        body = response.json()
        assert body["detail"] == "Validation error"
        assert any("password" in error["loc"] for error in body["errors"])
        assert db.query(User).count() == 0

    def test_mot_de_passe_non_encodable(self, sqlite_client, db):
        """Caractères isolés valides en JSON mais impossibles à hacher → 400, aucun compte créé."""
        response = sqlite_client.post(
            "/api/auth/register",
            content=json.dumps(register_payload(password="\ud800\ud800xxxx")),
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        body = response.json()
        assert any("password" in error["loc"] for error in body["errors"])
        assert all("input" not in error for error in body["errors"])
        assert db.query(User).count() == 0

    def test_role_invalide(self, sqlite_client):
        response = sqlite_client.post("/api/auth/register", json=register_payload(role="admin"))
        assert response.status_code == 400

    def test_champ_inconnu_refuse(self, sqlite_client):
        response = sqlite_client.post("/api/auth/register", json=register_payload(isAdmin=True))
        assert response.status_code == 400


# ============================================================
# POST /api/auth/login
# ============================================================

class TestLogin:
    def test_connexion_remet_cookie_et_token(self, sqlite_client):
        sqlite_client.post("/api/auth/register", json=register_payload())
        sqlite_client.cookies.clear()

        response = sqlite_client.post(
            "/api/auth/login", json={"email": "Priya.Sharma@college.edu", "password": "password123"}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["user"]["email"] == "priya.sharma@college.edu"
        assert body["tokenType"] == "bearer"
        assert settings.SESSION_COOKIE_NAME in response.cookies

        sqlite_client.cookies.clear()
        me = sqlite_client.get("/api/auth/me", headers={"Authorization": f"Bearer {body['accessToken']}"})
        assert me.status_code == 200

    def test_mot_de_passe_faux(self, sqlite_client):
        sqlite_client.post("/api/auth/register", json=register_payload())
        sqlite_client.cookies.clear()

        response = sqlite_client.post(
            "/api/auth/login", json={"email": "priya.sharma@college.edu", "password": "wrong-password"}
        )

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid email or password"
        assert settings.SESSION_COOKIE_NAME not in response.cookies

    def test_mot_de_passe_non_encodable(self, sqlite_client):
        sqlite_client.post("/api/auth/register", json=register_payload())
        sqlite_client.cookies.clear()

        response = sqlite_client.post(
            "/api/auth/login",
            content=json.dumps({"email": "priya.sharma@college.edu", "password": "\ud800"}),
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400

    def test_email_inconnu(self, sqlite_client):
        response = sqlite_client.post(
            "/api/auth/login", json={"email": "nobody@college.edu", "password": "password123"}
        )

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid email or password"


# ============================================================
# Session : /me et /logout
# ============================================================

class TestSession:
    def test_me_sans_identification(self, sqlite_client):
        response = sqlite_client.get("/api/auth/me")

        assert response.status_code == 401
        assert response.json()["detail"] == "Not authenticated"

    def test_cookie_reemis_a_chaque_requete_de_session(self, sqlite_client):
        """L'expiration glissante côté serveur est reportée sur le cookie du navigateur."""
        sqlite_client.post("/api/auth/register", json=register_payload())
        sid = sqlite_client.cookies.get(settings.SESSION_COOKIE_NAME)

        response = sqlite_client.get("/api/auth/me")

        assert response.status_code == 200
        assert response.cookies.get(settings.SESSION_COOKIE_NAME) == sid
        set_cookie = response.headers["set-cookie"].lower()
        assert "max-age=2592000" in set_cookie
        assert "httponly" in set_cookie

    def test_pas_de_cookie_pour_un_appel_bearer(self, sqlite_client):
        user_id = sqlite_client.post("/api/auth/register", json=register_payload()).json()["user"]["id"]
        sqlite_client.cookies.clear()

        response = sqlite_client.get("/api/auth/me", headers={"Authorization": f"Bearer user-{user_id}"})

        assert response.status_code == 200
        assert "set-cookie" not in response.headers

    def test_logout_invalide_la_session(self, sqlite_client, db):
        sqlite_client.post("/api/auth/register", json=register_payload())
        sid = sqlite_client.cookies.get(settings.SESSION_COOKIE_NAME)

        response = sqlite_client.post("/api/auth/logout")

        assert response.status_code == 200
        assert response.json() == {"success": True}
        assert db.query(UserSession).count() == 0

        # Cookie rejoué après déconnexion : plus valide
        sqlite_client.cookies.set(settings.SESSION_COOKIE_NAME, sid)
        assert sqlite_client.get("/api/auth/me").status_code == 401

    def test_logout_sans_session(self, sqlite_client):
        response = sqlite_client.post("/api/auth/logout")
        assert response.status_code == 200


# ============================================================
# POST /api/auth/dev-session
# ============================================================

class TestDevSession:
    def test_absente_par_defaut(self, sqlite_client):
        assert sqlite_client.post("/api/auth/dev-session").status_code == 404

    def test_ouvre_une_session_enseignant(self, sqlite_client):
        with patch.object(settings, "DEV_AUTH_ENABLED", True):
            response = sqlite_client.post("/api/auth/dev-session")

        assert response.status_code == 200
        assert response.json()["user"]["role"] == "faculty"
        assert sqlite_client.get("/api/auth/me").json()["user"]["email"] == settings.DEV_USER_EMAIL


# ============================================================
# Services mockés
# ============================================================

def test_register_doublon_mocke(client):
    """Erreur métier du service → HTTPException traduite dans la route."""
    with patch("collegeconnect.routers.auth.user_service.create_user", side_effect=DuplicateCollegeId()):
        response = client.post("/api/auth/register", json=register_payload())

    assert response.status_code == 400
    assert response.json() == {"detail": "This College ID is already in use"}


def test_login_identifiants_invalides_mocke(client):
    with patch("collegeconnect.routers.auth.user_service.authenticate_user", side_effect=InvalidCredentials()):
        response = client.post("/api/auth/login", json={"email": "a@college.edu", "password": "whatever"})

    assert response.status_code == 401
    assert response.json() == {"detail": "Invalid email or password"}
