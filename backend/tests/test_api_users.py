"""
Tests API pour l'annuaire des utilisateurs.
"""

from unittest.mock import patch


def as_user(user_id):
    return {"x-user-id": str(user_id)}


def test_liste_exige_une_identification(sqlite_client):
    assert sqlite_client.get("/api/users").status_code == 401


def test_liste_filtree(sqlite_client, make_user):
    viewer = make_user(role="faculty", last_name="Menon")
    make_user(role="student", year="2", last_name="Iyer")
    make_user(role="student", year="3", last_name="Khan")

    response = sqlite_client.get("/api/users", params={"role": "student", "year": "2"}, headers=as_user(viewer.id))

    assert response.status_code == 200
    users = response.json()["users"]
    assert [u["lastName"] for u in users] == ["Iyer"]
    assert "passwordHash" not in users[0]


def test_recherche_par_email(sqlite_client, make_user):
    viewer = make_user(role="faculty")
    target = make_user(email="rohan.gupta@college.edu")

    response = sqlite_client.get(
        "/api/users", params={"email": "Rohan.Gupta@college.edu", "role": "faculty"}, headers=as_user(viewer.id)
    )

    assert [u["id"] for u in response.json()["users"]] == [target.id]


def test_recherche_par_email_inconnu(sqlite_client, make_user):
    viewer = make_user()

    response = sqlite_client.get("/api/users", params={"email": "nobody@college.edu"}, headers=as_user(viewer.id))

    assert response.status_code == 200
    assert response.json() == {"users": []}


def test_detail_utilisateur(sqlite_client, make_user):
    viewer = make_user()
    target = make_user(role="faculty", position="Professor")

    response = sqlite_client.get(f"/api/users/{target.id}", headers=as_user(viewer.id))

    assert response.status_code == 200
    assert response.json()["user"]["position"] == "Professor"


def test_detail_utilisateur_inconnu(sqlite_client, make_user):
    viewer = make_user()

    response = sqlite_client.get("/api/users/999", headers=as_user(viewer.id))

    assert response.status_code == 404
    assert response.json()["detail"] == "User not found"


def test_en_tetes_ignores_si_ids_bruts_desactives(sqlite_client, make_user):
    from collegeconnect.config import settings

    viewer = make_user()
    with patch.object(settings, "TRUST_ID_CLAIMS", False):
        response = sqlite_client.get("/api/users", headers=as_user(viewer.id))

    assert response.status_code == 401


def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"
