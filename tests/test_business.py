"""
Invoicely - Isletme Profili Testleri

Test edilen endpoint'ler:
    GET /api/v1/business
    PUT /api/v1/business
"""

from invoicely.schemas.business import BusinessProfile
from invoicely.services import business as business_service

URL = "/api/v1/business"


class TestBusinessProfile:

    def test_default_profile(self, client, auth_headers):
        response = client.get(URL, headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["business_name"] == "Your Business Name"
        assert "id" not in response.json()

    def test_upsert_then_update(self, client, auth_headers):
        response = client.put(
            URL, json={"business_name": "Doeasy Services", "upi_id": "doeasy@upi"},
            headers=auth_headers,
        )
        assert response.status_code == 200, response.text
        first_id = response.json()["id"]

        response = client.put(URL, json={"business_phone": "020 1234 5678"}, headers=auth_headers)
        body = response.json()
        assert body["id"] == first_id
        assert body["business_name"] == "Doeasy Services"
        assert body["business_phone"] == "020 1234 5678"

    def test_requires_login(self, client):
        assert client.get(URL).status_code == 401

    def test_invalid_email(self, client, auth_headers):
        response = client.put(URL, json={"business_email": "not-an-email"}, headers=auth_headers)
        assert response.status_code == 422

    def test_guest_profile_is_default(self, db_session):
        profile = business_service.get_profile(db_session, None)
        assert profile == BusinessProfile()

    def test_member_profile_from_record(self, db_session, test_user, business_settings):
        profile = business_service.get_profile(db_session, test_user.id)
        assert profile.business_name == "Doeasy Services"
        assert profile.upi_id == "doeasy@upi"
