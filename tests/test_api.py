import unittest

from fastapi.testclient import TestClient
from jose import jwt

from teryt_registry.app.config import get_settings
from teryt_registry.app.main import create_app
from teryt_registry.db.session import get_db
from tests.support import SIMC, ULICA, WOJ, building_cmd, make_session_factory, seed_provider, seed_teryt


def _auth(role, sub="user-1"):
    s = get_settings()
    token = jwt.encode({"sub": sub, "role": role}, s.auth_jwt_secret, algorithm=s.auth_jwt_alg)
    return {"Authorization": f"Bearer {token}"}


class _ApiCase(unittest.TestCase):
    def setUp(self):
        Session = make_session_factory()
        db = Session()
        seed_teryt(db)
        self.provider_id = seed_provider(db)
        db.close()

        def _db():
            s = Session()
            try:
                yield s
            finally:
                s.close()

        self.app = create_app()
        self.app.dependency_overrides[get_db] = _db
        self.client = TestClient(self.app)

    def tearDown(self):
        self.app.dependency_overrides.clear()


class HealthTests(_ApiCase):
    def test_health_is_public(self):
        r = self.client.get("/health")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json(), {"status": "ok"})
        self.assertIn("x-request-id", r.headers)


class BuildingsApiTests(_ApiCase):
    def test_create_returns_201_and_geojson(self):
        r = self.client.post("/buildings", json=building_cmd(self.provider_id), headers=_auth("WRITE"))
        self.assertEqual(r.status_code, 201, r.text)
        body = r.json()
        self.assertEqual(body["location"], {"type": "Point", "coordinates": [21.0122, 52.2297]})
        self.assertEqual(body["street_code"], ULICA)
        self.assertEqual(body["provider_name"], "Orange")
        self.assertEqual(body["created_by"], "user-1")

        got = self.client.get(f"/buildings/{body['id']}", headers=_auth("READ"))
        self.assertEqual(got.status_code, 200)
        self.assertEqual(got.json()["building_number"], "12A")

    def test_read_role_gets_403_and_anonymous_gets_401(self):
        r = self.client.post("/buildings", json=building_cmd(self.provider_id), headers=_auth("READ"))
        self.assertEqual(r.status_code, 403)
        self.assertEqual(r.json()["error"], "forbidden")

        r = self.client.post("/buildings", json=building_cmd(self.provider_id))
        self.assertEqual(r.status_code, 401)
        self.assertEqual(r.json()["error"], "unauthorized")

    def test_invalid_token_is_anonymous(self):
        r = self.client.get("/buildings", headers={"Authorization": "Bearer not-a-jwt"})
        self.assertEqual(r.status_code, 401)

    def test_duplicate_is_409(self):
        self.client.post("/buildings", json=building_cmd(self.provider_id), headers=_auth("WRITE"))
        r = self.client.post("/buildings", json=building_cmd(self.provider_id), headers=_auth("WRITE"))
        self.assertEqual(r.status_code, 409)
        self.assertEqual(r.json()["error"], "conflict")

    def test_bad_shape_is_400_with_field(self):
        r = self.client.post("/buildings", json=building_cmd(self.provider_id, city_code=123), headers=_auth("WRITE"))
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.json()["details"]["field"], "city_code")

    def test_body_that_is_not_an_object_is_400(self):
        r = self.client.post("/buildings", json=[1, 2], headers=_auth("WRITE"))
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.json()["details"]["field"], "body")

    def test_out_of_range_is_400(self):
        cmd = building_cmd(self.provider_id, location={"type": "Point", "coordinates": [21.0, 55.0]})
        r = self.client.post("/buildings", json=cmd, headers=_auth("WRITE"))
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.json()["error"], "out_of_range")
        self.assertEqual(r.json()["details"]["field"], "latitude")

    def test_broken_hierarchy_is_404_with_level(self):
        r = self.client.post("/buildings", json=building_cmd(self.provider_id, district_code="1261"), headers=_auth("WRITE"))
        self.assertEqual(r.status_code, 404)
        self.assertEqual(r.json()["error"], "hierarchy_error")
        self.assertEqual(r.json()["details"]["level"], "district")

    def test_put_unknown_id_is_404(self):
        r = self.client.put(
            "/buildings/00000000-0000-0000-0000-000000000000",
            json=building_cmd(self.provider_id),
            headers=_auth("WRITE"),
        )
        self.assertEqual(r.status_code, 404)
        self.assertEqual(r.json()["error"], "not_found")

    def test_put_replaces(self):
        created = self.client.post("/buildings", json=building_cmd(self.provider_id), headers=_auth("WRITE")).json()
        r = self.client.put(
            f"/buildings/{created['id']}",
            json=building_cmd(self.provider_id, building_number="15"),
            headers=_auth("ADMIN", sub="admin-9"),
        )
        self.assertEqual(r.status_code, 200, r.text)
        self.assertEqual(r.json()["building_number"], "15")
        self.assertEqual(r.json()["updated_by"], "admin-9")

    def test_delete_is_204_for_admin_only(self):
        created = self.client.post("/buildings", json=building_cmd(self.provider_id), headers=_auth("WRITE")).json()
        r = self.client.delete(f"/buildings/{created['id']}", headers=_auth("WRITE"))
        self.assertEqual(r.status_code, 403)
        r = self.client.delete(f"/buildings/{created['id']}", headers=_auth("ADMIN"))
        self.assertEqual(r.status_code, 204)
        self.assertEqual(r.content, b"")

    def test_list_pagination_contract(self):
        for n in range(3):
            self.client.post(
                "/buildings", json=building_cmd(self.provider_id, building_number=str(n)), headers=_auth("WRITE")
            )
        r = self.client.get("/buildings", params={"page": 2, "pageSize": 2}, headers=_auth("READ"))
        self.assertEqual(r.status_code, 200)
        body = r.json()
        self.assertEqual(body["page"], 2)
        self.assertEqual(body["pageSize"], 2)
        self.assertEqual(body["total"], 3)
        self.assertEqual(len(body["data"]), 1)

        r = self.client.get("/buildings", params={"page": 1000, "pageSize": 2}, headers=_auth("READ"))
        self.assertEqual(r.status_code, 404)
        self.assertEqual(r.json()["error"], "page_out_of_range")

    def test_empty_list_is_200(self):
        r = self.client.get("/buildings", params={"city_code": SIMC}, headers=_auth("READ"))
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json()["data"], [])
        self.assertEqual(r.json()["page"], 1)

    def test_bad_filter_is_400(self):
        r = self.client.get("/buildings", params={"pageSize": "abc"}, headers=_auth("READ"))
        self.assertEqual(r.status_code, 400)


class ProvidersApiTests(_ApiCase):
    def test_crud_flow(self):
        r = self.client.post(
            "/providers", json={"name": "Netia", "technology": "HFC", "bandwidth": 300}, headers=_auth("WRITE")
        )
        self.assertEqual(r.status_code, 201, r.text)
        pid = r.json()["id"]

        r = self.client.put(f"/providers/{pid}", json={"bandwidth": 600}, headers=_auth("WRITE"))
        self.assertEqual(r.json()["bandwidth"], 600)

        r = self.client.get("/providers", params={"search": "net"}, headers=_auth("READ"))
        self.assertEqual([p["name"] for p in r.json()["data"]], ["Netia"])

        r = self.client.delete(f"/providers/{pid}", headers=_auth("ADMIN"))
        self.assertEqual(r.status_code, 204)
        self.assertEqual(self.client.get(f"/providers/{pid}", headers=_auth("READ")).status_code, 404)

    def test_duplicate_name_is_409(self):
        r = self.client.post(
            "/providers", json={"name": "orange", "technology": "FTTH", "bandwidth": 10}, headers=_auth("WRITE")
        )
        self.assertEqual(r.status_code, 409)

    def test_delete_referenced_is_409(self):
        self.client.post("/buildings", json=building_cmd(self.provider_id), headers=_auth("WRITE"))
        r = self.client.delete(f"/providers/{self.provider_id}", headers=_auth("ADMIN"))
        self.assertEqual(r.status_code, 409)
        self.assertEqual(r.json()["error"], "referenced_by_building")


class TerytApiTests(_ApiCase):
    def test_list_voivodeships(self):
        r = self.client.get("/teryt/voivodeships", headers=_auth("READ"))
        self.assertEqual(r.status_code, 200)
        self.assertEqual({u["code"] for u in r.json()["data"]}, {"12", WOJ})

    def test_list_children_by_parent(self):
        r = self.client.get("/teryt/streets", params={"parent_code": SIMC}, headers=_auth("READ"))
        self.assertEqual([u["code"] for u in r.json()["data"]], [ULICA])
        self.assertEqual(r.json()["data"][0]["parent_code"], SIMC)

    def test_get_by_code(self):
        r = self.client.get(f"/teryt/cities/{SIMC}", headers=_auth("READ"))
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json()["name"], "Warszawa")
        self.assertEqual(self.client.get("/teryt/cities/0000000", headers=_auth("READ")).status_code, 404)

    def test_unknown_resource_is_400(self):
        r = self.client.get("/teryt/planets", headers=_auth("READ"))
        self.assertEqual(r.status_code, 400)

    def test_requires_principal(self):
        self.assertEqual(self.client.get("/teryt/voivodeships").status_code, 401)


if __name__ == "__main__":
    unittest.main()
