# -*- coding: utf-8 -*-

from __future__ import annotations

import os
import shutil
import sys
import tempfile
import unittest
from pathlib import Path

from fastapi.testclient import TestClient


class TestDiaryApi(unittest.TestCase):
    @classmethod
    def setUpClass(cls) -> None:
        cls._tmp = Path(tempfile.mkdtemp(prefix="ceboelha-test-"))
        data_root = cls._tmp / "data"
        os.environ["CEBOELHA_DATA_ROOT"] = str(data_root)
        os.environ["CEBOELHA_DB_PATH"] = str(data_root / "ceboelha.db")
        os.environ["CEBOELHA_TIMEZONE"] = "UTC"
        os.environ["CEBOELHA_ENV"] = "development"
        os.environ["CEBOELHA_JWT_ACCESS_SECRET"] = "test-access-secret"
        os.environ["CEBOELHA_JWT_REFRESH_SECRET"] = "test-refresh-secret"

        # Ensure settings/app reflect the env vars above.
        for name in list(sys.modules.keys()):
            if name == "ceboelha" or name.startswith("ceboelha."):
                sys.modules.pop(name, None)

        from ceboelha.api import app  # noqa: WPS433 (import inside test for env control)
        from ceboelha.auth import security  # noqa: WPS433
        from ceboelha.utils import cookies  # noqa: WPS433

        cls.app = app
        cls.security = security
        cls.cookies = cookies
        cls.client = TestClient(app)
        cls.ana = {"Authorization": f"Bearer {security.create_access_token(user_id='ana')}"}
        cls.bia = {"Authorization": f"Bearer {security.create_access_token(user_id='bia')}"}

    @classmethod
    def tearDownClass(cls) -> None:
        try:
            cls.client.close()
        except Exception:
            pass
        shutil.rmtree(cls._tmp, ignore_errors=True)

    def _create_meal(self, headers, date="2024-03-18", **meal_overrides) -> dict:
        meal = {
            "type": "dinner",
            "time": "19:30",
            "foods": [{"foodId": 11, "foodName": "Pizza", "markedAsBad": True, "quantity_g": 200}],
        }
        meal.update(meal_overrides)
        resp = self.client.post("/api/diary/meal", json={"date": date, "meal": meal}, headers=headers)
        self.assertEqual(resp.status_code, 200, resp.text)
        return resp.json()["data"]

    def test_health(self) -> None:
        resp = self.client.get("/api/health")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"status": "ok"})

    def test_auth_required(self) -> None:
        resp = self.client.get("/api/diary")
        self.assertEqual(resp.status_code, 401)
        body = resp.json()
        self.assertFalse(body["success"])
        self.assertEqual(body["code"], "UNAUTHORIZED")

        resp = self.client.get("/api/diary", headers={"Authorization": "Bearer not-a-token"})
        self.assertEqual(resp.status_code, 401)

        refresh = self.security.create_refresh_token(user_id="ana")
        resp = self.client.get("/api/diary", headers={"Authorization": f"Bearer {refresh}"})
        self.assertEqual(resp.status_code, 401)

    def test_create_and_fetch_meal(self) -> None:
        entry = self._create_meal(self.ana)
        self.assertEqual(entry["type"], "meal")
        self.assertEqual(entry["userId"], "ana")
        self.assertEqual(entry["date"], "2024-03-18")
        self.assertNotIn("symptom", entry)
        food = entry["meal"]["foods"][0]
        self.assertEqual(food["foodId"], 11)
        self.assertEqual(food["foodName"], "Pizza")
        self.assertTrue(food["markedAsBad"])
        self.assertTrue(entry["createdAt"].endswith("Z"))

        resp = self.client.get(f"/api/diary/{entry['id']}", headers=self.ana)
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["data"]["id"], entry["id"])

        resp = self.client.get("/api/diary/foods/11", headers=self.ana)
        self.assertEqual(resp.status_code, 200)
        self.assertIn(entry["id"], [e["id"] for e in resp.json()["data"]])

    def test_validation_errors_are_400_with_violations(self) -> None:
        resp = self.client.post(
            "/api/diary/meal",
            json={"date": "2024-03-18", "meal": {"type": "lunch", "time": "12:00", "foods": []}},
            headers=self.ana,
        )
        self.assertEqual(resp.status_code, 400)
        body = resp.json()
        self.assertEqual(body["code"], "VALIDATION_ERROR")
        self.assertEqual([v["field"] for v in body["violations"]], ["meal.foods"])

        resp = self.client.post(
            "/api/diary/symptom",
            json={"date": "2024-03-18", "symptom": {"type": "cramps", "intensity": 6, "time": "12:00"}},
            headers=self.ana,
        )
        self.assertEqual(resp.status_code, 400)
        self.assertEqual([v["field"] for v in resp.json()["violations"]], ["symptom.intensity"])

        resp = self.client.get("/api/diary", params={"type": "drink"}, headers=self.ana)
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["violations"][0]["field"], "type")

        resp = self.client.get("/api/diary/summary/month/2024/13", headers=self.ana)
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["violations"][0]["field"], "month")

        resp = self.client.get("/api/diary/summary/day/2024-02-30", headers=self.ana)
        self.assertEqual(resp.status_code, 400)

        resp = self.client.get("/api/diary/symptoms/overview", params={"days": "-1"}, headers=self.ana)
        self.assertEqual(resp.status_code, 400)

    def test_out_of_range_calendar_inputs_are_400(self) -> None:
        resp = self.client.get("/api/diary/symptoms/overview", params={"days": "1000000"}, headers=self.ana)
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["violations"][0]["field"], "days")

        resp = self.client.get("/api/diary/symptoms/overview", params={"days": "3650"}, headers=self.ana)
        self.assertEqual(resp.status_code, 200)

        resp = self.client.get("/api/diary/summary/month/0000/1", headers=self.ana)
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["code"], "VALIDATION_ERROR")
        self.assertEqual(resp.json()["violations"][0]["field"], "year")

        resp = self.client.get("/api/diary/summary/month/0001/1", headers=self.ana)
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(len(resp.json()["data"]["days"]), 31)

        resp = self.client.get("/api/diary/summary/day/0000-01-01", headers=self.ana)
        self.assertEqual(resp.status_code, 400)

    def test_list_and_summaries(self) -> None:
        meal = self._create_meal(self.ana, date="2024-04-02")
        resp = self.client.post(
            "/api/diary/symptom",
            json={"date": "2024-04-02", "symptom": {"type": "reflux", "intensity": 3, "time": "21:00"}},
            headers=self.ana,
        )
        self.assertEqual(resp.status_code, 200)
        symptom = resp.json()["data"]
        self.assertNotIn("meal", symptom)

        resp = self.client.get("/api/diary", params={"date": "2024-04-02"}, headers=self.ana)
        self.assertEqual([e["id"] for e in resp.json()["data"]], [symptom["id"], meal["id"]])

        resp = self.client.get("/api/diary", params={"date": "2024-04-02", "type": "meal"}, headers=self.ana)
        self.assertEqual([e["id"] for e in resp.json()["data"]], [meal["id"]])

        resp = self.client.get("/api/diary/summary/day/2024-04-02", headers=self.ana)
        self.assertEqual(resp.status_code, 200)
        day = resp.json()["data"]
        self.assertEqual(day["mealsCount"], 1)
        self.assertEqual(day["symptomsCount"], 1)
        self.assertEqual(day["worstSymptomIntensity"], 3)
        self.assertEqual(day["status"], "okay")
        self.assertEqual(day["problematicFoodsCount"], 1)

        resp = self.client.get("/api/diary/summary/month/2024/4", headers=self.ana)
        self.assertEqual(resp.status_code, 200)
        month = resp.json()["data"]
        self.assertEqual(len(month["days"]), 30)
        self.assertEqual(month["days"][1]["status"], "okay")

        resp = self.client.get("/api/diary/symptoms/overview", headers=self.ana)
        self.assertEqual(resp.status_code, 200)
        overview = resp.json()["data"]
        for key in ("totalSymptoms", "avgIntensity", "mostFrequent", "trends", "foodCorrelations"):
            self.assertIn(key, overview)
        self.assertEqual(len(overview["trends"]), 14)

        resp = self.client.get("/api/diary/symptoms/worst", params={"limit": 1}, headers=self.ana)
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(len(resp.json()["data"]), 1)

    def test_update_and_delete(self) -> None:
        entry = self._create_meal(self.ana, date="2024-05-01")
        url = f"/api/diary/{entry['id']}"

        resp = self.client.patch(url, json={"meal": {"notes": "pouco queijo"}}, headers=self.bia)
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(resp.json()["code"], "FORBIDDEN")

        resp = self.client.patch(url, json={"type": "symptom", "meal": {"notes": "pouco queijo"}}, headers=self.ana)
        self.assertEqual(resp.status_code, 200, resp.text)
        updated = resp.json()["data"]
        self.assertEqual(updated["type"], "meal")
        self.assertEqual(updated["meal"]["notes"], "pouco queijo")
        self.assertEqual(updated["meal"]["foods"], entry["meal"]["foods"])

        resp = self.client.patch(url, json={"meal": {"time": "25:00"}}, headers=self.ana)
        self.assertEqual(resp.status_code, 400)

        resp = self.client.delete(url, headers=self.bia)
        self.assertEqual(resp.status_code, 403)
        resp = self.client.delete(url, headers=self.ana)
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"success": True})

        resp = self.client.get(url, headers=self.ana)
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json()["code"], "NOT_FOUND")

    def test_cookie_session(self) -> None:
        access_cookie = self.cookies.ACCESS_TOKEN_COOKIE
        refresh_cookie = self.cookies.REFRESH_TOKEN_COOKIE
        client = TestClient(self.app)
        try:
            token = self.security.create_access_token(user_id="ana")
            resp = client.get("/api/diary", headers={"Cookie": f"{access_cookie}={token}"})
            self.assertEqual(resp.status_code, 200)

            resp = client.post("/api/auth/refresh")
            self.assertEqual(resp.status_code, 401)

            refresh = self.security.create_refresh_token(user_id="ana")
            resp = client.post("/api/auth/refresh", headers={"Cookie": f"{refresh_cookie}={refresh}"})
            self.assertEqual(resp.status_code, 200)
            data = resp.json()["data"]
            self.assertEqual(data["expiresIn"], 15 * 60)
            self.assertEqual(self.security.decode_token(data["accessToken"])["sub"], "ana")
            set_cookie = resp.headers.get_list("set-cookie")
            self.assertEqual(len(set_cookie), 1)
            self.assertEqual(
                set_cookie[0],
                f"{access_cookie}={data['accessToken']}; HttpOnly; SameSite=lax; Max-Age=900; Path=/",
            )

            resp = client.post("/api/auth/logout")
            self.assertEqual(resp.status_code, 200)
            self.assertEqual(resp.json(), {"success": True})
            self.assertEqual(
                sorted(resp.headers.get_list("set-cookie")),
                sorted(
                    [
                        f"{access_cookie}=; HttpOnly; SameSite=lax; Max-Age=0; Path=/",
                        f"{refresh_cookie}=; HttpOnly; SameSite=lax; Max-Age=0; Path=/",
                    ]
                ),
            )
        finally:
            client.close()


if __name__ == "__main__":
    unittest.main()
