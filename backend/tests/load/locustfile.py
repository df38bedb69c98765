# backend/tests/load/locustfile.py
#   Load testing script using Locust to simulate members running the BitFit calculators.
from locust import HttpUser, task, between
import os
import random

API_HOST = os.getenv("LOAD_API_HOST", "http://api:8000")  # your API host

BODY_PAYLOAD = {"age": 30, "gender": "male", "height": 170, "weight": 70, "waist": 85, "hip": 100,
                "systolic": 118, "diastolic": 76, "resting_heart_rate": 64}
CARDIO_PAYLOADS = {
    "rockport": {"age": 30, "gender": "female", "weight": 62, "time_minutes": 14, "time_seconds": 30, "heart_rate": 130},
    "cooper": {"age": 25, "gender": "male", "distance": 2.6, "distance_unit": "km"},
    "mile15": {"age": 40, "gender": "male", "time_minutes": 12, "time_seconds": 30},
    "step": {"age": 35, "gender": "female", "recovery_heart_rate": 98},
}
CALORIE_PAYLOAD = {"gender": "female", "age": 35, "height": 165, "current_weight": 78, "target_weight": 68,
                   "timeframe_weeks": 16, "activity_level": "light"}


class BitFitUser(HttpUser):
    wait_time = between(1, 3)
    host = API_HOST
    token = None

    def on_start(self):
        # Step 1: Authenticate and get JWT token
        credentials = {
            "email": os.getenv("LOAD_USER_EMAIL", "loadtest@example.com"),
            "password": os.getenv("LOAD_USER_PASSWORD", "Password123!"),
        }
        try:
            resp = self.client.post("/auth/login", json=credentials)
            if resp.status_code == 200:
                self.token = resp.json().get("access_token")
                print("Logged in successfully.")
            else:
                print(f"Login failed: {resp.status_code} | {resp.text}")
        except Exception as e:
            print(f"Login exception: {e}")

    def auth_header(self):
        return {"Authorization": f"Bearer {self.token}"} if self.token else {}

    @task(3)
    def body_assessment(self):
        if not self.token:
            return
        resp = self.client.post("/bitfit/assessments/body", json=BODY_PAYLOAD, headers=self.auth_header())
        if resp.status_code != 200:
            print(f"[FAIL] body {resp.status_code} | {resp.text}")

    @task(3)
    def cardio_assessment(self):
        if not self.token:
            return
        test = random.choice(list(CARDIO_PAYLOADS))
        resp = self.client.post(
            f"/bitfit/assessments/cardio/{test}",
            json=CARDIO_PAYLOADS[test],
            headers=self.auth_header(),
            name="/bitfit/assessments/cardio/[test]",
        )
        if resp.status_code != 200:
            print(f"[FAIL] cardio/{test} {resp.status_code} | {resp.text}")

    @task(2)
    def calorie_plan(self):
        if not self.token:
            return
        resp = self.client.post("/bitfit/assessments/calories", json=CALORIE_PAYLOAD, headers=self.auth_header())
        if resp.status_code != 200:
            print(f"[FAIL] calories {resp.status_code} | {resp.text}")

    @task(1)
    def calorie_report(self):
        if not self.token:
            return
        resp = self.client.post("/bitfit/assessments/calories/report", json=CALORIE_PAYLOAD, headers=self.auth_header())
        if resp.status_code != 200:
            print(f"[FAIL] calories report {resp.status_code}")

    @task(1)
    def profile(self):
        if not self.token:
            return
        resp = self.client.get("/profile", headers=self.auth_header())
        if resp.status_code != 200:
            print(f"[FAIL] profile {resp.status_code} | {resp.text}")
