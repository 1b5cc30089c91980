import uuid

from locust import HttpUser, task, between


class InspectorUser(HttpUser):
    wait_time = between(1, 3)

    def on_start(self):
        username = f"load_{uuid.uuid4().hex[:10]}"
        payload = {"email": f"{username}@example.com", "username": username, "password": "password123"}
        r = self.client.post("/api/auth/register", json=payload)
        if r.status_code != 201:
            r = self.client.post("/api/auth/login", json={"username": username, "password": payload["password"]})
        token = r.json().get("token")
        self.headers = {"Authorization": f"Bearer {token}"}
        self.protocol_ids = []

    @task(3)
    def list_protocols(self):
        self.client.get("/api/protocols", headers=self.headers)

    @task(1)
    def create_protocol(self):
        data = {"name": "bench walkdown", "frequency": "DAILY", "targetCount": 1}
        r = self.client.post("/api/protocols", json=data, headers=self.headers)
        if r.status_code == 201:
            self.protocol_ids.append(r.json()["id"])

    @task(2)
    def log_completion(self):
        if not self.protocol_ids:
            return
        protocol_id = self.protocol_ids[-1]
        self.client.post(
            f"/api/protocols/{protocol_id}/compliance-logs",
            json={"note": "bench"},
            headers=self.headers,
            name="/api/protocols/[id]/compliance-logs",
        )
