from locust import HttpUser, task, between
import os
import random


CLIENT_POOL = int(os.getenv("LOCUST_CLIENT_POOL", "500"))
REGIONS = os.getenv("LOCUST_REGIONS", "1,10,20,100,").split(",")


class VastPlayerUser(HttpUser):
    """Locust user playing video: asks /vast for ads, now and then browses campaigns."""

    wait_time = between(0.5, 2.5)

    def on_start(self):
        # A player keeps one viewer id, so budgets run out over the test
        self.client_id = f"viewer-{random.randrange(CLIENT_POOL)}"
        self.region = random.choice(REGIONS)

    @task(10)
    def request_ads(self):
        params = {"client_id": self.client_id}
        if self.region:
            params["region"] = self.region
        with self.client.get("/vast", params=params, name="/vast", catch_response=True) as resp:
            if resp.status_code != 200:
                resp.failure(f"VAST request failed: {resp.status_code}")
            elif b"<VAST" not in resp.content:
                resp.failure("Response is not a VAST document")
            else:
                resp.success()

    @task(2)
    def list_campaigns(self):
        self.client.get("/api/v1/campaigns/")

    @task(1)
    def list_available_ads(self):
        self.client.get("/api/v1/ads/available/")


# Useful for headless CSV output: `locust --headless -u 50 -r 5 -t 2m -f locustfile.py --csv out --host http://localhost:8070`
