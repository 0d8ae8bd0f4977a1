"""
Load test with data integrity checks.

Many identities vote on the same few polls while each checks that:
- total_votes always equals votes_a + votes_b
- counts never decrease
- a repeat vote is reported as already_voted and leaves counts unchanged
"""

import random

from locust import HttpUser, between, events, task


class DataIntegrityUser(HttpUser):
    """User that votes and verifies vote counts."""

    wait_time = between(0.5, 1.5)

    def on_start(self):
        self.client.headers.update({"X-Load-Test": "true"})
        self.client.get("/api/v1/auth/anonymous/", name="Integrity: Issue Identity")
        self.poll_id = None
        self.last_total = 0
        self.has_voted = False

        response = self.client.get("/api/v1/polls/", params={"limit": 5})
        if response.status_code == 200 and response.json():
            poll = random.choice(response.json())
            self.poll_id = poll["id"]
            self.last_total = poll["total_votes"]

    def _check_counts(self, counts, response):
        if counts["total_votes"] != counts["votes_a"] + counts["votes_b"]:
            response.failure(f"Data corruption detected! Counts do not add up: {counts}")
            return False
        if counts["total_votes"] < self.last_total:
            response.failure(
                f"Data corruption detected! Vote count decreased: "
                f"{counts['total_votes']} < {self.last_total}"
            )
            return False
        self.last_total = counts["total_votes"]
        return True

    @task(3)
    def vote_and_verify(self):
        if self.poll_id is None:
            return

        with self.client.post(
            "/api/v1/votes/cast/",
            json={"poll_id": self.poll_id, "side": random.choice(["A", "B"])},
            catch_response=True,
            name="Integrity: Cast Vote",
        ) as response:
            if response.status_code not in (200, 201):
                response.failure(f"Vote failed: {response.status_code}")
                return

            data = response.json()
            if self.has_voted and not data["already_voted"]:
                response.failure("Data corruption detected! Second vote accepted")
                return
            self.has_voted = True

            if self._check_counts(data["counts"], response):
                response.success()

    @task(2)
    def verify_poll_counts(self):
        if self.poll_id is None:
            return

        with self.client.get(
            f"/api/v1/polls/{self.poll_id}/",
            catch_response=True,
            name="Integrity: Poll Detail",
        ) as response:
            if response.status_code != 200:
                response.failure(f"Status: {response.status_code}")
                return
            if self._check_counts(response.json(), response):
                response.success()


@events.request.add_listener
def on_request(request_type, name, response_time, response_length, exception, **kwargs):
    """Monitor for data integrity issues."""
    if "Integrity" in name and exception:
        print(f"DATA INTEGRITY WARNING: {name} - {exception}")
