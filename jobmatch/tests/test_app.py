"""
Tests for the HTTP API, with fake oracles installed before startup.
"""

import unittest
from unittest.mock import AsyncMock

from fastapi.testclient import TestClient

from app import LAST_REQUESTS_BY_IP, app, get_settings
from jobmatch.dedup_cache import RequestDeduplicationCache
from jobmatch.insight_cache import CompanyInsightCache
from jobmatch.service import MatchingService
from jobmatch.sources import StaticJobSource
from jobmatch.tests.fixtures import FakeSimilarityOracle, FakeSummarizer, make_jobs, make_profile
from models import Settings


class TestMatchesAPI(unittest.TestCase):

    def setUp(self):
        LAST_REQUESTS_BY_IP.clear()
        app.dependency_overrides.clear()
        self.install_service(FakeSimilarityOracle())

    def tearDown(self):
        app.dependency_overrides.clear()
        app.state.matching_service = None
        app.state.job_source = None

    def install_service(self, oracle):
        self.service = MatchingService(
            similarity_oracle=oracle,
            summarizer=FakeSummarizer(),
            dedup_cache=RequestDeduplicationCache(),
            insight_cache=CompanyInsightCache(),
        )
        app.state.matching_service = self.service
        app.state.job_source = StaticJobSource()

    def profile_payload(self, **overrides):
        profile = make_profile().model_dump()
        profile.update(overrides)
        return {"profile": profile}

    def test_root(self):
        with TestClient(app) as client:
            response = client.get("/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "ok")

    def test_matches_from_default_catalogue(self):
        with TestClient(app) as client:
            response = client.post("/api/matches", json=self.profile_payload())

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["jobs_analyzed"], 3)
        self.assertEqual(len(body["matches"]), 3)
        self.assertFalse(body["is_approximate"])
        self.assertIsNone(body["message"])
        for match in body["matches"]:
            self.assertIsNotNone(match["insight_card"])
            self.assertEqual(sum(match["features"]["score_breakdown"].values()), match["score"])

    def test_explicit_jobs_without_insights(self):
        payload = self.profile_payload()
        payload["jobs"] = [job.model_dump(mode="json") for job in make_jobs(4)]
        payload["include_insights"] = False

        with TestClient(app) as client:
            response = client.post("/api/matches", json=payload)

        body = response.json()
        self.assertEqual(response.status_code, 200)
        self.assertEqual(body["jobs_analyzed"], 4)
        self.assertTrue(all(m["insight_card"] is None for m in body["matches"]))

    def test_fallback_is_flagged_approximate(self):
        self.install_service(FakeSimilarityOracle(error=RuntimeError("down")))

        with TestClient(app) as client:
            response = client.post("/api/matches", json=self.profile_payload())

        body = response.json()
        self.assertTrue(body["is_approximate"])
        self.assertEqual(body["message"], "Some results may be approximate due to AI service limitations")

    def test_profile_with_pii_is_rejected(self):
        with TestClient(app) as client:
            response = client.post("/api/matches", json=self.profile_payload(email="jane@example.com"))

        self.assertEqual(response.status_code, 400)
        self.assertIn(
            "PII field 'email' found in anonymized profile",
            response.json()["detail"]["errors"],
        )

    def test_matching_error_returns_500(self):
        self.service.orchestrator.find_matches_with_insights = AsyncMock(side_effect=RuntimeError("boom"))

        with TestClient(app) as client:
            response = client.post("/api/matches", json=self.profile_payload())

        self.assertEqual(response.status_code, 500)

    def test_rate_limit(self):
        app.dependency_overrides[get_settings] = lambda: Settings(rate_limit_requests_per_minute=2)

        with TestClient(app) as client:
            codes = [client.post("/api/matches", json=self.profile_payload()).status_code for _ in range(3)]

        self.assertEqual(codes, [200, 200, 429])

    def test_metrics(self):
        with TestClient(app) as client:
            client.post("/api/matches", json=self.profile_payload())
            response = client.get("/api/metrics")

        body = response.json()
        self.assertEqual(response.status_code, 200)
        self.assertIn("matching.find_matches", body["performance"])
        self.assertIn("dedup_cache", body)
        self.assertIn("insight_cache", body)


if __name__ == "__main__":
    unittest.main()
