"""
Unit tests for job sources, performance monitoring and service wiring.
"""

import asyncio
import unittest

from jobmatch.dedup_cache import RequestDeduplicationCache
from jobmatch.insight_cache import CompanyInsightCache
from jobmatch.performance import PerformanceMonitor
from jobmatch.service import MatchingService
from jobmatch.privacy import PrivacyViolationError
from jobmatch.sources import SAMPLE_JOBS, InMemoryProfileSource, StaticJobSource
from jobmatch.tests.fixtures import FakeSimilarityOracle, FakeSummarizer, make_jobs, make_profile


class TestInMemoryProfileSource(unittest.TestCase):

    def test_saved_profile_is_returned(self):
        source = InMemoryProfileSource({"anon-1": make_profile()})
        self.assertEqual(source.get_anonymized_profile("anon-1"), make_profile())
        self.assertIsNone(source.get_anonymized_profile("anon-2"))

    def test_profile_with_pii_is_never_stored(self):
        source = InMemoryProfileSource()
        data = make_profile().model_dump()
        data["name"] = "Jane"

        with self.assertRaises(PrivacyViolationError):
            source.save("anon-1", data)
        self.assertIsNone(source.get_anonymized_profile("anon-1"))


class TestStaticJobSource(unittest.TestCase):

    def test_empty_query_returns_everything(self):
        self.assertEqual(StaticJobSource().search(), SAMPLE_JOBS)

    def test_all_terms_must_match(self):
        source = StaticJobSource()
        self.assertEqual([j.id for j in source.search("react")], ["job-1"])
        self.assertEqual([j.id for j in source.search("javascript css")], ["job-1", "job-3"])
        self.assertEqual(source.search("cobol"), [])

    def test_custom_catalogue(self):
        jobs = make_jobs(3)
        self.assertEqual(StaticJobSource(jobs).search("developer 1"), [jobs[1]])


class TestPerformanceMonitor(unittest.IsolatedAsyncioTestCase):

    async def test_measure_records_success_and_failure(self):
        monitor = PerformanceMonitor()

        async with monitor.measure("op"):
            pass
        with self.assertRaises(RuntimeError):
            async with monitor.measure("op"):
                raise RuntimeError("boom")

        stats = monitor.get_stats("op")
        self.assertEqual(stats["count"], 2)
        self.assertEqual(stats["success_rate"], 0.5)

    def test_percentiles_and_sample_limit(self):
        monitor = PerformanceMonitor(max_samples=100)
        for i in range(1, 201):
            monitor.record("op", float(i))

        stats = monitor.get_stats("op")
        self.assertEqual(stats["count"], 100)
        self.assertEqual(stats["min"], 101.0)
        self.assertEqual(stats["max"], 200.0)
        self.assertAlmostEqual(stats["avg"], 150.5)
        # Linear interpolation between closest ranks
        self.assertAlmostEqual(stats["p50"], 150.5)
        self.assertAlmostEqual(stats["p95"], 195.05)
        self.assertAlmostEqual(stats["p99"], 199.01)
        self.assertIsInstance(stats["p95"], float)

    def test_unknown_metric(self):
        monitor = PerformanceMonitor()
        self.assertIsNone(monitor.get_stats("missing"))
        self.assertEqual(monitor.all_stats(), {})


class TestMatchingService(unittest.IsolatedAsyncioTestCase):

    def make_service(self, oracle=None):
        return MatchingService(
            similarity_oracle=oracle or FakeSimilarityOracle(),
            summarizer=FakeSummarizer(),
            dedup_cache=RequestDeduplicationCache(),
            insight_cache=CompanyInsightCache(),
            prune_interval=0.01,
        )

    async def test_semantic_first_then_keyword(self):
        service = self.make_service()
        matches = await service.orchestrator.find_matches(make_profile(), make_jobs(2))
        self.assertFalse(any(m.is_approximate for m in matches))

        service = self.make_service(FakeSimilarityOracle(error=RuntimeError("down")))
        matches = await service.orchestrator.find_matches(make_profile(), make_jobs(2))
        self.assertTrue(all(m.is_approximate for m in matches))

    async def test_lifecycle_and_stats(self):
        service = self.make_service()
        service.start()
        self.assertTrue(service.janitor.is_running)

        await service.orchestrator.find_matches_with_insights(make_profile(), make_jobs(2))
        await asyncio.sleep(0.02)
        stats = service.stats()

        self.assertIn("matching.find_matches", stats["performance"])
        self.assertEqual(stats["insight_cache"]["size"], 2)

        await service.close()
        self.assertFalse(service.janitor.is_running)
        self.assertEqual(service.insight_cache.stats()["size"], 0)


if __name__ == "__main__":
    unittest.main()
