"""
Unit tests for semantic matching and breakdown rescaling.
"""

import unittest

from jobmatch.ai_service import AIError, ErrorCode
from jobmatch.models import ScoreBreakdown
from jobmatch.semantic_strategy import (
    SemanticMatchingStrategy,
    apportion,
    job_to_text,
    profile_to_text,
    rescale_breakdown,
    similarity_band,
    similarity_to_score,
)
from jobmatch.tests.fixtures import FakeSimilarityOracle, make_job, make_jobs, make_profile


class TestScoreMapping(unittest.TestCase):

    def test_similarity_to_score_rounds_half_up_and_clamps(self):
        self.assertEqual(similarity_to_score(0.125), 13)
        self.assertEqual(similarity_to_score(0.5), 50)
        self.assertEqual(similarity_to_score(0.004), 0)
        self.assertEqual(similarity_to_score(1.3), 100)
        self.assertEqual(similarity_to_score(-0.2), 0)

    def test_similarity_bands(self):
        self.assertEqual(similarity_band(0.85), "Strong semantic match")
        self.assertEqual(similarity_band(0.7), "Good semantic alignment")
        self.assertEqual(similarity_band(0.55), "Good semantic alignment")
        self.assertEqual(similarity_band(0.5), "Some semantic alignment")

    def test_apportion_sums_exactly(self):
        weights = {"skills": 20, "role": 20, "industry": 15, "company_size": 10, "remote": 10, "experience": 5}
        for total in (1, 7, 33, 77, 100):
            with self.subTest(total=total):
                self.assertEqual(sum(apportion(weights, total).values()), total)

    def test_rescale_keeps_proportions(self):
        breakdown = ScoreBreakdown(skills=40, role=20, industry=0, company_size=20, remote=0, experience=0)
        rescaled = rescale_breakdown(breakdown, 40)
        self.assertEqual(rescaled, ScoreBreakdown(skills=20, role=10, company_size=10))

    def test_rescale_uses_fixed_distribution_for_empty_breakdown(self):
        rescaled = rescale_breakdown(ScoreBreakdown(), 50)
        self.assertEqual(rescaled.total, 50)
        self.assertEqual(rescaled.skills, 20)
        self.assertEqual(rescaled.role, 10)
        self.assertEqual(rescaled.industry, 8)
        self.assertEqual(rescaled.experience, 2)

    def test_profile_and_job_text(self):
        text = profile_to_text(make_profile())
        self.assertIn("Skills: React, TypeScript, Node.js", text)
        self.assertIn("Experience: 5 years, senior level", text)

        job_text = job_to_text(make_job(description="x" * 500))
        self.assertIn("Job title: Senior Frontend Developer", job_text)
        self.assertTrue(job_text.endswith("Description: " + "x" * 200))


class TestSemanticMatchingStrategy(unittest.IsolatedAsyncioTestCase):

    async def test_results_are_not_approximate(self):
        strategy = SemanticMatchingStrategy(FakeSimilarityOracle())
        matches = await strategy.find_matches(make_profile(), make_jobs(3))

        self.assertEqual(len(matches), 3)
        self.assertFalse(any(m.is_approximate for m in matches))

    async def test_breakdown_sums_to_score(self):
        oracle = FakeSimilarityOracle(scores=[0.91, 0.337, 0.68, 0.05, 0.5])
        matches = await SemanticMatchingStrategy(oracle).find_matches(make_profile(), make_jobs(5))

        self.assertEqual([m.score for m in matches], [91, 68, 50, 34, 5])
        for match in matches:
            self.assertEqual(match.features.score_breakdown.total, match.score)

    async def test_band_sentence_leads_explanation(self):
        oracle = FakeSimilarityOracle(scores=[0.82, 0.6, 0.3])
        matches = await SemanticMatchingStrategy(oracle).find_matches(make_profile(), make_jobs(3))

        self.assertTrue(matches[0].explanation.startswith("Strong semantic match"))
        self.assertTrue(matches[1].explanation.startswith("Good semantic alignment"))
        self.assertTrue(matches[2].explanation.startswith("Some semantic alignment"))

    async def test_zero_and_invalid_scores_are_skipped(self):
        oracle = FakeSimilarityOracle(scores=[0.0, float("nan"), 0.4])
        matches = await SemanticMatchingStrategy(oracle).find_matches(make_profile(), make_jobs(3))

        self.assertEqual([m.job.id for m in matches], ["job-2"])

    async def test_score_count_mismatch_raises(self):
        oracle = FakeSimilarityOracle(scores=[0.9])

        with self.assertRaises(AIError) as ctx:
            await SemanticMatchingStrategy(oracle).find_matches(make_profile(), make_jobs(2))
        self.assertEqual(ctx.exception.code, ErrorCode.INVALID_RESPONSE)

    async def test_oracle_errors_propagate(self):
        oracle = FakeSimilarityOracle(error=AIError("down", "fake", ErrorCode.SERVICE_UNAVAILABLE))

        with self.assertRaises(AIError):
            await SemanticMatchingStrategy(oracle).find_matches(make_profile(), make_jobs(2))

    async def test_empty_jobs_skip_the_oracle(self):
        oracle = FakeSimilarityOracle()
        self.assertEqual(await SemanticMatchingStrategy(oracle).find_matches(make_profile(), []), [])
        self.assertEqual(oracle.calls, 0)


if __name__ == "__main__":
    unittest.main()
