import random
from collections import Counter

from django.test import SimpleTestCase

from api.exceptions import EmptyCandidatePool
from api.selector import ReviewerSelector
from api.tests.support import FixedIndexRandom


class ReviewerSelectorTest(SimpleTestCase):
    def test_pick_uses_injected_random_source(self):
        selector = ReviewerSelector(FixedIndexRandom(1))

        self.assertEqual(selector.pick(["a", "b", "c"]), "b")

    def test_pick_single_candidate(self):
        self.assertEqual(ReviewerSelector().pick(["only"]), "only")

    def test_pick_empty_pool(self):
        with self.assertRaises(EmptyCandidatePool):
            ReviewerSelector().pick([])

    def test_pick_is_uniform(self):
        """Каждый кандидат выбирается примерно в 1/N случаев"""
        selector = ReviewerSelector(random.Random(1234))

        counts = Counter(selector.pick(["a", "b", "c"]) for _ in range(3000))

        self.assertEqual(set(counts), {"a", "b", "c"})
        for candidate in ["a", "b", "c"]:
            self.assertTrue(800 < counts[candidate] < 1200, counts)

    def test_same_seed_same_picks(self):
        first = ReviewerSelector(random.Random(7))
        second = ReviewerSelector(random.Random(7))
        candidates = ["a", "b", "c", "d"]

        self.assertEqual(
            [first.pick(candidates) for _ in range(20)],
            [second.pick(candidates) for _ in range(20)],
        )
