"""
Tests for the social graph service: likes, dislikes, recommendations,
reviews, follows and the relation queries.
"""

import unittest

from moviefan.errors import BadRequest, Conflict
from moviefan.models import fan_follows_critics, fan_follows_fans, fan_likes
from moviefan.social import SocialGraphService
from moviefan.store import Store
from tests.fakes import AppTestCase


class TestLikesAndDislikes(AppTestCase):

    def setUp(self) -> None:
        super().setUp()
        self.social = SocialGraphService()
        self.alice = self.fan("alice")
        self.movie(7)

    def test_like_then_check(self):
        self.social.like("alice", 7)
        self.assertTrue(self.social.is_liked_by("alice", 7))
        self.assertIsNone(self.social.is_disliked_by("alice", 7))

    def test_dislike_then_check(self):
        self.social.dislike("alice", 7)
        self.assertFalse(self.social.is_liked_by("alice", 7))
        self.assertEqual(self.social.is_disliked_by("alice", 7).username, "alice")

    def test_like_then_dislike_leaves_only_dislike(self):
        self.social.like("alice", 7)
        self.social.dislike("alice", 7)
        self.assertFalse(self.social.is_liked_by("alice", 7))
        self.assertEqual(self.social.is_disliked_by("alice", 7).id, self.alice.id)

    def test_dislike_then_like_leaves_only_like(self):
        self.social.dislike("alice", 7)
        self.social.like("alice", 7)
        self.assertTrue(self.social.is_liked_by("alice", 7))
        self.assertIsNone(self.social.is_disliked_by("alice", 7))

    def test_double_like_is_idempotent(self):
        self.social.like("alice", 7)
        self.social.like("alice", 7)
        self.assertEqual([f.username for f in self.social.fans_who_liked(7)], ["alice"])

    def test_unknown_fan_or_movie_is_a_silent_noop(self):
        self.social.like("mallory", 7)
        self.social.like("alice", 404)
        self.social.dislike("mallory", 7)
        self.assertEqual(self.social.fans_who_liked(7), [])
        self.assertEqual(self.social.fans_who_disliked(7), [])
        self.assertFalse(self.social.is_liked_by("mallory", 7))
        self.assertFalse(self.social.is_liked_by("alice", 404))
        self.assertIsNone(self.social.is_disliked_by("alice", 404))

    def test_list_queries_for_unknown_movie_are_none(self):
        self.assertIsNone(self.social.fans_who_liked(404))
        self.assertIsNone(self.social.fans_who_disliked(404))
        self.assertIsNone(self.social.critics_who_recommended(404))
        self.assertIsNone(self.social.reviews_of(404))
        self.assertIsNone(self.social.cast_of(404))

    def test_fans_who_liked_in_like_order(self):
        self.fan("carol")
        self.fan("bea")
        self.social.like("carol", 7)
        self.social.like("alice", 7)
        self.social.like("bea", 7)
        self.assertEqual([f.username for f in self.social.fans_who_liked(7)],
                         ["carol", "alice", "bea"])


class TestRecommendationsAndReviews(AppTestCase):

    def setUp(self) -> None:
        super().setUp()
        self.social = SocialGraphService()
        self.bob = self.critic("bob")
        self.movie(10)

    def test_recommend_then_check(self):
        self.social.recommend("bob", 10)
        self.social.recommend("bob", 10)
        self.assertEqual(self.social.is_recommended_by("bob", 10).username, "bob")
        self.assertEqual([c.username for c in self.social.critics_who_recommended(10)], ["bob"])

    def test_unrecommended_or_unknown_critic_is_none(self):
        self.assertIsNone(self.social.is_recommended_by("bob", 10))
        self.social.recommend("nobody", 10)
        self.assertIsNone(self.social.is_recommended_by("nobody", 10))
        self.assertEqual(self.social.critics_who_recommended(10), [])

    def test_attach_review(self):
        review = self.social.create_review({"author": "bob", "body": "Great.", "score": "4.5"})
        self.social.attach_review(10, review.id)
        self.social.attach_review(10, review.id)
        reviews = self.social.reviews_of(10)
        self.assertEqual([r.id for r in reviews], [review.id])
        self.assertEqual(reviews[0].score, 4.5)

    def test_attach_unknown_review_is_noop(self):
        self.social.attach_review(10, 999)
        self.assertEqual(self.social.reviews_of(10), [])

    def test_review_requires_author_and_numeric_score(self):
        with self.assertRaises(BadRequest):
            self.social.create_review({"body": "anonymous"})
        with self.assertRaises(BadRequest):
            self.social.create_review({"author": "bob", "score": "ten"})

    def test_cast_of(self):
        Store.attach_cast_if_empty(10, [{"id": 1, "name": "Lead"}, {"id": 2, "name": "Support"}])
        self.assertEqual([a.name for a in self.social.cast_of(10)], ["Lead", "Support"])


class TestFollowsAndEntities(AppTestCase):

    def setUp(self) -> None:
        super().setUp()
        self.social = SocialGraphService()

    def test_follow_fan_and_critic_are_idempotent(self):
        alice = self.fan("alice")
        carol = self.fan("carol")
        bob = self.critic("bob")
        self.social.follow_fan("alice", "carol")
        self.social.follow_fan("alice", "carol")
        self.social.follow_critic("alice", "bob")
        self.social.follow_critic("alice", "bob")
        self.assertTrue(Store.has_edge(fan_follows_fans, alice.id, carol.id))
        self.assertTrue(Store.has_edge(fan_follows_critics, alice.id, bob.id))
        self.assertEqual([f.username for f in Store.fan(alice.id).fans_followed], ["carol"])
        self.assertEqual([c.username for c in Store.fan(alice.id).critics_followed], ["bob"])

    def test_fan_cannot_follow_itself(self):
        alice = self.fan("alice")
        self.social.follow_fan("alice", "alice")
        self.assertFalse(Store.has_edge(fan_follows_fans, alice.id, alice.id))

    def test_follow_unknown_is_noop(self):
        alice = self.fan("alice")
        self.social.follow_fan("alice", "ghost")
        self.social.follow_critic("alice", "ghost")
        self.assertEqual(Store.fan(alice.id).fans_followed, [])
        self.assertEqual(Store.fan(alice.id).critics_followed, [])

    def test_create_fan_and_critic(self):
        fan = self.social.create_fan({"username": " dana ", "first_name": "Dana"})
        critic = self.social.create_critic({"username": "ebert", "publication": "Sun-Times"})
        self.assertEqual(fan.username, "dana")
        self.assertEqual(critic.publication, "Sun-Times")
        with self.assertRaises(Conflict):
            self.social.create_fan({"username": "dana"})
        with self.assertRaises(BadRequest):
            self.social.create_critic({})
        with self.assertRaises(BadRequest):
            self.social.create_fan(None)

    def test_likes_edge_rows_are_unique(self):
        alice = self.fan("alice")
        self.movie(1)
        for _ in range(3):
            self.social.like("alice", 1)
        self.assertTrue(Store.has_edge(fan_likes, alice.id, 1))
        self.assertEqual(len(Store.fan(alice.id).liked_movies), 1)


if __name__ == "__main__":
    unittest.main()
