"""
Tests for the relational store repository.
"""

import unittest
from unittest.mock import patch

from sqlalchemy.exc import OperationalError

from moviefan.errors import Conflict, StoreUnavailable
from moviefan.models import Actor, Movie, critic_recommends, db, fan_dislikes, fan_likes
from moviefan.store import Store
from tests.fakes import AppTestCase, concurrent_insert


class TestStore(AppTestCase):

    def test_lookups_return_none_for_unknown_ids(self):
        self.assertIsNone(Store.movie(1))
        self.assertIsNone(Store.fan(1))
        self.assertIsNone(Store.critic(1))
        self.assertIsNone(Store.review(1))
        self.assertIsNone(Store.fan_id_by_username("nobody"))
        self.assertIsNone(Store.critic_id_by_username("nobody"))

    def test_username_lookups(self):
        alice = self.fan("alice")
        bob = self.critic("bob")
        self.assertEqual(Store.fan_id_by_username("alice"), alice.id)
        self.assertEqual(Store.critic_id_by_username("bob"), bob.id)
        # Fan and critic namespaces are separate.
        self.assertIsNone(Store.critic_id_by_username("alice"))

    def test_duplicate_username_is_conflict(self):
        self.fan("alice")
        with self.assertRaises(Conflict):
            Store.create_fan("alice")
        # The session is usable after the failed insert.
        self.assertIsNotNone(Store.fan_id_by_username("alice"))

    def test_save_edge_is_idempotent(self):
        alice = self.fan("alice")
        self.movie(7)
        self.assertTrue(Store.save_edge(fan_likes, alice.id, 7))
        self.assertFalse(Store.save_edge(fan_likes, alice.id, 7))
        rows = db.session.execute(fan_likes.select()).fetchall()
        self.assertEqual(len(rows), 1)

    def test_move_edge_removes_the_opposite_edge(self):
        alice = self.fan("alice")
        self.movie(7)
        Store.save_edge(fan_likes, alice.id, 7)

        Store.move_edge(fan_dislikes, fan_likes, alice.id, 7)

        self.assertFalse(Store.has_edge(fan_likes, alice.id, 7))
        self.assertTrue(Store.has_edge(fan_dislikes, alice.id, 7))

    def test_upsert_updates_catalog_fields_only(self):
        alice = self.fan("alice")
        bob = self.critic("bob")
        Store.upsert_movie({"id": 10, "title": "Old", "rating": 5.0})
        Store.save_edge(fan_likes, alice.id, 10)
        Store.save_edge(critic_recommends, bob.id, 10)
        Store.attach_cast_if_empty(10, [{"id": 1, "name": "Actor One"}])

        movie = Store.upsert_movie({"id": 10, "title": "New", "rating": 8.1})

        self.assertEqual(movie.title, "New")
        self.assertEqual(movie.rating, 8.1)
        self.assertEqual([f.username for f in movie.liked_by], ["alice"])
        self.assertEqual([c.username for c in movie.recommended_by], ["bob"])
        self.assertEqual([a.name for a in movie.cast], ["Actor One"])

    def test_upsert_keeps_fields_missing_from_the_record(self):
        Store.upsert_movie({"id": 10, "title": "Title", "poster_path": "/p.jpg"})
        movie = Store.upsert_movie({"id": 10, "title": "Title 2"})
        self.assertEqual(movie.poster_path, "/p.jpg")

    def test_upsert_movies_preserves_order(self):
        movies = Store.upsert_movies([{"id": 3}, {"id": 1}, {"id": 2}])
        self.assertEqual([m.id for m in movies], [3, 1, 2])
        self.assertEqual([m.id for m in Store.all_movies()], [1, 2, 3])

    def test_cast_is_attached_only_once(self):
        self.movie(5)
        self.assertTrue(Store.attach_cast_if_empty(5, [{"id": 1, "name": "A"}, {"id": 2, "name": "B"}]))
        self.assertFalse(Store.attach_cast_if_empty(5, [{"id": 3, "name": "C"}]))
        self.assertEqual([a.id for a in Store.movie(5).cast], [1, 2])

    def test_cast_for_unknown_movie_is_ignored(self):
        self.assertFalse(Store.attach_cast_if_empty(99, [{"id": 1, "name": "A"}]))

    def test_relations_keep_insertion_order(self):
        bob = self.critic("bob")
        for movie_id in (30, 10, 20):
            self.movie(movie_id)
            Store.save_edge(critic_recommends, bob.id, movie_id)
        self.assertEqual([m.id for m in Store.critic(bob.id).recommended_movies], [30, 10, 20])

    def test_database_errors_become_store_unavailable(self):
        error = OperationalError("SELECT 1", {}, Exception("database is locked"))
        with patch("sqlalchemy.orm.Session.get", side_effect=error):
            with self.assertRaises(StoreUnavailable):
                Store.movie(1)

    def test_upsert_survives_a_concurrent_insert_of_the_same_movie(self):
        with concurrent_insert(Movie, 21, title="Raced") as raced:
            movies = Store.upsert_movies([{"id": 21, "title": "Popular"}, {"id": 22, "title": "Other"}])

        self.assertEqual(raced, [21])
        self.assertEqual([m.id for m in movies], [21, 22])
        self.assertEqual(Store.movie(21).title, "Popular")

    def test_cast_attach_survives_a_concurrent_actor_insert(self):
        self.movie(603)
        with concurrent_insert(Actor, 6384, name="Keanu Reeves") as raced:
            attached = Store.attach_cast_if_empty(603, [{"id": 6384, "name": "Keanu Reeves"}])

        self.assertEqual(raced, [6384])
        self.assertTrue(attached)
        self.assertEqual([a.name for a in Store.movie(603).cast], ["Keanu Reeves"])

    def test_movie_relation(self):
        alice = self.fan("alice")
        self.movie(7)
        self.assertEqual(Store.movie_relation(7, "liked_by"), [])
        Store.save_edge(fan_likes, alice.id, 7)
        self.assertEqual([f.username for f in Store.movie_relation(7, "liked_by")], ["alice"])
        self.assertIsNone(Store.movie_relation(8, "liked_by"))
        with self.assertRaises(ValueError):
            Store.movie_relation(7, "title")

    def test_movie_relation_errors_become_store_unavailable(self):
        self.movie(7)
        error = OperationalError("SELECT", {}, Exception("no such table: fan_dislikes"))
        with patch("sqlalchemy.orm.Session.execute", side_effect=error):
            with self.assertRaises(StoreUnavailable):
                Store.movie_relation(7, "disliked_by")


if __name__ == "__main__":
    unittest.main()
