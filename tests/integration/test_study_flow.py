"""
Integration tests: evaluation, scheduling, persistence and planning together.

Each test works against a throwaway SQLite store.
"""

from datetime import timedelta

import pytest

from review_engine.assessment import PronunciationEvaluator, QualityPolicy
from review_engine.core.mastery import MasteryLevel
from review_engine.delivery.state_store import ReviewResponse, StateStore
from review_engine.study import MasteryCalculator, SessionPlanner, SessionType


class TestReviewLifecycle:
    def test_three_reviews_through_the_store(self, store, now):
        """Perfect, good, then a wrong answer."""
        first = store.review("w:nihao", ReviewResponse(quality=5, response_time=2000, was_correct=True), now)
        assert (first.repetitions, first.interval) == (1, 1)
        assert first.ease_factor == pytest.approx(2.6)
        assert first.due_date == now + timedelta(days=1)

        day_one = now + timedelta(days=1)
        second = store.review("w:nihao", ReviewResponse(quality=4, response_time=4000, was_correct=True), day_one)
        assert (second.repetitions, second.interval) == (2, 6)
        assert second.ease_factor == pytest.approx(2.6)

        day_seven = day_one + timedelta(days=6)
        third = store.review("w:nihao", ReviewResponse(quality=2, response_time=9000, was_correct=False), day_seven)
        assert (third.repetitions, third.interval) == (0, 1)
        assert third.streak == 0
        assert third.ease_factor == pytest.approx(2.28)
        assert third.total_reviews == 3
        assert third.correct_reviews == 2

        assert store.get("w:nihao") == third

    def test_graduation_to_mastered(self, store, now):
        at = now
        for _ in range(3):
            record = store.review("w:xiexie", ReviewResponse(quality=5, was_correct=True), at)
            at = record.due_date

        assert record.mastery_level == MasteryLevel.MASTERED
        assert MasteryCalculator().stats(store.all(), now).mastered_words == 1


class TestPronunciationToSchedule:
    def test_excellent_attempt_advances_item(self, store, now):
        result = PronunciationEvaluator().evaluate("你好", "你好", language="zh-CN", timing_ms=1800)

        record = store.review("w:nihao", QualityPolicy().to_review_response(result), now)

        assert record.repetitions == 1
        assert record.correct_reviews == 1
        assert record.ease_factor == pytest.approx(2.6)

    def test_poor_attempt_resets_item(self, store, make_record, now):
        store.save(make_record("w:nihao", repetitions=3, interval=15, streak=3, total_reviews=3, correct_reviews=3))
        result = PronunciationEvaluator().evaluate("谢谢", "你好", language="zh-CN")

        record = store.review("w:nihao", QualityPolicy().to_review_response(result), now)

        assert record.repetitions == 0
        assert record.interval == 1
        assert record.streak == 0
        assert record.ease_factor == pytest.approx(2.5 - 0.54)


class TestPlanningFromStore:
    def test_session_from_persisted_collection(self, store, now):
        for word in ("a", "b", "c"):
            store.get_or_initialize(f"w:{word}", now - timedelta(days=1))
        store.review("w:b", ReviewResponse(quality=5, was_correct=True), now - timedelta(days=3))
        store.get_or_initialize("w:d", now + timedelta(days=1))

        session = SessionPlanner().plan(store.all(), now, target_minutes=5, mode=SessionType.MIXED)

        # w:b came due two days ago and is no longer new;
        # w:d is not due yet but still fills a new-item slot
        assert session.item_ids[:3] == ["w:b", "w:a", "w:c"]
        assert "w:d" in session.item_ids
        assert len(session.item_ids) == len(set(session.item_ids))

    def test_backup_restores_plan(self, store, now, tmp_path):
        for word in ("a", "b"):
            store.review(f"w:{word}", ReviewResponse(quality=3, was_correct=True), now - timedelta(days=3))

        restored = StateStore(db_path=tmp_path / "restored.db")
        restored.import_json(store.export_json(now))

        planner = SessionPlanner()
        assert planner.plan(restored.all(), now).item_ids == planner.plan(store.all(), now).item_ids
