"""
Unit tests for the SM-2 scheduler.

Run: pytest tests/unit/test_scheduler.py -v
"""

from datetime import timedelta

import pytest

from review_engine.core.mastery import Difficulty
from review_engine.delivery.scheduler import SM2Config, SM2Scheduler, clamp_quality
from review_engine.delivery.state_store import ReviewResponse


def _response(quality, correct=True, response_time=2000):
    return ReviewResponse(quality=quality, response_time=response_time, was_correct=correct)


class TestInitialize:
    def test_new_record_defaults(self, scheduler, now):
        record = scheduler.initialize("w:nihao", now)

        assert record.item_id == "w:nihao"
        assert record.ease_factor == 2.5
        assert record.interval == 1
        assert record.repetitions == 0
        assert record.total_reviews == 0
        assert record.correct_reviews == 0
        assert record.streak == 0
        assert record.difficulty == Difficulty.MEDIUM

    def test_new_record_is_due_immediately(self, scheduler, now):
        record = scheduler.initialize("w:nihao", now)

        assert record.due_date == now
        assert record.is_due(now)


class TestIntervals:
    def test_cold_start_shape(self, scheduler, now):
        """Three perfect reviews give 1, 6, then round(6 * EF)."""
        record = scheduler.initialize("w:nihao", now)

        first = scheduler.process_review(record, _response(5), now)
        second = scheduler.process_review(first, _response(5), now + timedelta(days=1))
        third = scheduler.process_review(second, _response(5), now + timedelta(days=7))

        assert first.interval == 1
        assert second.interval == 6
        assert third.interval == round(6 * second.ease_factor)
        assert third.interval == 16

    def test_failure_resets_progress(self, scheduler, make_record, now):
        record = make_record(repetitions=5, interval=40, ease_factor=2.4, streak=5)

        updated = scheduler.process_review(record, _response(2, correct=True), now)

        assert updated.repetitions == 0
        assert updated.interval == 1

    @pytest.mark.parametrize("quality", [0, 1, 2])
    def test_any_failing_quality_resets(self, scheduler, make_record, now, quality):
        record = make_record(repetitions=3, interval=20)

        updated = scheduler.process_review(record, _response(quality, correct=False), now)

        assert updated.repetitions == 0
        assert updated.interval == 1
        assert updated.streak == 0

    def test_wrong_answer_with_passing_quality_restarts_at_one(self, scheduler, make_record, now):
        record = make_record(repetitions=4, interval=30, streak=4)

        updated = scheduler.process_review(record, _response(4, correct=False), now)

        assert updated.interval == 1
        assert updated.repetitions == 1
        assert updated.streak == 0

    def test_interval_never_below_one(self, scheduler, make_record, now):
        record = make_record(repetitions=2, interval=0, ease_factor=1.3)

        updated = scheduler.process_review(record, _response(3), now)

        assert updated.interval >= 1

    def test_custom_cold_start_intervals(self, make_record, now):
        scheduler = SM2Scheduler(SM2Config(first_interval=2, second_interval=5))
        record = make_record()

        first = scheduler.process_review(record, _response(5), now)
        second = scheduler.process_review(first, _response(5), now)

        assert (first.interval, second.interval) == (2, 5)

    def test_long_run_of_perfect_reviews_is_capped(self, scheduler, now):
        record = scheduler.initialize("w:nihao", now)
        for _ in range(40):
            record = scheduler.process_review(record, _response(5), now)

        assert record.interval == 36500
        assert record.due_date == now + timedelta(days=36500)
        assert record.total_reviews == 40

    def test_oversized_interval_is_clamped(self, scheduler, make_record, now):
        record = make_record(repetitions=5, interval=10**9, ease_factor=2.5)

        updated = scheduler.process_review(record, _response(4), now)

        assert updated.interval == scheduler.config.max_interval

    def test_custom_interval_cap(self, make_record, now):
        scheduler = SM2Scheduler(SM2Config(max_interval=30))
        record = make_record(repetitions=4, interval=20, ease_factor=2.5)

        assert scheduler.process_review(record, _response(5), now).interval == 30


class TestEaseFactor:
    @pytest.mark.parametrize(
        "quality, delta",
        [(5, 0.1), (4, 0.0), (3, -0.14), (2, -0.32), (1, -0.54), (0, -0.8)],
    )
    def test_ease_delta_per_quality(self, scheduler, make_record, now, quality, delta):
        record = make_record(ease_factor=2.5)

        updated = scheduler.process_review(record, _response(quality), now)

        assert updated.ease_factor == pytest.approx(2.5 + delta)

    def test_ease_floor_holds_for_repeated_blackouts(self, scheduler, make_record, now):
        record = make_record()
        for day in range(12):
            record = scheduler.process_review(record, _response(0, correct=False), now + timedelta(days=day))
            assert record.ease_factor >= 1.3

        assert record.ease_factor == pytest.approx(1.3)

    def test_ease_has_no_ceiling(self, scheduler, make_record, now):
        record = make_record(ease_factor=3.5)

        updated = scheduler.process_review(record, _response(5), now)

        assert updated.ease_factor == pytest.approx(3.6)


class TestRecordBookkeeping:
    def test_due_date_matches_interval(self, scheduler, make_record, now):
        record = make_record()
        qualities = [5, 4, 3, 1, 5, 5, 2, 4, 5, 5]
        at = now
        for quality in qualities:
            record = scheduler.process_review(record, _response(quality, correct=quality >= 3), at)
            assert record.last_reviewed == at
            assert record.due_date == record.last_reviewed + timedelta(days=record.interval)
            at = record.due_date

    def test_counters(self, scheduler, make_record, now):
        record = make_record()
        record = scheduler.process_review(record, _response(5), now)
        record = scheduler.process_review(record, _response(4), now)
        record = scheduler.process_review(record, _response(1, correct=False), now)
        record = scheduler.process_review(record, _response(3), now)

        assert record.total_reviews == 4
        assert record.correct_reviews == 3
        assert record.streak == 1

    def test_input_record_is_not_modified(self, scheduler, make_record, now):
        record = make_record(repetitions=2, interval=6)

        scheduler.process_review(record, _response(5), now)

        assert record.repetitions == 2
        assert record.interval == 6
        assert record.total_reviews == 0

    def test_difficulty_recomputed(self, scheduler, make_record, now):
        record = make_record()
        for _ in range(3):
            record = scheduler.process_review(record, _response(5), now)

        assert record.difficulty == Difficulty.EASY

        record = scheduler.process_review(record, _response(0, correct=False), now)
        assert record.difficulty == Difficulty.HARD

    def test_naive_now_is_treated_as_utc(self, scheduler, make_record, now):
        record = make_record()

        updated = scheduler.process_review(record, _response(5), now.replace(tzinfo=None))

        assert updated.last_reviewed == now


class TestClampQuality:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            (3, 3),
            (7, 5),
            (-2, 0),
            (3.6, 4),
            (2.5, 3),
            ("4", 4),
            ("abc", 0),
            (None, 0),
            (float("nan"), 0),
            (float("inf"), 5),
        ],
    )
    def test_clamp(self, raw, expected):
        assert clamp_quality(raw) == expected

    def test_out_of_range_quality_does_not_raise(self, scheduler, make_record, now):
        record = make_record()

        high = scheduler.process_review(record, _response(11), now)
        low = scheduler.process_review(record, _response(-4, correct=False), now)

        assert high.ease_factor == pytest.approx(2.6)
        assert low.ease_factor == pytest.approx(1.7)
        assert low.repetitions == 0


class TestPredictMasteryDate:
    def test_new_item_graduates_after_three_reviews(self, scheduler, now):
        record = scheduler.initialize("w:nihao", now)

        # Reviews on day 0 (+1), day 1 (+6), day 7 (+15)
        assert scheduler.predict_mastery_date(record, now) == now + timedelta(days=22)

    def test_already_graduated_item_returns_due_date(self, scheduler, make_record, now):
        record = make_record(repetitions=4, due_date=now + timedelta(days=9))

        assert scheduler.predict_mastery_date(record, now) == now + timedelta(days=9)

    def test_prediction_does_not_touch_record(self, scheduler, now):
        record = scheduler.initialize("w:nihao", now)

        scheduler.predict_mastery_date(record, now)

        assert record.total_reviews == 0


class TestGradeFromResponse:
    @pytest.mark.parametrize(
        "is_correct, response_ms, grade",
        [
            (True, 2000, 5),
            (True, 7000, 4),
            (True, 15000, 3),
            (False, 2000, 2),
            (False, 7000, 1),
            (False, 15000, 0),
        ],
    )
    def test_grades(self, scheduler, is_correct, response_ms, grade):
        assert scheduler.grade_from_response(is_correct, response_ms) == grade
