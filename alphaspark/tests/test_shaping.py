import random
import unittest
from datetime import datetime, timedelta, timezone

from alphaspark.records import CommentRecord, QuestionRecord, ResponseRecord
from alphaspark.shaping import (
    EARLIEST,
    group_comments,
    parse_timestamp,
    select_question,
    sort_responses,
)


def _question(doc_id, is_active):
    return QuestionRecord(id=doc_id, question=f"question {doc_id}", is_active=is_active)


def _response(doc_id, created_at):
    return ResponseRecord(
        id=doc_id, question_id="q", group_id="g", created_at=created_at
    )


def _comment(doc_id, response_id, created_at):
    return CommentRecord(
        id=doc_id,
        response_id=response_id,
        question_id="q",
        group_id="g",
        created_at=created_at,
    )


class ParseTimestampTests(unittest.TestCase):
    def test_iso_strings(self):
        self.assertEqual(
            parse_timestamp("2025-03-01T09:15:00Z"),
            datetime(2025, 3, 1, 9, 15, tzinfo=timezone.utc),
        )
        self.assertEqual(
            parse_timestamp("2025-03-01T10:15:00+01:00"),
            datetime(2025, 3, 1, 9, 15, tzinfo=timezone.utc),
        )

    def test_naive_values_are_utc(self):
        self.assertEqual(
            parse_timestamp(datetime(2025, 3, 1, 9, 15)),
            datetime(2025, 3, 1, 9, 15, tzinfo=timezone.utc),
        )
        self.assertEqual(
            parse_timestamp("2025-03-01"),
            datetime(2025, 3, 1, tzinfo=timezone.utc),
        )

    def test_epoch_milliseconds(self):
        self.assertEqual(
            parse_timestamp(1_700_000_000_000),
            datetime.fromtimestamp(1_700_000_000, tz=timezone.utc),
        )

    def test_unusable_values_sort_first(self):
        for value in (None, "", "yesterday", True, {"seconds": 1}):
            self.assertEqual(parse_timestamp(value), EARLIEST)


class SelectQuestionTests(unittest.TestCase):
    def test_empty_input(self):
        self.assertIsNone(select_question([]))

    def test_always_active_when_any_active(self):
        rng = random.Random(7)
        for _ in range(200):
            size = rng.randint(1, 8)
            questions = [_question(f"q{i}", rng.random() < 0.4) for i in range(size)]
            if not any(q.is_active for q in questions):
                questions.append(_question("forced", True))
            selected = select_question(questions, rng=rng)
            self.assertIs(selected.is_active, True)

    def test_falls_back_to_full_set(self):
        rng = random.Random(11)
        questions = [_question(f"q{i}", False) for i in range(4)]
        seen = {select_question(questions, rng=rng).id for _ in range(200)}
        self.assertEqual(seen, {"q0", "q1", "q2", "q3"})

    def test_active_choice_is_spread_over_active_subset(self):
        rng = random.Random(3)
        questions = [
            _question("a", True),
            _question("b", False),
            _question("c", True),
        ]
        seen = {select_question(questions, rng=rng).id for _ in range(200)}
        self.assertEqual(seen, {"a", "c"})


class ShapeResponsesTests(unittest.TestCase):
    def test_newest_first_with_mixed_types(self):
        base = datetime(2025, 3, 1, tzinfo=timezone.utc)
        responses = [
            _response("iso", "2025-03-02T00:00:00Z"),
            _response("dt", base + timedelta(days=3)),
            _response("missing", None),
            _response("millis", int((base + timedelta(hours=12)).timestamp() * 1000)),
        ]
        ordered = sort_responses(responses)
        self.assertEqual([r.id for r in ordered], ["dt", "iso", "millis", "missing"])

    def test_non_increasing_order(self):
        rng = random.Random(5)
        base = datetime(2025, 1, 1, tzinfo=timezone.utc)
        responses = [
            _response(f"r{i}", base + timedelta(minutes=rng.randint(0, 50)))
            for i in range(40)
        ]
        ordered = sort_responses(responses)
        stamps = [parse_timestamp(r.created_at) for r in ordered]
        self.assertEqual(stamps, sorted(stamps, reverse=True))

    def test_ties_keep_input_order(self):
        stamp = "2025-03-01T00:00:00Z"
        responses = [_response("first", stamp), _response("second", stamp)]
        self.assertEqual([r.id for r in sort_responses(responses)], ["first", "second"])


class GroupCommentsTests(unittest.TestCase):
    def test_grouped_oldest_first(self):
        comments = [
            _comment("c1", "r2", "2025-03-02T12:00:00Z"),
            _comment("c2", "r1", "2025-03-01T12:00:00Z"),
            _comment("c3", "r2", "2025-03-02T10:00:00Z"),
        ]
        grouped = group_comments(comments)
        self.assertEqual(list(grouped), ["r1", "r2"])
        self.assertEqual([c.id for c in grouped["r2"]], ["c3", "c1"])
        self.assertEqual([c.id for c in grouped["r1"]], ["c2"])

    def test_every_comment_under_its_own_response(self):
        rng = random.Random(9)
        base = datetime(2025, 1, 1, tzinfo=timezone.utc)
        comments = [
            _comment(
                f"c{i}",
                f"r{rng.randint(0, 4)}",
                base + timedelta(minutes=rng.randint(0, 30)),
            )
            for i in range(60)
        ]
        grouped = group_comments(comments)
        flattened = [c for thread in grouped.values() for c in thread]
        self.assertEqual(sorted(c.id for c in flattened), sorted(c.id for c in comments))
        for response_id, thread in grouped.items():
            self.assertTrue(all(c.response_id == response_id for c in thread))
            stamps = [parse_timestamp(c.created_at) for c in thread]
            self.assertEqual(stamps, sorted(stamps))

    def test_ties_keep_input_order(self):
        stamp = "2025-03-01T00:00:00Z"
        comments = [_comment("x", "r", stamp), _comment("y", "r", stamp)]
        self.assertEqual([c.id for c in group_comments(comments)["r"]], ["x", "y"])


if __name__ == "__main__":
    unittest.main()
