"""Tests for event classification."""

from tweetstream import (
    DeletionNotice,
    DirectMessage,
    LimitNotice,
    Status,
    Unrecognized,
    classify,
)

STATUS = {
    "id": 7,
    "text": "hello",
    "created_at": "Mon Oct 05 12:00:00 +0000 2009",
    "user": {"id": 42, "screen_name": "alice", "name": "Alice"},
}


class TestClassify:
    """Tests for each event shape."""

    def test_status(self) -> None:
        event = classify(STATUS)
        assert isinstance(event, Status)
        assert event.id == 7
        assert event.text == "hello"
        assert event.user.id == 42
        assert event.user.screen_name == "alice"
        assert event.created_at == "Mon Oct 05 12:00:00 +0000 2009"
        assert event.get("missing") is None
        assert "user" in event

    def test_deletion_notice(self) -> None:
        event = classify({"delete": {"status": {"id": 1234, "user_id": 3}}})
        assert event == DeletionNotice(status_id=1234, user_id=3)

    def test_limit_notice(self) -> None:
        event = classify({"limit": {"track": 1234}})
        assert event == LimitNotice(discarded_count=1234)

    def test_limit_notice_zero(self) -> None:
        assert classify({"limit": {"track": 0}}) == LimitNotice(discarded_count=0)

    def test_direct_message(self) -> None:
        event = classify(
            {
                "direct_message": {
                    "id": 5,
                    "text": "hi",
                    "sender": {"id": 1, "screen_name": "bob"},
                    "recipient": {"id": 2, "screen_name": "alice"},
                }
            }
        )
        assert isinstance(event, DirectMessage)
        assert event.id == 5
        assert event["text"] == "hi"
        assert event.sender is not None and event.sender.id == 1
        assert event.recipient is not None and event.recipient.screen_name == "alice"

    def test_unrecognized(self) -> None:
        event = classify({"friends": [1, 2]})
        assert isinstance(event, Unrecognized)
        assert event.raw == {"friends": [1, 2]}


class TestPriority:
    """Tests for precedence when an object carries several shapes."""

    def test_delete_beats_everything(self) -> None:
        obj = {
            "delete": {"status": {"id": 1, "user_id": 2}},
            "limit": {"track": 5},
            "direct_message": {"id": 3},
            **STATUS,
        }
        assert isinstance(classify(obj), DeletionNotice)

    def test_limit_beats_direct_message_and_status(self) -> None:
        obj = {"limit": {"track": 5}, "direct_message": {"id": 3}, **STATUS}
        assert isinstance(classify(obj), LimitNotice)

    def test_direct_message_beats_status(self) -> None:
        obj = {"direct_message": {"id": 3}, **STATUS}
        assert isinstance(classify(obj), DirectMessage)


class TestShapeMismatch:
    """Malformed shapes fall through to the next candidate."""

    def test_delete_without_status_falls_through(self) -> None:
        obj = {"delete": {"direct_message": {"id": 1}}, **STATUS}
        assert isinstance(classify(obj), Status)

    def test_limit_without_track(self) -> None:
        assert isinstance(classify({"limit": {"follow": 3}}), Unrecognized)

    def test_limit_with_non_numeric_track(self) -> None:
        assert isinstance(classify({"limit": {"track": "lots"}}), Unrecognized)

    def test_direct_message_not_an_object(self) -> None:
        assert isinstance(classify({"direct_message": "nope"}), Unrecognized)

    def test_text_without_user(self) -> None:
        assert isinstance(classify({"text": "hello"}), Unrecognized)

    def test_null_user(self) -> None:
        assert isinstance(classify({"text": "hello", "user": None}), Unrecognized)

    def test_user_not_an_object(self) -> None:
        assert isinstance(classify({"text": "hello", "user": 42}), Unrecognized)

    def test_empty_text_is_still_a_status(self) -> None:
        assert isinstance(classify({"text": "", "user": {"id": 1}}), Status)
