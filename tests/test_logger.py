from persistguard.utils.logger import GuardianLogger


def test_events_are_recorded_newest_first(tmp_path):
    logger = GuardianLogger(db_path=str(tmp_path / "events.db"), log_file=str(tmp_path / "pg.log"))

    logger.log_event("baseline_captured", {"snapshot_id": "abc", "item_count": 3})
    logger.log_event("snapshot_diff", {"summary": "1 added"})

    events = logger.recent_events()
    assert [e["event_type"] for e in events] == ["snapshot_diff", "baseline_captured"]
    assert events[1]["details"] == {"snapshot_id": "abc", "item_count": 3}


def test_db_failure_is_logged_not_raised(tmp_path, caplog):
    # a directory cannot be opened as the event database
    logger = GuardianLogger(db_path=str(tmp_path), log_file=str(tmp_path / "pg.log"))
    logger.log_event("snapshot_diff", {"summary": "No changes"})
    assert "Failed to log to DB" in caplog.text


def test_unserialisable_details_do_not_raise(tmp_path):
    logger = GuardianLogger(db_path=str(tmp_path / "events.db"), log_file=str(tmp_path / "pg.log"))

    logger.log_event("baseline_captured", {"path": tmp_path, "ids": {"a"}})

    details = logger.recent_events()[0]["details"]
    assert details["path"] == str(tmp_path)
    assert details["ids"] == "{'a'}"
