"""
Tests for the activity logger.
"""

import pytest

from fintrack.audit import ActivityLogger
from fintrack.models.activity import ActivityEventType, ActivitySeverity


class TestActivityLogger:
    
    def test_recent_is_newest_first(self):
        activity = ActivityLogger()
        activity.log_login()
        activity.log_snapshot_pushed(3)
        
        types = [e.event_type for e in activity.recent()]
        assert types == [ActivityEventType.SNAPSHOT_PUSHED, ActivityEventType.LOGIN]
        assert len(activity.recent(limit=1)) == 1
    
    def test_history_is_bounded(self):
        activity = ActivityLogger(history_size=2)
        for i in range(5):
            activity.log_project_created(f"p{i}", f"Project {i}")
        assert [e.entity_id for e in activity.recent()] == ["p4", "p3"]
    
    def test_failures_are_errors(self):
        activity = ActivityLogger()
        activity.log_auth_failed("consent denied")
        event = activity.recent()[0]
        assert event.severity == ActivitySeverity.ERROR
        assert event.error_message == "consent denied"
    
    def test_snapshot_pulled_details(self):
        activity = ActivityLogger()
        activity.log_snapshot_pulled(projects=1, transactions=5, categories=9)
        assert activity.recent()[0].details == {
            "projects": 1,
            "transactions": 5,
            "categories": 9,
        }


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
