import pytest
import os
import sys
from unittest.mock import MagicMock, patch
from datetime import datetime, timedelta

# Add project root to Python Path so modules can be imported
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from moodjournal.core.models import MoodCategory, MoodEntry

# Monday
BASE_TIME = datetime(2024, 6, 3, 10, 0)

# ============================================================================
# 1. GLOBAL ENVIRONMENT
# ============================================================================

@pytest.fixture(autouse=True)
def mock_env_vars(tmp_path):
    """Isolates every test from the developer's .env and MongoDB settings."""
    with patch.dict(os.environ, {"LOG_DIR": str(tmp_path / "logs")}):
        for key in ("MONGODB_URI", "MOODJOURNAL_DB", "MOODJOURNAL_PRO_FEATURES", "MOODJOURNAL_SEED"):
            os.environ.pop(key, None)
        yield

@pytest.fixture
def mock_collection():
    """Stands in for a pymongo collection."""
    collection = MagicMock()
    cursor = MagicMock()
    cursor.sort.return_value = cursor
    cursor.__iter__.return_value = iter([])
    collection.find.return_value = cursor
    return collection

# ============================================================================
# 2. ENTRY FACTORIES
# ============================================================================

@pytest.fixture
def make_entry():
    """make_entry(mood, day_offset=0, hour=10, text=None) relative to Monday 2024-06-03."""
    def _make(mood, day_offset=0, hour=10, text=None):
        when = (BASE_TIME + timedelta(days=day_offset)).replace(hour=hour)
        return MoodEntry.create(mood, text=text, timestamp=when)
    return _make

@pytest.fixture
def daily_entries(make_entry):
    """One entry per consecutive day, starting Monday, at 10:00."""
    def _make(moods, hour=10):
        return [make_entry(mood, day_offset=i, hour=hour) for i, mood in enumerate(moods)]
    return _make

@pytest.fixture
def happy_week(daily_entries):
    """H,H,H,N,H,H,H at 10:00, Monday to Sunday."""
    H, N = MoodCategory.HAPPY, MoodCategory.NORMAL
    return daily_entries([H, H, H, N, H, H, H])
