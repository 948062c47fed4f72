"""
Root entry point for MoodJournal Insights.
Bootstraps the moodjournal package and runs the report CLI.
"""

import sys
import os

# Ensure the project root is in python path
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from moodjournal.main import main

if __name__ == "__main__":
    sys.exit(main())
