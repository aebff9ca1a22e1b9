"""
Pytest configuration and fixtures for all tests.
"""

import os
import sys

import pytest

# Project root on sys.path before importing application modules
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from utils.observers import RecordingAttemptObserver


@pytest.fixture
def observer():
    return RecordingAttemptObserver()
