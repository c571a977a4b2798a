from pathlib import Path

import pytest
from loguru import logger
from PIL import Image


class FakeTag:
    """Stand-in for an exifread IfdTag."""

    def __init__(self, values):
        self.values = values

    def __str__(self):
        return str(self.values)


class FakeLocation:
    def __init__(self, raw):
        self.raw = raw


class FakeGeocoder:
    """Records reverse() calls and replays canned results."""

    def __init__(self, results):
        self.results = list(results)
        self.calls = []

    def reverse(self, query, **kwargs):
        self.calls.append((query, kwargs))
        result = self.results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


def gps_tags(lat=(40, 26, 46), lat_ref='N', lon=(79, 58, 56), lon_ref='W'):
    tags = {
        'GPS GPSLatitude': FakeTag(list(lat)),
        'GPS GPSLongitude': FakeTag(list(lon)),
    }
    if lat_ref is not None:
        tags['GPS GPSLatitudeRef'] = FakeTag(lat_ref)
    if lon_ref is not None:
        tags['GPS GPSLongitudeRef'] = FakeTag(lon_ref)
    return tags


@pytest.fixture
def make_image(tmp_path):
    """Create a small JPEG file and return its path."""

    def _make(name='photo.jpg', size=(64, 48), folder: Path = None):
        folder = folder or tmp_path
        path = folder / name
        Image.new('RGB', size, color=(200, 120, 40)).save(path, format='JPEG')
        return path

    return _make


@pytest.fixture
def cache_path(tmp_path):
    folder = tmp_path / 'cache'
    folder.mkdir()
    return folder / 'nameforge_cache.json'


@pytest.fixture
def log_messages():
    """Collect formatted loguru messages emitted during the test."""
    messages = []
    handler_id = logger.add(lambda message: messages.append(message.rstrip('\n')),
                            format="{message}", level="DEBUG")
    yield messages
    logger.remove(handler_id)


class FakeResponse:
    def __init__(self, payload=None, status_code=200, text=''):
        self.payload = payload
        self.status_code = status_code
        self.text = text

    def json(self):
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload


class FakeSession:
    """Replays canned responses or transport errors for post()."""

    def __init__(self, outcomes):
        self.outcomes = list(outcomes)
        self.calls = []

    def post(self, url, json=None, timeout=None):
        self.calls.append({'url': url, 'json': json, 'timeout': timeout})
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome
