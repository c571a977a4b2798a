import json
import os
from datetime import datetime
from pathlib import Path

import pytest
from PIL import Image

from conftest import FakeGeocoder, FakeLocation, FakeResponse, FakeSession, gps_tags
from nameforge import core
from nameforge.config import RenameOptions
from nameforge.core import ImageRenamer
from nameforge.describer import ContentDescriber
from nameforge.geo import GeoResolver


class FakeDescriber:
    def __init__(self, names):
        self.names = list(names)
        self.calls = []

    def describe(self, image_path, model, max_chars, case, language):
        self.calls.append((image_path, model, max_chars, case, language))
        return self.names.pop(0)


def set_mtime(path, moment):
    timestamp = moment.timestamp()
    os.utime(path, (timestamp, timestamp))


@pytest.fixture
def photos(tmp_path):
    folder = tmp_path / 'photos'
    folder.mkdir()
    return folder


def names_in(folder):
    return sorted(p.name for p in folder.iterdir())


def test_no_gps_without_date(photos, make_image, cache_path):
    images = [make_image('IMG_1.jpg', folder=photos), make_image('IMG_2.jpg', folder=photos)]
    renamer = ImageRenamer(RenameOptions(no_date=True), cache_path=cache_path)

    summary = renamer.process(photos, images)

    assert names_in(photos) == ['NoGPS.jpg', 'NoGPS_1.jpg']
    assert summary.processed == 2
    assert summary.renamed == 2
    assert not cache_path.exists()


def test_date_from_file_time(photos, make_image, cache_path):
    image = make_image('IMG_1.jpg', folder=photos)
    set_mtime(image, datetime(2023, 5, 4, 10, 11, 12))
    options = RenameOptions(date_only=True, use_file_date=True, prefer_modified=True)

    ImageRenamer(options, cache_path=cache_path).process(photos, [image])

    assert names_in(photos) == ['2023-05-04_NoGPS.jpg']


def test_place_names_and_cache_persistence(photos, make_image, cache_path, monkeypatch):
    images = [make_image('IMG_1.jpg', folder=photos), make_image('IMG_2.jpg', folder=photos)]
    monkeypatch.setattr(core, 'read_exif', lambda path: gps_tags())
    geocoder = FakeGeocoder([FakeLocation({'display_name': 'Pittsburgh, Pennsylvania, USA'})])
    renamer = ImageRenamer(RenameOptions(no_date=True), resolver=GeoResolver(geocoder=geocoder),
                           cache_path=cache_path)

    renamer.process(photos, images)

    assert names_in(photos) == ['Pittsburgh.jpg', 'Pittsburgh_1.jpg']
    assert len(geocoder.calls) == 1
    assert list(json.loads(cache_path.read_text(encoding='utf-8')).values()) == ['Pittsburgh']


def test_dry_run_leaves_files_but_warms_cache(photos, make_image, cache_path, monkeypatch):
    image = make_image('IMG_1.jpg', folder=photos)
    monkeypatch.setattr(core, 'read_exif', lambda path: gps_tags())
    geocoder = FakeGeocoder([FakeLocation({'display_name': 'Pittsburgh'})])
    options = RenameOptions(dry_run=True, no_date=True)

    summary = ImageRenamer(options, resolver=GeoResolver(geocoder=geocoder),
                           cache_path=cache_path).process(photos, [image])

    assert names_in(photos) == ['IMG_1.jpg']
    assert summary.renamed == 1
    assert cache_path.exists()


def test_max_images_stops_early(photos, make_image, cache_path):
    images = [make_image(f'IMG_{i}.jpg', folder=photos) for i in range(3)]
    options = RenameOptions(no_date=True, max_images=2)

    summary = ImageRenamer(options, cache_path=cache_path).process(photos, images)

    assert summary.processed == 2
    assert names_in(photos) == ['IMG_2.jpg', 'NoGPS.jpg', 'NoGPS_1.jpg']


def test_organize_by_date(photos, make_image, cache_path):
    image = make_image('IMG_1.jpg', folder=photos)
    set_mtime(image, datetime(2023, 5, 4, 10, 11, 12))
    options = RenameOptions(organize_by_date=True, date_only=True, prefer_modified=True)

    ImageRenamer(options, cache_path=cache_path).process(photos, [image])

    assert (photos / '2023-05-04' / '2023-05-04_NoGPS.jpg').exists()
    assert not image.exists()


def test_organize_without_date_uses_unknown_folder(photos, make_image, cache_path):
    image = make_image('IMG_1.jpg', folder=photos)
    options = RenameOptions(organize_by_date=True, no_date=True)

    ImageRenamer(options, cache_path=cache_path).process(photos, [image])

    assert (photos / 'unknown-date' / 'NoGPS.jpg').exists()


def test_ai_name(photos, make_image, cache_path):
    image = make_image('IMG_1.jpg', folder=photos)
    describer = FakeDescriber(['cat_on_carpet'])
    options = RenameOptions(ai_content=True, no_date=True, ai_case='snake_case', ai_max_chars=30)

    ImageRenamer(options, describer=describer, cache_path=cache_path).process(photos, [image])

    assert names_in(photos) == ['cat_on_carpet.jpg']
    assert describer.calls == [(image, 'llava:13b', 30, 'snake_case', 'English')]


def test_ai_failure_falls_back_to_timestamp(photos, make_image, cache_path):
    image = make_image('IMG_1.jpg', folder=photos)
    set_mtime(image, datetime(2023, 5, 4, 10, 11, 12))
    options = RenameOptions(ai_content=True, date_only=True, prefer_modified=True)

    ImageRenamer(options, describer=FakeDescriber([None]),
                 cache_path=cache_path).process(photos, [image])

    assert names_in(photos) == ['2023-05-04_2023-05-04_10-11-12.jpg']


def test_ai_failure_without_any_date_uses_now(make_image, cache_path, monkeypatch):
    image = make_image('IMG_1.jpg')
    monkeypatch.setattr(core, 'resolve_date', lambda *args, **kwargs: None)
    renamer = ImageRenamer(RenameOptions(ai_content=True), describer=FakeDescriber([None]),
                           cache_path=cache_path)
    record = renamer.build_record(image, None)

    content = renamer.ai_content(record, None)

    assert datetime.strptime(content, '%Y-%m-%d_%H-%M-%S')


def test_rename_failure_continues(photos, make_image, cache_path, monkeypatch):
    images = [make_image('IMG_1.jpg', folder=photos), make_image('IMG_2.jpg', folder=photos)]
    real_rename = Path.rename

    def flaky_rename(self, target):
        if self.name == 'IMG_1.jpg':
            raise OSError('read-only')
        return real_rename(self, target)

    monkeypatch.setattr(Path, 'rename', flaky_rename)
    summary = ImageRenamer(RenameOptions(no_date=True), cache_path=cache_path).process(photos, images)

    assert summary.failed == 1
    assert summary.renamed == 1
    assert names_in(photos) == ['IMG_1.jpg', 'NoGPS.jpg']


def test_file_without_extension_is_skipped(tmp_path, cache_path):
    path = tmp_path / 'README'
    path.write_bytes(b'\xff\xd8\xff\xe0')

    summary = ImageRenamer(RenameOptions(), cache_path=cache_path).process(tmp_path, [path])

    assert summary.failed == 1
    assert path.exists()


def test_oversized_image_does_not_stop_the_batch(photos, make_image, cache_path, monkeypatch):
    big = make_image('IMG_1.jpg', size=(64, 48), folder=photos)
    small = make_image('IMG_2.jpg', size=(10, 10), folder=photos)
    # 64x48 is over twice this limit, which makes Pillow refuse to open it
    monkeypatch.setattr(Image, 'MAX_IMAGE_PIXELS', 1000)
    describer = ContentDescriber(session=FakeSession([FakeResponse({'response': 'tiny square'})]),
                                 sleep=lambda seconds: None)
    options = RenameOptions(ai_content=True, no_date=True)

    summary = ImageRenamer(options, describer=describer, cache_path=cache_path).process(photos, [big, small])

    assert summary.processed == 2
    assert summary.renamed == 2
    assert len(describer.session.calls) == 1
    names = names_in(photos)
    assert 'tiny_square.jpg' in names
    assert 'IMG_1.jpg' not in names and 'IMG_2.jpg' not in names


class ExplodingDescriber:
    def describe(self, *args):
        raise RuntimeError('model crashed')


def test_unexpected_error_skips_file_and_continues(photos, make_image, cache_path, log_messages):
    images = [make_image('IMG_1.jpg', folder=photos), make_image('IMG_2.jpg', folder=photos)]
    options = RenameOptions(ai_content=True, no_date=True)

    summary = ImageRenamer(options, describer=ExplodingDescriber(),
                           cache_path=cache_path).process(photos, images)

    assert summary.processed == 2
    assert summary.failed == 2
    assert names_in(photos) == ['IMG_1.jpg', 'IMG_2.jpg']
    assert f"Error processing {images[0]}: model crashed" in log_messages


def test_cache_saved_when_a_later_step_fails(photos, make_image, cache_path, monkeypatch):
    image = make_image('IMG_1.jpg', folder=photos)
    monkeypatch.setattr(core, 'read_exif', lambda path: gps_tags())

    def broken_allocate(*args):
        raise OSError('disk gone')

    monkeypatch.setattr(core, 'allocate_filename', broken_allocate)
    geocoder = FakeGeocoder([FakeLocation({'display_name': 'Pittsburgh'})])

    summary = ImageRenamer(RenameOptions(no_date=True), resolver=GeoResolver(geocoder=geocoder),
                           cache_path=cache_path).process(photos, [image])

    assert summary.failed == 1
    assert list(json.loads(cache_path.read_text(encoding='utf-8')).values()) == ['Pittsburgh']
