"""Scenario tests for ImageSession: notices and keeping the last good image."""

import logging
from unittest.mock import Mock

import pytest

from exceptions import ValidationError
from models import Variant
from session import (
    MSG_BUSY,
    MSG_DOWNLOADED,
    MSG_EMPTY_TEXT,
    MSG_FAILED,
    MSG_GENERATED,
    MSG_NO_IMAGE,
    MSG_UPLOADED,
    ImageSession,
)


@pytest.fixture
def session(generator):
    return ImageSession(generator)


def test_generate_success_sets_current(session):
    session.set_text("Hello World")
    notice = session.generate()

    assert notice.ok
    assert notice.message == MSG_GENERATED
    assert session.current is not None
    assert session.current.layout.lines == ["Hello World"]
    assert (session.current.width, session.current.height) == (1200, 630)


def test_empty_text_gives_validation_notice(session):
    session.set_text("   ")
    notice = session.generate()

    assert notice.level == "error"
    assert notice.message == MSG_EMPTY_TEXT
    assert session.current is None


def test_corrupt_upload_keeps_previous_image(session):
    session.set_text("First version")
    assert session.generate().ok
    previous = session.current

    assert session.upload_background(b"\x00\x01 corrupt bytes").message == MSG_UPLOADED
    notice = session.generate()

    assert notice.level == "error"
    assert notice.message == MSG_FAILED
    assert session.current is previous


def test_validation_failure_keeps_previous_image(session):
    session.set_text("Keep me")
    session.generate()
    previous = session.current

    session.set_text("")
    session.generate()

    assert session.current is previous


def test_unexpected_error_is_logged_and_reported(caplog):
    generator = Mock()
    generator.generate_featured_image.side_effect = RuntimeError("boom")
    session = ImageSession(generator)
    session.set_text("Hello")

    with caplog.at_level(logging.ERROR):
        notice = session.generate()

    assert notice.message == MSG_FAILED
    assert session.current is None
    assert "boom" in caplog.text


def test_new_generation_replaces_current(session):
    session.set_text("One")
    session.generate()
    first = session.current

    session.set_text("Two")
    session.generate()

    assert session.current is not first
    assert session.current.layout.lines == ["Two"]


def test_reentry_is_refused(session):
    session.set_text("Busy")
    session._lock.acquire()
    try:
        assert session.is_generating
        notice = session.generate()
    finally:
        session._lock.release()

    assert notice.level == "warning"
    assert notice.message == MSG_BUSY
    assert session.current is None
    assert not session.is_generating


def test_photo_upload_is_used(session, make_photo):
    session.set_text("With photo")
    session.upload_background(bytearray(make_photo((640, 480))))

    assert isinstance(session.background, bytes)
    assert session.generate().ok

    session.clear_background()
    assert session.background is None
    assert session.build_request().background is None


def test_download_requires_image(session):
    notice, image = session.download()
    assert image is None
    assert notice.message == MSG_NO_IMAGE

    session.set_text("Ready")
    session.generate()
    notice, image = session.download()
    assert image is session.current
    assert notice.message == MSG_DOWNLOADED


def test_style_and_variant_flow_into_request(session):
    session.set_variant("banner")
    session.set_category("  release   notes ")
    session.set_style("banner_color", "#336699")
    session.set_text("Version two")

    request = session.build_request()
    assert request.variant is Variant.BANNER
    assert request.category == "release notes"
    assert request.style.banner_color == (0x33, 0x66, 0x99)

    session.reset_style()
    assert session.build_request().style.banner_color != (0x33, 0x66, 0x99)


def test_bad_style_value_raises(session):
    with pytest.raises(ValidationError):
        session.set_style("text_color", "nope")
    with pytest.raises(ValidationError):
        session.set_variant("sepia")


def test_padding_does_not_shrink_headline(session):
    session.set_text("  Hello" + " " * 60 + "\n\nWorld  ")
    session.generate()

    assert session.text == "Hello World"
    assert session.current.layout.font_size == 72
    assert session.current.layout.lines == ["Hello World"]
