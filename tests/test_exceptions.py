"""Tests for the error taxonomy and error translation."""

import os

import pytest

from zkclient.dispatch import ErrorTranslator, find_call_site
from zkclient.exceptions import (
    BadVersionError,
    CallSite,
    Code,
    KeeperError,
    NoNodeError,
    NotEmptyError,
    SessionExpiredError,
    ZkClientError,
    error_for_code,
    is_recognized_code,
)
from zkclient.transport import TransportError


class TestTaxonomy:
    """Tests for the code to error mapping."""

    def test_every_code_has_an_error(self):
        """Every non-OK code maps to a KeeperError subclass carrying it."""
        for code in Code:
            if code == Code.OK:
                assert not is_recognized_code(code)
                continue
            error = error_for_code(code)
            assert isinstance(error, KeeperError)
            assert error.code == code

    def test_distinct_classes(self):
        """No two codes share an error class."""
        classes = {type(error_for_code(code)) for code in Code if code != Code.OK}
        assert len(classes) == len(Code) - 1

    def test_known_codes(self):
        assert type(error_for_code(-101)) is NoNodeError
        assert type(error_for_code(-103)) is BadVersionError
        assert type(error_for_code(-111)) is NotEmptyError
        assert type(error_for_code(-112)) is SessionExpiredError

    def test_unknown_code(self):
        assert not is_recognized_code(-999)
        assert not is_recognized_code(None)
        assert not is_recognized_code(True)
        with pytest.raises(KeyError):
            error_for_code(-999)

    def test_message_includes_context(self):
        """Message names the operation, path, code and call site."""
        site = CallSite("app.py", 12, "main")
        error = NoNodeError(path="/missing", operation="get", call_site=site)

        message = str(error)
        assert "get /missing" in message
        assert "-101" in message
        assert "app.py:12 in main" in message
        assert error.path == "/missing"
        assert error.operation == "get"
        assert error.call_site == site

    def test_hierarchy(self):
        assert issubclass(NoNodeError, KeeperError)
        assert issubclass(KeeperError, ZkClientError)


class TestErrorTranslator:
    """Tests for ErrorTranslator."""

    def test_translate_recognized(self):
        """A failure with a recognized code becomes its named error."""
        cause = TransportError(Code.NO_NODE)
        error = ErrorTranslator().translate(cause, "get", "/a")

        assert isinstance(error, NoNodeError)
        assert error.path == "/a"
        assert error.operation == "get"
        assert error.__cause__ is cause

    def test_unrecognized_propagates_unchanged(self):
        """Failures without a recognized code are re-raised as they are."""
        cause = RuntimeError("boom")
        with pytest.raises(RuntimeError) as info:
            ErrorTranslator().translate(cause, "get", "/a")
        assert info.value is cause

        odd = TransportError(-999)
        with pytest.raises(TransportError) as info:
            ErrorTranslator().translate(odd, "get", "/a")
        assert info.value is odd

    def test_error_for(self):
        translator = ErrorTranslator()
        assert translator.error_for(-999, "get") is None

        error = translator.error_for(Code.BAD_VERSION, "set", "/a")
        assert isinstance(error, BadVersionError)

    def test_call_site_is_outside_package(self):
        """The recorded call site is this test, not a zkclient frame."""
        error = ErrorTranslator().error_for(Code.NO_NODE, "get", "/a")

        assert error.call_site is not None
        assert os.path.abspath(error.call_site.filename) == os.path.abspath(__file__)
        assert error.call_site.function == "test_call_site_is_outside_package"

    def test_find_call_site(self):
        site = find_call_site()
        assert site is not None
        assert site.function == "test_find_call_site"
