"""Tests for argument normalization and completion handlers."""

import pytest

from zkclient.acl import CREATOR_ALL_ACL, OPEN_ACL_UNSAFE, READ_ACL_UNSAFE
from zkclient.dispatch import (
    ArgumentNormalizer,
    FunctionHandler,
    GetOptions,
    ObjectHandler,
    as_completion_handler,
)
from zkclient.exceptions import InvalidArgumentError
from zkclient.types import CreateMode, Operation


class TestCreateArguments:
    """Tests for create normalization."""

    def test_defaults(self):
        """Create fills in the session ACL, the session mode and an empty payload."""
        request = ArgumentNormalizer().create("/a")

        assert request.operation == Operation.CREATE
        assert request.path == "/a"
        assert request.data == b""
        assert request.mode == CreateMode.EPHEMERAL
        assert list(request.acl) == OPEN_ACL_UNSAFE
        assert not request.is_async

    def test_injected_defaults(self):
        normalizer = ArgumentNormalizer(default_acl=READ_ACL_UNSAFE, default_mode=CreateMode.PERSISTENT)
        request = normalizer.create("/a", None)

        assert request.mode == CreateMode.PERSISTENT
        assert list(request.acl) == READ_ACL_UNSAFE
        assert request.data == b""

    def test_mode(self):
        normalizer = ArgumentNormalizer()

        assert normalizer.create("/a", mode="persistent").mode == CreateMode.PERSISTENT
        assert normalizer.create("/a", mode=CreateMode.EPHEMERAL_SEQUENTIAL).mode == CreateMode.EPHEMERAL_SEQUENTIAL

    def test_legacy_mode_names(self):
        normalizer = ArgumentNormalizer()

        assert normalizer.create("/a", mode="persistent_sequence").mode == CreateMode.PERSISTENT_SEQUENTIAL
        assert normalizer.create("/a", mode="ephemeral_sequence").mode == CreateMode.EPHEMERAL_SEQUENTIAL

    def test_legacy_flags(self):
        normalizer = ArgumentNormalizer()

        assert normalizer.create("/a", ephemeral=True, sequential=True).mode == CreateMode.EPHEMERAL_SEQUENTIAL
        assert normalizer.create("/a", ephemeral=False).mode == CreateMode.PERSISTENT
        assert normalizer.create("/a", sequential=True).mode == CreateMode.PERSISTENT_SEQUENTIAL

    def test_mode_and_flags_are_exclusive(self):
        with pytest.raises(InvalidArgumentError):
            ArgumentNormalizer().create("/a", mode="persistent", ephemeral=True)

    def test_explicit_acl(self):
        request = ArgumentNormalizer().create("/a", b"x", acl=CREATOR_ALL_ACL)
        assert list(request.acl) == CREATOR_ALL_ACL

    def test_rejects_bad_values(self):
        normalizer = ArgumentNormalizer()

        with pytest.raises(InvalidArgumentError):
            normalizer.create("/a", acl=[])
        with pytest.raises(InvalidArgumentError):
            normalizer.create("/a", mode="forever")
        with pytest.raises(InvalidArgumentError):
            normalizer.create("/a", 3.5)


class TestOptionParsing:
    """Tests for option handling shared by every operation."""

    def test_unknown_option(self):
        """Unknown options are rejected by name."""
        with pytest.raises(InvalidArgumentError) as info:
            ArgumentNormalizer().get("/a", {"wacth": True})

        assert "unknown option 'wacth'" in str(info.value)
        assert info.value.operation == "get"

    def test_option_not_valid_for_operation(self):
        with pytest.raises(InvalidArgumentError):
            ArgumentNormalizer().delete("/a", watch=True)
        with pytest.raises(InvalidArgumentError):
            ArgumentNormalizer().get("/a", version=1)

    def test_mapping_model_and_keywords(self):
        normalizer = ArgumentNormalizer()

        assert normalizer.get("/a", {"watch": True}).watch
        assert normalizer.get("/a", GetOptions(watch=True)).watch
        assert normalizer.get("/a", watch=True).watch
        assert not normalizer.get("/a").watch

    def test_keywords_override_mapping(self):
        request = ArgumentNormalizer().set("/a", b"x", {"version": 1}, version=2)
        assert request.version == 2

    def test_options_must_be_mapping(self):
        with pytest.raises(InvalidArgumentError):
            ArgumentNormalizer().get("/a", ["watch"])

    def test_watch_must_be_bool(self):
        with pytest.raises(InvalidArgumentError):
            ArgumentNormalizer().exists("/a", watch="yes")

    def test_version(self):
        normalizer = ArgumentNormalizer()

        assert normalizer.set("/a", b"x").version == -1
        assert normalizer.delete("/a", version=4).version == 4
        with pytest.raises(InvalidArgumentError):
            normalizer.delete("/a", version=-2)

    def test_version_must_be_int(self):
        normalizer = ArgumentNormalizer()

        with pytest.raises(InvalidArgumentError):
            normalizer.set("/a", b"x", version=True)
        with pytest.raises(InvalidArgumentError):
            normalizer.delete("/a", version="3")
        with pytest.raises(InvalidArgumentError):
            normalizer.set_acls("/a", acl=READ_ACL_UNSAFE, version=False)

    def test_set_acls_requires_acl(self):
        normalizer = ArgumentNormalizer()

        with pytest.raises(InvalidArgumentError):
            normalizer.set_acls("/a")
        with pytest.raises(InvalidArgumentError):
            normalizer.set_acls("/a", acl=[])

        request = normalizer.set_acls("/a", acl=READ_ACL_UNSAFE, version=0)
        assert list(request.acl) == READ_ACL_UNSAFE
        assert request.version == 0

    def test_add_auth(self):
        request = ArgumentNormalizer().add_auth("user:secret")

        assert request.operation == Operation.ADD_AUTH
        assert request.scheme == "digest"
        assert request.data == b"user:secret"

    def test_add_auth_has_no_callback(self):
        with pytest.raises(InvalidArgumentError):
            ArgumentNormalizer().add_auth("user:secret", callback=print)


class TestCallbackArguments:
    """Tests for callback and context options."""

    def test_callback_makes_call_async(self):
        request = ArgumentNormalizer().get("/a", callback=print, context="ctx")

        assert request.is_async
        assert isinstance(request.handler, FunctionHandler)
        assert request.context == "ctx"

    def test_context_without_callback(self):
        """A context alone leaves the call blocking."""
        request = ArgumentNormalizer().get("/a", context="ctx")

        assert not request.is_async
        assert request.handler is None
        assert request.context == "ctx"

    def test_bad_callback(self):
        with pytest.raises(InvalidArgumentError):
            ArgumentNormalizer().exists("/a", callback=42)


class TestHandlers:
    """Tests for completion handler resolution."""

    def test_function(self):
        calls = []
        handler = as_completion_handler(lambda *args: calls.append(args), "get")
        handler.invoke(0, "/a", None, b"x", "stat")

        assert isinstance(handler, FunctionHandler)
        assert calls == [(0, "/a", None, b"x", "stat")]

    def test_object_with_process_result(self):
        class Target:
            def __init__(self):
                self.calls = []

            def process_result(self, *args):
                self.calls.append(args)

        target = Target()
        handler = as_completion_handler(target, "delete")
        handler.invoke(-101, "/a", "ctx")

        assert isinstance(handler, ObjectHandler)
        assert target.calls == [(-101, "/a", "ctx")]

    def test_process_result_wins_over_call(self):
        class Both:
            def __call__(self, *args):
                raise AssertionError("should use process_result")

            def process_result(self, *args):
                pass

        assert isinstance(as_completion_handler(Both(), "get"), ObjectHandler)

    def test_none_and_invalid(self):
        assert as_completion_handler(None, "get") is None
        with pytest.raises(InvalidArgumentError):
            as_completion_handler("callback", "get")

    def test_function_fail_reraises(self):
        handler = as_completion_handler(lambda *args: None, "get")
        error = RuntimeError("connection reset")

        with pytest.raises(RuntimeError) as info:
            handler.fail("/a", None, error)
        assert info.value is error

    def test_object_fail_uses_process_error(self):
        class Target:
            def __init__(self):
                self.errors = []

            def process_result(self, *args):
                pass

            def process_error(self, path, context, error):
                self.errors.append((path, context, error))

        target = Target()
        error = RuntimeError("connection reset")
        as_completion_handler(target, "get").fail("/a", "ctx", error)

        assert target.errors == [("/a", "ctx", error)]

    def test_object_fail_without_process_error(self):
        class Target:
            def process_result(self, *args):
                pass

        error = RuntimeError("connection reset")
        with pytest.raises(RuntimeError) as info:
            as_completion_handler(Target(), "get").fail("/a", None, error)
        assert info.value is error
