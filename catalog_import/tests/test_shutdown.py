"""Tests for graceful shutdown handling."""

import signal

import pytest

from catalog_import.shutdown import ShutdownHandler, get_shutdown_handler


class TestShutdownHandler:
    """Tests for ShutdownHandler."""

    @pytest.fixture
    def handler(self):
        handler = ShutdownHandler()
        yield handler
        handler.uninstall()

    def test_initial_state(self, handler):
        assert not handler.shutdown_requested

    def test_request_shutdown(self, handler):
        handler.request_shutdown()
        assert handler.shutdown_requested

    def test_signal_sets_flag_and_arms_force_exit(self, handler):
        handler.install()

        handler._handle_signal(signal.SIGTERM, None)

        assert handler.shutdown_requested
        assert signal.getsignal(signal.SIGTERM) == handler._force_exit

    def test_install_and_uninstall_restore_handlers(self, handler):
        original = signal.getsignal(signal.SIGINT)

        handler.install()
        assert signal.getsignal(signal.SIGINT) == handler._handle_signal

        handler.uninstall()
        assert signal.getsignal(signal.SIGINT) == original

    def test_cleanup_runs_each_callback_once(self, handler):
        calls = []
        handler.register_cleanup(lambda: calls.append("store"))
        handler.register_cleanup(lambda: calls.append("log"))

        handler.cleanup()
        handler.cleanup()

        assert calls == ["store", "log"]

    def test_failing_cleanup_does_not_stop_others(self, handler):
        calls = []

        def broken():
            raise RuntimeError("already closed")

        handler.register_cleanup(broken)
        handler.register_cleanup(lambda: calls.append("ran"))

        handler.cleanup()

        assert calls == ["ran"]

    def test_force_exit(self, handler):
        calls = []
        handler.register_cleanup(lambda: calls.append("closed"))

        with pytest.raises(SystemExit):
            handler._force_exit(signal.SIGINT, None)

        assert calls == ["closed"]

    def test_reset(self, handler):
        handler.request_shutdown()
        handler.register_cleanup(lambda: None)

        handler.reset()

        assert not handler.shutdown_requested
        assert handler._cleanup_callbacks == []

    def test_process_wide_instance(self):
        assert get_shutdown_handler() is get_shutdown_handler()
