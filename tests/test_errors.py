"""Tests for error handling helpers."""

from vcap_services.errors import (
    ConfigurationError,
    CredentialsNotFoundError,
    ExitCode,
    VcapServicesError,
    format_error_message,
    main_with_error_handling,
)


class TestExceptions:
    """Tests for the exception hierarchy."""

    def test_exit_codes(self):
        """Each error carries its exit code."""
        assert VcapServicesError("x").exit_code == ExitCode.UNKNOWN_ERROR
        assert ConfigurationError("x").exit_code == ExitCode.CONFIG_ERROR
        assert CredentialsNotFoundError("x").exit_code == ExitCode.NOT_FOUND

    def test_details_default(self):
        """Details default to an empty dict."""
        assert ConfigurationError("x").details == {}


class TestFormatErrorMessage:
    """Tests for format_error_message."""

    def test_message_only(self):
        assert format_error_message(ConfigurationError("Bad config")) == "Bad config"

    def test_with_details(self):
        error = ConfigurationError("Bad config", {"path": "a.yaml"})
        assert format_error_message(error) == "Bad config (path=a.yaml)"


class TestMainWithErrorHandling:
    """Tests for the CLI error decorator."""

    def test_passes_through_exit_code(self):
        @main_with_error_handling()
        def command() -> int:
            return 0

        assert command() == 0

    def test_known_error(self, capsys):
        """Known errors map to their exit code and are printed."""

        @main_with_error_handling()
        def command() -> int:
            raise CredentialsNotFoundError("No credentials", {"service": "foo"})

        assert command() == ExitCode.NOT_FOUND
        assert "No credentials (service=foo)" in capsys.readouterr().out

    def test_unexpected_error(self):
        """Unexpected errors map to UNKNOWN_ERROR."""

        @main_with_error_handling()
        def command() -> int:
            raise RuntimeError("boom")

        assert command() == ExitCode.UNKNOWN_ERROR

    def test_keyboard_interrupt(self):
        """Interrupts exit with 130."""

        @main_with_error_handling()
        def command() -> int:
            raise KeyboardInterrupt

        assert command() == 130
