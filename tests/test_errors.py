"""Tests for the exception hierarchy."""

from __future__ import annotations

import pytest

from ampbox.errors import (
    AmpboxError,
    ConfigInvalidError,
    ConfigWriteError,
    DataDirUnwritableError,
    DockerError,
    DockerNotFoundError,
    DockerTimeoutError,
    ImageBuildError,
    MissingCredentialError,
    MountUnverifiedError,
    RuntimeNotInstalledError,
    RuntimeNotRunningError,
    SmokeTestError,
    TargetNotFoundError,
)


class TestErrors:
    """Tests for AmpboxError and its subclasses."""

    @pytest.mark.parametrize(
        "error_cls",
        [
            DockerNotFoundError,
            DockerTimeoutError,
            RuntimeNotInstalledError,
            RuntimeNotRunningError,
            ImageBuildError,
            MountUnverifiedError,
        ],
    )
    def test_docker_errors(self, error_cls: type[AmpboxError]) -> None:
        assert issubclass(error_cls, DockerError)
        assert issubclass(error_cls, AmpboxError)

    @pytest.mark.parametrize(
        "error_cls",
        [
            TargetNotFoundError,
            MissingCredentialError,
            DataDirUnwritableError,
            ConfigWriteError,
            ConfigInvalidError,
            SmokeTestError,
        ],
    )
    def test_domain_errors(self, error_cls: type[AmpboxError]) -> None:
        assert issubclass(error_cls, AmpboxError)
        assert not issubclass(error_cls, DockerError)

    def test_message_and_hint(self) -> None:
        err = MissingCredentialError("token missing", hint="export it")
        assert str(err) == "token missing"
        assert err.hint == "export it"

    def test_hint_optional(self) -> None:
        assert TargetNotFoundError("missing").hint is None
