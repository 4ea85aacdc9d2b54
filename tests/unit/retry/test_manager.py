from __future__ import annotations

from unittest.mock import Mock

from resilex.callbacks import AttemptRecord, TelemetryEvent
from resilex.classifier import ErrorKind, NormalizedError
from resilex.retry import CallbackConfig, CallbackManager

ERROR = NormalizedError(ErrorKind.NETWORK, "connection reset", retryable_hint=True)

#####################################
#     Tests for CallbackManager     #
#####################################


def test_callback_manager_on_attempt() -> None:
    on_attempt, telemetry = Mock(), Mock()
    manager = CallbackManager(CallbackConfig(on_attempt=on_attempt, telemetry=telemetry), "load")
    record = AttemptRecord(attempt_number=2, error=ERROR, retryable=True, is_last_attempt=False)
    manager.on_attempt(record)
    on_attempt.assert_called_once_with(record)
    telemetry.assert_called_once_with(
        TelemetryEvent(
            operation_name="load",
            attempt=2,
            status_code=None,
            retryable=True,
            message="connection reset",
        )
    )


def test_callback_manager_on_give_up() -> None:
    on_give_up = Mock()
    CallbackManager(CallbackConfig(on_give_up=on_give_up), "load").on_give_up(ERROR)
    on_give_up.assert_called_once_with(ERROR)


def test_callback_manager_on_success() -> None:
    on_success, telemetry = Mock(), Mock()
    manager = CallbackManager(CallbackConfig(on_success=on_success, telemetry=telemetry), "load")
    manager.on_success(attempt=3, start_time=0.0)
    info = on_success.call_args.args[0]
    assert info.operation_name == "load"
    assert info.attempt == 3
    assert info.total_time > 0
    telemetry.assert_called_once_with(
        TelemetryEvent(
            operation_name="load", attempt=3, status_code=None, retryable=False, message="succeeded"
        )
    )


def test_callback_manager_without_callbacks() -> None:
    manager = CallbackManager(CallbackConfig(), "load")
    manager.on_attempt(AttemptRecord(1, ERROR, True, False))
    manager.on_give_up(ERROR)
    manager.on_success(1, 0.0)
