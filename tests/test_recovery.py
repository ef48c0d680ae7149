"""Unit tests for ErrorRecoveryPolicy."""

import pytest

from docsift.core.constants import ProcessingStatus, RecoveryAction, RecoveryStrategy
from docsift.pipeline.context import ProcessingContext
from docsift.pipeline.errors import (
    DocumentProcessingError,
    ExtractionError,
    PreconditionError,
    UnsupportedDocumentError,
)
from docsift.pipeline.recovery import ErrorRecoveryPolicy


@pytest.fixture
def context(tmp_path) -> ProcessingContext:
    return ProcessingContext(source=tmp_path / "broken.pdf")


class TestStrategies:

    def test_default_is_skip_and_continue(self):
        assert ErrorRecoveryPolicy().strategy == RecoveryStrategy.SKIP_AND_CONTINUE

    def test_skip_and_continue_excludes(self, context):
        policy = ErrorRecoveryPolicy(RecoveryStrategy.SKIP_AND_CONTINUE)
        action = policy.handle(context, ValueError("bad cell"))
        assert action == RecoveryAction.SKIP
        assert context.metadata.excluded
        assert context.error_count == 1

    def test_log_and_continue_does_not_exclude(self, context):
        policy = ErrorRecoveryPolicy("LOG_AND_CONTINUE")
        assert policy.handle(context, ValueError("bad cell")) == RecoveryAction.CONTINUE
        assert not context.metadata.excluded
        assert context.error_count == 1

    def test_retry_behaves_as_skip(self, context):
        policy = ErrorRecoveryPolicy(RecoveryStrategy.RETRY)
        assert policy.handle(context, OSError("flaky disk")) == RecoveryAction.SKIP
        assert context.metadata.excluded

    def test_fail_fast_marks_failed_and_raises(self, context):
        policy = ErrorRecoveryPolicy(RecoveryStrategy.FAIL_FAST)
        error = ValueError("bad cell")
        with pytest.raises(DocumentProcessingError) as exc_info:
            policy.handle(context, error)
        assert exc_info.value.__cause__ is error
        assert exc_info.value.context is context
        assert context.status == ProcessingStatus.FAILED
        assert "broken.pdf" in str(exc_info.value)

    def test_strategy_can_be_changed(self, context):
        policy = ErrorRecoveryPolicy()
        policy.strategy = "LOG_AND_CONTINUE"
        assert policy.handle(context, ValueError("x")) == RecoveryAction.CONTINUE

    def test_invalid_strategy_rejected(self):
        with pytest.raises(ValueError):
            ErrorRecoveryPolicy("SOMETIMES")

    def test_already_recorded_error_not_duplicated(self, context):
        error = ValueError("once")
        context.add_error("engine recorded it", error)
        ErrorRecoveryPolicy().handle(context, error)
        assert context.error_count == 1

    def test_validation_error(self, context):
        policy = ErrorRecoveryPolicy()
        policy.handle_validation_error(context, "too large")
        assert context.error_count == 1
        assert isinstance(context.errors[0].cause, PreconditionError)


class TestListeners:

    def test_listeners_run_before_strategy(self, context):
        seen = []

        def listener(ctx, error, document):
            seen.append((ctx.metadata.excluded, str(error), document.name))

        policy = ErrorRecoveryPolicy()
        policy.add_error_listener(listener)
        policy.handle(context, ValueError("x"))
        assert seen == [(False, "x", "broken.pdf")]

    def test_failing_listener_is_swallowed(self, context):
        calls = []

        def bad(ctx, error, document):
            raise RuntimeError("listener bug")

        policy = ErrorRecoveryPolicy()
        policy.add_error_listener(bad)
        policy.add_error_listener(lambda *args: calls.append(args))
        assert policy.handle(context, ValueError("x")) == RecoveryAction.SKIP
        assert len(calls) == 1


class TestRecoverability:

    @pytest.mark.parametrize(
        "error",
        [
            FileNotFoundError("x"),
            PermissionError("x"),
            PreconditionError("empty"),
            UnsupportedDocumentError("no extractor"),
            ValueError("Could not parse row 3"),
        ],
    )
    def test_not_recoverable(self, error):
        assert not ErrorRecoveryPolicy.is_recoverable(error)

    @pytest.mark.parametrize("error", [OSError("disk hiccup"), TimeoutError("slow"), ValueError("odd")])
    def test_recoverable(self, error):
        assert ErrorRecoveryPolicy.is_recoverable(error)

    def test_extraction_error_delegates_to_cause(self):
        try:
            raise ExtractionError("Failed to read workbook") from OSError("disk hiccup")
        except ExtractionError as exc:
            assert ErrorRecoveryPolicy.is_recoverable(exc)

        try:
            raise ExtractionError("Failed to read workbook") from PermissionError("denied")
        except ExtractionError as exc:
            assert not ErrorRecoveryPolicy.is_recoverable(exc)

    def test_extraction_parse_failure_not_recoverable(self):
        assert not ErrorRecoveryPolicy.is_recoverable(ExtractionError("Failed to parse PDF x.pdf"))
