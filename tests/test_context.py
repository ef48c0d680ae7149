"""Unit tests for ProcessingContext and ProcessingResult."""

import pytest

from docsift.core.constants import ProcessingStatus
from docsift.pipeline.context import ProcessingContext, ProcessingResult
from docsift.pipeline.errors import ExtractionError, InvalidTransitionError
from docsift.pipeline.record import Record


@pytest.fixture
def context(tmp_path) -> ProcessingContext:
    return ProcessingContext(source=tmp_path / "doc.xlsx", keywords={"python"})


class TestStateMachine:

    def test_starts_pending(self, context):
        assert context.status == ProcessingStatus.PENDING
        assert not context.is_terminal
        assert context.completed_at is None

    def test_forward_path_to_completed(self, context):
        context.set_status(ProcessingStatus.VALIDATING)
        context.set_status(ProcessingStatus.PROCESSING)
        context.set_status(ProcessingStatus.COMPLETED)
        assert context.is_complete
        assert context.is_terminal
        assert context.completed_at is not None

    @pytest.mark.parametrize("steps", [0, 1, 2])
    def test_any_non_terminal_can_fail(self, context, steps):
        for status in [ProcessingStatus.VALIDATING, ProcessingStatus.PROCESSING][:steps]:
            context.set_status(status)
        context.set_status(ProcessingStatus.FAILED)
        assert context.is_failed

    def test_pending_can_be_cancelled(self, context):
        context.set_status(ProcessingStatus.CANCELLED)
        assert context.is_cancelled

    def test_skipping_a_step_is_rejected(self, context):
        with pytest.raises(InvalidTransitionError):
            context.set_status(ProcessingStatus.PROCESSING)

    def test_moving_backwards_is_rejected(self, context):
        context.set_status(ProcessingStatus.VALIDATING)
        context.set_status(ProcessingStatus.PROCESSING)
        with pytest.raises(InvalidTransitionError):
            context.set_status(ProcessingStatus.VALIDATING)

    def test_pending_cannot_complete_directly(self, context):
        with pytest.raises(InvalidTransitionError):
            context.set_status(ProcessingStatus.COMPLETED)
        assert context.status == ProcessingStatus.PENDING

    def test_validating_cannot_complete_directly(self, context):
        context.set_status(ProcessingStatus.VALIDATING)
        with pytest.raises(InvalidTransitionError):
            context.set_status(ProcessingStatus.COMPLETED)
        assert context.completed_at is None

    def test_reentering_terminal_status_is_noop(self, context):
        context.set_status(ProcessingStatus.FAILED)
        stamped = context.completed_at
        context.set_status(ProcessingStatus.FAILED)
        assert context.completed_at == stamped

    def test_leaving_terminal_status_is_rejected(self, context):
        context.set_status(ProcessingStatus.FAILED)
        with pytest.raises(InvalidTransitionError):
            context.set_status(ProcessingStatus.COMPLETED)


class TestProgress:

    def test_zero_total_means_zero_progress(self, context):
        context.set_processed_items(5)
        assert context.progress == 0.0

    def test_progress_is_a_percentage(self, context):
        context.set_total_items(4)
        context.set_processed_items(1)
        assert context.progress == 25.0

    @pytest.mark.parametrize("processed,total", [(10, 3), (0, 7), (7, 7), (1, 1000)])
    def test_progress_is_clamped(self, context, processed, total):
        context.set_total_items(total)
        context.set_processed_items(processed)
        assert 0.0 <= context.progress <= 100.0

    def test_negative_counts_are_floored(self, context):
        context.set_total_items(-3)
        context.set_processed_items(-1)
        assert context.total_items == 0
        assert context.processed_items == 0

    def test_increment(self, context):
        context.set_total_items(2)
        context.increment_processed_items()
        assert context.processed_items == 1
        assert context.progress == 50.0

    def test_counters_frozen_after_terminal(self, context):
        context.set_status(ProcessingStatus.CANCELLED)
        with pytest.raises(InvalidTransitionError):
            context.set_total_items(3)
        with pytest.raises(InvalidTransitionError):
            context.increment_processed_items()


class TestMetadataAndErrors:

    def test_update_known_fields(self, context):
        context.update_metadata(extractor="spreadsheet", detected_type="XLSX")
        assert context.metadata.extractor == "spreadsheet"
        assert context.metadata.detected_type == "XLSX"

    def test_unknown_field_rejected(self, context):
        with pytest.raises(KeyError):
            context.update_metadata(colour="blue")
        with pytest.raises(KeyError):
            context.update_metadata(extra={})

    def test_extra_bag(self, context):
        context.set_extra("batch", "b-1")
        assert context.get_extra("batch") == "b-1"
        assert context.get_extra("missing", 0) == 0

    def test_metadata_frozen_after_terminal(self, context):
        context.set_status(ProcessingStatus.FAILED)
        with pytest.raises(InvalidTransitionError):
            context.update_metadata(extractor="pdf")
        with pytest.raises(InvalidTransitionError):
            context.set_extra("k", "v")

    def test_errors_and_exclusion_writable_after_terminal(self, context):
        context.set_status(ProcessingStatus.FAILED)
        context.add_error("late note")
        context.mark_excluded()
        assert context.error_count == 1
        assert context.metadata.excluded

    def test_has_error_for_follows_cause_chain(self, context):
        root = FileNotFoundError("gone")
        try:
            raise ExtractionError("wrapped") from root
        except ExtractionError as exc:
            wrapper = exc
        context.add_error("missing", root)
        assert context.has_error_for(wrapper)
        assert context.has_error_for(root)
        assert not context.has_error_for(ValueError("other"))

    def test_keywords_are_a_snapshot(self, tmp_path):
        keywords = {"a"}
        context = ProcessingContext(source=tmp_path / "x.pdf", keywords=keywords)
        keywords.add("b")
        assert context.keywords == frozenset({"a"})

    def test_summary_dict(self, context):
        context.add_error("boom", ValueError("x"))
        summary = context.to_summary_dict()
        assert summary["status"] == "PENDING"
        assert summary["keywords"] == ["python"]
        assert len(summary["errors"]) == 1
        assert summary["errors"][0]["message"] == "boom"
        assert "doc.xlsx" in str(context)


class TestProcessingResult:

    def test_success_requires_completion_without_errors(self, context):
        context.set_status(ProcessingStatus.VALIDATING)
        context.set_status(ProcessingStatus.PROCESSING)
        context.set_status(ProcessingStatus.COMPLETED)
        result = ProcessingResult(context, [Record(source="doc.xlsx")])
        assert result.success
        assert result.status == ProcessingStatus.COMPLETED
        assert isinstance(result.records, tuple)

    def test_failed_result_is_not_success(self, context):
        context.set_status(ProcessingStatus.FAILED)
        context.add_error("broken")
        result = ProcessingResult(context)
        assert not result.success
        assert result.has_errors
        assert result.records == ()
