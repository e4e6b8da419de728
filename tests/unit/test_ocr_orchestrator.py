from collections.abc import Callable

import pytest

from ecoreceipt.ocr.base import BaseOcrEngine
from ecoreceipt.ocr.exceptions import OcrError, OcrUnavailableError
from ecoreceipt.ocr.models import OcrPassResult, SegmentationMode
from ecoreceipt.ocr.orchestrator import MultiPassOcr


class FakeEngine(BaseOcrEngine):
    """Engine session returning canned results per mode; records its lifecycle."""

    def __init__(self, outcomes: dict[SegmentationMode, float | Exception]) -> None:
        self._outcomes = outcomes
        self.opened = False
        self.closed = False
        self.calls: list[tuple[SegmentationMode, str]] = []

    def open(self) -> None:
        self.opened = True

    def close(self) -> None:
        self.closed = True

    def recognize_text(
        self,
        image_bytes: bytes,
        mode: SegmentationMode,
        language: str,
    ) -> OcrPassResult:
        self.calls.append((mode, language))
        outcome = self._outcomes[mode]
        if isinstance(outcome, Exception):
            raise outcome
        return OcrPassResult(text=f"{mode.value} text", confidence=outcome, segmentation_mode=mode)


def _provider(
    outcomes: dict[SegmentationMode, float | Exception],
    sessions: list[FakeEngine],
) -> Callable[[], BaseOcrEngine]:
    def _create() -> BaseOcrEngine:
        engine = FakeEngine(outcomes)
        sessions.append(engine)
        return engine

    return _create


BLOCK = SegmentationMode.SINGLE_BLOCK
COLUMN = SegmentationMode.SINGLE_COLUMN


class TestMultiPassOcrSelection:
    def test_higher_confidence_column_pass_wins(self) -> None:
        sessions: list[FakeEngine] = []
        ocr = MultiPassOcr(_provider({BLOCK: 62.0, COLUMN: 81.5}, sessions))

        result = ocr.recognize(b"png")

        assert result.segmentation_mode is COLUMN
        assert result.confidence == 81.5
        assert result.text == "single_column text"
        assert len(result.candidates) == 2

    def test_higher_confidence_block_pass_wins(self) -> None:
        ocr = MultiPassOcr(_provider({BLOCK: 90.0, COLUMN: 40.0}, []))
        assert ocr.recognize(b"png").segmentation_mode is BLOCK

    def test_tie_favours_single_block(self) -> None:
        ocr = MultiPassOcr(_provider({BLOCK: 75.0, COLUMN: 75.0}, []))
        assert ocr.recognize(b"png").segmentation_mode is BLOCK

    @pytest.mark.parametrize(
        ("block", "column"),
        [(0.0, 0.0), (10.0, 90.0), (90.0, 10.0), (55.5, 55.4), (55.4, 55.5)],
    )
    def test_selected_confidence_is_maximum(self, block: float, column: float) -> None:
        ocr = MultiPassOcr(_provider({BLOCK: block, COLUMN: column}, []))
        result = ocr.recognize(b"png")
        assert result.confidence == max(block, column)
        assert all(result.confidence >= c.confidence for c in result.candidates)


class TestMultiPassOcrSessions:
    def test_each_pass_uses_its_own_session(self) -> None:
        sessions: list[FakeEngine] = []
        ocr = MultiPassOcr(_provider({BLOCK: 70.0, COLUMN: 60.0}, sessions), language="spa")

        ocr.recognize(b"png")

        assert len(sessions) == 2
        assert sessions[0] is not sessions[1]
        assert sessions[0].calls == [(BLOCK, "spa")]
        assert sessions[1].calls == [(COLUMN, "spa")]
        assert all(engine.opened and engine.closed for engine in sessions)

    def test_language_override(self) -> None:
        sessions: list[FakeEngine] = []
        ocr = MultiPassOcr(_provider({BLOCK: 70.0, COLUMN: 60.0}, sessions), language="spa")

        ocr.recognize(b"png", language="eng")

        assert {call[1] for engine in sessions for call in engine.calls} == {"eng"}

    def test_session_closed_when_pass_fails(self) -> None:
        sessions: list[FakeEngine] = []
        ocr = MultiPassOcr(_provider({BLOCK: OcrError("crash"), COLUMN: 60.0}, sessions))

        ocr.recognize(b"png")

        assert sessions[0].closed is True


class TestMultiPassOcrFailures:
    def test_one_failed_pass_is_tolerated(self) -> None:
        ocr = MultiPassOcr(_provider({BLOCK: OcrError("crash"), COLUMN: 48.0}, []))

        result = ocr.recognize(b"png")

        assert result.segmentation_mode is COLUMN
        assert len(result.candidates) == 1

    def test_both_passes_failing_raises_unavailable(self) -> None:
        ocr = MultiPassOcr(_provider({BLOCK: OcrError("a"), COLUMN: OcrError("b")}, []))

        with pytest.raises(OcrUnavailableError, match="OCR passes failed"):
            ocr.recognize(b"png")

    def test_unexpected_errors_propagate(self) -> None:
        ocr = MultiPassOcr(_provider({BLOCK: KeyError("bug"), COLUMN: 48.0}, []))

        with pytest.raises(KeyError):
            ocr.recognize(b"png")


class TestMultiPassOcrParallel:
    def test_parallel_matches_sequential(self) -> None:
        outcomes: dict[SegmentationMode, float | Exception] = {BLOCK: 64.0, COLUMN: 64.0}
        sequential = MultiPassOcr(_provider(outcomes, []), parallel=False).recognize(b"png")
        parallel = MultiPassOcr(_provider(outcomes, []), parallel=True).recognize(b"png")

        assert parallel.selected == sequential.selected
        assert parallel.candidates == sequential.candidates

    def test_parallel_tolerates_one_failure(self) -> None:
        sessions: list[FakeEngine] = []
        ocr = MultiPassOcr(
            _provider({BLOCK: 50.0, COLUMN: OcrError("crash")}, sessions),
            parallel=True,
        )

        result = ocr.recognize(b"png")

        assert result.segmentation_mode is BLOCK
        assert len(sessions) == 2
