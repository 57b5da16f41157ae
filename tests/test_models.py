from nonnls_markers.models import ExtractionResult, ScanMode, ScanState


def test_scan_mode_members():
    assert list(ScanMode) == [
        ScanMode.CODE,
        ScanMode.IN_SINGLE_LINE_COMMENT,
        ScanMode.IN_MULTI_LINE_COMMENT,
    ]


def test_scan_state_defaults():
    state = ScanState()

    assert state.cursor == 0
    assert state.mode is ScanMode.CODE
    assert state.exhausted is False


def test_scan_state_exhausted_sentinel():
    assert ScanState(None, ScanMode.IN_MULTI_LINE_COMMENT).exhausted is True


def test_extraction_result_defaults_are_independent():
    first = ExtractionResult()
    second = ExtractionResult()
    first.literals.append('"a"')

    assert second.literals == []
    assert first.any_marker is False


def test_extraction_result_unpacks():
    literals, has_marker, any_marker = ExtractionResult(['"a"'], [True], True)

    assert literals == ['"a"']
    assert has_marker == [True]
    assert any_marker is True
