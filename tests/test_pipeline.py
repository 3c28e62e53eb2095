from scenevault.pipeline import CancelToken, FixedDelayPacer, RunProgress, SyncStage, SyncState


def test_fixed_delay_pacer_sleeps():
    slept = []
    FixedDelayPacer(0.1, sleep=slept.append).wait()
    FixedDelayPacer(0, sleep=slept.append).wait()

    assert slept == [0.1]


def test_cancel_token():
    token = CancelToken()
    assert token.cancelled is False

    token.cancel()
    assert token.cancelled is True


def test_run_progress():
    p = RunProgress()
    p.reset(3)
    p.advance()
    p.advance()

    assert (p.current, p.total) == (2, 3)


def test_sync_state_lifecycle():
    state = SyncState(playlist_id="PL1")
    state.set_stage(SyncStage.FETCH_PAGES)
    state.record_page(50)
    state.record_page(20)
    state.finish_failed("QUOTA_EXCEEDED")

    assert state.stage is SyncStage.ERROR
    assert state.error_code == "QUOTA_EXCEEDED"
    assert (state.pages_fetched, state.items_fetched) == (2, 70)
    assert state.finished_at is not None
