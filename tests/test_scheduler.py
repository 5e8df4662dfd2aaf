from fast_reader.scheduler import CooperativeFrameScheduler, ManualFrameScheduler


def test_manual_scheduler_runs_queued_callbacks_once():
    scheduler = ManualFrameScheduler()
    calls: list[str] = []
    scheduler.request_frame(lambda: calls.append("a"))
    scheduler.request_frame(lambda: calls.append("b"))
    assert scheduler.pending == 2
    assert scheduler.run_frame() == 2
    assert calls == ["a", "b"]
    assert scheduler.run_frame() == 0
    assert scheduler.frames_run == 2


def test_cancelled_frames_do_not_run():
    scheduler = ManualFrameScheduler()
    calls: list[int] = []
    handle = scheduler.request_frame(lambda: calls.append(1))
    scheduler.cancel_frame(handle)
    scheduler.cancel_frame(handle)
    scheduler.cancel_frame(999)
    scheduler.run_frame()
    assert calls == []


def test_rescheduled_callback_waits_for_next_frame():
    scheduler = ManualFrameScheduler()
    calls: list[int] = []

    def tick() -> None:
        calls.append(len(calls))
        scheduler.request_frame(tick)

    scheduler.request_frame(tick)
    scheduler.run_frame()
    assert calls == [0]
    scheduler.run_frame()
    assert calls == [0, 1]


def test_callback_can_cancel_a_later_one_in_the_same_frame():
    scheduler = ManualFrameScheduler()
    calls: list[str] = []
    handles: dict[str, int] = {}
    handles["first"] = scheduler.request_frame(
        lambda: scheduler.cancel_frame(handles["second"])
    )
    handles["second"] = scheduler.request_frame(lambda: calls.append("second"))
    assert scheduler.run_frame() == 1
    assert calls == []


def test_cooperative_scheduler_runs_until_idle():
    sleeps: list[float] = []
    scheduler = CooperativeFrameScheduler(frame_interval=0.5, sleep=sleeps.append)
    remaining = [3]

    def tick() -> None:
        remaining[0] -= 1
        if remaining[0]:
            scheduler.request_frame(tick)

    scheduler.request_frame(tick)
    frames: list[int] = []
    scheduler.run(on_frame=lambda: frames.append(scheduler.frames_run))
    assert remaining == [0]
    assert sleeps == [0.5, 0.5, 0.5]
    assert frames == [1, 2, 3]


def test_cooperative_scheduler_stop():
    scheduler = CooperativeFrameScheduler(sleep=lambda _seconds: None)

    def forever() -> None:
        scheduler.request_frame(forever)
        if scheduler.frames_run >= 4:
            scheduler.stop()

    scheduler.request_frame(forever)
    scheduler.run()
    assert scheduler.frames_run == 5
    assert scheduler.pending == 1
