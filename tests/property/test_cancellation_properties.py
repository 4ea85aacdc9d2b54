from __future__ import annotations

from hypothesis import given
from hypothesis import strategies as st

from resilex.cancellation import CancellationSource, compose

_ACTIONS = st.sampled_from(["cancel_input", "dispose", "cancel_then_dispose"])


@given(
    pre_canceled=st.lists(st.booleans(), min_size=0, max_size=8),
    action=_ACTIONS,
    index=st.integers(min_value=0, max_value=7),
)
def test_compose_leaves_no_listener_on_inputs(
    pre_canceled: list[bool], action: str, index: int
) -> None:
    sources = [CancellationSource() for _ in pre_canceled]
    for source, canceled in zip(sources, pre_canceled):
        if canceled:
            source.cancel("pre")

    composite = compose(sources)
    if any(pre_canceled):
        assert composite.is_canceled()
        assert all(source.listener_count == 0 for source in sources)

    if action in ("cancel_input", "cancel_then_dispose") and sources:
        sources[index % len(sources)].cancel("input")
    if action in ("dispose", "cancel_then_dispose"):
        composite.dispose()

    assert all(source.listener_count == 0 for source in sources)
    assert composite.registered_count == 0


@given(
    size=st.integers(min_value=1, max_value=8),
    order=st.permutations(range(8)),
)
def test_compose_settles_once_and_never_cancels_inputs(size: int, order: list[int]) -> None:
    sources = [CancellationSource() for _ in range(size)]
    composite = compose(sources)
    fired = []
    composite.on_cancel(lambda: fired.append(1))

    first, *rest = [i for i in order if i < size]
    sources[first].cancel(f"source {first}")
    assert composite.reason == f"source {first}"
    assert [source.is_canceled() for source in sources] == [i == first for i in range(size)]
    for i in rest:
        sources[i].cancel()

    assert fired == [1]
    assert composite.reason == f"source {first}"
    assert all(source.listener_count == 0 for source in sources)
