from dataclasses import replace

import pytest

from aurora_compass.compass_core.label_cache import LabelCache, l1_distance_deg


def _resolve(cache, request, name):
    request.future.set_result([request.target.with_name(name)])
    return cache.process_completions()


def test_first_selection_issues_request(resolver, target_a):
    cache = LabelCache(resolver)
    req = cache.note_selection(target_a)
    assert req is not None and req.seq == 1
    assert resolver.calls == [[target_a]]
    assert cache.pending == 1
    assert cache.display_name is None


def test_completion_is_applied_on_process(resolver, target_a):
    cache = LabelCache(resolver)
    req = cache.note_selection(target_a)
    req.future.set_result([target_a.with_name("X")])
    # Nothing changes until the owner drains completions.
    assert cache.display_name is None
    assert cache.process_completions() == 1
    assert cache.display_name == "X"
    assert cache.resolved.id == "A"
    assert cache.pending == 0


def test_no_flicker_on_same_id_jitter(resolver, target_a):
    cache = LabelCache(resolver)
    _resolve(cache, cache.note_selection(target_a), "X")

    jittered = replace(target_a, latitude_deg=target_a.latitude_deg + 0.001)
    assert cache.note_selection(jittered) is None
    assert cache.display_name == "X"
    assert len(resolver.calls) == 1


def test_clears_on_real_move_before_request(resolver, target_a, target_b):
    cache = LabelCache(resolver)
    _resolve(cache, cache.note_selection(target_a), "X")
    assert l1_distance_deg(target_a, target_b) > 0.1

    seen_at_request = []
    original = resolver.resolve_names

    def probe(points):
        seen_at_request.append(cache.resolved)
        return original(points)

    resolver.resolve_names = probe
    req = cache.note_selection(target_b)
    assert req is not None
    assert seen_at_request == [None]
    assert cache.display_name is None
    assert len(resolver.calls) == 2


def test_keeps_label_for_nearby_different_id(resolver, target_a):
    cache = LabelCache(resolver)
    _resolve(cache, cache.note_selection(target_a), "X")

    neighbour = replace(target_a, id="A2", longitude_deg=target_a.longitude_deg + 0.05)
    req = cache.note_selection(neighbour)
    assert req is not None
    assert cache.display_name == "X"
    _resolve(cache, req, "Y")
    assert cache.display_name == "Y"
    assert cache.resolved.id == "A2"


def test_unnamed_entry_is_requested_again(resolver, target_a):
    cache = LabelCache(resolver)
    req = cache.note_selection(target_a)
    req.future.set_result([target_a])
    assert cache.process_completions() == 0
    assert cache.note_selection(target_a) is not None
    assert len(resolver.calls) == 2


@pytest.mark.parametrize("outcome", ["exception", "empty"])
def test_failures_stay_unresolved_without_retry(resolver, target_a, outcome):
    cache = LabelCache(resolver)
    req = cache.note_selection(target_a)
    if outcome == "exception":
        req.future.set_exception(RuntimeError("geocoder offline"))
    else:
        req.future.set_result([])
    assert cache.process_completions() == 0
    assert cache.display_name is None
    assert cache.pending == 0
    assert len(resolver.calls) == 1


def test_unfinished_requests_stay_pending(resolver, target_a, target_b):
    cache = LabelCache(resolver)
    req_a = cache.note_selection(target_a)
    req_b = cache.note_selection(target_b)
    req_b.future.set_result([target_b.with_name("Bee")])
    assert cache.process_completions() == 1
    assert cache.pending == 1
    assert not req_a.future.done()


def test_late_stale_resolution_overwrites_by_default(resolver, target_a, target_b):
    cache = LabelCache(resolver)
    req_a = cache.note_selection(target_a)
    req_b = cache.note_selection(target_b)
    _resolve(cache, req_b, "Bee")
    _resolve(cache, req_a, "Aye")
    assert cache.display_name == "Aye"


def test_late_stale_resolution_dropped_when_disabled(resolver, target_a, target_b):
    cache = LabelCache(resolver, apply_stale=False)
    req_a = cache.note_selection(target_a)
    req_b = cache.note_selection(target_b)
    _resolve(cache, req_b, "Bee")
    assert _resolve(cache, req_a, "Aye") == 0
    assert cache.display_name == "Bee"


def test_staleness_follows_issued_request_not_returned_id(resolver, target_a, target_b):
    cache = LabelCache(resolver, apply_stale=False)
    req_a = cache.note_selection(target_a)
    req_b = cache.note_selection(target_b)

    # Resolver answers A's request with a point carrying B's id: still stale.
    req_a.future.set_result([replace(target_a, id="B", display_name="Aye")])
    assert cache.process_completions() == 0
    assert cache.display_name is None

    # Resolver answers B's request with a renamed id: still current.
    req_b.future.set_result([replace(target_b, id="cell-7", display_name="Bee")])
    assert cache.process_completions() == 1
    assert cache.display_name == "Bee"


def test_pending_grows_per_selection_change_until_futures_finish(resolver, target_a, target_b):
    cache = LabelCache(resolver)
    for _ in range(3):
        cache.note_selection(target_a)
        cache.note_selection(target_b)
    assert cache.pending == len(resolver.calls) == 6
    assert cache.process_completions() == 0
    assert cache.pending == 6

    for fut in resolver.futures:
        fut.set_result([])
    assert cache.process_completions() == 0
    assert cache.pending == 0


def test_reset_forgets_everything(resolver, target_a):
    cache = LabelCache(resolver)
    _resolve(cache, cache.note_selection(target_a), "X")
    cache.note_selection(replace(target_a, id="Z", latitude_deg=10.0))
    cache.reset()
    assert cache.resolved is None
    assert cache.pending == 0
