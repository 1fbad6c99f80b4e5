import pytest

from aurora_compass.compass_core.label_cache import LabelCache
from aurora_compass.compass_core.model import Target
from aurora_compass.compass_io.gazetteer import GazetteerResolver, load_gazetteer


@pytest.fixture
def places_csv(tmp_path):
    p = tmp_path / "places.csv"
    p.write_text(
        "# name,latitude,longitude\n"
        "name,latitude,longitude\n"
        "Tromsø,69.6492,18.9553\n"
        "Alta,69.9689,23.2716\n"
        ",70.0,20.0\n"
        "Hobart,-42.8821,147.3272\n",
        encoding="utf-8",
    )
    return str(p)


def test_load_gazetteer_drops_unnamed(places_csv):
    df = load_gazetteer(places_csv)
    assert df["name"].tolist() == ["Tromsø", "Alta", "Hobart"]


def test_nearest_within_range(places_csv):
    res = GazetteerResolver.from_file(places_csv, max_distance_km=300.0)
    assert res.nearest(69.7, 19.2) == "Tromsø"
    assert res.nearest(70.0, 23.0) == "Alta"
    assert res.nearest(0.0, 0.0) is None


def test_resolve_names_contract(places_csv):
    res = GazetteerResolver.from_file(places_csv)
    fut = res.resolve_names([Target("a", 69.9, 23.0, 10.0), Target("b", 10.0, -40.0, 5.0)])
    assert fut.done()
    names = [t.display_name for t in fut.result()]
    assert names == ["Alta", None]


def test_drives_label_cache(places_csv):
    cache = LabelCache(GazetteerResolver.from_file(places_csv))
    cache.note_selection(Target("t", 69.6, 19.0, 50.0))
    assert cache.process_completions() == 1
    assert cache.display_name == "Tromsø"
