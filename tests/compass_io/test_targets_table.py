from pathlib import Path

import pytest

from aurora_compass.compass_io.tables import detect_delimiter
from aurora_compass.compass_io.targets import (
    load_targets,
    read_targets_table,
    target_id_for,
)


def write(path: Path, text: str) -> str:
    path.write_text(text, encoding="utf-8")
    return str(path)


def test_csv_with_comments_wrap_clip_and_drop(tmp_path):
    p = write(
        tmp_path / "grid.csv",
        "# OVATION-style grid\n"
        "# longitudes in 0..360\n"
        "Longitude, Latitude, Probability\n"
        "345,65,20\n"
        "19,70,120\n"
        "20,,50\n"
        "200,-66,40\n",
    )
    df = read_targets_table(p)
    assert list(df.columns) == ["id", "latitude", "longitude", "probability", "name"]
    assert len(df) == 3
    assert df["longitude"].tolist() == [-15.0, 19.0, -160.0]
    assert df["probability"].tolist() == [20.0, 100.0, 40.0]
    assert df["id"].tolist()[0] == target_id_for(65.0, -15.0) == "65.0000,-15.0000"


def test_tsv_with_ids_names_and_aliases(tmp_path):
    p = write(
        tmp_path / "grid.tsv",
        "id\tlat\tlon\tprob\tname\n"
        "cell-1\t69.5\t19.0\t30\tTromsø\n"
        "cell-2\t75.0\t19.0\t90\t\n",
    )
    targets = load_targets(p)
    assert [t.id for t in targets] == ["cell-1", "cell-2"]
    assert targets[0].display_name == "Tromsø"
    assert targets[1].display_name is None
    assert targets[1].probability == 90.0


def test_min_probability_filter(tmp_path):
    p = write(tmp_path / "g.csv", "latitude,longitude,probability\n66,10,2\n68,15,35\n")
    targets = load_targets(p, min_probability=5.0)
    assert [t.latitude_deg for t in targets] == [68.0]


def test_missing_required_column(tmp_path):
    p = write(tmp_path / "bad.csv", "latitude,longitude\n66,10\n")
    with pytest.raises(ValueError):
        read_targets_table(p)


def test_detect_delimiter(tmp_path):
    assert detect_delimiter(write(tmp_path / "a", "# c,o,m\na;b;c\n1;2;3\n")) == ";"
    assert detect_delimiter(write(tmp_path / "b", "a b  c\n")) == r"\s+"
    with pytest.raises(ValueError):
        detect_delimiter(write(tmp_path / "c", "# only comments\n\n"))
