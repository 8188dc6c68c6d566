import json
import sys
from pathlib import Path

import pandas as pd

sys.path.append(str(Path(__file__).resolve().parents[1] / "dot-generator"))

from tests.test_utils import (  # noqa: E402
    multipolygon_geometry,
    polygon_geometry,
    rectangle_ring,
    region_geojson,
    write_geojson,
    write_population_tsv,
)


def _write_inputs(tmp_path):
    collection = region_geojson(
        [
            ("Zaragoza", polygon_geometry(rectangle_ring(-2.0, 40.9, 2.5, 1.9))),
            ("Illes Balears", multipolygon_geometry(
                rectangle_ring(1.2, 38.6, 0.4, 0.3),
                rectangle_ring(2.3, 39.3, 1.0, 0.6),
            )),
            ("Ceuta", polygon_geometry(rectangle_ring(-5.4, 35.85, 0.1, 0.05))),
        ]
    )
    geojson = write_geojson(tmp_path / "regions.geojson.gz", collection, compress=True)
    population = write_population_tsv(
        tmp_path / "population.tsv.gz",
        [("Zaragoza", 967_452), ("Illes Balears", 1_173_008), ("Ceuta", 83_117)],
        compress=True,
    )
    return geojson, population


def test_generate_dot_density_csv(tmp_path):
    from generate_dot_density import main

    geojson, population = _write_inputs(tmp_path)
    output = tmp_path / "out" / "dots.csv"

    exit_code = main([
        "--geojson", str(geojson),
        "--population", str(population),
        "--output", str(output),
        "--dots-per-unit", "10000",
        "--seed", "0",
    ])

    assert exit_code == 0
    assert output.exists()
    dots = pd.read_csv(output)
    assert list(dots.columns) == ["x", "y"]
    assert len(dots) == 96 + 117 + 8
    assert dots["x"].between(0, 900).all()
    assert dots["y"].between(0, 800).all()


def test_generate_dot_density_is_reproducible(tmp_path):
    from generate_dot_density import main

    geojson, population = _write_inputs(tmp_path)
    outputs = []
    for name in ("a.geojson", "b.geojson"):
        output = tmp_path / name
        assert main([
            "--geojson", str(geojson),
            "--population", str(population),
            "--output", str(output),
            "--dots-per-unit", "50000",
            "--seed", "42",
        ]) == 0
        outputs.append(json.loads(output.read_text()))

    coords_a = [f["geometry"]["coordinates"] for f in outputs[0]["features"]]
    coords_b = [f["geometry"]["coordinates"] for f in outputs[1]["features"]]
    assert len(coords_a) == 19 + 23 + 1
    assert coords_a == coords_b


def test_missing_input_returns_error(tmp_path):
    from generate_dot_density import main

    _, population = _write_inputs(tmp_path)
    assert main([
        "--geojson", str(tmp_path / "missing.geojson"),
        "--population", str(population),
    ]) == 1
