"""End-to-end tests through the CLI entrypoint."""

from __future__ import annotations

import json
import logging

import pytest
from PIL import Image

from conftest import region_payload
from dwellmap.cli import main


@pytest.fixture
def config_file(dataset_dir):
    path = dataset_dir / "config.yaml"
    path.write_text(
        "paths:\n"
        "  regions: us-states.json\n"
        "  records: dwell_times.json\n"
        "  output_dir: out\n"
        "  logs_dir: out/logs\n",
        encoding="utf-8",
    )
    yield path
    root = logging.getLogger()
    for handler in list(root.handlers):
        handler.close()
        root.removeHandler(handler)


class TestRenderCommand:
    """`dwellmap render`."""

    def test_renders_png_at_container_size(self, config_file, dataset_dir):
        output = dataset_dir / "map.png"
        code = main(
            [
                "render",
                "--config",
                str(config_file),
                "--width",
                "832",
                "--railroad",
                "up",
                "--output",
                str(output),
            ]
        )
        assert code == 0
        with Image.open(output) as image:
            assert image.size == (800, 432)
        assert (dataset_dir / "out" / "logs" / "dwellmap.log").exists()

    def test_default_output_name(self, config_file, dataset_dir):
        code = main(["render", "--config", str(config_file), "--week", "44", "--width", "432"])
        assert code == 0
        assert (dataset_dir / "out" / "dwell_2024_w44_ALL.png").exists()

    def test_bad_dataset_exits_non_zero(self, config_file, dataset_dir):
        payload = region_payload()
        payload["features"][0]["properties"]["name"] = 7
        (dataset_dir / "us-states.json").write_text(json.dumps(payload), encoding="utf-8")
        output = dataset_dir / "map.png"
        code = main(["render", "--config", str(config_file), "--output", str(output)])
        assert code == 1
        assert not output.exists()

    def test_undecodable_dataset_exits_non_zero(self, config_file, dataset_dir):
        (dataset_dir / "dwell_times.json").write_bytes(b'[{"Yard": "\xff\xfe"}]')
        output = dataset_dir / "map.png"
        code = main(["render", "--config", str(config_file), "--output", str(output)])
        assert code == 1
        assert not output.exists()

    def test_rejects_unknown_railroad(self, config_file):
        with pytest.raises(SystemExit):
            main(["render", "--config", str(config_file), "--railroad", "AMTK"])


class TestOtherCommands:
    """`dwellmap validate` and `dwellmap convert`."""

    def test_validate(self, config_file):
        assert main(["validate", "--config", str(config_file)]) == 0

    def test_convert(self, config_file, dataset_dir):
        source = dataset_dir / "dwell_times.csv"
        source.write_text(
            "Date,Week,Month,Year,Railroad,Yard,Location,Latitude,Longitude,Value,Yard Point\n"
            "2024-10-21,43,10,2024,NS,Conway,PA,40.66,-80.23,22.8,\n",
            encoding="utf-8",
        )
        output = dataset_dir / "converted.json"
        code = main(["convert", "--config", str(config_file), str(source), str(output)])
        assert code == 0
        assert json.loads(output.read_text(encoding="utf-8"))[0]["Yard"] == "Conway"

    def test_convert_bad_csv(self, config_file, dataset_dir):
        source = dataset_dir / "broken.csv"
        source.write_text("Date,Week\n2024-10-21,43\n", encoding="utf-8")
        code = main(["convert", "--config", str(config_file), str(source), str(dataset_dir / "x.json")])
        assert code == 1
