"""
Tests for the Command Line Tool
===============================
Tests for hycom_subset/cli.py
"""

import json

import pytest


@pytest.fixture
def offline(monkeypatch, fake_archive):
    """Route the CLI's remote source to the fake archive."""
    import hycom_subset.cli as cli

    monkeypatch.setattr(cli, "OpendapArraySource", lambda: fake_archive)
    return fake_archive


class TestCli:
    """Exit codes: 0 all instants served, 1 some failed, 2 bad arguments."""

    def test_single_instant(self, offline, tmp_path):
        from hycom_subset.cli import main

        code = main([
            "--region", "190", "240", "-5", "5",
            "--start", "2018-01-15",
            "--variables", "ssh", "temp",
            "--outdir", str(tmp_path),
        ])

        assert code == 0
        assert (tmp_path / "W190E240Sn5N5_20180115T0000Z.mat").exists()

    def test_time_span(self, offline, tmp_path):
        from hycom_subset.cli import main

        code = main([
            "--region", "190", "240", "-5", "5",
            "--start", "2018-01-15T00:00", "--end", "2018-01-15T06:00", "--step-hours", "3",
            "--variables", "ssh", "--format", "portable", "--prefix", "nino34",
            "--outdir", str(tmp_path),
        ])

        assert code == 0
        assert sorted(p.name for p in tmp_path.iterdir()) == [
            "nino34_20180115T0000Z.nc",
            "nino34_20180115T0300Z.nc",
            "nino34_20180115T0600Z.nc",
        ]

    def test_failed_instant(self, offline, tmp_path):
        from hycom_subset.cli import main

        code = main([
            "--region", "190", "240", "-5", "5",
            "--start", "2018-01-15", "--end", "2018-01-20", "--step-hours", "120",
            "--outdir", str(tmp_path), "--retries", "1",
        ])

        assert code == 1
        assert [p.name for p in tmp_path.iterdir()] == ["W190E240Sn5N5_20180115T0000Z.mat"]

    def test_unreadable_cache_file_does_not_stop_the_span(self, offline, tmp_path):
        from hycom_subset.cli import main

        (tmp_path / "W190E240Sn5N5_20180115T0000Z.mat").write_bytes(b"not a mat file")

        code = main([
            "--region", "190", "240", "-5", "5",
            "--start", "2018-01-15T00:00", "--end", "2018-01-15T03:00", "--step-hours", "3",
            "--variables", "ssh",
            "--outdir", str(tmp_path), "--retries", "1",
        ])

        assert code == 1
        assert (tmp_path / "W190E240Sn5N5_20180115T0300Z.mat").exists()

    @pytest.mark.parametrize("args", [
        ["--region", "190", "240", "5", "-5", "--start", "2018-01-15"],
        ["--region", "190", "240", "-5", "95", "--start", "2018-01-15"],
        ["--region", "190", "240", "-5", "5", "--start", "2018-01-15", "--step-hours", "0"],
        ["--region", "190", "240", "-5", "5", "--start", "2018-01-15", "--variables", "sst"],
    ])
    def test_invalid_arguments(self, offline, args):
        from hycom_subset.cli import main

        assert main(args) == 2
        assert offline.n_reads == 0

    def test_config_file_with_override(self, offline, tmp_path):
        from hycom_subset.cli import main

        config = tmp_path / "options.json"
        config.write_text(json.dumps({
            "target_directory": str(tmp_path / "from_config"),
            "variables": ["ssh"],
            "output_format": "portable",
        }))

        code = main([
            "--region", "190", "240", "-5", "5",
            "--start", "2018-01-15",
            "--config", str(config),
            "--format", "native",
        ])

        assert code == 0
        assert (tmp_path / "from_config" / "W190E240Sn5N5_20180115T0000Z.mat").exists()
