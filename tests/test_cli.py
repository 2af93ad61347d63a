import json
from pathlib import Path

import pytest

from legato import cli


def test_run_multiplies(capsys):
    assert cli.main(["run", "3", "5"]) == 0
    assert "3 * 5 = 15 (hi=0x00, lo=0x0f)" in capsys.readouterr().out


def test_run_accepts_hex_and_writes_trace(tmp_path: Path, capsys):
    output = tmp_path / "trace.json"
    assert cli.main(["run", "0xff", "0x02", "--trace", str(output)]) == 0
    assert "= 510" in capsys.readouterr().out
    data = json.loads(output.read_text())
    assert data["steps"][0]["instruction"] == "LDX #8"
    assert data["final_state"]["registers"]["A"] == "1"


def test_listing(capsys):
    assert cli.main(["listing"]) == 0
    out = capsys.readouterr().out
    assert "ADC F2" in out and "BNE LOOP" in out


def test_vectors_to_file(tmp_path: Path):
    output = tmp_path / "vectors.json"
    assert cli.main(["vectors", "3", "--seed", "5", "--output", str(output)]) == 0
    assert len(json.loads(output.read_text())) == 3


def test_missing_command_exits_with_usage(capsys):
    with pytest.raises(SystemExit) as excinfo:
        cli.main([])
    assert excinfo.value.code == 2
    assert "usage: legato-verify" in capsys.readouterr().err


def test_run_rejects_wide_factor(capsys):
    with pytest.raises(SystemExit):
        cli.main(["run", "256", "1"])
    assert "factors must fit in a byte" in capsys.readouterr().err
