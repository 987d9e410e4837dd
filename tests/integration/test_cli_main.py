import json
import os
import subprocess
import sys
from pathlib import Path

import pytest

from railplan.cli.main import main

SRC_DIR = Path(__file__).resolve().parents[2] / "src"

SINGLE_ROUTE_ARGS = [
    '--station', 'A', '--station', 'B',
    '--route', 'AB,A,B,10',
    '--package', 'P,5,A,B',
    '--train', 'T,5,A',
]


def test_main_prints_instructions_and_time(capsys):
    assert main(SINGLE_ROUTE_ARGS) == 0
    out, _ = capsys.readouterr()
    lines = out.strip().splitlines()
    assert lines[0] == "W=0, T=T, N1=A, P1=[P], N2=B, P2=[P] via AB"
    assert lines[-1] == "Optimal time: 10 minutes"


def test_main_lists_all_packages_moved_on_one_leg(capsys):
    code = main([
        '--station', 'A', '--station', 'B', '--route', 'AB,A,B,10',
        '--package', 'P1,5,A,B', '--package', 'P2,5,A,B', '--train', 'T,10,A',
    ])
    out, _ = capsys.readouterr()
    assert code == 0
    lines = out.strip().splitlines()
    assert lines[0] in (
        "W=0, T=T, N1=A, P1=[P1,P2], N2=B, P2=[P1,P2] via AB",
        "W=0, T=T, N1=A, P1=[P2,P1], N2=B, P2=[P2,P1] via AB",
    )
    assert lines[-1] == "Optimal time: 10 minutes"


def test_main_parallel_routes(capsys):
    code = main([
        '--station', 'phraram9', '--station', 'samyan',
        '--station', 'thonburi', '--station', 'silom',
        '--route', 'r1,silom,thonburi,30',
        '--route', 'r2,silom,thonburi,10',
        '--route', 'r3,silom,thonburi,10',
        '--package', 'clothes,5,thonburi,silom',
        '--train', 'alpha,5,silom',
    ])
    out, _ = capsys.readouterr()
    assert code == 0
    assert "via r1" not in out
    assert "Optimal time: 20 minutes" in out


def test_main_infeasible_returns_error(capsys):
    args = [a if a != 'T,5,A' else 'T,3,A' for a in SINGLE_ROUTE_ARGS]
    assert main(args) == 1
    out, err = capsys.readouterr()
    assert "Optimal time" not in out
    assert "heavier than the capacity" in err


def test_main_unknown_station_is_usage_error(capsys):
    # Trains placed at stations "1" and "2", which were never declared
    with pytest.raises(SystemExit) as exc:
        main([
            '--station', 'silom', '--station', 'thonburi',
            '--route', 'r1,silom,thonburi,30',
            '--package', 'clothes,5,thonburi,silom',
            '--train', 'alpha,2,1',
        ])
    assert exc.value.code == 2
    _, err = capsys.readouterr()
    assert "station not found: 1" in err


def test_main_rejects_nan_travel_time(capsys):
    with pytest.raises(SystemExit) as exc:
        main([
            '--station', 'A', '--station', 'B',
            '--route', 'AB1,A,B,nan', '--route', 'AB2,A,B,10',
            '--package', 'P,5,A,B', '--train', 'T,5,A',
        ])
    assert exc.value.code == 2
    _, err = capsys.readouterr()
    assert "must be a finite non-negative number" in err


def test_main_budget_exceeded(capsys):
    code = main([
        '--station', 'A', '--station', 'B', '--route', 'AB,A,B,10',
        '--package', 'P1,5,A,B', '--package', 'P2,5,A,B', '--train', 'T,5,A',
        '--max-expanded-states', '1',
    ])
    assert code == 1
    _, err = capsys.readouterr()
    assert "expanding 1 states" in err


def test_main_network_file_to_json(tmp_path, sample_network_yaml, capsys):
    out_file = tmp_path / 'plan.json'
    code = main(['--network', str(sample_network_yaml), '--output', str(out_file), '--format', 'json'])
    assert code == 0
    assert "Optimal time: 20 minutes" in capsys.readouterr().out
    data = json.loads(out_file.read_text())
    assert data['Plan Summary']['Makespan (min)'] == 20


def test_main_excel_output(tmp_path):
    out_file = tmp_path / 'plan.xlsx'
    assert main(SINGLE_ROUTE_ARGS + ['--output', str(out_file), '--verbose']) == 0
    assert out_file.exists()


def test_help_params(capsys):
    with pytest.raises(SystemExit) as exc:
        main(['--help-params'])
    assert exc.value.code == 0
    assert 'Train Delivery Planner Parameters' in capsys.readouterr().out


def test_cli_as_module_subprocess():
    env = {**os.environ, 'PYTHONPATH': os.pathsep.join(
        p for p in (str(SRC_DIR), os.environ.get('PYTHONPATH')) if p
    )}
    result = subprocess.run(
        [sys.executable, '-m', 'railplan.cli.main', *SINGLE_ROUTE_ARGS],
        capture_output=True, text=True, env=env,
    )
    assert result.returncode == 0, result.stderr
    assert result.stdout.strip().splitlines()[-1] == "Optimal time: 10 minutes"
