import logging
import pytest
from pathlib import Path

from railplan.config.parameters import Parameters
from railplan.network.problem import DeliveryProblem

# Define project root for path fixtures
repo_root = Path(__file__).resolve().parent.parent

@pytest.fixture(scope="session")
def sample_network_yaml():
    """Path to the small YAML network used by loader and CLI tests"""
    return repo_root / "tests" / "_assets" / "smoke" / "network.yaml"

@pytest.fixture(autouse=True)
def tmp_results_dir(tmp_path, monkeypatch):
    """Run every test from a temp folder so default result files never land in the repo"""
    fake_results = tmp_path / "results"
    fake_results.mkdir()
    monkeypatch.chdir(tmp_path)
    return fake_results

@pytest.fixture(autouse=True)
def restore_root_logger():
    """setup_logging replaces root handlers; put them back after each test"""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)

@pytest.fixture
def default_params():
    return Parameters.from_yaml()

# Toy problems shared by unit and core tests
@pytest.fixture
def single_route_problem():
    """A --10-- B, one 5kg package A->B, one train of capacity 5 at A"""
    return DeliveryProblem.from_records(
        ["A", "B"],
        routes=[("AB", "A", "B", 10)],
        packages=[("P", 5, "A", "B")],
        trains=[("T", 5, "A")],
    )

@pytest.fixture
def parallel_routes_problem():
    """Three routes between silom and thonburi (30, 10, 10)"""
    return DeliveryProblem.from_records(
        ["phraram9", "samyan", "thonburi", "silom"],
        routes=[
            ("r1", "silom", "thonburi", 30),
            ("r2", "silom", "thonburi", 10),
            ("r3", "silom", "thonburi", 10),
        ],
        packages=[("clothes", 5, "thonburi", "silom")],
        trains=[("alpha", 5, "silom")],
    )

@pytest.fixture
def line_problem():
    """A --10-- B --50-- C --40-- D --10-- E with packages at both ends"""
    return DeliveryProblem.from_records(
        ["A", "B", "C", "D", "E"],
        routes=[
            ("AB", "A", "B", 10),
            ("BC", "B", "C", 50),
            ("CD", "C", "D", 40),
            ("DE", "D", "E", 10),
        ],
        packages=[("P1", 5, "B", "A"), ("P2", 5, "D", "E")],
        trains=[("T", 10, "C")],
    )
