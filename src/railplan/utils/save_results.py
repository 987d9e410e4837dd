import json
import logging
from datetime import datetime
from pathlib import Path

import numpy as np
import pandas as pd

from railplan.config.parameters import Parameters
from railplan.core_types import OutputFormat
from railplan.optimization.core import DeliverySolution

logger = logging.getLogger(__name__)


class NumpyEncoder(json.JSONEncoder):
    """JSON encoder that understands numpy scalars and arrays."""
    def default(self, obj):
        if isinstance(obj, np.integer):
            return int(obj)
        if isinstance(obj, np.floating):
            return float(obj)
        if isinstance(obj, np.ndarray):
            return obj.tolist()
        return super().default(obj)


def save_plan_results(
    solution: DeliverySolution,
    parameters: Parameters,
    filename: str | Path = None,
    format: str = None,
) -> Path:
    """Save a delivery plan to a file (Excel or JSON).

    Args:
        solution: Result of `solve_delivery_problem`
        parameters: Parameters the plan was computed with
        filename: Target file; a timestamped name under `results_dir` when omitted
        format: 'excel' or 'json'; defaults to `parameters.format`

    Returns:
        Path of the written file
    """
    format = format or parameters.format
    if format not in [f.value for f in OutputFormat]:
        raise ValueError(f"Unsupported output format: {format}")

    if filename is None:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        extension = '.xlsx' if format == OutputFormat.EXCEL.value else '.json'
        filename = Path(parameters.results_dir) / f"delivery_plan_{timestamp}{extension}"
    filename = Path(filename)
    filename.parent.mkdir(parents=True, exist_ok=True)

    plan = solution.plan
    search = solution.search
    summary_metrics = [
        ('Makespan (min)', plan.makespan),
        ('Trains', len(plan.trains)),
        ('Trains Used', sum(1 for t in plan.trains if plan.steps(t))),
        ('Plan Steps', sum(len(plan.steps(t)) for t in plan.trains)),
        ('Pre-delivered Packages', ", ".join(p.name for p in plan.pre_delivered) or "None"),
        ('States Expanded', search.expanded),
        ('States Generated', search.generated),
        ('Search Time (s)', round(search.elapsed_sec, 3)),
        ('Execution Time (s)', round(solution.execution_time, 3)),
        ('Validation', "OK" if not solution.violations else "; ".join(solution.violations)),
    ]
    parameter_rows = [
        *((f'search.{k}', v) for k, v in parameters.search.items()),
        *((f'limits.{k}', v) for k, v in parameters.limits.items()),
        ('validate_plan', parameters.validate_plan),
    ]

    data = {
        'summary_metrics': summary_metrics,
        'plan_steps': plan.to_frame(),
        'route_legs': plan.legs_frame(),
        'travel_times': solution.travel_times.to_frame(),
        'parameters': parameter_rows,
    }

    try:
        if format == OutputFormat.JSON.value:
            _write_to_json(filename, data)
        else:
            _write_to_excel(filename, data)
    except OSError as e:
        logger.error(f"Error saving results to {filename}: {e}")
        raise

    logger.info(f"Plan saved to {filename}")
    return filename


def _write_to_excel(filename: Path, data: dict) -> None:
    """Write plan results to an Excel workbook."""
    with pd.ExcelWriter(filename, engine='openpyxl') as writer:
        pd.DataFrame(data['summary_metrics'], columns=['Metric', 'Value']).to_excel(
            writer, sheet_name='Plan Summary', index=False
        )
        data['plan_steps'].to_excel(writer, sheet_name='Plan Steps', index=False)
        data['route_legs'].to_excel(writer, sheet_name='Route Legs', index=False)
        # Unreachable pairs are infinite; Excel has no representation for that
        data['travel_times'].replace(np.inf, 'unreachable').to_excel(
            writer, sheet_name='Travel Times'
        )
        pd.DataFrame(data['parameters'], columns=['Parameter', 'Value']).to_excel(
            writer, sheet_name='Parameters', index=False
        )


def _write_to_json(filename: Path, data: dict) -> None:
    """Write plan results to a JSON file."""
    times = data['travel_times']
    travel_times = times.astype(object).where(np.isfinite(times), None)
    json_data = {
        'Plan Summary': dict(data['summary_metrics']),
        'Plan Steps': _records(data['plan_steps']),
        'Route Legs': _records(data['route_legs']),
        'Travel Times': {
            origin: row.to_dict() for origin, row in travel_times.iterrows()
        },
        'Parameters': dict(data['parameters']),
    }

    with open(filename, 'w') as f:
        json.dump(json_data, f, indent=2, cls=NumpyEncoder)


def _records(frame: pd.DataFrame) -> list:
    """Row dicts with NaN replaced by None so the JSON stays valid."""
    return frame.astype(object).where(frame.notna(), None).to_dict(orient='records')
