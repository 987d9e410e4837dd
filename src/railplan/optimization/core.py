"""
Entry point of the planner: travel-time table, delivery search and plan extraction.

    problem = DeliveryProblem.from_yaml("network.yaml")
    solution = solve_delivery_problem(problem)
    print(solution.makespan)
"""
import logging
import time
from dataclasses import dataclass, field
from typing import List, Optional

from railplan.config.parameters import Parameters
from railplan.network.problem import DeliveryProblem
from railplan.optimization.plan import Plan, extract_plan, validate_plan
from railplan.optimization.search import SearchResult, search_delivery_plan
from railplan.routing.travel_times import TravelTimeTable

logger = logging.getLogger(__name__)


@dataclass
class DeliverySolution:
    """Optimal plan together with the data it was computed from."""
    plan: Plan
    travel_times: TravelTimeTable
    search: SearchResult
    execution_time: float
    violations: List[str] = field(default_factory=list)

    @property
    def makespan(self) -> float:
        return self.plan.makespan


def solve_delivery_problem(
    problem: DeliveryProblem,
    parameters: Optional[Parameters] = None,
    travel_times: Optional[TravelTimeTable] = None,
) -> DeliverySolution:
    """
    Compute a minimum-makespan delivery plan.

    Args:
        problem: Validated stations, routes, packages and trains
        parameters: Search budgets, instance limits and validation switch
        travel_times: Precomputed table for `problem.network`; built when omitted

    Returns:
        DeliverySolution holding the plan and the search statistics

    Raises:
        NoFeasiblePlanError: Some package can never be delivered
        SearchBudgetExceededError: The configured state or time budget ran out
        InstanceTooLargeError: The instance exceeds the configured limits
    """
    parameters = parameters or Parameters()
    start_time = time.perf_counter()

    if travel_times is None:
        travel_times = TravelTimeTable.from_network(problem.network)

    summary = problem.summary()
    logger.info(
        f"Planning deliveries for {summary['packages']} packages with "
        f"{summary['trains']} trains over {summary['stations']} stations"
    )

    result = search_delivery_plan(problem, travel_times, parameters)
    plan = extract_plan(
        problem,
        travel_times,
        result.transitions,
        pre_delivered=result.pre_delivered,
    )

    violations: List[str] = []
    if parameters.validate_plan:
        violations = validate_plan(plan, problem)
        if violations:
            logger.error(f"Plan failed validation with {len(violations)} violations")

    return DeliverySolution(
        plan=plan,
        travel_times=travel_times,
        search=result,
        execution_time=time.perf_counter() - start_time,
        violations=violations,
    )
