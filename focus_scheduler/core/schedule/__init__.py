from focus_scheduler.core.schedule.greedy import schedule_greedy
from focus_scheduler.core.schedule.knapsack import schedule_knapsack_dp
from focus_scheduler.core.schedule.select import ScheduleRequest, run_schedule, schedule_optimal

__all__ = [
    "ScheduleRequest",
    "run_schedule",
    "schedule_greedy",
    "schedule_knapsack_dp",
    "schedule_optimal",
]
