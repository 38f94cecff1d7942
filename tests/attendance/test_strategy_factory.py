from src.hr_attendance.hr_attendance.attendance.factory import AttendanceStrategyFactory
from src.hr_attendance.hr_attendance.attendance.strategies.absent_strategy import AbsentStrategy
from src.hr_attendance.hr_attendance.attendance.strategies.base import WorkMetrics
from src.hr_attendance.hr_attendance.attendance.strategies.early_strategy import EarlyDepartureStrategy
from src.hr_attendance.hr_attendance.attendance.strategies.half_day_strategy import HalfDayStrategy
from src.hr_attendance.hr_attendance.attendance.strategies.late_strategy import LateStrategy
from src.hr_attendance.hr_attendance.attendance.strategies.present_strategy import PresentStrategy
from src.hr_attendance.hr_attendance.core.enums import AttendanceStatus


def _metrics(**kw) -> WorkMetrics:
    data = dict(has_punch_in=True, has_punch_out=True, total_work_hours=9.0, late_minutes=0, early_departure_minutes=0)
    data.update(kw)
    return WorkMetrics(**data)


def test_factory_no_punch_in_is_absent():
    strategy = AttendanceStrategyFactory().for_metrics(WorkMetrics(has_punch_in=False, has_punch_out=False))

    assert isinstance(strategy, AbsentStrategy)
    assert strategy.decide(WorkMetrics(False, False)).status == AttendanceStatus.ABSENT


def test_factory_late_threshold_is_strictly_greater_than_30_minutes():
    factory = AttendanceStrategyFactory()

    assert isinstance(factory.for_metrics(_metrics(late_minutes=30)), PresentStrategy)
    assert isinstance(factory.for_metrics(_metrics(late_minutes=30.5)), LateStrategy)


def test_factory_late_wins_over_early_departure_and_short_day():
    strategy = AttendanceStrategyFactory().for_metrics(
        _metrics(late_minutes=45, early_departure_minutes=120, total_work_hours=2)
    )

    assert isinstance(strategy, LateStrategy)


def test_factory_early_departure_wins_over_half_day():
    strategy = AttendanceStrategyFactory().for_metrics(_metrics(early_departure_minutes=31, total_work_hours=3))

    assert isinstance(strategy, EarlyDepartureStrategy)


def test_factory_short_day_is_half_day():
    strategy = AttendanceStrategyFactory().for_metrics(_metrics(total_work_hours=3.99))

    assert isinstance(strategy, HalfDayStrategy)
    assert strategy.decide(_metrics(total_work_hours=3.99)).status == AttendanceStatus.HALF_DAY


def test_factory_thresholds_are_configurable():
    factory = AttendanceStrategyFactory(late_threshold_minutes=10)

    assert isinstance(factory.for_metrics(_metrics(late_minutes=15)), LateStrategy)
