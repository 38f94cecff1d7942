from dataclasses import replace

from src.hr_attendance.hr_attendance.reports.calculator.standard_calculator import StandardAttendanceRateCalculator
from src.hr_attendance.hr_attendance.reports.model import StatusCounts


def test_standard_calculator_weights_half_days():
    counts = StatusCounts(present=8, half_day=2)

    calc = StandardAttendanceRateCalculator()
    assert calc.credited_days(counts) == 9
    assert calc.rate(counts, 10) == 90.0


def test_late_and_early_departure_earn_no_credit():
    calc = StandardAttendanceRateCalculator()

    assert calc.rate(StatusCounts(present=1, late=3, early_departure=2), 6) == 16.7


def test_rate_is_zero_without_working_days():
    assert StandardAttendanceRateCalculator().rate(StatusCounts(present=3), 0) == 0.0


def test_adding_present_never_lowers_and_adding_absent_never_raises():
    calc = StandardAttendanceRateCalculator()
    counts = StatusCounts(present=4, half_day=1, absent=1)
    base = calc.rate(counts, 10)

    more_present = replace(counts, present=counts.present + 1)
    more_absent = replace(counts, absent=counts.absent + 1)

    assert calc.rate(more_present, 10) >= base
    assert calc.rate(more_absent, 10) <= base
