import math
from dataclasses import asdict, dataclass
from fractions import Fraction
from typing import Any, Dict, Optional


NO_CLASSES_MESSAGE = "No classes conducted yet."


class InvalidInputError(ValueError):
    """Raised when attendance figures cannot be used for a calculation."""

    pass


@dataclass(frozen=True)
class AttendanceStats:
    current_percent: float
    can_bunk: int
    need_to_attend: Optional[int]
    message: str
    safe: bool = True
    reachable: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _to_number(name: str, value: Any) -> Fraction:
    # bool is an int subclass; True/False are never meaningful counts
    if isinstance(value, bool):
        raise InvalidInputError(f"{name} must be a number, got {value!r}")
    if isinstance(value, (int, Fraction)):
        return Fraction(value)

    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidInputError(f"{name} must be a number, got {value!r}")

    if not math.isfinite(number):
        raise InvalidInputError(f"{name} must be a finite number, got {value!r}")

    # repr keeps the decimal the caller wrote (33.3 stays 333/10)
    return Fraction(repr(number))


def format_percent(value: Any) -> str:
    """Print a percentage as given: 75, 82.5, 99.9999999."""
    number = _to_number("percent", value)
    if number.denominator == 1:
        return str(number.numerator)
    return repr(float(number))


class AttendanceCalculator:
    @staticmethod
    def compute(attended: Any, total: Any, required_percent: Any) -> AttendanceStats:
        """
        Project attendance against a target percentage.

        In the safe branch ``can_bunk`` is the largest n with
        attended / (total + n) >= r. Otherwise ``need_to_attend`` is the
        smallest x with (attended + x) / (total + x) >= r, or None when the
        target is 100% and a class has already been missed.
        """
        attended_q = _to_number("attended", attended)
        total_q = _to_number("total", total)
        required_q = _to_number("requiredPercent", required_percent)

        if total_q <= 0:
            return AttendanceStats(
                current_percent=0,
                can_bunk=0,
                need_to_attend=0,
                message=NO_CLASSES_MESSAGE,
            )

        if attended_q < 0:
            raise InvalidInputError(f"attended must not be negative, got {attended!r}")
        if not 0 < required_q <= 100:
            raise InvalidInputError(
                f"requiredPercent must be in (0, 100], got {required_percent!r}"
            )

        current_percent = round(float(attended_q * 100 / total_q), 2)
        required_label = format_percent(required_q)

        # Branch on the exact ratio; the rounded value is only for display
        if attended_q * 100 >= required_q * total_q:
            can_bunk = math.floor((attended_q * 100 - required_q * total_q) / required_q)
            can_bunk = max(0, can_bunk)
            return AttendanceStats(
                current_percent=current_percent,
                can_bunk=can_bunk,
                need_to_attend=0,
                message=f"You are safe. You can bunk around {can_bunk} classes.",
            )

        if required_q >= 100:
            return AttendanceStats(
                current_percent=current_percent,
                can_bunk=0,
                need_to_attend=None,
                message=f"{required_label}% attendance can no longer be reached.",
                safe=False,
                reachable=False,
            )

        need_to_attend = math.ceil(
            (required_q * total_q - attended_q * 100) / (100 - required_q)
        )
        need_to_attend = max(0, need_to_attend)
        return AttendanceStats(
            current_percent=current_percent,
            can_bunk=0,
            need_to_attend=need_to_attend,
            message=(
                f"You need to attend around {need_to_attend} more classes "
                f"to reach {required_label}%."
            ),
            safe=False,
        )

    @staticmethod
    def threshold_mark(total: Any, required_percent: Any) -> int:
        """
        Calculate the minimum number of attended classes needed to meet the threshold.
        """
        total_q = _to_number("total", total)
        required_q = _to_number("requiredPercent", required_percent)
        if total_q <= 0:
            return 0
        return math.ceil(required_q * total_q / 100)


def compute(attended: Any, total: Any, required_percent: Any) -> AttendanceStats:
    return AttendanceCalculator.compute(attended, total, required_percent)
