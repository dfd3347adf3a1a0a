from .distribution import Distribution, EmpiricalDistribution
from .beta import Beta, LogOddsBeta

__all__ = [
    "Distribution",
    "EmpiricalDistribution",
    "Beta",
    "LogOddsBeta",
]
