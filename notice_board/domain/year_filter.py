"""
Year filter domain value object.
"""
from dataclasses import dataclass
from typing import Optional

from .notice import Notice

ALL_YEARS = "all"


@dataclass(frozen=True)
class YearFilter:
    """연도 필터 값 객체. year=None 이면 전체 연도."""
    year: Optional[str] = None

    def __post_init__(self):
        if self.year is not None and not (len(self.year) == 4 and self.year.isdigit()):
            raise ValueError(f"Invalid year filter: {self.year}")

    @classmethod
    def parse(cls, value: Optional[str]) -> "YearFilter":
        """Build a filter from its wire value ('all' or a four-digit year).

        Args:
            value: 'all', None, '' or a year string such as '2024'

        Returns:
            YearFilter instance
        """
        if value is None or value == "" or value == ALL_YEARS:
            return cls()
        return cls(year=str(value))

    @property
    def is_all(self) -> bool:
        return self.year is None

    def matches(self, notice: Notice) -> bool:
        """주어진 공지사항이 필터 연도에 해당하는지 확인.

        Notices in the unknown-year bucket only match the ALL filter.
        """
        if self.year is None:
            return True
        return notice.year == self.year

    @property
    def value(self) -> str:
        """Wire value of the filter."""
        return ALL_YEARS if self.year is None else self.year

    def __str__(self) -> str:
        """문자열 표현."""
        if self.year is None:
            return "전체 연도"
        return f"{self.year}년"
