"""Version comparison utilities for Maven-style version strings."""

import re
from dataclasses import dataclass, field
from typing import Iterable, List, Union


@dataclass
class VersionInfo:
    """
    Parsed version information.

    Attributes:
        original_string: The original version string as-is
        segments: The string split on '.' and '-'; all-digit segments become ints
    """
    original_string: str
    segments: List[Union[int, str]] = field(default_factory=list)


class VersionParser:
    """Parser and comparator for dotted/hyphenated version strings."""

    # 4.1.118.Final -> ['4', '1', '118', 'Final'], 1.0-SNAPSHOT -> ['1', '0', 'SNAPSHOT']
    SEGMENT_SEPARATOR = re.compile(r'[.\-]')

    @classmethod
    def parse(cls, version: str) -> VersionInfo:
        """
        Split a version string into comparable segments.

        Args:
            version: The version string to parse

        Returns:
            VersionInfo with numeric segments converted to integers
        """
        segments: List[Union[int, str]] = []
        for part in cls.SEGMENT_SEPARATOR.split(version or ""):
            if part.isascii() and part.isdigit():
                segments.append(int(part))
            else:
                segments.append(part)
        return VersionInfo(original_string=version, segments=segments)

    @staticmethod
    def _compare_segment(a: Union[int, str], b: Union[int, str]) -> int:
        if isinstance(a, int) and isinstance(b, int):
            return (a > b) - (a < b)
        # Mixed numeric/text segments fall back to comparing the text
        a_str, b_str = str(a), str(b)
        return (a_str > b_str) - (a_str < b_str)

    @classmethod
    def compare(cls, version1: str, version2: str) -> int:
        """
        Compare two versions segment by segment, left to right.

        Numeric segments compare as integers, anything else as case-sensitive
        strings. When one version is a strict prefix of the other, the shorter
        one is smaller.

        Returns:
            Negative if version1 < version2, zero if equal, positive otherwise
        """
        segments1 = cls.parse(version1).segments
        segments2 = cls.parse(version2).segments

        for a, b in zip(segments1, segments2):
            result = cls._compare_segment(a, b)
            if result != 0:
                return result

        return (len(segments1) > len(segments2)) - (len(segments1) < len(segments2))

    @classmethod
    def max_version(cls, versions: Iterable[str]) -> str:
        """
        Return the highest version, keeping the first one seen on ties.

        An empty input yields an empty string.
        """
        best = ""
        seen = False
        for version in versions:
            if not seen or cls.compare(version, best) > 0:
                best = version
                seen = True
        return best
