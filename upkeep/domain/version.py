"""
SemanticVersion domain object for upkeep.

Release tags look like "v0.40.1": an optional single-letter marker followed
by exactly three dot-separated non-negative integers. Anything else
(pre-releases, build metadata, two or four components) is not a release.

Versions are immutable value objects ordered by (major, minor, patch) as
integers, so "v10.0.0" sorts after "v9.9.9".
"""

import re
from dataclasses import dataclass, field
from typing import Optional, Dict, Any

# Largest component accepted: signed 64-bit range
MAX_COMPONENT = 2**63 - 1

TAG_PATTERN = re.compile(r'(?P<marker>[A-Za-z]?)(?P<major>[0-9]+)\.(?P<minor>[0-9]+)\.(?P<patch>[0-9]+)')


def tag_name(ref: str) -> str:
    """
    Return the tag name of a remote reference.

    Only the final path segment counts: "refs/tags/v1.2.3" -> "v1.2.3".
    """
    return ref.strip().rsplit('/', 1)[-1]


def _component(text: str) -> int:
    if len(text) > 1 and text.startswith('0'):
        raise ValueError(f"leading zero in version component '{text}'")
    value = int(text)
    if value > MAX_COMPONENT:
        raise ValueError(f"version component '{text}' is out of range")
    return value


@dataclass(frozen=True, order=True)
class SemanticVersion:
    """
    A parsed release version.

    Examples:
        SemanticVersion.parse("v1.2.3")   -> SemanticVersion(1, 2, 3, tag="v1.2.3", marker="v")
        SemanticVersion.parse("1.2.3")    -> SemanticVersion(1, 2, 3, tag="1.2.3", marker="")
        SemanticVersion.parse("v1.2")     -> ValueError

    Attributes:
        major, minor, patch: Non-negative integer components
        tag: Tag text exactly as it was listed
        marker: Leading letter of the tag, or "" when there is none
    """

    major: int
    minor: int
    patch: int
    tag: str = field(default="", compare=False)
    marker: str = field(default="", compare=False)

    @classmethod
    def parse(cls, tag: str, markers: Optional[str] = None) -> 'SemanticVersion':
        """
        Parse a tag name into a SemanticVersion.

        Args:
            tag: Tag name (e.g., "v0.40.1")
            markers: Letters accepted as the leading marker. None accepts any
                single ASCII letter; "v" accepts only "v".

        Raises:
            ValueError: The tag is not a well-formed release version.
        """
        match = TAG_PATTERN.fullmatch(tag)
        if not match:
            raise ValueError(f"'{tag}' is not a release version")

        marker = match.group('marker')
        if marker and markers is not None and marker not in markers:
            raise ValueError(f"'{tag}' uses marker '{marker}', expected one of '{markers}'")

        return cls(
            major=_component(match.group('major')),
            minor=_component(match.group('minor')),
            patch=_component(match.group('patch')),
            tag=tag,
            marker=marker,
        )

    @classmethod
    def try_parse(cls, tag: str, markers: Optional[str] = None) -> Optional['SemanticVersion']:
        """Parse a tag, returning None instead of raising."""
        try:
            return cls.parse(tag, markers=markers)
        except ValueError:
            return None

    @property
    def triple(self):
        return (self.major, self.minor, self.patch)

    def __str__(self) -> str:
        return self.tag or f"{self.major}.{self.minor}.{self.patch}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            'tag': str(self),
            'major': self.major,
            'minor': self.minor,
            'patch': self.patch,
        }
