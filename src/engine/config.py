"""Search settings. Passed explicitly into every search, never stored on a long-lived engine object."""

from dataclasses import dataclass

# Recursion guard: whatever gets configured, the search never goes deeper than this.
MAX_SEARCH_DEPTH = 6


@dataclass(frozen=True)
class SearchConfig:
    max_depth: int = 2
    time_limit_ms: int = 500
    # only this many of the best-ordered root moves get searched per iteration
    root_breadth: int = 5

    def __post_init__(self) -> None:
        if self.max_depth < 1:
            raise ValueError(f"max_depth must be at least 1, got {self.max_depth}")
        if self.time_limit_ms < 0:
            raise ValueError(
                f"time_limit_ms cannot be negative, got {self.time_limit_ms}"
            )
        if self.root_breadth < 1:
            raise ValueError(
                f"root_breadth must be at least 1, got {self.root_breadth}"
            )

    @property
    def depth(self) -> int:
        """The depth actually searched: the configured one, clamped to MAX_SEARCH_DEPTH"""
        return min(self.max_depth, MAX_SEARCH_DEPTH)

    @property
    def time_limit_s(self) -> float:
        return self.time_limit_ms / 1000
