"""Page-based LIMIT clause helper."""

from dataclasses import dataclass


@dataclass
class Pager:
    """A page number and page size that render as a SQL LIMIT clause."""

    current_page: int
    page_size: int

    def increment_page(self) -> None:
        """Move to the next page."""
        self.current_page += 1

    def __str__(self) -> str:
        offset = (self.current_page - 1) * self.page_size
        return f"LIMIT {offset},{self.page_size}"