"""Domain enumerations for the files service.

Enums represent fixed sets of domain values (e.g. file category).
"""

from enum import Enum


class FileCategory(str, Enum):
    """Logical file category.

    Closed set: decides the physical bucket and the accepted MIME family.
    """

    PORTFOLIO_IMAGE = "portfolio-image"
    MINIATURE_IMAGE = "miniature-image"
    DOCUMENT = "document"

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid category values as strings.

        Returns:
            List of enum value strings (e.g. for validation or error messages).
        """
        return [category.value for category in cls]
