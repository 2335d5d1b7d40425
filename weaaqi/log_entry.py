"""
Log entry module for the weaaqi dashboard.

This module defines the LogEntry dataclass which records one refresh cycle:
the reading that went in, the presentation values that came out and a few
details about how they were produced (matched rules, heat override, whether
the result was reused from the refresh window).
"""

from dataclasses import dataclass
from datetime import datetime

from .presentation import PresentationValues
from .reading import Reading


@dataclass
class LogEntry:
    """
    Represents a single log record for a dashboard refresh.

    Attributes:
        timestamp: When the values were computed
        reading: The reading used as input
        presentation: The values handed to the renderer
        details: Additional metadata (matched condition, AQI status,
                 heat override flag, data mode)
    """

    timestamp: datetime
    reading: Reading
    presentation: PresentationValues
    details: dict[str, str]

    def to_dict(self) -> dict[str, object]:
        """
        Converts the log entry to a serializable dictionary.

        Returns:
            A dictionary with the timestamp as ISO string and the reading and
            presentation as nested dictionaries
        """
        return {
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
            "reading": self.reading.to_dict(),
            "presentation": self.presentation.to_dict(),
            "details": self.details,
        }
