"""Topic/query input state with mutual exclusion between the two."""

from __future__ import annotations

from dataclasses import dataclass, field

SPORTS = (
    "Football",
    "Basketball",
    "Tennis",
    "Formula 1",
    "Cricket",
    "Baseball",
    "American Football",
    "Ice Hockey",
    "Golf",
    "MMA",
)


@dataclass
class TopicSelection:
    """What the user has picked so far.

    Toggling a topic clears the query; typing a query clears the topics.
    """

    topics: list[str] = field(default_factory=list)
    query: str = ""

    def toggle_topic(self, name: str) -> None:
        self.query = ""
        if name in self.topics:
            self.topics.remove(name)
        else:
            self.topics.append(name)

    def set_query(self, text: str) -> None:
        self.topics = []
        self.query = text
